"""
Codex target implementation for ideport.

Commands become prompts (.codex/prompts/agileflow-<name>.md), agents become
versioned skills (.codex/skills/agileflow-<name>/SKILL.md). Codex has no
hooks, so an index of the installed skills and prompts is kept in a managed
section of AGENTS.md instead.
"""

from __future__ import annotations

from pathlib import Path

from ideport.models import COMMAND, SKILL, TransformedArtifact
from ideport.transformer import agent_reference, command_reference

from .base import ManagedSectionMixin, ProfileTarget

HEADER = """## AgileFlow

These skills and prompts are installed by AgileFlow. When a task matches a
skill's description, invoke the skill or read its SKILL.md for instructions.
"""


class CodexTarget(ManagedSectionMixin, ProfileTarget):
    """Target for the Codex CLI."""

    name = "codex"

    def cleanup(self, root: Path) -> None:
        super().cleanup(root)
        instructions = self.profile.paths.resolve(root, "instructions")
        if instructions is not None:
            self.remove_managed_section(instructions)

    def finalize(self, root: Path, written: dict[str, list[TransformedArtifact]]) -> None:
        instructions = self.profile.paths.resolve(root, "instructions")
        skills = written.get(SKILL, [])
        prompts = written.get(COMMAND, [])
        if instructions is None or not (skills or prompts):
            return
        self.write_managed_section(instructions, self._index(skills, prompts))

    def _index(self, skills: list[TransformedArtifact], prompts: list[TransformedArtifact]) -> str:
        profile = self.profile
        lines = [HEADER]
        if skills:
            lines.append("### Skills\n")
            for skill in skills:
                reference = agent_reference(skill.slug.replace("/", "-"), profile)
                lines.append(f"- `{reference}`: {skill.description}")
            lines.append("")
        if prompts:
            lines.append("### Prompts\n")
            for prompt in prompts:
                reference = command_reference(prompt.slug.split("/"), profile)
                lines.append(f"- `{reference}`: {prompt.description}")
        return "\n".join(lines)
