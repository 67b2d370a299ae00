"""
Claude Code target implementation for ideport.

Claude Code is the canonical format, so commands and agents are copied
through unchanged and guard hooks go into .claude/settings.json.
"""

from __future__ import annotations

from pathlib import Path

from ideport.models import TransformedArtifact

from .base import ProfileTarget


class ClaudeCodeTarget(ProfileTarget):
    """Target for Claude Code."""

    name = "claude-code"

    def finalize(self, root: Path, written: dict[str, list[TransformedArtifact]]) -> None:  # noqa: ARG002
        """Make sure the skills directory exists for skills added later."""
        skills_dir = self.profile.paths.resolve(root, "skills")
        if skills_dir is not None:
            skills_dir.mkdir(parents=True, exist_ok=True)
