"""
transformer:
    Rewrite canonical content into a target IDE's native syntax.

Every rewrite for a (source profile, target profile) pair is compiled into a
single alternation and applied in one pass over the text, so no rule ever
sees the output of another rule. The one exception is a structured-choice
block: its rendered prompt goes once through the remaining rules, since the
block carries canonical content of its own. Rules are derived from profile data:

- command references (/agileflow:story:list) in the target's reference style
- config directory, managed paths, instructions file and display name
- capability fallbacks chosen from the target's typed capability fields
- an optional docs folder relocation

Nothing in this module touches the filesystem.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

import yaml

from ideport import config
from ideport.models import SKILL
from ideport.profiles import CapabilityProfile

logger = logging.getLogger(__name__)

Replacement = Union[str, Callable[["re.Match[str]"], str]]

NAMESPACE = config.NAMESPACE

# /agileflow:story:list, not preceded by an identifier, path or sigil character
COMMAND_REFERENCE = (
    rf"(?<![\w/.:$@-])/{re.escape(NAMESPACE)}:([A-Za-z0-9_-]+(?::[A-Za-z0-9_-]+)*)"
)

_TEMPLATE_FIELD = re.compile(r"\{(slug|name|title|description|reference|prefix)\}")
_COMPOUND_IDENTIFIER = re.compile(r"[A-Z][a-z0-9]+(?:[A-Z][a-z0-9]*)+")


# =============================================================================
# Command reference styles
# =============================================================================


def _colon_reference(parts: list[str]) -> str:
    return f"/{NAMESPACE}:" + ":".join(parts)


def _hyphen_reference(parts: list[str]) -> str:
    return "/" + "-".join(parts)


def _namespaced_hyphen_reference(parts: list[str]) -> str:
    return f"/{NAMESPACE}-" + "-".join(parts)


def _sigil_reference(parts: list[str]) -> str:
    return f"${NAMESPACE}-" + "-".join(parts)


REFERENCE_STYLES: dict[str, Callable[[list[str]], str]] = {
    "colon": _colon_reference,
    "hyphen": _hyphen_reference,
    "namespaced-hyphen": _namespaced_hyphen_reference,
    "sigil": _sigil_reference,
}


def command_reference(parts: list[str], profile: CapabilityProfile) -> str:
    """Native invocation of a command for a target, e.g. ["story", "list"] -> /story-list."""
    return REFERENCE_STYLES[profile.conventions.command_reference](parts)


def agent_reference(name: str, profile: CapabilityProfile) -> str:
    """Native invocation of an agent or skill for a target."""
    return expand_template(profile.conventions.agent_reference, {"slug": name})


def expand_template(template: str, values: dict[str, Any]) -> str:
    """Fill {slug}-style fields, leaving unknown braces such as {{input}} alone."""
    return _TEMPLATE_FIELD.sub(
        lambda m: str(values[m.group(1)]) if m.group(1) in values else m.group(0),
        template,
    )


# =============================================================================
# Rules
# =============================================================================


@dataclass(frozen=True)
class RewriteRule:
    """A named regex and what each occurrence becomes.

    Patterns must not use backreferences or named groups: they are embedded
    in a larger alternation. Callable replacements receive the occurrence
    re-matched against the rule's own pattern. With `rewrite_output`, the
    replacement text is passed once through every other rule; use it for
    rules that consume a whole block of canonical content.
    """

    name: str
    pattern: str
    replacement: Replacement
    rewrite_output: bool = False

    def apply(self, text: str) -> str:
        if isinstance(self.replacement, str):
            return self.replacement
        match = re.fullmatch(self.pattern, text)
        return self.replacement(match)


def _literal(
    name: str,
    old: Optional[str],
    new: Optional[str],
    ignore_case: bool = False,
    prefix: bool = False,
) -> Optional[RewriteRule]:
    """Whole-token replacement of a literal; None when there is nothing to do.

    With `prefix`, the literal also matches at the start of a longer token
    (.claude in .claude-plugin).
    """
    if not old or new is None or old == new:
        return None
    body = re.escape(old)
    if ignore_case:
        body = f"(?i:{body})"
    end = "" if prefix else r"(?![\w-])"
    return RewriteRule(name, rf"(?<![\w.-]){body}{end}", new)


def artifact_relpath(layout: str, slug: str, name: str, prefix: str) -> str:
    """Location of one artifact relative to its kind's output directory.

    tree:      story/list.md
    prefixed:  agileflow-story-list.md
    skill-dir: agileflow-story-list/SKILL.md
    """
    if layout == "prefixed":
        return f"{prefix}{name}.md"
    if layout == "skill-dir":
        return f"{prefix}{name}/{config.SKILL_FILE}"
    return f"{slug}.md"


def _commands_location(profile: CapabilityProfile) -> str:
    return profile.paths.commands or profile.paths.config_dir


def _agents_location(profile: CapabilityProfile) -> str:
    return profile.paths.agents or profile.paths.skills or profile.paths.config_dir


def _agent_file_rule(source: CapabilityProfile, target: CapabilityProfile) -> Optional[RewriteRule]:
    """Point agent files at the skill generated from them when agents become skills."""
    spec = target.artifacts.get(SKILL)
    if not source.paths.agents or target.paths.agents or not target.paths.skills or spec is None:
        return None

    skills, prefix = target.paths.skills, target.conventions.prefix

    def _skill_file(match: "re.Match[str]") -> str:
        name = match.group(1)
        return f"{skills}/{artifact_relpath(spec.layout, name, name, prefix)}"

    return RewriteRule(
        "agent-file",
        rf"(?<![\w.-]){re.escape(source.paths.agents)}/([\w-]+)\.md(?![\w-])",
        _skill_file,
    )


def _path_rules(source: CapabilityProfile, target: CapabilityProfile) -> list[RewriteRule]:
    rules = [
        _agent_file_rule(source, target),
        _literal("commands-path", source.paths.commands, _commands_location(target)),
        _literal("agents-path", source.paths.agents, _agents_location(target)),
        _literal("skills-path", source.paths.skills, target.paths.skills),
        _literal("hooks-path", source.paths.hooks_dir, target.paths.hooks_dir),
        _literal("hook-config", source.paths.hook_config, target.paths.hook_config),
        _literal("instructions", source.paths.instructions, target.paths.instructions),
        _literal("display-name", source.display_name, target.display_name, ignore_case=True),
        _literal("config-dir", source.paths.config_dir, target.paths.config_dir, prefix=True),
    ]
    # Longer patterns first so managed paths win over the bare config dir
    return sorted(filter(None, rules), key=lambda rule: -len(rule.pattern))


# =============================================================================
# Capability fallbacks
# =============================================================================


def _choice_lines(question: dict) -> Optional[str]:
    options = question.get("options")
    if not isinstance(options, list) or not options:
        return None

    lines = []
    text, header = question.get("question"), question.get("header")
    if text:
        lines.append(f"**{text}**" + (f" ({header})" if header else ""))
        lines.append("")
    elif header:
        lines.append(f"**{header}**")
        lines.append("")

    if question.get("multiSelect"):
        lines.append("Reply with the numbers of all that apply (comma-separated):")
    else:
        lines.append("Reply with the number of your choice:")
    lines.append("")

    for number, option in enumerate(options, 1):
        if isinstance(option, dict):
            label, description = option.get("label"), option.get("description")
        else:
            label, description = option, None
        lines.append(f"{number}. {label}" + (f" - {description}" if description else ""))
    return "\n".join(lines)


def render_choice_fallback(block: str, tool: str) -> Optional[str]:
    """Turn a structured-choice block into a numbered plain-text prompt.

    Returns None when the block cannot be read as a choice invocation.
    """
    inner = block.split("\n", 1)[1].rsplit("```", 1)[0]
    try:
        data = yaml.safe_load(inner)
    except yaml.YAMLError:
        return None
    if not isinstance(data, dict):
        return None

    invocation = data.get(tool)
    if isinstance(invocation, dict) and isinstance(invocation.get("questions"), list):
        questions = invocation["questions"]
    elif isinstance(invocation, list):
        questions = invocation
    else:
        questions = [invocation]

    rendered = [_choice_lines(q) for q in questions if isinstance(q, dict)]
    if not rendered or any(text is None for text in rendered):
        return None
    return "\n\n".join(rendered)


def _interactive_rules(
    source: CapabilityProfile, target: CapabilityProfile, warnings: list[str]
) -> list[RewriteRule]:
    tool = source.tool_name("askUser")
    if not tool:
        return []

    if target.interactive_input:
        rule = _literal("ask-user", tool, target.tool_name("askUser"))
        return [rule] if rule else []

    fallback_token = "numbered list prompt"

    def _choice(match: "re.Match[str]") -> str:
        block = match.group(0)
        rendered = render_choice_fallback(block, tool)
        if rendered is None:
            warnings.append(f"Unreadable {tool} block replaced by a plain prompt")
            # the ask-user rule renames the tool inside the kept block
            return block
        return rendered

    return [
        RewriteRule(
            "choice-block",
            rf"(?s:```(?:ya?ml)?[ \t]*\n{re.escape(tool)}:.*?```)",
            _choice,
            rewrite_output=True,
        ),
        RewriteRule(
            "ask-phrase",
            rf"\bcall the {re.escape(tool)} tool\b",
            "ask the user to reply with their choice (as a numbered list)",
        ),
        _literal("ask-user", tool, fallback_token),
    ]


def _delegation_rules(source: CapabilityProfile, target: CapabilityProfile) -> list[RewriteRule]:
    rules = []
    label = _literal(
        "delegation", source.conventions.delegation_label, target.conventions.delegation_label
    )
    if label:
        rules.append(label)

    if not target.sub_agents and source.sub_agents:
        key = target.conventions.delegation_key

        def _delegate(match: "re.Match[str]") -> str:
            return f'{key}: "{agent_reference(match.group(1), target)}"'

        rules.append(
            RewriteRule(
                "delegation-target",
                rf"\b{re.escape(source.conventions.delegation_key)}:[ \t]*[\"']?"
                rf"{re.escape(source.conventions.prefix)}([\w-]+)[\"']?",
                _delegate,
            )
        )
    return rules


def _tool_rules(
    source: CapabilityProfile,
    target: CapabilityProfile,
    aliases: tuple[str, ...],
    supported: bool,
    missing_note: str,
) -> list[RewriteRule]:
    rules = []
    for alias in aliases:
        native = target.tool_name(alias) if supported else None
        if native is None:
            native = missing_note
        rule = _literal(alias, source.tool_name(alias), native)
        if rule:
            rules.append(rule)
    return rules


def _capability_rules(
    source: CapabilityProfile, target: CapabilityProfile, warnings: list[str]
) -> list[RewriteRule]:
    name = target.display_name
    rules = _interactive_rules(source, target, warnings)
    rules += _delegation_rules(source, target)
    rules += _tool_rules(
        source,
        target,
        ("enterPlanMode", "exitPlanMode"),
        target.plan_mode,
        f"(not available in {name})" if target.plan_mode else f"(not available - no plan mode in {name})",
    )
    rules += _tool_rules(
        source,
        target,
        ("taskCreate", "taskUpdate", "taskList", "taskGet"),
        target.task_tracking,
        f"(not available - no task tracking in {name})",
    )
    if source.hooks_enabled and not target.hooks_enabled:
        # Single-word events such as "Stop" read as prose and stay untouched
        for event in filter(_COMPOUND_IDENTIFIER.fullmatch, source.hook_events):
            rules.append(_literal(f"hook-{event}", event, f"(not available - no hooks in {name})"))
    return rules


# =============================================================================
# Public API
# =============================================================================


def build_rules(
    source: CapabilityProfile,
    target: CapabilityProfile,
    warnings: list[str],
    docs_folder: Optional[str] = None,
) -> list[RewriteRule]:
    """All rules rewriting `source` content for `target`, in priority order."""
    rules: list[RewriteRule] = []
    if docs_folder and docs_folder.strip("/") != config.DOCS_FOLDER:
        rules.append(
            RewriteRule(
                "docs-folder",
                rf"(?<![\w./-]){re.escape(config.DOCS_FOLDER)}/",
                docs_folder.strip("/") + "/",
            )
        )
    if source.id == target.id:
        return rules

    rules += _capability_rules(source, target, warnings)
    rules += _path_rules(source, target)

    def _reference(match: "re.Match[str]") -> str:
        return command_reference(match.group(1).split(":"), target)

    rules.append(RewriteRule("command-reference", COMMAND_REFERENCE, _reference))
    return rules


def rewrite(
    content: Optional[str],
    source: CapabilityProfile,
    target: CapabilityProfile,
    docs_folder: Optional[str] = None,
) -> tuple[str, list[str]]:
    """Rewrite content for a target in a single pass.

    Returns:
        Tuple of (rewritten content, warnings)
    """
    if not content:
        return "", []

    warnings: list[str] = []
    rules = build_rules(source, target, warnings, docs_folder)
    if not rules:
        return content, warnings

    plain = [rule for rule in rules if not rule.rewrite_output]
    inner = _substitution(plain) if plain else None
    return _substitution(rules, inner)(content), warnings


def _substitution(
    rules: list[RewriteRule], inner: Optional[Callable[[str], str]] = None
) -> Callable[[str], str]:
    """Compile rules into one alternation applied with a single `re.sub`."""
    combined = re.compile(
        "|".join(f"(?P<r{index}>{rule.pattern})" for index, rule in enumerate(rules))
    )

    def _replace(match: "re.Match[str]") -> str:
        for group, text in match.groupdict().items():
            if text is not None:
                rule = rules[int(group[1:])]
                result = rule.apply(text)
                if rule.rewrite_output and inner is not None:
                    result = inner(result)
                return result
        return match.group(0)

    return lambda text: combined.sub(_replace, text)
