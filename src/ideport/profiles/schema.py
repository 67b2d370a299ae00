"""
schema:
    Typed capability profile records and their validation.

A profile declaration is a YAML mapping with the required sections
`identity`, `paths`, `capabilities` and `toolNames`, plus the optional
`conventions`, `artifacts`, `limits` and `hooks` sections. `build_profile`
turns the raw mapping into a frozen CapabilityProfile or raises
ProfileInvalidError listing every problem found.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Any, Optional

from ideport import config
from ideport.exceptions import ProfileInvalidError
from ideport.models import ARTIFACT_KINDS, AGENT, COMMAND

logger = logging.getLogger(__name__)

COMMAND_REFERENCE_STYLES = ("colon", "hyphen", "namespaced-hyphen", "sigil")
LAYOUTS = ("tree", "prefixed", "skill-dir")
HOOK_FORMATS = ("flat", "settings")

_PATH_KEYS = {
    "configDir": "config_dir",
    "commands": "commands",
    "agents": "agents",
    "skills": "skills",
    "rules": "rules",
    "hooksDir": "hooks_dir",
    "hookConfig": "hook_config",
    "instructions": "instructions",
}


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class ProfilePaths:
    """Project-relative locations owned or read by a target."""

    config_dir: str
    commands: Optional[str] = None
    agents: Optional[str] = None
    skills: Optional[str] = None
    rules: Optional[str] = None
    hooks_dir: Optional[str] = None
    hook_config: Optional[str] = None
    instructions: Optional[str] = None
    legacy: tuple[str, ...] = ()

    def resolve(self, root: Path, attr: str) -> Optional[Path]:
        """Resolve a path attribute against a project root."""
        value = getattr(self, attr)
        if value is None:
            return None
        return Path(root) / value


@dataclass(frozen=True)
class FieldRule:
    """How one output frontmatter key is produced.

    `source` copies the canonical value, `default` is a template used when the
    source key is missing, `value` is a template that always wins.
    """

    key: str
    source: Optional[str] = None
    default: Any = None
    value: Any = None


@dataclass(frozen=True)
class ArtifactSpec:
    """Shape of one artifact kind in a target."""

    kind: str
    layout: str = "tree"
    source: str = AGENT
    frontmatter: Optional[tuple[FieldRule, ...]] = None
    header: str = ""
    footer: str = ""

    @property
    def passthrough(self) -> bool:
        return self.frontmatter is None


@dataclass(frozen=True)
class Conventions:
    command_reference: str = "colon"
    agent_reference: str = "agileflow-{slug}"
    prefix: str = "agileflow-"
    delegation_label: str = "Task tool"
    delegation_key: str = "subagent_type"


@dataclass(frozen=True)
class HookEntrySpec:
    """A guard script registration declared by a profile."""

    event: str
    script: str
    matcher: Optional[str] = None
    timeout: Optional[int] = None
    extras: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class HookSpec:
    format: str
    runner: str
    entries: tuple[HookEntrySpec, ...]
    project_dir_var: Optional[str] = None

    @property
    def scripts(self) -> list[str]:
        """Guard scripts referenced by the entries, in first-use order."""
        return list(dict.fromkeys(entry.script for entry in self.entries))


@dataclass(frozen=True)
class CapabilityProfile:
    """Everything ideport knows about one target IDE."""

    id: str
    display_name: str
    paths: ProfilePaths
    capabilities: dict[str, dict[str, Any]]
    tool_names: dict[str, Optional[str]]
    conventions: Conventions = field(default_factory=Conventions)
    artifacts: dict[str, ArtifactSpec] = field(default_factory=dict)
    limits: dict[str, int] = field(default_factory=dict)
    hooks: Optional[HookSpec] = None

    def has_capability(self, group: str, name: str) -> Optional[bool]:
        """True/False when modelled, None when the group or name is absent."""
        caps = self.capabilities.get(group)
        if caps is None or name not in caps:
            return None
        return caps[name] is True

    def capability(self, group: str, name: str, default: Any = None) -> Any:
        return self.capabilities.get(group, {}).get(name, default)

    def tool_name(self, alias: str) -> Optional[str]:
        return self.tool_names.get(alias)

    # Typed capability fields used to pick transformation strategies

    @property
    def interactive_input(self) -> bool:
        return self.has_capability("core", "interactiveInput") is True

    @property
    def sub_agents(self) -> bool:
        return self.has_capability("core", "subAgents") is True

    @property
    def plan_mode(self) -> bool:
        return self.has_capability("planning", "planMode") is True

    @property
    def task_tracking(self) -> bool:
        return self.has_capability("collaboration", "taskTracking") is True

    @property
    def hooks_enabled(self) -> bool:
        return self.has_capability("lifecycle", "hooks") is True

    @property
    def hook_events(self) -> list[str]:
        return list(self.capability("lifecycle", "hookEvents") or [])


# =============================================================================
# Validation
# =============================================================================


def _is_relative(value: str) -> bool:
    if value.startswith("~"):
        return False
    if PurePosixPath(value).is_absolute() or PureWindowsPath(value).is_absolute():
        return False
    if PureWindowsPath(value).drive:
        return False
    return ".." not in PurePosixPath(value).parts


def _mapping(data: dict, key: str, errors: list[str]) -> dict:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        errors.append(f"'{key}' must be a mapping")
        return {}
    return value


def _build_paths(raw: dict, errors: list[str]) -> ProfilePaths:
    values: dict[str, Any] = {}
    for key, attr in _PATH_KEYS.items():
        value = raw.get(key)
        if value is None:
            continue
        if not isinstance(value, str) or not value:
            errors.append(f"paths.{key} must be a non-empty string")
        elif not _is_relative(value):
            errors.append(f"paths.{key} must be relative to the project root: {value}")
        else:
            values[attr] = value.rstrip("/")

    legacy = raw.get("legacy") or []
    if not isinstance(legacy, list):
        errors.append("paths.legacy must be a list")
        legacy = []
    for value in legacy:
        if not isinstance(value, str) or not _is_relative(value):
            errors.append(f"paths.legacy entry must be a relative path: {value}")

    if "config_dir" not in values:
        errors.append("paths.configDir is required")
        values["config_dir"] = ""
    return ProfilePaths(legacy=tuple(str(v) for v in legacy), **values)


def _build_capabilities(profile_id: str, raw: dict, errors: list[str]) -> dict:
    capabilities: dict[str, dict[str, Any]] = {}
    for group, caps in raw.items():
        if group not in config.CAPABILITY_GROUPS:
            logger.warning("Profile '%s' declares unknown capability group '%s'", profile_id, group)
        if not isinstance(caps, dict):
            errors.append(f"capabilities.{group} must be a mapping")
            continue
        capabilities[group] = dict(caps)
    return capabilities


def _build_artifact(kind: str, raw: Any, paths: ProfilePaths, errors: list[str]) -> Optional[ArtifactSpec]:
    if not isinstance(raw, dict):
        errors.append(f"artifacts.{kind} must be a mapping")
        return None

    layout = raw.get("layout", "tree")
    if layout not in LAYOUTS:
        errors.append(f"artifacts.{kind}.layout must be one of {', '.join(LAYOUTS)}")

    location = {"command": paths.commands, "agent": paths.agents, "skill": paths.skills}[kind]
    if location is None:
        errors.append(f"artifacts.{kind} requires paths.{kind}s")

    rules = None
    if raw.get("frontmatter") is not None:
        rules = []
        for item in raw["frontmatter"]:
            if not isinstance(item, dict) or "key" not in item:
                errors.append(f"artifacts.{kind}.frontmatter entries need a 'key'")
                continue
            rules.append(
                FieldRule(
                    key=str(item["key"]),
                    source=item.get("from"),
                    default=item.get("default"),
                    value=item.get("value"),
                )
            )
        rules = tuple(rules)

    return ArtifactSpec(
        kind=kind,
        layout=layout,
        source=raw.get("source", COMMAND if kind == COMMAND else AGENT),
        frontmatter=rules,
        header=raw.get("header") or "",
        footer=raw.get("footer") or "",
    )


def _build_hooks(raw: dict, capabilities: dict, paths: ProfilePaths, errors: list[str]) -> Optional[HookSpec]:
    if not raw:
        return None

    lifecycle = capabilities.get("lifecycle", {})
    if lifecycle.get("hooks") is not True:
        errors.append("hooks section requires capabilities.lifecycle.hooks: true")
    if paths.hook_config is None or paths.hooks_dir is None:
        errors.append("hooks section requires paths.hookConfig and paths.hooksDir")

    fmt = raw.get("format", "flat")
    if fmt not in HOOK_FORMATS:
        errors.append(f"hooks.format must be one of {', '.join(HOOK_FORMATS)}")

    known_events = lifecycle.get("hookEvents")
    entries = []
    for item in raw.get("entries") or []:
        if not isinstance(item, dict) or "event" not in item or "script" not in item:
            errors.append("hooks.entries need 'event' and 'script'")
            continue
        if known_events is not None and item["event"] not in known_events:
            errors.append(f"hook event '{item['event']}' is not in lifecycle.hookEvents")
        extras = {
            k: v for k, v in item.items() if k not in ("event", "script", "matcher", "timeout")
        }
        entries.append(
            HookEntrySpec(
                event=item["event"],
                script=item["script"],
                matcher=item.get("matcher"),
                timeout=item.get("timeout"),
                extras=extras,
            )
        )

    return HookSpec(
        format=fmt,
        runner=raw.get("runner", "node"),
        entries=tuple(entries),
        project_dir_var=raw.get("projectDirVar"),
    )


def build_profile(profile_id: str, data: Any) -> CapabilityProfile:
    """Validate a raw declaration and build the typed profile.

    Raises:
        ProfileInvalidError: With every problem found in the declaration.
    """
    if not isinstance(data, dict):
        raise ProfileInvalidError(profile_id, ["declaration must be a mapping"])

    missing = [key for key in config.REQUIRED_PROFILE_SECTIONS if key not in data]
    if missing:
        raise ProfileInvalidError(
            profile_id, [f"missing required section '{key}'" for key in missing]
        )

    errors: list[str] = []

    identity = _mapping(data, "identity", errors)
    if identity.get("id") != profile_id:
        errors.append(f"identity.id must be '{profile_id}', got {identity.get('id')!r}")
    display_name = identity.get("displayName")
    if not display_name:
        errors.append("identity.displayName is required")

    paths = _build_paths(_mapping(data, "paths", errors), errors)
    capabilities = _build_capabilities(profile_id, _mapping(data, "capabilities", errors), errors)

    tool_names = _mapping(data, "toolNames", errors)
    for alias, native in tool_names.items():
        if native is not None and not isinstance(native, str):
            errors.append(f"toolNames.{alias} must be a string or null")

    raw_conventions = _mapping(data, "conventions", errors)
    delegation = raw_conventions.get("delegation") or {}
    conventions = Conventions(
        command_reference=raw_conventions.get("commandReference", "colon"),
        agent_reference=raw_conventions.get("agentReference", Conventions.agent_reference),
        prefix=raw_conventions.get("prefix", Conventions.prefix),
        delegation_label=delegation.get("label", Conventions.delegation_label),
        delegation_key=delegation.get("key", Conventions.delegation_key),
    )
    if conventions.command_reference not in COMMAND_REFERENCE_STYLES:
        errors.append(
            "conventions.commandReference must be one of "
            + ", ".join(COMMAND_REFERENCE_STYLES)
        )

    artifacts = {}
    for kind, raw in _mapping(data, "artifacts", errors).items():
        if kind not in ARTIFACT_KINDS:
            errors.append(f"unknown artifact kind '{kind}'")
            continue
        spec = _build_artifact(kind, raw, paths, errors)
        if spec is not None:
            artifacts[kind] = spec

    limits = {}
    for kind, value in _mapping(data, "limits", errors).items():
        if not isinstance(value, int) or value <= 0:
            errors.append(f"limits.{kind} must be a positive integer")
        else:
            limits[kind] = value

    hooks = _build_hooks(_mapping(data, "hooks", errors), capabilities, paths, errors)

    if errors:
        raise ProfileInvalidError(profile_id, errors)

    return CapabilityProfile(
        id=profile_id,
        display_name=str(display_name),
        paths=paths,
        capabilities=capabilities,
        tool_names=dict(tool_names),
        conventions=conventions,
        artifacts=artifacts,
        limits=limits,
        hooks=hooks,
    )
