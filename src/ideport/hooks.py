"""
hooks:
    Damage-control guard wiring and non-destructive hook-file merging.

Two hook-file formats exist:

- flat: a JSON array of {event, command, args, ...} records (Cursor, Windsurf)
- settings: Claude Code's settings.json, hooks.<event> -> [{matcher, hooks: [...]}]

Entries owned by ideport carry HOOK_MARKER in their command or arguments.
The merge functions are pure: foreign entries are kept verbatim and in order,
owned entries are replaced by the current canonical set. Running a merge on
its own output gives the same output.

Concurrent installs into the same project are not coordinated; files are
replaced atomically so a reader never sees a partial write.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any

from ideport import config
from ideport.exceptions import HookMergeError
from ideport.models import HookEntry, SourceTree
from ideport.profiles import CapabilityProfile

logger = logging.getLogger(__name__)


# =============================================================================
# Pure merge logic
# =============================================================================


def is_owned(entry: Any, marker: str = config.HOOK_MARKER) -> bool:
    """Whether a flat hook record belongs to ideport."""
    if not isinstance(entry, dict):
        return False
    if marker in str(entry.get("command", "")):
        return True
    args = entry.get("args")
    if isinstance(args, list):
        return any(marker in str(arg) for arg in args)
    return False


def merge_hook_entries(
    existing: list[Any],
    owned: list[dict[str, Any]],
    marker: str = config.HOOK_MARKER,
) -> list[Any]:
    """Union of foreign entries (kept in order) and the current owned set."""
    foreign = [entry for entry in existing if not is_owned(entry, marker)]
    return foreign + [copy.deepcopy(entry) for entry in owned]


def remove_hook_entries(existing: list[Any], marker: str = config.HOOK_MARKER) -> list[Any]:
    return [entry for entry in existing if not is_owned(entry, marker)]


def _owned_definition(hook: Any, marker: str) -> bool:
    return isinstance(hook, dict) and marker in str(hook.get("command", ""))


def _strip_settings_hooks(hooks: dict[str, Any], marker: str) -> dict[str, Any]:
    """Drop owned hook definitions; groups emptied by the removal go too."""
    stripped: dict[str, Any] = {}
    for event, groups in hooks.items():
        if not isinstance(groups, list):
            stripped[event] = groups
            continue

        kept_groups = []
        for group in groups:
            if not isinstance(group, dict) or not isinstance(group.get("hooks"), list):
                kept_groups.append(group)
                continue
            kept = [h for h in group["hooks"] if not _owned_definition(h, marker)]
            if len(kept) == len(group["hooks"]):
                kept_groups.append(group)
            elif kept:
                kept_groups.append({**group, "hooks": kept})

        if kept_groups or not groups:
            stripped[event] = kept_groups
    return stripped


def merge_settings_hooks(
    settings: dict[str, Any],
    owned_groups: dict[str, list[dict[str, Any]]],
    marker: str = config.HOOK_MARKER,
) -> dict[str, Any]:
    """Merge owned matcher groups into a settings.json mapping."""
    result = copy.deepcopy(settings)
    hooks = _strip_settings_hooks(result.get("hooks") or {}, marker)
    for event, groups in owned_groups.items():
        hooks.setdefault(event, []).extend(copy.deepcopy(groups))
    result["hooks"] = hooks
    return result


def remove_settings_hooks(settings: dict[str, Any], marker: str = config.HOOK_MARKER) -> dict[str, Any]:
    result = copy.deepcopy(settings)
    if isinstance(result.get("hooks"), dict):
        result["hooks"] = _strip_settings_hooks(result["hooks"], marker)
    return result


def remove_owned_hooks(data: Any, fmt: str, marker: str = config.HOOK_MARKER) -> Any:
    """Uninstall counterpart of the merges for either hook-file format."""
    if fmt == "flat":
        return remove_hook_entries(data, marker)
    return remove_settings_hooks(data, marker)


# =============================================================================
# Owned entries declared by a profile
# =============================================================================


def script_path(profile: CapabilityProfile, script: str) -> str:
    """Path a hook uses to reach a guard script, rooted at the project dir variable."""
    spec = profile.hooks
    relative = f"{profile.paths.hooks_dir}/{config.GUARD_TARGET_DIR}/{script}"
    if spec is not None and spec.project_dir_var:
        return f"{spec.project_dir_var}/{relative}"
    return relative


def build_flat_entries(profile: CapabilityProfile) -> list[dict[str, Any]]:
    spec = profile.hooks
    return [
        HookEntry(
            event=entry.event,
            command=spec.runner,
            args=[script_path(profile, entry.script)],
            extras=dict(entry.extras),
        ).to_dict()
        for entry in spec.entries
    ]


def build_settings_groups(profile: CapabilityProfile) -> dict[str, list[dict[str, Any]]]:
    spec = profile.hooks
    groups: dict[str, list[dict[str, Any]]] = {}
    for entry in spec.entries:
        hook: dict[str, Any] = {
            "type": "command",
            "command": f"{spec.runner} {script_path(profile, entry.script)}",
        }
        if entry.timeout is not None:
            hook["timeout"] = entry.timeout
        group: dict[str, Any] = {}
        if entry.matcher is not None:
            group["matcher"] = entry.matcher
        group["hooks"] = [hook]
        groups.setdefault(entry.event, []).append(group)
    return groups


# =============================================================================
# File I/O
# =============================================================================


def read_hook_file(path: Path, fmt: str) -> Any:
    """Read a hook file; a missing file is an empty configuration.

    Raises:
        HookMergeError: If the file is unreadable, not JSON, or the wrong shape.
    """
    if not path.exists():
        return [] if fmt == "flat" else {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise HookMergeError(path, f"invalid JSON ({e})") from e
    except OSError as e:
        raise HookMergeError(path, str(e)) from e

    if fmt == "flat" and not isinstance(data, list):
        raise HookMergeError(path, "expected a JSON array of hook entries")
    if fmt == "settings":
        if not isinstance(data, dict):
            raise HookMergeError(path, "expected a JSON object")
        if "hooks" in data and not isinstance(data["hooks"], dict):
            raise HookMergeError(path, "'hooks' must be an object")
    return data


def write_json_atomic(path: Path, data: Any) -> bool:
    """Write JSON via a temp file and rename. Returns False when nothing changed."""
    text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    if path.exists() and path.read_text(encoding="utf-8") == text:
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(temp_path, path)
    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise
    return True


# =============================================================================
# Damage-control wiring
# =============================================================================


def copy_guard_scripts(root: Path, profile: CapabilityProfile, tree: SourceTree) -> list[str]:
    """Copy the profile's guard scripts, the shared library and patterns.yaml.

    An existing patterns.yaml is never overwritten.
    """
    warnings = []
    hooks_dir = profile.paths.resolve(root, "hooks_dir")
    dest = hooks_dir / config.GUARD_TARGET_DIR
    dest.mkdir(parents=True, exist_ok=True)

    for script in profile.hooks.scripts:
        source = tree.guard_dir / script
        if source.is_file():
            shutil.copy2(source, dest / script)
        else:
            warnings.append(f"Damage control: guard script {script} not found")

    if tree.guard_lib.is_file():
        lib_dir = hooks_dir / config.GUARD_LIB_TARGET_DIR
        lib_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(tree.guard_lib, lib_dir / tree.guard_lib.name)

    patterns_source = tree.guard_dir / config.GUARD_PATTERNS_FILE
    patterns_dest = dest / config.GUARD_PATTERNS_FILE
    if patterns_dest.exists():
        logger.debug("Damage control: %s preserved", patterns_dest)
    elif patterns_source.is_file():
        shutil.copy2(patterns_source, patterns_dest)

    return warnings


def install_damage_control(root: Path, profile: CapabilityProfile, tree: SourceTree) -> list[str]:
    """Copy guard scripts and register them in the target's hook file.

    Targets without hook support are left alone. The hook file is read before
    anything is copied so a corrupt file aborts without side effects.

    Raises:
        HookMergeError: If the existing hook file cannot be merged.
    """
    spec = profile.hooks
    if spec is None or not profile.hooks_enabled:
        return []

    if not tree.guard_dir.is_dir():
        message = f"Damage control: source not found at {tree.guard_dir}, skipping"
        logger.info(message)
        return [message]

    config_path = profile.paths.resolve(root, "hook_config")
    existing = read_hook_file(config_path, spec.format)

    warnings = copy_guard_scripts(root, profile, tree)

    if spec.format == "flat":
        merged = merge_hook_entries(existing, build_flat_entries(profile))
    else:
        merged = merge_settings_hooks(existing, build_settings_groups(profile))

    if write_json_atomic(config_path, merged):
        logger.info("Registered %d damage-control hooks in %s", len(spec.entries), config_path)
    return warnings


def uninstall_damage_control(root: Path, profile: CapabilityProfile) -> bool:
    """Unregister owned hook entries. Guard scripts stay in place.

    Returns:
        True if the hook file changed.
    """
    spec = profile.hooks
    if spec is None:
        return False
    config_path = profile.paths.resolve(root, "hook_config")
    if not config_path.exists():
        return False

    existing = read_hook_file(config_path, spec.format)
    return write_json_atomic(config_path, remove_owned_hooks(existing, spec.format))
