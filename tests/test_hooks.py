"""Tests for damage-control hook merging and wiring."""

import json

import pytest

from ideport.exceptions import HookMergeError
from ideport.hooks import (
    build_flat_entries,
    build_settings_groups,
    install_damage_control,
    is_owned,
    merge_hook_entries,
    merge_settings_hooks,
    read_hook_file,
    remove_owned_hooks,
    uninstall_damage_control,
    write_json_atomic,
)
from ideport.models import SourceTree

USER_ENTRY = {"event": "beforeShellExecution", "command": "./audit.sh", "args": ["--strict"]}


class TestPureMerge:
    """Tests for the flat-format merge functions."""

    def test_is_owned(self):
        assert is_owned({"command": "node", "args": ["x/damage-control/bash.js"]})
        assert is_owned({"command": "node damage-control/bash.js"})
        assert not is_owned(USER_ENTRY)
        assert not is_owned("not an entry")

    def test_foreign_entries_kept_in_order(self):
        other = {"event": "stop", "command": "./notify.sh"}
        owned = [{"event": "afterFileEdit", "command": "node", "args": ["damage-control/edit.js"]}]
        merged = merge_hook_entries([USER_ENTRY, other], owned)
        assert merged == [USER_ENTRY, other, owned[0]]

    def test_previous_owned_entries_replaced(self):
        stale = {"event": "afterFileEdit", "command": "node", "args": ["old/damage-control/x.js"]}
        owned = [{"event": "afterFileEdit", "command": "node", "args": ["damage-control/edit.js"]}]
        merged = merge_hook_entries([stale, USER_ENTRY], owned)
        assert merged == [USER_ENTRY, owned[0]]

    def test_merge_is_idempotent(self, loader):
        owned = build_flat_entries(loader.load("cursor"))
        once = merge_hook_entries([USER_ENTRY], owned)
        twice = merge_hook_entries(once, owned)
        assert once == twice

    def test_merge_does_not_mutate_inputs(self, loader):
        owned = build_flat_entries(loader.load("cursor"))
        existing = [dict(USER_ENTRY)]
        merged = merge_hook_entries(existing, owned)
        merged[-1]["event"] = "changed"
        assert existing == [USER_ENTRY]
        assert owned[-1]["event"] != "changed"

    def test_remove_owned(self, loader):
        merged = merge_hook_entries([USER_ENTRY], build_flat_entries(loader.load("cursor")))
        assert remove_owned_hooks(merged, "flat") == [USER_ENTRY]


class TestSettingsMerge:
    """Tests for the Claude Code settings.json merge."""

    def test_groups_built_from_profile(self, loader):
        groups = build_settings_groups(loader.load("claude-code"))
        assert list(groups) == ["PreToolUse"]
        assert [g["matcher"] for g in groups["PreToolUse"]] == ["Bash", "Edit", "Write"]
        hook = groups["PreToolUse"][0]["hooks"][0]
        assert hook == {
            "type": "command",
            "command": "node $CLAUDE_PROJECT_DIR/.claude/hooks/damage-control/bash-tool-damage-control.js",
            "timeout": 5000,
        }

    def test_foreign_settings_kept(self, loader):
        user_group = {"matcher": "Bash", "hooks": [{"type": "command", "command": "./lint.sh"}]}
        settings = {"model": "opus", "hooks": {"PreToolUse": [user_group], "Stop": []}}
        merged = merge_settings_hooks(settings, build_settings_groups(loader.load("claude-code")))
        assert merged["model"] == "opus"
        assert merged["hooks"]["Stop"] == []
        assert merged["hooks"]["PreToolUse"][0] == user_group
        assert len(merged["hooks"]["PreToolUse"]) == 4

    def test_settings_merge_idempotent(self, loader):
        groups = build_settings_groups(loader.load("claude-code"))
        once = merge_settings_hooks({}, groups)
        assert merge_settings_hooks(once, groups) == once

    def test_mixed_group_keeps_foreign_hooks(self):
        mixed = {
            "matcher": "Bash",
            "hooks": [
                {"type": "command", "command": "./lint.sh"},
                {"type": "command", "command": "node .claude/hooks/damage-control/old.js"},
            ],
        }
        result = remove_owned_hooks({"hooks": {"PreToolUse": [mixed]}}, "settings")
        assert result["hooks"]["PreToolUse"] == [
            {"matcher": "Bash", "hooks": [{"type": "command", "command": "./lint.sh"}]}
        ]

    def test_emptied_event_dropped(self, loader):
        merged = merge_settings_hooks({}, build_settings_groups(loader.load("claude-code")))
        assert remove_owned_hooks(merged, "settings") == {"hooks": {}}


class TestFileIO:
    """Tests for reading and writing hook files."""

    def test_missing_file_is_empty(self, tmp_path):
        assert read_hook_file(tmp_path / "hooks.json", "flat") == []
        assert read_hook_file(tmp_path / "settings.json", "settings") == {}

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "hooks.json"
        path.write_text("[{not json")
        with pytest.raises(HookMergeError) as exc_info:
            read_hook_file(path, "flat")
        assert "invalid JSON" in str(exc_info.value)

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "hooks.json"
        path.write_text('{"hooks": []}')
        with pytest.raises(HookMergeError):
            read_hook_file(path, "flat")
        with pytest.raises(HookMergeError):
            read_hook_file(path, "settings")

    def test_write_atomic(self, tmp_path):
        path = tmp_path / "nested" / "hooks.json"
        assert write_json_atomic(path, [USER_ENTRY]) is True
        assert path.read_text().endswith("]\n")
        assert json.loads(path.read_text()) == [USER_ENTRY]
        assert write_json_atomic(path, [USER_ENTRY]) is False
        assert [p.name for p in path.parent.iterdir()] == ["hooks.json"]


class TestInstallDamageControl:
    """Tests for copying guard scripts and registering hooks."""

    def test_cursor_preserves_user_entry(self, loader, source_tree, project):
        hooks_file = project / ".cursor" / "hooks.json"
        hooks_file.parent.mkdir()
        hooks_file.write_text(json.dumps([USER_ENTRY]))

        profile = loader.load("cursor")
        warnings = install_damage_control(project, profile, SourceTree(source_tree))

        entries = json.loads(hooks_file.read_text())
        assert warnings == []
        assert entries[0] == USER_ENTRY
        assert len(entries) == 1 + len(profile.hooks.entries)
        assert entries[1] == {
            "event": "beforeShellExecution",
            "command": "node",
            "args": ["$CURSOR_PROJECT_DIR/.cursor/hooks/damage-control/bash-tool-damage-control.js"],
            "order": 1,
        }

    def test_scripts_copied(self, loader, source_tree, project):
        install_damage_control(project, loader.load("windsurf"), SourceTree(source_tree))
        guard_dir = project / ".windsurf" / "hooks" / "damage-control"
        assert (guard_dir / "bash-tool-damage-control.js").exists()
        assert (guard_dir / "edit-tool-damage-control.js").exists()
        assert not (guard_dir / "write-tool-damage-control.js").exists()
        assert (guard_dir / "patterns.yaml").exists()
        assert (project / ".windsurf" / "hooks" / "lib" / "damage-control-utils.js").exists()

    def test_patterns_preserved(self, loader, source_tree, project):
        guard_dir = project / ".claude" / "hooks" / "damage-control"
        guard_dir.mkdir(parents=True)
        (guard_dir / "patterns.yaml").write_text("custom: true\n")
        install_damage_control(project, loader.load("claude-code"), SourceTree(source_tree))
        assert (guard_dir / "patterns.yaml").read_text() == "custom: true\n"

    def test_corrupt_file_aborts_without_side_effects(self, loader, source_tree, project):
        hooks_file = project / ".cursor" / "hooks.json"
        hooks_file.parent.mkdir()
        hooks_file.write_text("{broken")
        with pytest.raises(HookMergeError):
            install_damage_control(project, loader.load("cursor"), SourceTree(source_tree))
        assert hooks_file.read_text() == "{broken"
        assert not (project / ".cursor" / "hooks").exists()

    def test_missing_guard_source(self, loader, tmp_path, project):
        warnings = install_damage_control(project, loader.load("cursor"), SourceTree(tmp_path / "empty"))
        assert len(warnings) == 1
        assert "source not found" in warnings[0]
        assert not (project / ".cursor").exists()

    def test_target_without_hooks(self, loader, source_tree, project):
        assert install_damage_control(project, loader.load("codex"), SourceTree(source_tree)) == []
        assert not (project / ".codex").exists()

    def test_uninstall(self, loader, source_tree, project):
        profile = loader.load("cursor")
        hooks_file = project / ".cursor" / "hooks.json"
        hooks_file.parent.mkdir()
        hooks_file.write_text(json.dumps([USER_ENTRY]))
        install_damage_control(project, profile, SourceTree(source_tree))

        assert uninstall_damage_control(project, profile) is True
        assert json.loads(hooks_file.read_text()) == [USER_ENTRY]
        assert uninstall_damage_control(project, profile) is False
