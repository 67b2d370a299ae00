"""Tests for the target install pipelines."""

import json
import shutil

import pytest

from ideport import frontmatter as fm
from ideport.exceptions import ProfileNotFoundError, UnsupportedTargetError
from ideport.models import InstallOptions
from ideport.profiles import ProfileLoader
from ideport.targets import (
    TARGETS,
    ClaudeCodeTarget,
    CodexTarget,
    CursorTarget,
    ManagedSectionMixin,
    WindsurfTarget,
    get_target,
)

SKIP_HOOKS = InstallOptions(skip_damage_control=True)


def _snapshot(root):
    return {
        str(p.relative_to(root)): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


class TestRegistry:
    """Tests for the TARGETS registry."""

    def test_all_targets_registered(self):
        assert set(TARGETS) == {"claude-code", "cursor", "windsurf", "codex"}

    def test_get_target(self, loader):
        target = get_target("cursor", loader)
        assert isinstance(target, CursorTarget)
        assert target.loader is loader

    def test_get_target_unknown(self):
        with pytest.raises(UnsupportedTargetError) as exc_info:
            get_target("emacs")
        assert "cursor" in exc_info.value.supported


class TestDetect:
    """Tests for detect()"""

    def test_detect(self, loader, project):
        target = CursorTarget(loader)
        assert target.detect(project) is False
        (project / ".cursor").mkdir()
        assert target.detect(project) is True


class TestCursorInstall:
    """Cursor: hyphen commands and frontmatter-reshaped agents."""

    def test_install(self, loader, source_tree, project):
        result = CursorTarget(loader).setup(project, source_tree, SKIP_HOOKS)

        assert result.success is True
        assert result.commands >= 1
        assert result.agents >= 1
        command = project / ".cursor" / "commands" / "AgileFlow" / "test-command.md"
        content = command.read_text()
        assert "/story-list" in content
        assert "/agileflow:story:list" not in content
        assert (project / ".cursor" / "commands" / "AgileFlow" / "story" / "list.md").exists()
        assert (project / ".cursor" / "agents" / "AgileFlow" / "test-agent.md").exists()

    def test_counts(self, loader, source_tree, project):
        result = CursorTarget(loader).setup(project, source_tree, SKIP_HOOKS)
        assert (result.commands, result.agents, result.skills) == (2, 1, 0)

    def test_skip_damage_control_creates_no_hook_file(self, loader, source_tree, project):
        CursorTarget(loader).setup(project, source_tree, SKIP_HOOKS)
        assert not (project / ".cursor" / "hooks.json").exists()
        assert not (project / ".cursor" / "hooks").exists()

    def test_hook_merge_preserves_user_entry(self, loader, source_tree, project):
        user_entry = {"event": "stop", "command": "./notify.sh"}
        hooks_file = project / ".cursor" / "hooks.json"
        hooks_file.parent.mkdir()
        hooks_file.write_text(json.dumps([user_entry]))

        result = CursorTarget(loader).setup(project, source_tree, InstallOptions())

        entries = json.loads(hooks_file.read_text())
        assert result.success is True
        assert entries[0] == user_entry
        assert len(entries) == 1 + len(loader.load("cursor").hooks.entries)

    def test_corrupt_hook_file_fails_target(self, loader, source_tree, project):
        hooks_file = project / ".cursor" / "hooks.json"
        hooks_file.parent.mkdir()
        hooks_file.write_text("not json")

        result = CursorTarget(loader).setup(project, source_tree, InstallOptions())

        assert result.success is False
        assert "hooks.json" in result.error
        assert hooks_file.read_text() == "not json"

    def test_legacy_rules_removed(self, loader, source_tree, project):
        legacy = project / ".cursor" / "rules" / "agileflow"
        legacy.mkdir(parents=True)
        (legacy / "old.mdc").write_text("old")
        (project / ".cursor" / "rules" / "mine.mdc").write_text("mine")

        CursorTarget(loader).setup(project, source_tree, SKIP_HOOKS)

        assert not legacy.exists()
        assert (project / ".cursor" / "rules" / "mine.mdc").exists()


class TestWindsurfInstall:
    """Windsurf: workflows plus agents rendered as skills."""

    def test_skill_generation(self, loader, source_tree, project):
        result = WindsurfTarget(loader).setup(project, source_tree, SKIP_HOOKS)

        skill = project / ".windsurf" / "skills" / "agileflow-test-agent" / "SKILL.md"
        content = skill.read_text()
        metadata, body = fm.parse(content)
        assert "name: agileflow-test-agent" in content
        assert metadata["name"] == "agileflow-test-agent"
        assert ".claude" not in body
        assert result.skills == 1
        assert result.agents == 0

    def test_workflows(self, loader, source_tree, project):
        WindsurfTarget(loader).setup(project, source_tree, SKIP_HOOKS)
        workflow = project / ".windsurf" / "workflows" / "agileflow" / "test-command.md"
        assert "/agileflow-story-list" in workflow.read_text()

    def test_cleanup_keeps_user_skills(self, loader, source_tree, project):
        user_skill = project / ".windsurf" / "skills" / "my-skill"
        user_skill.mkdir(parents=True)
        (user_skill / "SKILL.md").write_text("mine")
        target = WindsurfTarget(loader)
        target.setup(project, source_tree, SKIP_HOOKS)

        target.cleanup(project)

        assert (user_skill / "SKILL.md").read_text() == "mine"
        assert not (project / ".windsurf" / "skills" / "agileflow-test-agent").exists()
        assert not (project / ".windsurf" / "workflows" / "agileflow").exists()


class TestCodexInstall:
    """Codex: prefixed prompts, versioned skills and an AGENTS.md index."""

    def test_install(self, loader, source_tree, project):
        result = CodexTarget(loader).setup(project, source_tree)

        assert result.success is True
        prompt = project / ".codex" / "prompts" / "agileflow-story-list.md"
        assert prompt.exists()
        skill = project / ".codex" / "skills" / "agileflow-test-agent" / "SKILL.md"
        metadata, _ = fm.parse(skill.read_text())
        assert metadata["version"] == "1.0.0"
        assert not (project / ".codex" / "hooks.json").exists()

    def test_agents_md_section(self, loader, source_tree, project):
        (project / "AGENTS.md").write_text("# My project\n\nHand-written notes.\n")
        CodexTarget(loader).setup(project, source_tree, SKIP_HOOKS)

        content = (project / "AGENTS.md").read_text()
        assert content.startswith("# My project\n\nHand-written notes.\n")
        assert ManagedSectionMixin.START_MARKER in content
        assert "- `$agileflow-test-agent`: Test agent for planning work" in content
        assert "- `$agileflow-story-list`: List stories" in content

    def test_cleanup_removes_section(self, loader, source_tree, project):
        (project / "AGENTS.md").write_text("# My project\n")
        target = CodexTarget(loader)
        target.setup(project, source_tree, SKIP_HOOKS)

        target.cleanup(project)

        assert (project / "AGENTS.md").read_text() == "# My project\n"
        assert not list((project / ".codex" / "prompts").glob("agileflow-*"))

    def test_cleanup_deletes_file_it_created(self, loader, source_tree, project):
        target = CodexTarget(loader)
        target.setup(project, source_tree, SKIP_HOOKS)
        assert (project / "AGENTS.md").exists()

        target.cleanup(project)

        assert not (project / "AGENTS.md").exists()

    def test_user_prompts_kept(self, loader, source_tree, project):
        prompts = project / ".codex" / "prompts"
        prompts.mkdir(parents=True)
        (prompts / "review.md").write_text("mine")
        CodexTarget(loader).setup(project, source_tree, SKIP_HOOKS)
        assert (prompts / "review.md").read_text() == "mine"


class TestClaudeCodeInstall:
    """Claude Code: passthrough copies plus settings.json hooks."""

    def test_passthrough(self, loader, source_tree, project):
        result = ClaudeCodeTarget(loader).setup(project, source_tree, SKIP_HOOKS)

        assert result.success is True
        source = (source_tree / "commands" / "test-command.md").read_text()
        installed = (project / ".claude" / "commands" / "agileflow" / "test-command.md").read_text()
        assert installed == source
        assert (project / ".claude" / "skills").is_dir()

    def test_settings_hooks(self, loader, source_tree, project):
        settings_file = project / ".claude" / "settings.json"
        settings_file.parent.mkdir()
        settings_file.write_text(json.dumps({"permissions": {"allow": ["Bash(ls)"]}}))

        ClaudeCodeTarget(loader).setup(project, source_tree, InstallOptions())

        settings = json.loads(settings_file.read_text())
        assert settings["permissions"] == {"allow": ["Bash(ls)"]}
        groups = settings["hooks"]["PreToolUse"]
        assert [g["matcher"] for g in groups] == ["Bash", "Edit", "Write"]
        guard_dir = project / ".claude" / "hooks" / "damage-control"
        assert (guard_dir / "write-tool-damage-control.js").exists()


class TestPipelineEdgeCases:
    """Tests shared by all targets."""

    @pytest.mark.parametrize("name", sorted(TARGETS))
    def test_zero_agents_directory(self, loader, source_tree, project, name):
        shutil.rmtree(source_tree / "agents")

        result = get_target(name, loader).setup(project, source_tree, SKIP_HOOKS)

        assert result.success is True
        assert result.agents == 0
        assert result.skills == 0
        assert any("agents directory" in w for w in result.warnings)

    @pytest.mark.parametrize("name", sorted(TARGETS))
    def test_idempotent_reinstall(self, loader, source_tree, project, name):
        (project / "AGENTS.md").write_text("# Notes\n")
        target = get_target(name, loader)
        target.setup(project, source_tree, InstallOptions())
        first = _snapshot(project)

        target.setup(project, source_tree, InstallOptions())

        assert _snapshot(project) == first

    def test_stale_artifacts_removed(self, loader, source_tree, project):
        target = CursorTarget(loader)
        target.setup(project, source_tree, SKIP_HOOKS)
        (source_tree / "commands" / "test-command.md").unlink()

        target.setup(project, source_tree, SKIP_HOOKS)

        assert not (project / ".cursor" / "commands" / "AgileFlow" / "test-command.md").exists()

    def test_missing_profile_propagates(self, tmp_path, source_tree, project):
        with pytest.raises(ProfileNotFoundError):
            CursorTarget(ProfileLoader(tmp_path / "none")).setup(project, source_tree)

    def test_frontmatter_warnings_reported(self, loader, source_tree, project):
        (source_tree / "commands" / "bare.md").write_text("No frontmatter.\n")
        result = CursorTarget(loader).setup(project, source_tree, SKIP_HOOKS)
        assert result.success is True
        assert any("command bare" in w for w in result.warnings)
