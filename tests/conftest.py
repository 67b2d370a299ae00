"""Shared pytest fixtures for ideport tests."""

import pytest
from click.testing import CliRunner

from ideport.models import SourceArtifact
from ideport.profiles import ProfileLoader

SAMPLE_COMMAND = """---
description: Test command for story listing
argument-hint: "[EPIC=<id>]"
---

# Test Command

Run `/agileflow:story:list` to see stories, then `/agileflow:status` for a summary.
Configuration lives in .claude/commands/agileflow/ and CLAUDE.md.
Use the Task tool with subagent_type: "agileflow-epic-planner" to plan.
"""

SAMPLE_AGENT = """---
name: agileflow-test-agent
description: Test agent for planning work
tools: Read, Write, Bash
model: sonnet
---

# Test Agent

You are the test agent for Claude Code.
Read .claude/agents/agileflow/ and .claude/settings.json before starting.

```yaml
AskUserQuestion:
  question: Which epic should we plan?
  header: Epic
  multiSelect: false
  options:
    - label: EP-0001
      description: Authentication
    - label: EP-0002
      description: Billing
```

When done, run `/agileflow:story:list`.
"""

NESTED_COMMAND = """---
description: List stories
---

List stories for an epic.
"""

GUARD_SCRIPTS = (
    "bash-tool-damage-control.js",
    "edit-tool-damage-control.js",
    "write-tool-damage-control.js",
)


@pytest.fixture
def cli_runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def loader():
    """Loader over the bundled profiles, fresh per test."""
    return ProfileLoader()


@pytest.fixture
def source_tree(tmp_path):
    """Create a canonical agileflow source tree with guard scripts."""
    source = tmp_path / "agileflow"

    commands_dir = source / "commands"
    (commands_dir / "story").mkdir(parents=True)
    (commands_dir / "test-command.md").write_text(SAMPLE_COMMAND)
    (commands_dir / "story" / "list.md").write_text(NESTED_COMMAND)

    agents_dir = source / "agents"
    agents_dir.mkdir()
    (agents_dir / "test-agent.md").write_text(SAMPLE_AGENT)

    guard_dir = source / "scripts" / "damage-control"
    guard_dir.mkdir(parents=True)
    for script in GUARD_SCRIPTS:
        (guard_dir / script).write_text(f"// {script}\n")
    (guard_dir / "patterns.yaml").write_text("bashToolPatterns: []\n")

    lib_dir = source / "scripts" / "lib"
    lib_dir.mkdir(parents=True)
    (lib_dir / "damage-control-utils.js").write_text("module.exports = {};\n")

    return source


@pytest.fixture
def project(tmp_path):
    """Create an empty project root."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def sample_agent(source_tree):
    agents_dir = source_tree / "agents"
    return SourceArtifact.from_path("agent", agents_dir / "test-agent.md", agents_dir)


@pytest.fixture
def sample_command(source_tree):
    commands_dir = source_tree / "commands"
    return SourceArtifact.from_path("command", commands_dir / "test-command.md", commands_dir)
