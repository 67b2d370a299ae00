"""
config:
    Configuration constants for ideport
"""

from pathlib import Path
import os

PACKAGE_DIR = Path(__file__).parent

# Capability profile declarations (<id>.yaml)
PROFILES_DIR = Path(
    os.environ.get("IDEPORT_PROFILES_DIR", PACKAGE_DIR / "profiles" / "data")
)

# Profile the canonical content is written for
SOURCE_PROFILE = os.environ.get("IDEPORT_SOURCE_PROFILE", "claude-code")

# Canonical command namespace (/agileflow:story:list)
NAMESPACE = "agileflow"

# Source tree layout
COMMANDS_DIR = "commands"
AGENTS_DIR = "agents"
GUARD_SOURCE_DIR = Path("scripts") / "damage-control"
GUARD_LIB_SOURCE = Path("scripts") / "lib" / "damage-control-utils.js"
GUARD_PATTERNS_FILE = "patterns.yaml"

# Guard scripts land in <hooksDir>/damage-control, the library in <hooksDir>/lib
GUARD_TARGET_DIR = "damage-control"
GUARD_LIB_TARGET_DIR = "lib"

# Substring identifying hook entries owned by ideport
HOOK_MARKER = "damage-control"

# Skill definition filename
SKILL_FILE = "SKILL.md"

# Default docs folder referenced by canonical content
DOCS_FOLDER = "docs"

REQUIRED_PROFILE_SECTIONS = ("identity", "paths", "capabilities", "toolNames")
CAPABILITY_GROUPS = ("core", "planning", "lifecycle", "external", "collaboration")
