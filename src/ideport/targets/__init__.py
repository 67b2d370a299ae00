"""
targets:
    Target IDEs and their install pipelines.

This module provides:
- IdeTarget ABC defining the detect/cleanup/setup contract
- Concrete implementations for each supported IDE
- TARGETS registry for looking up targets by name
"""

from __future__ import annotations

from typing import Optional

from ideport.exceptions import UnsupportedTargetError
from ideport.profiles import ProfileLoader

from ideport.targets.base import (
    IdeTarget,
    ManagedSectionMixin,
    ProfileTarget,
    artifact_path,
    remove_managed,
)
from ideport.targets.claude_code import ClaudeCodeTarget
from ideport.targets.codex import CodexTarget
from ideport.targets.cursor import CursorTarget
from ideport.targets.windsurf import WindsurfTarget

# =============================================================================
# Target Registry
# =============================================================================

TARGETS: dict[str, type[ProfileTarget]] = {
    "claude-code": ClaudeCodeTarget,
    "cursor": CursorTarget,
    "windsurf": WindsurfTarget,
    "codex": CodexTarget,
}


def get_target(name: str, loader: Optional[ProfileLoader] = None) -> ProfileTarget:
    """Create the target for an IDE name, sharing `loader` when given.

    Raises:
        UnsupportedTargetError: If the IDE is not supported.
    """
    if name not in TARGETS:
        raise UnsupportedTargetError(name, list(TARGETS.keys()))
    return TARGETS[name](loader)


__all__ = [
    "IdeTarget",
    "ProfileTarget",
    "ManagedSectionMixin",
    "ClaudeCodeTarget",
    "CursorTarget",
    "WindsurfTarget",
    "CodexTarget",
    "TARGETS",
    "get_target",
    "artifact_path",
    "remove_managed",
]
