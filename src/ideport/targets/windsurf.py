"""
Windsurf target implementation for ideport.

Commands become Cascade workflows under .windsurf/workflows/agileflow/ and
agents are projected into skills (.windsurf/skills/agileflow-<name>/SKILL.md).
Workflows and skills over the profile's size limit are written with a warning.
"""

from .base import ProfileTarget


class WindsurfTarget(ProfileTarget):
    """Target for Windsurf."""

    name = "windsurf"
