"""
Cursor target implementation for ideport.

Commands and agents land in AgileFlow/ namespaces under .cursor/, guard
hooks are registered in the flat .cursor/hooks.json array. Rule files from
older installs (.cursor/rules/agileflow) are removed during cleanup.
"""

from .base import ProfileTarget


class CursorTarget(ProfileTarget):
    """Target for Cursor."""

    name = "cursor"
