"""
exceptions:
    Custom exception hierarchy for ideport.

All ideport-specific exceptions inherit from IdeportError, making it easy to
catch them at the CLI layer or at a target pipeline boundary.

Usage:
    - Raise specific exceptions in library code
    - Catch IdeportError in the install pipeline to produce a failed report
    - Convert to user-friendly messages and exit codes at the CLI layer
"""

from pathlib import Path
from typing import Optional


class IdeportError(Exception):
    """Base exception for all ideport-specific errors."""

    pass


# =============================================================================
# Profile-related exceptions
# =============================================================================


class ProfileError(IdeportError):
    """Raised when a capability profile cannot be used."""

    def __init__(self, profile_id: str, message: Optional[str] = None):
        self.profile_id = profile_id
        if message is None:
            message = f"Profile '{profile_id}' cannot be loaded"
        super().__init__(message)


class ProfileNotFoundError(ProfileError):
    """Raised when no declaration exists for a profile id."""

    def __init__(self, profile_id: str, available: Optional[list[str]] = None):
        self.available = available or []
        message = f"Profile '{profile_id}' not found"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(profile_id, message)


class ProfileInvalidError(ProfileError):
    """Raised when a profile declaration is malformed.

    Contains the list of specific problems found.
    """

    def __init__(self, profile_id: str, errors: list[str]):
        self.errors = errors
        message = f"Profile '{profile_id}' is invalid:\n" + "\n".join(
            f"  - {err}" for err in errors
        )
        super().__init__(profile_id, message)


# =============================================================================
# Target-related exceptions
# =============================================================================


class UnsupportedTargetError(IdeportError):
    """Raised when an unknown target IDE is requested."""

    def __init__(self, target: str, supported: list[str]):
        self.target = target
        self.supported = supported
        message = f"Unknown target: {target}. Supported: {', '.join(supported)}"
        super().__init__(message)


class TargetWriteError(IdeportError):
    """Raised when writing into a target's file tree fails.

    Fatal to that target's pipeline only.
    """

    def __init__(
        self,
        target: str,
        path: Optional[Path] = None,
        reason: Optional[str] = None,
    ):
        self.target = target
        self.path = path
        self.reason = reason

        parts = [f"Failed to write {target} files"]
        if path:
            parts.append(f"path: {path}")
        if reason:
            parts.append(f"reason: {reason}")
        super().__init__(" - ".join(parts))


class HookMergeError(IdeportError):
    """Raised when an existing hook configuration file is unreadable or corrupt."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot merge hooks into {path}: {reason}")
