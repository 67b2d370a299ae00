"""
loader:
    Load, validate, cache and query capability profiles.

Each loader owns its cache. A profile is parsed at most once per loader
unless clear_cache() is called; concurrent first loads of the same id may
both parse, and the first stored value wins (both are identical).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from ideport import config
from ideport.exceptions import IdeportError, ProfileInvalidError, ProfileNotFoundError

from .schema import CapabilityProfile, build_profile

logger = logging.getLogger(__name__)

PROFILE_SUFFIX = ".yaml"


class ProfileLoader:
    """Reads `<id>.yaml` declarations from a profiles directory."""

    def __init__(self, profiles_dir: Optional[Path] = None):
        self.profiles_dir = Path(profiles_dir) if profiles_dir else config.PROFILES_DIR
        self._cache: dict[str, CapabilityProfile] = {}

    # =========================================================================
    # Loading
    # =========================================================================

    def list_available(self) -> list[str]:
        """Profile ids with a declaration file, without parsing them."""
        if not self.profiles_dir.is_dir():
            return []
        return sorted(p.stem for p in self.profiles_dir.glob(f"*{PROFILE_SUFFIX}") if p.is_file())

    def is_supported(self, profile_id: str) -> bool:
        return (self.profiles_dir / f"{profile_id}{PROFILE_SUFFIX}").is_file()

    def load(self, profile_id: str) -> CapabilityProfile:
        """Load a profile, parsing its declaration on first use.

        Raises:
            ProfileNotFoundError: No declaration exists for the id.
            ProfileInvalidError: The declaration cannot be parsed or validated.
        """
        cached = self._cache.get(profile_id)
        if cached is not None:
            return cached

        if not self.is_supported(profile_id):
            raise ProfileNotFoundError(profile_id, self.list_available())

        path = self.profiles_dir / f"{profile_id}{PROFILE_SUFFIX}"
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ProfileInvalidError(profile_id, [f"cannot parse {path.name}: {e}"]) from e

        profile = build_profile(profile_id, data)
        logger.debug("Loaded profile %s from %s", profile_id, path)
        return self._cache.setdefault(profile_id, profile)

    def load_all(self) -> dict[str, CapabilityProfile]:
        """Load every available profile, skipping (and logging) broken ones."""
        profiles = {}
        for profile_id in self.list_available():
            try:
                profiles[profile_id] = self.load(profile_id)
            except IdeportError as e:
                logger.warning("Skipping profile %s: %s", profile_id, e)
        return profiles

    def clear_cache(self) -> None:
        self._cache.clear()

    # =========================================================================
    # Queries
    # =========================================================================

    def has_capability(self, profile_id: str, group: str, name: str) -> Optional[bool]:
        """Whether a target supports a capability.

        Returns None, not False, when the capability is not modelled at all.
        """
        return self.load(profile_id).has_capability(group, name)

    def get_tool_name(self, profile_id: str, alias: str) -> Optional[str]:
        return self.load(profile_id).tool_name(alias)

    def get_all_capabilities(self, profile_id: str) -> dict[str, Any]:
        """Flatten a profile's capabilities into `group.name` keys."""
        profile = self.load(profile_id)
        return {
            f"{group}.{name}": value
            for group, caps in profile.capabilities.items()
            for name, value in caps.items()
        }

    def find_ides_with_capability(self, group: str, name: str) -> list[str]:
        return sorted(
            profile_id
            for profile_id, profile in self.load_all().items()
            if profile.has_capability(group, name) is True
        )

    def compare_capability(self, group: str, name: str) -> dict[str, Optional[bool]]:
        return {
            profile_id: profile.has_capability(group, name)
            for profile_id, profile in self.load_all().items()
        }
