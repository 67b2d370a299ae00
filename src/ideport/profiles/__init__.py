"""
profiles:
    Declarative capability profiles for each target IDE.
"""

from ideport.profiles.loader import ProfileLoader
from ideport.profiles.schema import (
    ArtifactSpec,
    CapabilityProfile,
    Conventions,
    FieldRule,
    HookEntrySpec,
    HookSpec,
    ProfilePaths,
    build_profile,
)

__all__ = [
    "ArtifactSpec",
    "CapabilityProfile",
    "Conventions",
    "FieldRule",
    "HookEntrySpec",
    "HookSpec",
    "ProfileLoader",
    "ProfilePaths",
    "build_profile",
]
