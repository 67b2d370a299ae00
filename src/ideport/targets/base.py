"""
base:
    ABC, profile-driven base class, mixins and shared helpers for IDE targets.

This module provides:
- IdeTarget ABC defining the contract each target exposes to its caller
- ProfileTarget, the install pipeline driven by a target's capability profile
- ManagedSectionMixin for targets keeping an index inside an instructions file
- Shared helpers for managed artifact paths and cleanup
"""

from __future__ import annotations

import logging
import re
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import yaml

from ideport import config
from ideport.exceptions import IdeportError, TargetWriteError
from ideport.generator import generate_artifact
from ideport.hooks import install_damage_control
from ideport.models import (
    AGENT,
    COMMAND,
    SKILL,
    InstallOptions,
    InstallReport,
    SourceArtifact,
    SourceTree,
    TransformedArtifact,
)
from ideport.profiles import CapabilityProfile, ProfileLoader
from ideport.transformer import artifact_relpath

logger = logging.getLogger(__name__)

# ProfilePaths attribute holding each artifact kind's output directory
PATH_ATTRS = {COMMAND: "commands", AGENT: "agents", SKILL: "skills"}


# =============================================================================
# IdeTarget ABC
# =============================================================================


class IdeTarget(ABC):
    """Abstract base class defining the interface for target IDEs."""

    name: str

    @abstractmethod
    def detect(self, root: Path) -> bool:
        """Whether the target's configuration directory exists under root."""
        ...

    @abstractmethod
    def cleanup(self, root: Path) -> None:
        """Remove artifacts previously written by ideport, and nothing else."""
        ...

    @abstractmethod
    def setup(
        self,
        root: Path,
        source_dir: Path,
        options: Optional[InstallOptions] = None,
    ) -> InstallReport:
        """Install transformed commands, agents and skills plus guard hooks."""
        ...


# =============================================================================
# Shared helpers
# =============================================================================


def artifact_path(directory: Path, layout: str, artifact: SourceArtifact, prefix: str) -> Path:
    """Destination of one artifact inside a kind's output directory."""
    return directory / artifact_relpath(layout, artifact.slug, artifact.name, prefix)


def remove_managed(directory: Optional[Path], layout: str, prefix: str) -> int:
    """Remove managed artifacts of one layout. Missing directories are a no-op.

    Returns:
        Number of entries removed.
    """
    if directory is None or not directory.is_dir():
        return 0

    if layout == "tree":
        shutil.rmtree(directory)
        return 1

    removed = 0
    for entry in sorted(directory.glob(f"{prefix}*")):
        if layout == "prefixed" and entry.is_file() and entry.suffix == ".md":
            entry.unlink()
            removed += 1
        elif layout == "skill-dir" and entry.is_dir():
            shutil.rmtree(entry)
            removed += 1
    return removed


# =============================================================================
# ProfileTarget - the install pipeline
# =============================================================================


class ProfileTarget(IdeTarget):
    """Install pipeline whose paths and shapes all come from the profile.

    Detect -> Cleanup -> Write(commands) -> Write(agents/skills) -> MergeHooks -> Report
    """

    name: str = ""

    def __init__(self, loader: Optional[ProfileLoader] = None):
        self.loader = loader or ProfileLoader()

    @property
    def profile(self) -> CapabilityProfile:
        return self.loader.load(self.name)

    @property
    def source_profile(self) -> CapabilityProfile:
        return self.loader.load(config.SOURCE_PROFILE)

    def detect(self, root: Path) -> bool:
        return (Path(root) / self.profile.paths.config_dir).is_dir()

    def cleanup(self, root: Path) -> None:
        root = Path(root)
        profile = self.profile
        for kind, spec in profile.artifacts.items():
            directory = profile.paths.resolve(root, PATH_ATTRS[kind])
            removed = remove_managed(directory, spec.layout, profile.conventions.prefix)
            if removed:
                logger.debug("%s: removed %d managed %s entries", self.name, removed, kind)
        for legacy in profile.paths.legacy:
            legacy_dir = root / legacy
            if legacy_dir.is_dir():
                shutil.rmtree(legacy_dir)

    def setup(
        self,
        root: Path,
        source_dir: Path,
        options: Optional[InstallOptions] = None,
    ) -> InstallReport:
        """Run the pipeline for this target.

        Profile errors propagate. Write and hook-merge failures end this
        target's run with success=False.
        """
        options = options or InstallOptions()
        root = Path(root)
        profile = self.profile
        source = self.source_profile
        tree = SourceTree(Path(source_dir))
        report = InstallReport(target=self.name)

        try:
            self.cleanup(root)
            commands = tree.commands()
            agents = tree.agents()
            by_kind = {COMMAND: commands, AGENT: agents}

            written: dict[str, list[TransformedArtifact]] = {}
            for kind in (COMMAND, AGENT, SKILL):
                spec = profile.artifacts.get(kind)
                if spec is None:
                    continue
                artifacts = by_kind[spec.source] if kind == SKILL else by_kind[kind]
                written[kind] = self._write_artifacts(root, kind, artifacts, source, options, report)

            report.commands = len(written.get(COMMAND, []))
            report.agents = len(written.get(AGENT, []))
            report.skills = len(written.get(SKILL, []))

            self.finalize(root, written)

            if options.skip_damage_control:
                logger.debug("%s: damage control skipped", self.name)
            else:
                report.warnings.extend(install_damage_control(root, profile, tree))
        except IdeportError as e:
            logger.error("%s: %s", self.name, e)
            report.fail(str(e))
        except OSError as e:
            error = TargetWriteError(
                self.name, Path(e.filename) if e.filename else None, e.strerror or str(e)
            )
            logger.error("%s", error)
            report.fail(str(error))

        report.warnings[:0] = tree.warnings
        return report

    def _write_artifacts(
        self,
        root: Path,
        kind: str,
        artifacts: list[SourceArtifact],
        source: CapabilityProfile,
        options: InstallOptions,
        report: InstallReport,
    ) -> list[TransformedArtifact]:
        profile = self.profile
        spec = profile.artifacts[kind]
        directory = profile.paths.resolve(root, PATH_ATTRS[kind])

        written = []
        for artifact in artifacts:
            try:
                transformed = generate_artifact(
                    artifact, kind, profile, source, options.docs_folder
                )
            except yaml.YAMLError as e:
                report.warnings.append(f"Skipped {kind} {artifact.slug}: {e}")
                continue
            report.warnings.extend(transformed.warnings)

            dest = artifact_path(directory, spec.layout, artifact, profile.conventions.prefix)
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_text(transformed.content, encoding="utf-8")
            written.append(transformed)
        return written

    def finalize(self, root: Path, written: dict[str, list[TransformedArtifact]]) -> None:  # noqa: ARG002
        """Target-specific step after artifacts are written. Default: nothing."""
        return None


# =============================================================================
# ManagedSectionMixin
# =============================================================================


class ManagedSectionMixin:
    """Mixin for targets that keep an index inside a shared markdown file.

    The section sits between START_MARKER and END_MARKER and is rewritten as a
    whole; everything outside the markers belongs to the user.
    """

    START_MARKER: str = f"<!-- {config.NAMESPACE}:start -->"
    END_MARKER: str = f"<!-- {config.NAMESPACE}:end -->"

    def write_managed_section(self, dest_file: Path, block: str) -> None:
        content = dest_file.read_text(encoding="utf-8") if dest_file.exists() else ""
        section = f"{self.START_MARKER}\n{block.strip()}\n{self.END_MARKER}"

        if self.START_MARKER in content and self.END_MARKER in content:
            start_idx = content.index(self.START_MARKER)
            end_idx = content.index(self.END_MARKER) + len(self.END_MARKER)
            content = content[:start_idx] + section + content[end_idx:]
        elif content.strip():
            content = content.rstrip() + "\n\n" + section + "\n"
        else:
            content = section + "\n"

        dest_file.parent.mkdir(parents=True, exist_ok=True)
        dest_file.write_text(content, encoding="utf-8")

    def remove_managed_section(self, dest_file: Path) -> bool:
        """Remove the section; delete the file if nothing else is left."""
        if not dest_file.exists():
            return False
        content = dest_file.read_text(encoding="utf-8")
        if self.START_MARKER not in content or self.END_MARKER not in content:
            return False

        start_idx = content.index(self.START_MARKER)
        end_idx = content.index(self.END_MARKER) + len(self.END_MARKER)
        content = content[:start_idx].rstrip("\n") + content[end_idx:]
        content = re.sub(r"\n{3,}", "\n\n", content)

        if content.strip():
            dest_file.write_text(content, encoding="utf-8")
        else:
            dest_file.unlink()
        return True
