"""
models:
    Data models for canonical sources, transformed artifacts and install reports
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ideport import config
from ideport import frontmatter as fm

logger = logging.getLogger(__name__)

COMMAND = "command"
AGENT = "agent"
SKILL = "skill"
ARTIFACT_KINDS = (COMMAND, AGENT, SKILL)


@dataclass(frozen=True)
class SourceArtifact:
    """A canonical command or agent, read once and never mutated.

    `slug` is the path below the kind's source directory without the `.md`
    suffix, using `/` for nested commands (e.g. `story/list`).
    """

    kind: str
    slug: str
    path: Path
    frontmatter: dict[str, Any]
    body: str
    raw: str

    @classmethod
    def from_path(cls, kind: str, path: Path, base_dir: Path) -> "SourceArtifact":
        """Load an artifact from its markdown file."""
        raw = path.read_text(encoding="utf-8")
        metadata, body = fm.parse(raw)
        slug = path.relative_to(base_dir).with_suffix("").as_posix()
        return cls(
            kind=kind, slug=slug, path=path, frontmatter=metadata, body=body, raw=raw
        )

    @property
    def parts(self) -> list[str]:
        return self.slug.split("/")

    @property
    def name(self) -> str:
        """Hyphen-joined slug, used for flat file and skill directory names."""
        return "-".join(self.parts)

    @property
    def description(self) -> Optional[str]:
        value = self.frontmatter.get("description")
        return str(value) if value is not None else None


@dataclass
class SourceTree:
    """The canonical source directory handed to an installer.

    Layout:
        commands/**/*.md
        agents/*.md
        scripts/damage-control/*.js, patterns.yaml
        scripts/lib/damage-control-utils.js
    """

    root: Path
    warnings: list[str] = field(default_factory=list)

    @property
    def commands_dir(self) -> Path:
        return self.root / config.COMMANDS_DIR

    @property
    def agents_dir(self) -> Path:
        return self.root / config.AGENTS_DIR

    @property
    def guard_dir(self) -> Path:
        return self.root / config.GUARD_SOURCE_DIR

    @property
    def guard_lib(self) -> Path:
        return self.root / config.GUARD_LIB_SOURCE

    def commands(self) -> list[SourceArtifact]:
        """Load every command, including nested command groups."""
        return self._load(COMMAND, self.commands_dir, recursive=True)

    def agents(self) -> list[SourceArtifact]:
        return self._load(AGENT, self.agents_dir, recursive=False)

    def _load(self, kind: str, directory: Path, recursive: bool) -> list[SourceArtifact]:
        if not directory.is_dir():
            self._warn(f"No {kind}s directory at {directory}")
            return []

        files = directory.rglob("*.md") if recursive else directory.glob("*.md")
        artifacts = []
        for path in sorted(files):
            if not path.is_file():
                continue
            try:
                artifact = SourceArtifact.from_path(kind, path, directory)
            except (OSError, UnicodeDecodeError) as e:
                self._warn(f"Skipping unreadable {kind} {path.name}: {e}")
                continue
            for message in fm.validate(artifact.raw):
                self._warn(f"{kind} {artifact.slug}: {message}")
            artifacts.append(artifact)
        return artifacts

    def _warn(self, message: str) -> None:
        logger.warning(message)
        if message not in self.warnings:
            self.warnings.append(message)


@dataclass
class TransformedArtifact:
    """Target-native rendition of a SourceArtifact for one profile."""

    kind: str
    slug: str
    frontmatter: dict[str, Any]
    body: str
    content: str
    description: str = ""
    warnings: list[str] = field(default_factory=list)


@dataclass
class HookEntry:
    """One record of a flat hook-configuration file."""

    event: str
    command: str
    args: list[str] = field(default_factory=list)
    extras: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"event": self.event, "command": self.command, "args": list(self.args), **self.extras}


@dataclass
class InstallOptions:
    """Options recognised by a target's setup()."""

    skip_damage_control: bool = False
    docs_folder: str = config.DOCS_FOLDER


@dataclass
class InstallReport:
    """Outcome of one target pipeline run."""

    target: str
    success: bool = True
    commands: int = 0
    agents: int = 0
    skills: int = 0
    warnings: list[str] = field(default_factory=list)
    error: Optional[str] = None

    def fail(self, error: str) -> None:
        self.success = False
        self.error = error

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target,
            "success": self.success,
            "commands": self.commands,
            "agents": self.agents,
            "skills": self.skills,
            "warnings": list(self.warnings),
            "error": self.error,
        }
