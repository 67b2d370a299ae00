"""
generator:
    Produce target-native commands, agents and skills from canonical sources.

Unknown target ids are never an error here: the content is returned
unchanged and a warning is logged (or attached to the artifact).
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from ideport import config
from ideport import frontmatter as fm
from ideport.exceptions import ProfileNotFoundError
from ideport.models import AGENT, COMMAND, SKILL, SourceArtifact, TransformedArtifact
from ideport.profiles import CapabilityProfile, FieldRule, ProfileLoader
from ideport.transformer import (
    agent_reference,
    command_reference,
    expand_template,
    rewrite,
)

logger = logging.getLogger(__name__)

Target = Union[str, CapabilityProfile]


def _resolve(target: Target, loader: ProfileLoader) -> Optional[CapabilityProfile]:
    if isinstance(target, CapabilityProfile):
        return target
    try:
        return loader.load(target)
    except ProfileNotFoundError:
        return None


def generate_for_ide(
    content: Optional[str],
    target: Target,
    loader: Optional[ProfileLoader] = None,
    docs_folder: Optional[str] = None,
) -> str:
    """Rewrite canonical markdown for a target IDE.

    Empty or missing content yields "". Content already native to the
    target comes back unchanged.
    """
    if not content:
        return ""

    loader = loader or ProfileLoader()
    profile = _resolve(target, loader)
    if profile is None:
        logger.warning("Unknown target '%s', content left unchanged", target)
        return content

    source = loader.load(config.SOURCE_PROFILE)
    text, warnings = rewrite(content, source, profile, docs_folder)
    for warning in warnings:
        logger.warning("%s: %s", profile.id, warning)
    return text


# =============================================================================
# Artifacts
# =============================================================================


def _template_values(
    artifact: SourceArtifact,
    target: CapabilityProfile,
    description: str,
) -> dict[str, Any]:
    name = artifact.name
    if artifact.kind == COMMAND:
        reference = command_reference(artifact.parts, target)
    else:
        reference = agent_reference(name, target)
    return {
        "slug": artifact.slug,
        "name": name,
        "title": name[:1].upper() + name[1:],
        "description": description,
        "reference": reference,
        "prefix": target.conventions.prefix,
    }


def _reshape_frontmatter(
    source: dict[str, Any],
    rules: tuple[FieldRule, ...],
    values: dict[str, Any],
    rewrite_value,
) -> dict[str, Any]:
    """Build target frontmatter: listed keys only, in listed order."""
    result: dict[str, Any] = {}
    for rule in rules:
        if rule.value is not None:
            value = rule.value
            if isinstance(value, str):
                value = expand_template(value, values)
        elif rule.source and source.get(rule.source) is not None:
            value = source[rule.source]
            if isinstance(value, str):
                value = rewrite_value(value)
        elif rule.default is not None:
            value = rule.default
            if isinstance(value, str):
                value = expand_template(value, values)
        else:
            continue
        result[rule.key] = value
    return result


def generate_artifact(
    artifact: SourceArtifact,
    kind: str,
    target: CapabilityProfile,
    source: CapabilityProfile,
    docs_folder: Optional[str] = None,
) -> TransformedArtifact:
    """Transform one canonical artifact into the target's `kind` shape.

    Raises:
        ValueError: If the target declares no artifacts of this kind.
    """
    spec = target.artifacts.get(kind)
    if spec is None:
        raise ValueError(f"{target.id} does not accept {kind} artifacts")

    warnings: list[str] = []

    def _rewrite(text: str) -> str:
        result, found = rewrite(text, source, target, docs_folder)
        warnings.extend(f"{artifact.slug}: {w}" for w in found)
        return result

    if spec.passthrough:
        content = _rewrite(artifact.raw)
        metadata, body = fm.parse(content)
        description = ""
    else:
        description = _rewrite(
            artifact.description or f"AgileFlow {artifact.name} {artifact.kind}"
        )
        values = _template_values(artifact, target, description)
        metadata = _reshape_frontmatter(artifact.frontmatter, spec.frontmatter, values, _rewrite)
        body = (
            expand_template(spec.header, values)
            + _rewrite(artifact.body).strip("\n")
            + expand_template(spec.footer, values)
        )
        content = fm.dump(metadata, body)

    limit = target.limits.get(kind)
    if limit and len(content) > limit:
        warnings.append(
            f"{artifact.slug}: {len(content)} characters exceeds the "
            f"{target.display_name} {kind} limit of {limit}"
        )

    return TransformedArtifact(
        kind=kind,
        slug=artifact.slug,
        frontmatter=metadata,
        body=body,
        content=content,
        description=str(metadata.get("description") or description),
        warnings=warnings,
    )


def generate_command(artifact, target, source, docs_folder=None) -> TransformedArtifact:
    return generate_artifact(artifact, COMMAND, target, source, docs_folder)


def generate_agent(artifact, target, source, docs_folder=None) -> TransformedArtifact:
    return generate_artifact(artifact, AGENT, target, source, docs_folder)


def generate_skill(artifact, target, source, docs_folder=None) -> TransformedArtifact:
    """Project an agent into a skill: a separate pass with the skill schema."""
    return generate_artifact(artifact, SKILL, target, source, docs_folder)


def transform_artifact(
    artifact: SourceArtifact,
    target: Target,
    kind: Optional[str] = None,
    loader: Optional[ProfileLoader] = None,
    docs_folder: Optional[str] = None,
) -> TransformedArtifact:
    """Transform an artifact for a target given by id or profile.

    An unknown target id yields the artifact unchanged with a warning.
    """
    kind = kind or artifact.kind
    loader = loader or ProfileLoader()
    profile = _resolve(target, loader)
    if profile is None:
        return TransformedArtifact(
            kind=kind,
            slug=artifact.slug,
            frontmatter=dict(artifact.frontmatter),
            body=artifact.body,
            content=artifact.raw,
            warnings=[f"Unknown target '{target}', {artifact.slug} left unchanged"],
        )
    source = loader.load(config.SOURCE_PROFILE)
    return generate_artifact(artifact, kind, profile, source, docs_folder)
