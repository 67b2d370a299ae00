"""
Centralized frontmatter handling using the python-frontmatter library.

Parsing is tolerant: malformed frontmatter yields an empty mapping and the
full text as body, and `validate` reports the problem separately.
"""

from typing import Any

import frontmatter
import yaml


def parse(content: str) -> tuple[dict, str]:
    """
    Parse YAML frontmatter from markdown content.

    Args:
        content: Full file content (markdown with optional frontmatter)

    Returns:
        Tuple of (frontmatter dict, body content)
    """
    try:
        post = frontmatter.loads(content)
    except (yaml.YAMLError, ValueError, TypeError):
        return {}, content
    return dict(post.metadata), post.content


def dump(metadata: dict[str, Any], body: str) -> str:
    """
    Render frontmatter and body back into a markdown document.

    Keys keep their insertion order. An empty mapping renders the body alone.
    """
    body = body.strip("\n") + "\n"
    if not metadata:
        return body
    frontmatter_str = yaml.dump(
        metadata,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=4096,
    ).rstrip()
    return f"---\n{frontmatter_str}\n---\n\n{body}"


def validate(content: str) -> list[str]:
    """
    Validate the YAML frontmatter of command or agent markdown.

    Returns:
        List of warning/error messages (empty if valid)
    """
    if not content.startswith("---"):
        return ["Warning: Missing frontmatter with 'description' field (recommended)"]

    try:
        metadata = frontmatter.loads(content).metadata
    except (yaml.YAMLError, ValueError, TypeError) as e:
        error_msg = str(e)
        if "[" in error_msg or "found" in error_msg.lower():
            return [
                "Error: YAML parsing failed - if using brackets in values like "
                "'[--flag]', wrap them in quotes: '\"[--flag]\"'"
            ]
        return [f"Error: Invalid YAML frontmatter - {e}"]

    if not metadata.get("description"):
        return ["Warning: Missing 'description' field (recommended)"]
    return []
