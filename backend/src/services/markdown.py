"""Markdown helpers used when indexing notes."""

from __future__ import annotations

import logging
import re

import frontmatter
import yaml

from ..models.note import DEFAULT_NOTE_TITLE

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100

FENCED_CODE_PATTERN = re.compile(r"```[\s\S]*?```")
INLINE_CODE_PATTERN = re.compile(r"`[^`]*`")
IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
LINK_PATTERN = re.compile(r"\[([^\]]*)\]\([^)]*\)")
HEADING_PATTERN = re.compile(r"^#{1,6}\s+", re.MULTILINE)
EMPHASIS_PATTERN = re.compile(r"[*_]{1,2}([^*_]*)[*_]{1,2}")
STRIKETHROUGH_PATTERN = re.compile(r"~~([^~]*)~~")
RULE_PATTERN = re.compile(r"^---+$", re.MULTILINE)
BULLET_PATTERN = re.compile(r"^[ \t]*[-*+]\s+", re.MULTILINE)
ORDERED_PATTERN = re.compile(r"^[ \t]*\d+\.\s+", re.MULTILINE)
BLANK_LINES_PATTERN = re.compile(r"\n\s*\n")
TITLE_HEADING_PATTERN = re.compile(r"^#{1,6}\s+(.+)$", re.MULTILINE)


def strip_frontmatter(markdown: str) -> str:
    """Drop a leading YAML front matter block; malformed blocks stay as text."""
    if not frontmatter.checks(markdown):
        return markdown
    try:
        return frontmatter.loads(markdown).content
    except (yaml.YAMLError, ValueError, TypeError):
        logger.debug("Front matter could not be parsed; indexing it as text")
        return markdown


def extract_plain_text(markdown: str | None) -> str:
    """Strip markdown syntax, keeping the readable text."""
    if not markdown:
        return ""

    text = strip_frontmatter(markdown)
    text = FENCED_CODE_PATTERN.sub("", text)
    text = INLINE_CODE_PATTERN.sub("", text)
    text = IMAGE_PATTERN.sub(r"\1", text)
    text = LINK_PATTERN.sub(r"\1", text)
    text = HEADING_PATTERN.sub("", text)
    text = EMPHASIS_PATTERN.sub(r"\1", text)
    text = STRIKETHROUGH_PATTERN.sub(r"\1", text)
    text = RULE_PATTERN.sub("", text)
    text = BULLET_PATTERN.sub("", text)
    text = ORDERED_PATTERN.sub("", text)
    text = BLANK_LINES_PATTERN.sub("\n", text)
    return text.strip()


def extract_title(markdown: str | None) -> str:
    """Derive a display title: first heading, else first plain line, else a placeholder."""
    if not markdown:
        return DEFAULT_NOTE_TITLE

    body = strip_frontmatter(markdown)
    match = TITLE_HEADING_PATTERN.search(body)
    if match:
        return match.group(1).strip()

    for line in body.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith(("#", "```")):
            plain = extract_plain_text(stripped)[:MAX_TITLE_LENGTH]
            if plain:
                return plain
    return DEFAULT_NOTE_TITLE


__all__ = ["extract_plain_text", "extract_title", "strip_frontmatter"]
