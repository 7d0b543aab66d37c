"""
Markdown processing utilities for ZK Env.

This module provides functions for working with markdown files:
- Extracting frontmatter and content
- Extracting wikilinks and local markdown links
- Extracting inline tags
- Calculating statistics (word and character counts)
"""

import yaml
import logging
import datetime
from typing import Dict, List, Tuple, Any, Optional, Set

from zk_env.constants import (
    WIKILINK_ALL_RE,
    MARKDOWN_LINK_RE,
    URL_SCHEME_RE,
    INLINE_TAG_RE,
    HEADING_RE,
    FENCED_CODE_RE,
    INLINE_CODE_RE,
)

logger = logging.getLogger(__name__)

_TAG_TRAILING_PUNCTUATION = ".,;:!?)]}\"'"


def json_ready(data: Any) -> Any:
    """
    Prepare data for JSON serialization, handling date objects.

    Args:
        data: Data to prepare

    Returns:
        Data ready for JSON serialization
    """
    if isinstance(data, datetime.date):
        return data.isoformat()
    elif isinstance(data, dict):
        return {k: json_ready(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [json_ready(item) for item in data]
    else:
        return data


def extract_frontmatter_and_body(content: str) -> Tuple[Dict[str, Any], str]:
    """
    Extract YAML frontmatter and markdown body from content.

    Args:
        content: Markdown content with optional YAML frontmatter

    Returns:
        Tuple of (frontmatter dict, body text)
    """
    meta: Dict[str, Any] = {}
    body = content
    if content.startswith('---'):
        parts = content.split('---', 2)
        if len(parts) >= 3:
            yaml_content = parts[1].strip()
            body = parts[2].strip()
            try:
                meta = yaml.safe_load(yaml_content) or {}
                if not isinstance(meta, dict):
                    logger.warning("YAML frontmatter did not parse to a dictionary. Ignoring frontmatter.")
                    meta = {}
                else:
                    meta = json_ready(meta)
            except yaml.YAMLError as e:
                logger.warning(f"YAML parsing error: {e}. Ignoring frontmatter.")
                meta = {}
    else:
        body = body.strip()
    return meta, body


def strip_code(body: str) -> str:
    """Remove fenced code blocks and inline code spans from markdown."""
    return INLINE_CODE_RE.sub("", FENCED_CODE_RE.sub("", body))


def _link_target(target: str) -> str:
    # Headings and folders do not identify the note, only the file name does
    target = target.split('#', 1)[0]
    return target.rsplit('/', 1)[-1].strip()


def _dedupe(items: List[str]) -> List[str]:
    seen: Set[str] = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def extract_wikilinks(body: str) -> List[str]:
    """
    Extract wikilink targets from markdown body, ignoring aliases.

    Args:
        body: Markdown content

    Returns:
        List of wikilink targets (deduplicated)
    """
    targets = [_link_target(match.group(1)) for match in WIKILINK_ALL_RE.finditer(body)]
    return _dedupe([target for target in targets if target])


def extract_markdown_links(body: str) -> List[str]:
    """
    Extract targets of markdown links pointing at local files.

    Links with a URL scheme (http:, mailto:, ...) and pure anchors are
    skipped; anchors are cut from the remaining targets.
    """
    targets = []
    for match in MARKDOWN_LINK_RE.finditer(body):
        target = match.group(1)
        if URL_SCHEME_RE.match(target) or target.startswith('#'):
            continue
        target = _link_target(target)
        if target:
            targets.append(target)
    return _dedupe(targets)


def extract_inline_tags(body: str) -> List[str]:
    """Extract `#tag` tokens from the body, without the leading '#'."""
    tags = []
    for match in INLINE_TAG_RE.finditer(strip_code(body)):
        tag = match.group(1).rstrip(_TAG_TRAILING_PUNCTUATION)
        if tag:
            tags.append(tag)
    return _dedupe(tags)


def frontmatter_tags(meta: Dict[str, Any]) -> List[str]:
    """Read the `tags` entry of a frontmatter dict as a list of tag strings."""
    raw = meta.get('tags', [])
    if isinstance(raw, str):
        raw = raw.replace(',', ' ').split()
    if not isinstance(raw, list):
        return []
    tags = []
    for tag in raw:
        tag = str(tag).strip()
        if tag.startswith('#'):
            tag = tag[1:]
        if tag:
            tags.append(tag)
    return tags


def calculate_word_count(body: str) -> int:
    """Calculate the number of whitespace separated words in text."""
    return len(body.split())


def calculate_char_count(body: str) -> int:
    """Calculate the number of characters in text, whitespace included."""
    return len(body)


def extract_title(body: str) -> Optional[str]:
    """
    Extract title from markdown content (first heading).

    Args:
        body: Markdown content

    Returns:
        Title text or None if no heading found
    """
    heading_match = HEADING_RE.search(body)
    if heading_match:
        return heading_match.group(1).strip()
    return None
