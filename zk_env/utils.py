"""Utility functions for ZK Env."""

import os
import re
import json
import fnmatch
import logging
from typing import List, Any, Optional
from pathlib import Path

logger = logging.getLogger(__name__)

_WHITESPACE_RUN_RE = re.compile(r'\s+')

# --- Identifiers ---

def name_to_id(name: str) -> str:
    """
    Convert a display name or file name into a canonical note id.

    Always returns a string, whether or not a note with that id exists.
    """
    name = name.strip()
    if name.lower().endswith(".md"):
        name = name[:-3]
    return _WHITESPACE_RUN_RE.sub("-", name.strip().lower())

# --- Data Serialization ---

def load_json_file(file_path: Path) -> Any:
    """Load JSON data from a file."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.error(f"Error reading JSON file '{file_path}': {e}")
        return None

def save_json_file(file_path: Path, data: Any, indent: int = 2) -> bool:
    """Save data to a JSON file."""
    try:
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
        return True
    except OSError as e:
        logger.error(f"Error writing JSON file '{file_path}': {e}")
        return False

# --- File System Utilities ---

def scandir_recursive(
    root: str,
    exclude_patterns: Optional[List[str]] = None,
    quiet: bool = False,
) -> List[str]:
    """
    Recursively scan a directory, skipping entries that match any exclude pattern.

    Args:
        root: Root directory to scan
        exclude_patterns: List of glob patterns to exclude
        quiet: Whether to suppress debug logging
    """
    exclude_patterns = exclude_patterns or []
    paths = []

    if not quiet:
        logger.debug(f"Scanning directory: {root}")

    try:
        with os.scandir(root) as it:
            for entry in it:
                full_path = entry.path
                relative_path = os.path.relpath(full_path, root)
                skip = False
                for pattern in exclude_patterns:
                    if fnmatch.fnmatch(relative_path, pattern) or fnmatch.fnmatch(os.path.basename(full_path), pattern):
                        if not quiet:
                            logger.debug(f"Excluding {full_path} because it matches pattern '{pattern}'")
                        skip = True
                        break
                if skip:
                    continue
                if entry.is_file():
                    paths.append(full_path)
                elif entry.is_dir():
                    paths.extend(scandir_recursive(full_path, exclude_patterns, quiet))
    except PermissionError as e:
        logger.warning(f"Permission error accessing directory: {root}. Skipping. Error: {e}")
    except OSError as e:
        logger.error(f"OS error while scanning directory: {root}. Skipping. Error: {e}")
    return sorted(paths)
