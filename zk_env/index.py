"""
Note index loading for ZK Env.

Builds a NoteIndex either by scanning a directory of markdown notes or by
reading a JSON index file previously written by `save_index_file`.
"""

import os
import logging
from pathlib import Path
from typing import Dict, List, Any, Optional

from pydantic import ValidationError
from tqdm import tqdm

from zk_env.constants import MARKDOWN_EXTENSIONS, DEFAULT_EXCLUDE_PATTERNS
from zk_env.markdown import (
    extract_frontmatter_and_body,
    extract_wikilinks,
    extract_markdown_links,
    extract_inline_tags,
    frontmatter_tags,
    calculate_word_count,
    calculate_char_count,
    extract_title,
)
from zk_env.models import Note, NoteIndex, NoteModel
from zk_env.utils import name_to_id, scandir_recursive, load_json_file, save_json_file

logger = logging.getLogger(__name__)


def note_from_markdown(filepath: str, content: str) -> Note:
    """Build a Note from the content of a markdown file."""
    meta, body = extract_frontmatter_and_body(content)
    stem = Path(filepath).stem

    title = meta.get('title')
    name = str(title) if title else (extract_title(body) or stem)

    tags = frontmatter_tags(meta) + extract_inline_tags(body)
    links = [name_to_id(target) for target in extract_wikilinks(body) + extract_markdown_links(body)]

    return Note(
        id=name_to_id(stem),
        name=name,
        tags=frozenset(tags),
        links=frozenset(link for link in links if link),
        words=calculate_word_count(body),
        characters=calculate_char_count(body),
        path=filepath,
    )


def process_markdown_file(filepath: str) -> Optional[Note]:
    """Read and parse a markdown file, returning None if it cannot be read."""
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading file {filepath}: {e}")
        return None
    try:
        return note_from_markdown(filepath, content)
    except ValueError as e:
        logger.warning(f"Skipping {filepath}: {e}")
        return None


def load_notes_dir(notes_dir: str,
                   exclude_patterns: Optional[List[str]] = None,
                   quiet: bool = True) -> NoteIndex:
    """
    Scan a notes directory and build an index of all markdown notes in it.

    If two files resolve to the same id, the first one (in path order) wins.
    """
    if exclude_patterns is None:
        exclude_patterns = DEFAULT_EXCLUDE_PATTERNS
    files = [
        path for path in scandir_recursive(notes_dir, exclude_patterns, quiet)
        if os.path.splitext(path)[1].lower() in MARKDOWN_EXTENSIONS
    ]
    logger.debug(f"Found {len(files)} markdown files in {notes_dir}")

    index: NoteIndex = {}
    for filepath in tqdm(files, desc="Loading notes", unit="note", disable=quiet):
        note = process_markdown_file(filepath)
        if note is None:
            continue
        if note.id in index:
            logger.warning(f"Duplicate note id '{note.id}' from {filepath}, keeping {index[note.id].path}")
            continue
        index[note.id] = note
    return index


def load_index_file(index_file: Path) -> Optional[NoteIndex]:
    """
    Load an index from a JSON index file.

    Returns None if the file cannot be read or is not a list of records.
    Invalid records are skipped.
    """
    data = load_json_file(index_file)
    if data is None:
        return None
    if not isinstance(data, list):
        logger.error(f"Index file '{index_file}' does not contain a list of notes.")
        return None

    index: NoteIndex = {}
    for position, record in enumerate(data):
        try:
            note = NoteModel.model_validate(record).to_note()
        except ValidationError as e:
            logger.warning(f"Skipping invalid record #{position} in '{index_file}': {e}")
            continue
        if note.id in index:
            logger.warning(f"Duplicate note id '{note.id}' in '{index_file}', keeping the first")
            continue
        index[note.id] = note
    logger.debug(f"Loaded {len(index)} notes from {index_file}")
    return index


def index_to_records(index: NoteIndex) -> List[Dict[str, Any]]:
    """Convert an index into JSON-ready records ordered by id."""
    return [index[note_id].to_dict() for note_id in sorted(index)]


def save_index_file(index_file: Path, index: NoteIndex) -> bool:
    """Write an index to a JSON index file."""
    return save_json_file(index_file, index_to_records(index))
