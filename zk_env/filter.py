"""
Filter module for Zettelkasten notes.

A filter selects notes by tag and link predicates and ranks the survivors by
fuzzy matching their name against a free-text title query.

Query strings are split on whitespace and every token is classified by its
prefix:

  !#tag    note must not carry `tag` (or any tag below it)
  #tag     note must carry `tag` (or any tag below it)
  !>name   note must not link to the note called `name`
  >name    note must link to the note called `name`
  other    appended to the title query

Tags are hierarchical, using '/' as a separator. A note tagged 'os/linux'
satisfies a predicate on 'os' as well as one on 'os/linux', but a note tagged
'os' does not satisfy a predicate on 'os/linux'.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import List, Tuple, Optional, Iterable, FrozenSet

from zk_env.constants import (
    EXCLUDE_TAG_PREFIX,
    INCLUDE_TAG_PREFIX,
    EXCLUDE_LINK_PREFIX,
    INCLUDE_LINK_PREFIX,
    TAG_SEPARATOR,
)
from zk_env.fuzzy import fuzzy_match
from zk_env.models import Note
from zk_env.utils import name_to_id

logger = logging.getLogger(__name__)


class FilterMode(str, enum.Enum):
    """How the tag and link predicates of a filter are combined."""
    ANY = "any"
    ALL = "all"

    @classmethod
    def from_string(cls, value: str) -> 'FilterMode':
        """Parse a mode name case-insensitively, raising ValueError if unknown."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown filter mode '{value}' (expected 'any' or 'all')") from None


def normalize_tag(tag: str) -> str:
    """Drop a single leading '#' from a tag."""
    return tag[1:] if tag.startswith(INCLUDE_TAG_PREFIX) else tag


def tag_closure(tag: str) -> FrozenSet[str]:
    """
    Return the tag together with all of its ancestor paths.

    >>> sorted(tag_closure("a/b/c"))
    ['a', 'a/b', 'a/b/c']
    """
    tag = normalize_tag(tag)
    paths = {tag}
    index = tag.find(TAG_SEPARATOR)
    while index != -1:
        paths.add(tag[:index])
        index = tag.find(TAG_SEPARATOR, index + 1)
    return frozenset(paths)


def note_tag_paths(tags: Iterable[str]) -> FrozenSet[str]:
    """Union of the tag closures of all given tags."""
    paths: set = set()
    for tag in tags:
        paths.update(tag_closure(tag))
    return frozenset(paths)


@dataclass(frozen=True)
class Filter:
    """Describes a way to filter notes by their tags, links and title."""
    mode: FilterMode = FilterMode.ANY
    # (tag path, wanted) pairs, in query order
    tags: Tuple[Tuple[str, bool], ...] = field(default_factory=tuple)
    # (target note id, wanted) pairs, in query order
    links: Tuple[Tuple[str, bool], ...] = field(default_factory=tuple)
    # Only used for ranking, never for inclusion
    title: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.mode, FilterMode):
            object.__setattr__(self, "mode", FilterMode.from_string(self.mode))
        object.__setattr__(self, "tags", tuple((path, bool(wanted)) for path, wanted in self.tags))
        object.__setattr__(self, "links", tuple((target, bool(wanted)) for target, wanted in self.links))

    @classmethod
    def parse(cls, query: str, mode: FilterMode = FilterMode.ANY) -> 'Filter':
        """Parse a query string into a filter."""
        tags: List[Tuple[str, bool]] = []
        links: List[Tuple[str, bool]] = []
        title = ""

        for word in query.split():
            if word.startswith(EXCLUDE_TAG_PREFIX):
                tags.append((normalize_tag(word[1:]), False))
            elif word.startswith(INCLUDE_TAG_PREFIX):
                tags.append((normalize_tag(word), True))
            elif word.startswith(EXCLUDE_LINK_PREFIX):
                links.append((name_to_id(word[len(EXCLUDE_LINK_PREFIX):]), False))
            elif word.startswith(INCLUDE_LINK_PREFIX):
                links.append((name_to_id(word[len(INCLUDE_LINK_PREFIX):]), True))
            else:
                # Plain words are joined without separators
                title += word

        note_filter = cls(mode=mode, tags=tuple(tags), links=tuple(links), title=title)
        logger.debug(f"Parsed query {query!r} into {note_filter}")
        return note_filter

    @property
    def has_predicates(self) -> bool:
        """Whether the filter has any tag or link predicates."""
        return bool(self.tags or self.links)

    def expectations(self, note: Note) -> List[bool]:
        """For every tag predicate, then every link predicate, whether the note meets it."""
        results = []
        if self.tags:
            paths = note_tag_paths(note.tags)
            for tag, wanted in self.tags:
                results.append((normalize_tag(tag) in paths) == wanted)
        for link, wanted in self.links:
            results.append((link in note.links) == wanted)
        return results

    def passes_predicates(self, note: Note) -> bool:
        """Apply the tag and link predicates to a note according to the filter mode."""
        if not self.has_predicates:
            return True
        results = self.expectations(note)
        if self.mode is FilterMode.ALL:
            return all(results)
        return any(results)

    def evaluate(self, note: Note) -> Optional[int]:
        """
        Apply the filter to a note.

        Returns the fuzzy match score of the note's name against the title
        query (higher is better), or None if the note is excluded.
        """
        if not self.passes_predicates(note):
            return None
        return fuzzy_match(note.name, self.title)

    def matches(self, note: Note) -> bool:
        """Whether the note is included by the filter."""
        return self.evaluate(note) is not None

    def to_query(self) -> str:
        """Render the filter back into a query string."""
        words = []
        for tag, wanted in self.tags:
            words.append(f"{'' if wanted else '!'}#{tag}")
        for link, wanted in self.links:
            words.append(f"{'' if wanted else '!'}>{link}")
        if self.title:
            words.append(self.title)
        return " ".join(words)
