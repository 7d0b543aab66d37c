"""Data models for ZK Env."""

from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any, Optional, FrozenSet, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from zk_env.filter import Filter


@dataclass(frozen=True)
class Note:
    """Represents a single note in the Zettelkasten system."""
    id: str
    name: str = ""
    tags: FrozenSet[str] = field(default_factory=frozenset)
    links: FrozenSet[str] = field(default_factory=frozenset)
    words: int = 0
    characters: int = 0
    path: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Note id must not be empty")
        # Accept any iterable for tags/links, store them as frozensets
        if not isinstance(self.tags, frozenset):
            object.__setattr__(self, "tags", frozenset(self.tags))
        if not isinstance(self.links, frozenset):
            object.__setattr__(self, "links", frozenset(self.links))

    def to_dict(self) -> Dict[str, Any]:
        """Convert Note to a JSON-ready dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'tags': sorted(self.tags),
            'links': sorted(self.links),
            'words': self.words,
            'characters': self.characters,
            'path': self.path,
        }


# Mapping from note id to Note, built by a loader and only read by the engine
NoteIndex = Dict[str, Note]


@dataclass
class NoteEnvStatistics:
    """Statistics of a single note in relation to its containing environment."""
    id: str
    match_score: int
    # Links pointing to this note from anywhere
    inlinks_global: int = 0
    # Links pointing to this note from within the environment
    inlinks_local: int = 0
    # Links from this note to notes within the environment
    outlinks_local: int = 0
    # Links from this note to existing notes anywhere; broken links not counted
    outlinks_global: int = 0
    # Links from this note whose target does not exist
    broken_links: int = 0


@dataclass
class EnvironmentStatistics:
    """
    Statistical information about the subset of an index selected by a filter.

    The subset is called the 'environment'. Instances are produced by
    `compute` and never updated afterwards.
    """
    word_count_total: int = 0
    char_count_total: int = 0
    note_count_total: int = 0
    # Unique tags, not occurrences
    tag_count_total: int = 0
    local_local_links: int = 0
    local_global_links: int = 0
    global_local_links: int = 0
    broken_links: int = 0
    filtered_stats: List[NoteEnvStatistics] = field(default_factory=list)

    @classmethod
    def compute(cls, index: NoteIndex, note_filter: 'Filter') -> 'EnvironmentStatistics':
        """Compute statistics for the notes of `index` matching `note_filter`."""
        from zk_env.statistics import compute_environment_statistics
        return compute_environment_statistics(index, note_filter)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the statistics to a JSON-ready dictionary."""
        return asdict(self)


# Pydantic models for validation

class NoteModel(BaseModel):
    """Pydantic model for a note record in a JSON index file."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    # null names in hand-written index files are accepted
    name: Optional[str] = Field(default="")
    tags: List[str] = Field(default_factory=list)
    links: List[str] = Field(default_factory=list)
    words: int = Field(default=0, ge=0)
    characters: int = Field(default=0, ge=0)
    path: Optional[str] = Field(default=None)

    def to_note(self) -> Note:
        """Convert the validated record into a Note."""
        return Note(
            id=self.id,
            name=self.name or "",
            tags=frozenset(self.tags),
            links=frozenset(self.links),
            words=self.words,
            characters=self.characters,
            path=self.path,
        )

