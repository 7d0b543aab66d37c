#!/usr/bin/env python3
"""
Tests for data models.
"""

import pytest
from pydantic import ValidationError

from zk_env.models import Note, NoteModel, NoteEnvStatistics, EnvironmentStatistics


def test_note_normalizes_collections():
    """Test that tags and links are stored as frozensets without duplicates."""
    note = Note(id="n", name="N", tags=["a", "a", "b/c"], links=("x", "x"))
    assert note.tags == frozenset({"a", "b/c"})
    assert note.links == frozenset({"x"})
    # Frozen notes are hashable
    assert len({note, note}) == 1


def test_note_requires_id():
    """Test that an empty id is rejected."""
    with pytest.raises(ValueError):
        Note(id="")


def test_note_model_null_name():
    """Test that a record with a null name becomes a note with an empty name."""
    note = NoteModel.model_validate({"id": "n", "name": None, "links": ["a", "a"]}).to_note()
    assert note.name == ""
    assert note.links == {"a"}


def test_note_to_dict_sorted():
    """Test that dictionaries list tags and links in sorted order."""
    note = Note(id="n", name="N", tags={"b", "a"}, links={"z", "y"}, words=2)
    assert note.to_dict() == {"id": "n", "name": "N", "tags": ["a", "b"], "links": ["y", "z"],
                              "words": 2, "characters": 0, "path": None}


def test_note_model_validation():
    """Test the pydantic record used for index files."""
    note = NoteModel.model_validate({"id": "n", "tags": ["t"], "unknown": 1}).to_note()
    assert note == Note(id="n", tags={"t"})

    with pytest.raises(ValidationError):
        NoteModel.model_validate({"id": "n", "characters": -1})


def test_environment_statistics_to_dict():
    """Test conversion of statistics to a dictionary."""
    stats = EnvironmentStatistics(note_count_total=1,
                                  filtered_stats=[NoteEnvStatistics(id="n", match_score=5)])
    data = stats.to_dict()
    assert data["note_count_total"] == 1
    assert data["filtered_stats"] == [{
        "id": "n", "match_score": 5, "inlinks_global": 0, "inlinks_local": 0,
        "outlinks_local": 0, "outlinks_global": 0, "broken_links": 0,
    }]
