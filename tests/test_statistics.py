#!/usr/bin/env python3
"""
Tests for environment statistics.
"""

import pytest

from zk_env.filter import Filter, FilterMode
from zk_env.models import Note, EnvironmentStatistics
from zk_env.statistics import compute_environment_statistics


@pytest.fixture
def index():
    """
    A small graph. The 'math' environment is {hub, a, b}.

    hub links to a, b (environment), outside (existing) and two missing notes.
    """
    notes = [
        Note(id="hub", name="Hub", tags={"math/algebra"}, words=100, characters=600,
             links={"a", "b", "outside", "missing-1", "missing-2"}),
        Note(id="a", name="Alpha", tags={"math"}, words=10, characters=50, links={"hub"}),
        Note(id="b", name="Beta", tags={"math/algebra", "draft"}, words=20, characters=90,
             links={"missing-1"}),
        Note(id="outside", name="Outside", tags={"cooking"}, words=5, characters=30,
             links={"a", "hub", "b"}),
        Note(id="lonely", name="Lonely", tags=set(), words=1, characters=6),
    ]
    return {note.id: note for note in notes}


def by_id(stats):
    return {s.id: s for s in stats.filtered_stats}


def test_note_link_counts(index):
    """Test per-note link counts for a note with local, global and broken links."""
    stats = compute_environment_statistics(index, Filter.parse("#math"))
    hub = by_id(stats)["hub"]

    assert hub.outlinks_local == 2
    assert hub.outlinks_global == 3
    assert hub.broken_links == 2


def test_inlink_counts(index):
    """Test that inlinks count sources from everywhere, local ones only from the environment."""
    stats = by_id(compute_environment_statistics(index, Filter.parse("#math")))

    # hub <- a, outside
    assert stats["hub"].inlinks_global == 2
    assert stats["hub"].inlinks_local == 1
    # a <- hub, outside
    assert stats["a"].inlinks_global == 2
    assert stats["a"].inlinks_local == 1
    # b <- hub, outside
    assert stats["b"].inlinks_global == 2
    assert stats["b"].inlinks_local == 1
    assert stats["b"].broken_links == 1
    assert "outside" not in stats
    assert "lonely" not in stats


def test_aggregates(index):
    """Test the environment totals."""
    stats = compute_environment_statistics(index, Filter.parse("#math"))

    assert stats.note_count_total == 3
    assert stats.word_count_total == 130
    assert stats.char_count_total == 740
    # math/algebra, math, draft
    assert stats.tag_count_total == 3
    assert stats.local_local_links == 3
    assert stats.local_global_links == 4
    assert stats.global_local_links == 6
    assert stats.broken_links == 3


def test_link_invariants(index):
    """Test the ordering between the link totals for several environments."""
    for query in ["", "#math", "!#math", "#cooking", "#draft", ">hub", "!>hub"]:
        for mode in FilterMode:
            stats = compute_environment_statistics(index, Filter.parse(query, mode))
            members = {s.id for s in stats.filtered_stats}
            outgoing = sum(len(index[note_id].links) for note_id in members)
            missing = sum(1 for note_id in members for link in index[note_id].links if link not in index)

            assert stats.local_local_links <= stats.local_global_links <= outgoing
            assert stats.global_local_links >= stats.local_local_links
            assert stats.broken_links == missing


def test_whole_index_environment(index):
    """Test that an environment of all notes keeps every valid link local."""
    stats = compute_environment_statistics(index, Filter.parse(""))

    assert stats.note_count_total == len(index)
    assert stats.local_local_links == stats.local_global_links == stats.global_local_links == 7
    assert stats.broken_links == 3
    assert all(s.inlinks_local == s.inlinks_global for s in stats.filtered_stats)


def test_sorted_by_score_then_id(index):
    """Test that per-note stats are ordered by score, ties by id."""
    stats = compute_environment_statistics(index, Filter.parse(""))
    assert [s.id for s in stats.filtered_stats] == sorted(index)

    stats = compute_environment_statistics(index, Filter.parse("#math a"))
    scores = [s.match_score for s in stats.filtered_stats]
    assert scores == sorted(scores, reverse=True)
    # 'Alpha' starts with the query, 'Hub' does not contain it
    assert stats.filtered_stats[0].id == "a"
    assert "hub" not in by_id(stats)


def test_empty_index():
    """Test that an empty index gives all-zero statistics."""
    stats = compute_environment_statistics({}, Filter.parse("#anything", FilterMode.ALL))

    assert stats == EnvironmentStatistics()
    assert stats.filtered_stats == []


def test_empty_environment(index):
    """Test a filter matching nothing."""
    stats = compute_environment_statistics(index, Filter.parse("#nothing", FilterMode.ALL))
    assert stats.note_count_total == 0
    assert stats.global_local_links == 0
    assert stats.filtered_stats == []


def test_idempotent(index):
    """Test that computing twice gives identical results."""
    note_filter = Filter.parse("#math !>outside", FilterMode.ANY)
    first = compute_environment_statistics(index, note_filter)
    second = compute_environment_statistics(index, note_filter)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_index_not_mutated(index):
    """Test that computing statistics leaves the index untouched."""
    snapshot = {note_id: note.to_dict() for note_id, note in index.items()}
    compute_environment_statistics(index, Filter.parse("#math"))
    assert {note_id: note.to_dict() for note_id, note in index.items()} == snapshot


def test_classmethod_entry_point(index):
    """Test that EnvironmentStatistics.compute delegates to the engine."""
    note_filter = Filter.parse("#math")
    assert EnvironmentStatistics.compute(index, note_filter) == \
        compute_environment_statistics(index, note_filter)
