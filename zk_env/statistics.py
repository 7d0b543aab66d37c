"""
Environment statistics for Zettelkasten notes.

An environment is the subset of an index selected by a filter. Its
statistics relate that subset to the full index: how many links stay within
the environment, how many leave it, how many enter it from anywhere, and how
many point at notes that do not exist at all.
"""

import time
import logging
from typing import Dict, List, Set

from zk_env.filter import Filter
from zk_env.models import Note, NoteIndex, NoteEnvStatistics, EnvironmentStatistics

logger = logging.getLogger(__name__)


def compute_environment_statistics(index: NoteIndex, note_filter: Filter) -> EnvironmentStatistics:
    """
    Compute statistics for the subset of `index` matching `note_filter`.

    The first pass fixes the environment, the second pass walks every note of
    the full index as a link source and tallies its links against it.
    """
    start_time = time.time()

    # Pass 1: membership. `positions` maps an environment id to its slot in `stats`.
    notes: List[Note] = []
    stats: List[NoteEnvStatistics] = []
    positions: Dict[str, int] = {}
    for note_id, note in index.items():
        score = note_filter.evaluate(note)
        if score is None:
            continue
        positions[note_id] = len(stats)
        notes.append(note)
        stats.append(NoteEnvStatistics(id=note_id, match_score=score))

    # Pass 2: link accounting over the full index
    for note_id, note in index.items():
        source = positions.get(note_id)
        local_targets = 0
        global_targets = 0

        for link in note.links:
            target = positions.get(link)
            if target is not None:
                stats[target].inlinks_global += 1
                if source is not None:
                    stats[target].inlinks_local += 1
                local_targets += 1
                global_targets += 1
            elif link in index:
                global_targets += 1

        if source is not None:
            source_stats = stats[source]
            source_stats.outlinks_local += local_targets
            source_stats.outlinks_global += global_targets
            source_stats.broken_links = len(note.links) - global_targets

    unique_tags: Set[str] = set()
    for note in notes:
        unique_tags.update(note.tags)

    result = EnvironmentStatistics(
        word_count_total=sum(note.words for note in notes),
        char_count_total=sum(note.characters for note in notes),
        note_count_total=len(notes),
        tag_count_total=len(unique_tags),
        local_local_links=sum(s.outlinks_local for s in stats),
        local_global_links=sum(s.outlinks_global for s in stats),
        global_local_links=sum(s.inlinks_global for s in stats),
        broken_links=sum(s.broken_links for s in stats),
        # Best match first, ties broken by id
        filtered_stats=sorted(stats, key=lambda s: (-s.match_score, s.id)),
    )

    logger.debug(
        f"Environment of {result.note_count_total}/{len(index)} notes computed "
        f"in {time.time() - start_time:.4f} seconds"
    )
    return result
