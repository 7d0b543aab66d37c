"""
Fuzzy subsequence matching for note titles.

Every character of the query has to appear in the target, in order and
ignoring case. Among all such alignments the best scoring one is picked:
matches are rewarded, gaps between matches are penalised, and matches at
word starts or continuing a consecutive run earn a bonus.
"""

import logging
from typing import List, Optional

logger = logging.getLogger(__name__)

SCORE_MATCH = 16
SCORE_GAP_START = -3
SCORE_GAP_EXTENSION = -1

BONUS_BOUNDARY = SCORE_MATCH // 2
BONUS_NON_WORD = SCORE_MATCH // 2
BONUS_CAMEL = BONUS_BOUNDARY + SCORE_GAP_EXTENSION
BONUS_CONSECUTIVE = -(SCORE_GAP_START + SCORE_GAP_EXTENSION)
BONUS_FIRST_CHAR_MULTIPLIER = 2

# Character classes
CHAR_WHITE = 0
CHAR_NON_WORD = 1
CHAR_DELIMITER = 2
CHAR_LOWER = 3
CHAR_UPPER = 4
CHAR_NUMBER = 5

DELIMITERS = "/,:;|-_."


def char_class(ch: str) -> int:
    """Classify a single character."""
    if ch.isspace():
        return CHAR_WHITE
    if ch in DELIMITERS:
        return CHAR_DELIMITER
    if ch.isdigit():
        return CHAR_NUMBER
    if ch.isupper():
        return CHAR_UPPER
    if ch.isalpha():
        return CHAR_LOWER
    return CHAR_NON_WORD


def position_bonus(prev_class: int, cur_class: int) -> int:
    """Bonus for matching a character of class `cur_class` preceded by `prev_class`."""
    if cur_class > CHAR_DELIMITER:
        if prev_class in (CHAR_WHITE, CHAR_DELIMITER, CHAR_NON_WORD):
            return BONUS_BOUNDARY
        if prev_class == CHAR_LOWER and cur_class == CHAR_UPPER:
            return BONUS_CAMEL
        if prev_class != CHAR_NUMBER and cur_class == CHAR_NUMBER:
            return BONUS_CAMEL
        return 0
    if cur_class in (CHAR_NON_WORD, CHAR_DELIMITER):
        return BONUS_NON_WORD
    return 0


def _bonuses(target: str) -> List[int]:
    # The start of the string counts as following whitespace
    prev = CHAR_WHITE
    bonuses = []
    for ch in target:
        cls = char_class(ch)
        bonuses.append(position_bonus(prev, cls))
        prev = cls
    return bonuses


def is_subsequence(target: str, query: str) -> bool:
    """Check whether `query` is a case-insensitive subsequence of `target`."""
    it = iter(target.lower())
    return all(ch in it for ch in query.lower())


def fuzzy_match(target: str, query: str) -> Optional[int]:
    """
    Score `query` against `target`.

    Returns None if the query is not a subsequence of the target, otherwise an
    integer score where higher is better. An empty query always matches with a
    score of 0.
    """
    if not query:
        return 0
    if not is_subsequence(target, query):
        return None

    needle = query.lower()
    haystack = target.lower()
    # Some characters change length when lowercased; fall back to the lowered text
    bonuses = _bonuses(target if len(target) == len(haystack) else haystack)
    width = len(haystack)

    # prev_row[j]: best score with the previous query char matched at target[j]
    prev_row: List[Optional[int]] = [None] * width
    prev_run_bonus: List[int] = [0] * width

    for i, qch in enumerate(needle):
        row: List[Optional[int]] = [None] * width
        run_bonus: List[int] = [0] * width
        gap_best: Optional[int] = None

        for j, tch in enumerate(haystack):
            # Best previous match at k <= j - 2, already charged for the gap up to j
            if i > 0 and j >= 2:
                opened = prev_row[j - 2] + SCORE_GAP_START if prev_row[j - 2] is not None else None
                extended = gap_best + SCORE_GAP_EXTENSION if gap_best is not None else None
                if opened is None:
                    gap_best = extended
                elif extended is None:
                    gap_best = opened
                else:
                    gap_best = max(opened, extended)

            if tch != qch:
                continue

            bonus = bonuses[j]
            if i == 0:
                row[j] = SCORE_MATCH + bonus * BONUS_FIRST_CHAR_MULTIPLIER
                run_bonus[j] = bonus
                continue

            best: Optional[int] = None
            if j >= 1 and prev_row[j - 1] is not None:
                consecutive_bonus = max(bonus, prev_run_bonus[j - 1], BONUS_CONSECUTIVE)
                best = prev_row[j - 1] + SCORE_MATCH + consecutive_bonus
                run_bonus[j] = max(prev_run_bonus[j - 1], bonus)
            if gap_best is not None:
                gapped = gap_best + SCORE_MATCH + bonus
                if best is None or gapped > best:
                    best = gapped
                    run_bonus[j] = bonus
            row[j] = best

        prev_row = row
        prev_run_bonus = run_bonus

    scores = [score for score in prev_row if score is not None]
    if not scores:
        return None
    return max(scores)
