"""Course ranking: safe/target/reach classification plus word and fuzzy search.

Strategy for a search term:
  1. Word search: every word (2+ chars) must appear in the course's
     search text; courses are scored by where each word lands.
  2. Fuzzy fallback: used unless the word search found something AND the
     query has 2+ words or the word search found 3+ courses.
"""

import logging
import math
from collections.abc import Sequence

from scoresearch.core.config import (
    COURSE_FUZZY_CONFIG,
    CourseSearchOptions,
    SearchConfiguration,
)
from scoresearch.core.schemas import Course, CourseCategory, EnrichedCourse
from scoresearch.search.cache import MatchCache
from scoresearch.search.fuzzy import fuzzy_search_with_scores

logger = logging.getLogger(__name__)

# Rank codes meaning "not published" / "no prior rank".
UNPUBLISHED_RANKS = frozenset({"N/P", "L/N", "RC"})

# How far either side of the ATAR still counts as a target course.
TARGET_BAND = 5.0

MIN_WORD_LENGTH = 2

# Per-word bonuses, checked in this order; the first hit wins.
INSTITUTION_EXACT_BONUS = 100
NAME_EXACT_BONUS = 90
INSTITUTION_PREFIX_BONUS = 50
NAME_PREFIX_BONUS = 40
INSTITUTION_WORD_BONUS = 20
NAME_WORD_BONUS = 15
CONTAINS_BONUS = 1


def classify_rank(rank: str, atar: float) -> tuple[CourseCategory, float]:
    """Return (category, numeric rank) for a course rank against an ATAR.

    Sentinel and unparsable ranks are "unknown" with rank 0. The band is
    strict on both sides: exactly atar - 5 or atar + 5 is still "target".
    """
    if rank in UNPUBLISHED_RANKS:
        return "unknown", 0.0
    try:
        rank_num = float(rank)
    except (TypeError, ValueError):
        return "unknown", 0.0
    if math.isnan(rank_num):
        return "unknown", 0.0
    if rank_num < atar - TARGET_BAND:
        return "safe", rank_num
    if rank_num > atar + TARGET_BAND:
        return "reach", rank_num
    return "target", rank_num


def enrich_courses(courses: Sequence[Course], atar: float) -> list[EnrichedCourse]:
    """Attach category, numeric rank and search text to fresh copies of the courses."""
    enriched: list[EnrichedCourse] = []
    for course in courses:
        category, rank_num = classify_rank(course.rank, atar)
        enriched.append(
            EnrichedCourse(
                **course.model_dump(exclude={"category", "rank_num", "search_text"}),
                category=category,
                rank_num=rank_num,
                search_text=f"{course.institution} {course.name} {course.code}",
            )
        )
    return enriched


def _query_words(search_term: str) -> list[str]:
    return [w for w in search_term.lower().split() if len(w) >= MIN_WORD_LENGTH]


def _word_score(course: EnrichedCourse, word: str) -> int:
    institution = course.institution.lower()
    name = course.name.lower()
    if institution == word:
        return INSTITUTION_EXACT_BONUS
    if name == word:
        return NAME_EXACT_BONUS
    if institution.startswith(word):
        return INSTITUTION_PREFIX_BONUS
    if name.startswith(word):
        return NAME_PREFIX_BONUS
    if f" {word}" in institution:
        return INSTITUTION_WORD_BONUS
    if f" {word}" in name:
        return NAME_WORD_BONUS
    return CONTAINS_BONUS


def word_based_search(
    courses: Sequence[EnrichedCourse],
    search_term: str,
) -> list[EnrichedCourse]:
    """Keep courses containing every query word, best placed words first.

    With no qualifying words (all shorter than 2 chars) nothing is filtered.
    """
    words = _query_words(search_term)
    if not words:
        return list(courses)

    matches = [
        c for c in courses
        if all(word in c.search_text.lower() for word in words)
    ]
    scored = [(sum(_word_score(c, w) for w in words), c) for c in matches]
    scored.sort(key=lambda s: s[0], reverse=True)
    return [c for _, c in scored]


def search_courses(
    courses: Sequence[Course],
    options: CourseSearchOptions | None = None,
    fuzzy_config: SearchConfiguration = COURSE_FUZZY_CONFIG,
    cache: MatchCache | None = None,
) -> list[EnrichedCourse]:
    """Classify, search, filter and limit courses.

    Args:
        courses: Raw course records.
        options: Search term, category filter, ATAR and limit.
        fuzzy_config: Index configuration for the fuzzy fallback.
        cache: Match cache override (defaults to the process-wide one).

    Returns:
        Enriched courses in relevance order when a term is given, otherwise
        by rank descending with unranked courses last.
    """
    options = options or CourseSearchOptions()
    enriched = enrich_courses(courses, options.atar)
    results = enriched

    term = (options.search_term or "").strip()
    if term:
        word_matches = word_based_search(enriched, term)
        multi_word = len(_query_words(term)) > 1
        if word_matches and (multi_word or len(word_matches) >= 3):
            logger.debug("search_courses: word search kept %d courses", len(word_matches))
            results = word_matches
        else:
            logger.debug("search_courses: falling back to fuzzy search for '%s'", term)
            hits = fuzzy_search_with_scores(enriched, term, fuzzy_config, cache)
            results = [hit.item for hit in hits]

    if options.category != "all":
        results = [c for c in results if c.category == options.category]

    if not options.search_term:
        results.sort(key=lambda c: (c.category == "unknown", -c.rank_num))

    if options.limit is not None and options.limit > 0:
        results = results[: options.limit]

    return results
