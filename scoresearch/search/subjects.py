"""Subject ranking with alias resolution.

Unlike course word scoring, subject bonuses are additive: a subject that
matches several alias targets, or matches both by name and by code,
accumulates every bonus.
"""

import logging
from collections.abc import Mapping, Sequence

from scoresearch.core.config import (
    SUBJECT_FUZZY_CONFIG,
    SearchConfiguration,
    SubjectSearchOptions,
)
from scoresearch.core.schemas import EnrichedSubject, Subject
from scoresearch.search.cache import MatchCache
from scoresearch.search.fuzzy import fuzzy_search_with_scores

logger = logging.getLogger(__name__)

ALIAS_EXACT_BONUS = 100
ALIAS_PREFIX_BONUS = 50
NAME_EXACT_BONUS = 80
NAME_PREFIX_BONUS = 40
CODE_EXACT_BONUS = 70
CODE_PREFIX_BONUS = 30


def normalise_subject_query(
    query: str,
    aliases: Mapping[str, Sequence[str]] | None = None,
) -> tuple[str, list[str]]:
    """Lowercase the query and expand any aliases it starts with.

    An alias applies when the query is the alias itself or begins with the
    alias followed by a space ("methods 3/4" hits "methods"). Targets from
    every applicable alias are collected, duplicates included.

    Returns:
        (normalised query, alias target subject names)
    """
    normalised = query.strip().lower()
    targets: list[str] = []
    for alias, alias_targets in (aliases or {}).items():
        if normalised == alias or normalised.startswith(f"{alias} "):
            targets.extend(alias_targets)
    return normalised, targets


def _priority(subject: Subject, query: str, alias_targets: list[str]) -> int:
    name = subject.name.lower()
    code = subject.code.lower()
    priority = 0
    for target in alias_targets:
        if name == target.lower():
            priority += ALIAS_EXACT_BONUS
    for target in alias_targets:
        if name.startswith(target.lower()):
            priority += ALIAS_PREFIX_BONUS
    if name == query:
        priority += NAME_EXACT_BONUS
    if name.startswith(query):
        priority += NAME_PREFIX_BONUS
    if code == query:
        priority += CODE_EXACT_BONUS
    if code.startswith(query):
        priority += CODE_PREFIX_BONUS
    return priority


def search_subjects(
    subjects: Sequence[Subject],
    options: SubjectSearchOptions,
    fuzzy_config: SearchConfiguration = SUBJECT_FUZZY_CONFIG,
    cache: MatchCache | None = None,
) -> list[Subject]:
    """Rank subjects: alias/exact/prefix hits first, then fuzzy hits.

    An empty query returns the first `limit` subjects in input order.
    """
    limit = options.limit
    if not options.query.strip():
        return list(subjects[:limit]) if limit > 0 else list(subjects)

    query, alias_targets = normalise_subject_query(options.query, options.aliases)

    enriched = [
        EnrichedSubject(**s.model_dump(exclude={"search_text"}), search_text=f"{s.name} {s.code}")
        for s in subjects
    ]
    scored = [(_priority(s, query, alias_targets), s) for s in enriched]

    exact = [(p, s) for p, s in scored if p > 0]
    exact.sort(key=lambda ps: ps[0], reverse=True)
    remainder = [s for p, s in scored if p == 0]

    fuzzy: list[EnrichedSubject] = []
    if remainder:
        hits = fuzzy_search_with_scores(remainder, query, fuzzy_config, cache)
        hits.sort(key=lambda h: h.score or 1.0)
        fuzzy = [h.item for h in hits]

    logger.debug(
        "search_subjects: '%s' -> %d exact, %d fuzzy (aliases: %s)",
        query, len(exact), len(fuzzy), alias_targets,
    )
    results: list[Subject] = [s for _, s in exact] + fuzzy
    return results[:limit] if limit > 0 else results
