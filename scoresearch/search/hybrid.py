"""Exact/prefix matches first, fuzzy matches for the rest."""

import logging
from collections.abc import Sequence
from typing import TypeVar

from scoresearch.core.config import SearchConfiguration
from scoresearch.search.cache import MatchCache
from scoresearch.search.fuzzy import Accessor, field_accessor, fuzzy_search

logger = logging.getLogger(__name__)

T = TypeVar("T")


def hybrid_search(
    data: Sequence[T],
    query: str | None,
    config: SearchConfiguration,
    exact_keys: Sequence[str | Accessor] = (),
    cache: MatchCache | None = None,
) -> Sequence[T]:
    """Search data, ranking exact/prefix hits on exact_keys ahead of fuzzy hits.

    Args:
        data: Records to search.
        query: Free text. Empty means "no filter" and returns data as is.
        config: Fuzzy index configuration for the fallback.
        exact_keys: Field names or accessor callables checked in order;
            the first key whose value equals or starts with the query wins.
        cache: Match cache override (defaults to the process-wide one).

    Returns:
        Exact matches in input order, then fuzzy matches in score order.
    """
    if not query or not query.strip():
        return data

    needle = query.strip().lower()
    accessors = [field_accessor(k) if isinstance(k, str) else k for k in exact_keys]

    exact: list[T] = []
    rest: list[T] = []
    for item in data:
        if _is_exact(item, needle, accessors):
            exact.append(item)
        else:
            rest.append(item)

    if not exact:
        return fuzzy_search(data, query, config, cache)

    logger.debug("hybrid_search: %d exact, %d to fuzzy-match", len(exact), len(rest))
    exact_ids = {id(item) for item in exact}
    fuzzy = [
        item for item in fuzzy_search(rest, query, config, cache)
        if id(item) not in exact_ids
    ]
    return exact + fuzzy


def _is_exact(item: object, needle: str, accessors: list[Accessor]) -> bool:
    for accessor in accessors:
        value = accessor(item)
        if value and value.lower().startswith(needle):
            return True
    return False
