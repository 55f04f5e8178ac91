"""Approximate string matching over weighted record fields.

Scoring follows the usual fuzzy-search convention: 0.0 is a perfect match
and 1.0 is no match at all. Each configured key is compared with a
partial-ratio alignment (best matching window of the field against the
query), turned into a distance, and the distances of the matching keys are
combined as a weighted geometric mean.
"""

import logging
import sys
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Generic, TypeVar

from rapidfuzz import fuzz

from scoresearch.core.config import SearchConfiguration
from scoresearch.search.cache import MatchCache, get_default_cache

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Reads a searchable string (or None) off a record.
Accessor = Callable[[Any], str | None]

_EPSILON = sys.float_info.epsilon


def field_accessor(name: str) -> Accessor:
    """Build an accessor for a named field on a model, object, or mapping."""

    def _get(item: Any) -> str | None:
        if isinstance(item, Mapping):
            value = item.get(name)
        else:
            value = getattr(item, name, None)
        return value if isinstance(value, str) else None

    _get.__name__ = f"field_{name}"
    return _get


class FuzzyMatch(Generic[T]):
    """A search hit and its position in the searched collection.

    score is None when the index omits scores.
    """

    __slots__ = ("item", "score", "ref_index")

    def __init__(self, item: T, score: float | None, ref_index: int) -> None:
        self.item = item
        self.score = score
        self.ref_index = ref_index

    def __repr__(self) -> str:
        return (
            f"FuzzyMatch(item={self.item!r}, score={self.score!r}, "
            f"ref_index={self.ref_index!r})"
        )


class FuzzyIndex(Generic[T]):
    """Prepared, lowercased field values for a fixed record collection."""

    def __init__(self, records: Sequence[T], config: SearchConfiguration) -> None:
        self._records = list(records)
        self._config = config
        total = sum(k.weight for k in config.keys) or 1.0
        self._weights = [k.weight / total for k in config.keys]
        accessors = [field_accessor(k.name) for k in config.keys]
        self._fields: list[list[str | None]] = []
        for record in self._records:
            values = [accessor(record) for accessor in accessors]
            self._fields.append([v.lower() if v else None for v in values])

    @property
    def config(self) -> SearchConfiguration:
        return self._config

    def __len__(self) -> int:
        return len(self._records)

    def search(self, query: str) -> list[FuzzyMatch[T]]:
        """Return matching records, best first when the config sorts."""
        pattern = query.strip().lower()
        if not pattern:
            return []
        hits: list[FuzzyMatch[T]] = []
        for position, (record, values) in enumerate(zip(self._records, self._fields)):
            score = self._score(pattern, values)
            if score is None:
                continue
            hits.append(
                FuzzyMatch(record, score if self._config.include_score else None, position)
            )
        if self._config.should_sort and self._config.include_score:
            # list.sort is stable, so equal scores keep collection order.
            hits.sort(key=lambda h: h.score)
        return hits

    def _score(self, pattern: str, values: list[str | None]) -> float | None:
        total = 1.0
        matched = False
        for weight, value in zip(self._weights, values):
            if not value:
                continue
            distance = self._distance(pattern, value)
            if distance > self._config.threshold:
                continue
            matched = True
            total *= max(distance, _EPSILON) ** weight
        return total if matched else None

    def _distance(self, pattern: str, value: str) -> float:
        if len(value) < self._config.min_match_char_length:
            return 1.0
        alignment = fuzz.partial_ratio_alignment(pattern, value)
        distance = 1.0 - alignment.score / 100.0
        if not self._config.ignore_location:
            start = alignment.dest_start
            if self._config.distance == 0:
                distance += 1.0 if start else 0.0
            else:
                distance += start / self._config.distance
        return min(distance, 1.0)


def build_index(
    collection: Sequence[T],
    config: SearchConfiguration,
    cache: MatchCache | None = None,
) -> FuzzyIndex[T]:
    """Return an index for the collection, reusing a cached one when live."""
    cache = cache if cache is not None else get_default_cache()
    return cache.get_or_build(len(collection), config, lambda: FuzzyIndex(collection, config))


def fuzzy_search_with_scores(
    data: Sequence[T],
    query: str | None,
    config: SearchConfiguration,
    cache: MatchCache | None = None,
) -> list[FuzzyMatch[T]]:
    """Fuzzy search returning (item, score) pairs.

    An empty query is "no filter": every item comes back with score 1.0.
    Hits always carry the records of data, even when a cached index was
    built over another collection of the same size.
    """
    if not query or not query.strip():
        return [FuzzyMatch(item, 1.0, i) for i, item in enumerate(data)]
    trimmed = query.strip()
    if len(trimmed) < config.min_match_char_length:
        return []
    hits = build_index(data, config, cache).search(trimmed)
    return [FuzzyMatch(data[h.ref_index], h.score, h.ref_index) for h in hits]


def fuzzy_search(
    data: Sequence[T],
    query: str | None,
    config: SearchConfiguration,
    cache: MatchCache | None = None,
) -> Sequence[T]:
    """Fuzzy search returning items only.

    An empty query returns data itself; a query shorter than
    min_match_char_length returns an empty list.
    """
    if not query or not query.strip():
        return data
    return [hit.item for hit in fuzzy_search_with_scores(data, query, config, cache)]
