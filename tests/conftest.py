"""Shared fixtures."""

from collections.abc import Iterator

import pytest

from scoresearch.search.cache import DEFAULT_TTL_SECONDS, clear_search_cache, get_default_cache


@pytest.fixture(autouse=True)
def fresh_match_cache() -> Iterator[None]:
    """Same-size collections share cached indices, so isolate every test."""
    clear_search_cache()
    yield
    clear_search_cache()
    get_default_cache().ttl_seconds = DEFAULT_TTL_SECONDS
