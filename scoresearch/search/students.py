"""Per-record student matching and ordering.

Used to post-filter candidate sets already fetched from storage.
"""

import logging
import re
from collections.abc import Iterable, Sequence

from scoresearch.core.schemas import Student

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 100

# Trimmed queries shorter than this match no students.
MIN_QUERY_LENGTH = 3

_NAME_SPLIT = re.compile(r"[\s,]+")


def _words(text: str) -> list[str]:
    return [w for w in _NAME_SPLIT.split(text) if w]


def student_matches_query(student: Student, query: str) -> bool:
    """Return True if the query appears in the student's name, school or subjects.

    Multi-word queries also match when every word is found somewhere, in any
    order and across fields ("Smith John" matches "John Smith").
    """
    q = query.lower()
    name = student.name.lower()
    school = student.school.lower()
    subjects = [s.subject.lower() for s in student.subjects]

    if q in name or q in school or any(q in s for s in subjects):
        return True

    query_words = q.split()
    if len(query_words) < 2:
        return False

    name_words = _words(name)
    school_words = _words(school)
    return all(
        any(qw in w for w in name_words)
        or any(qw in w for w in school_words)
        or any(qw in s for s in subjects)
        for qw in query_words
    )


def _collation_key(name: str) -> tuple[str, str]:
    return (name.casefold(), name)


def sort_students(students: list[Student]) -> list[Student]:
    """Sort in place by year (newest first, missing as 0) then name; returns the list."""
    students.sort(key=lambda s: (-(s.year or 0), _collation_key(s.name)))
    return students


def filter_students(
    students: Sequence[Student],
    query: str,
    year: int | None = None,
    limit: int | None = DEFAULT_MAX_RESULTS,
) -> list[Student]:
    """Keep students matching query (and year, if given), sorted and capped at limit.

    Queries shorter than MIN_QUERY_LENGTH after trimming match no one.
    """
    query = query.strip()
    if len(query) < MIN_QUERY_LENGTH:
        logger.debug("filter_students: query '%s' too short", query)
        return []
    result = [
        s for s in students
        if (year is None or s.year == year) and student_matches_query(s, query)
    ]
    dropped = len(students) - len(result)
    if dropped:
        logger.debug("filter_students: removed %d non-matching students", dropped)
    sort_students(result)
    if limit is not None and limit > 0:
        result = result[:limit]
    return result


def available_years(students: Iterable[Student]) -> list[int]:
    """Distinct years present in the records, newest first."""
    return sorted({s.year for s in students if s.year is not None}, reverse=True)
