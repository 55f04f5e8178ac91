"""Search and ranking over in-memory course, subject and student records.

Usage:
    from scoresearch.search import search_courses, search_subjects

    courses = search_courses(records, CourseSearchOptions(search_term="monash medicine", atar=90))
    subjects = search_subjects(records, SubjectSearchOptions(query="methods", aliases=aliases))
"""

from scoresearch.search.cache import MatchCache, clear_search_cache, get_default_cache
from scoresearch.search.courses import (
    classify_rank,
    enrich_courses,
    search_courses,
    word_based_search,
)
from scoresearch.search.fuzzy import (
    FuzzyIndex,
    FuzzyMatch,
    build_index,
    field_accessor,
    fuzzy_search,
    fuzzy_search_with_scores,
)
from scoresearch.search.hybrid import hybrid_search
from scoresearch.search.students import (
    available_years,
    filter_students,
    sort_students,
    student_matches_query,
)
from scoresearch.search.subjects import normalise_subject_query, search_subjects

__all__ = [
    "FuzzyIndex",
    "FuzzyMatch",
    "MatchCache",
    "available_years",
    "build_index",
    "classify_rank",
    "clear_search_cache",
    "enrich_courses",
    "field_accessor",
    "filter_students",
    "fuzzy_search",
    "fuzzy_search_with_scores",
    "get_default_cache",
    "hybrid_search",
    "normalise_subject_query",
    "search_courses",
    "search_subjects",
    "sort_students",
    "student_matches_query",
    "word_based_search",
]
