"""Tests for subject alias resolution and additive ranking."""

from scoresearch.core.config import SubjectSearchOptions
from scoresearch.core.schemas import EnrichedSubject, Subject
from scoresearch.search.subjects import normalise_subject_query, search_subjects

GENERAL = Subject(name="General Mathematics", code="GMA")
METHODS = Subject(name="Mathematical Methods", code="MAM")
SPECIALIST = Subject(name="Specialist Mathematics", code="SPM")
CHEMISTRY = Subject(name="Chemistry", code="CHEM", mean=29.8, stdev=7.1)
PHYSICS = Subject(name="Physics", code="PHYS")

ALL = [GENERAL, METHODS, SPECIALIST, CHEMISTRY, PHYSICS]


def _names(subjects: list[Subject]) -> list[str]:
    return [s.name for s in subjects]


# ---------------------------------------------------------------------------
# normalise_subject_query
# ---------------------------------------------------------------------------


class TestNormaliseSubjectQuery:
    def test_trims_and_lowercases(self) -> None:
        assert normalise_subject_query("  Chemistry ") == ("chemistry", [])

    def test_exact_alias(self) -> None:
        _, targets = normalise_subject_query("methods", {"methods": ["Mathematical Methods"]})
        assert targets == ["Mathematical Methods"]

    def test_alias_followed_by_more_words(self) -> None:
        query, targets = normalise_subject_query(
            "Methods 3/4", {"methods": ["Mathematical Methods"]}
        )
        assert query == "methods 3/4"
        assert targets == ["Mathematical Methods"]

    def test_partial_alias_does_not_apply(self) -> None:
        _, targets = normalise_subject_query("method", {"methods": ["Mathematical Methods"]})
        assert targets == []

    def test_alias_without_space_does_not_apply(self) -> None:
        _, targets = normalise_subject_query("methodsx", {"methods": ["Mathematical Methods"]})
        assert targets == []

    def test_targets_accumulate_with_duplicates(self) -> None:
        aliases = {
            "spec": ["Specialist Mathematics"],
            "spec maths": ["Specialist Mathematics"],
        }
        _, targets = normalise_subject_query("spec maths", aliases)
        assert targets == ["Specialist Mathematics", "Specialist Mathematics"]


# ---------------------------------------------------------------------------
# search_subjects
# ---------------------------------------------------------------------------


class TestSearchSubjects:
    def test_empty_query_returns_first_limit(self) -> None:
        assert search_subjects(ALL, SubjectSearchOptions(query="", limit=2)) == [GENERAL, METHODS]

    def test_empty_query_default_limit(self) -> None:
        assert search_subjects(ALL, SubjectSearchOptions()) == ALL

    def test_alias_outranks_fuzzy(self) -> None:
        further = Subject(name="Further Methods", code="FUR")
        options = SubjectSearchOptions(query="methods", aliases={"methods": ["Mathematical Methods"]})
        results = search_subjects([further, METHODS], options)
        assert _names(results) == ["Mathematical Methods", "Further Methods"]

    def test_additive_name_and_code_bonuses(self) -> None:
        engineering = Subject(name="Chemical Engineering", code="CE")
        results = search_subjects([engineering, CHEMISTRY], SubjectSearchOptions(query="chem"))
        # Chemistry: name prefix + code exact + code prefix; Engineering: name prefix only.
        assert _names(results)[:2] == ["Chemistry", "Chemical Engineering"]

    def test_exact_name_beats_prefix(self) -> None:
        extension = Subject(name="Physics Extension", code="PHX")
        results = search_subjects([extension, PHYSICS], SubjectSearchOptions(query="physics"))
        assert _names(results) == ["Physics", "Physics Extension"]

    def test_multiple_alias_targets_compound(self) -> None:
        aliases = {"maths": ["Specialist Mathematics", "Specialist"]}
        results = search_subjects(ALL, SubjectSearchOptions(query="maths", aliases=aliases))
        assert results[0].name == "Specialist Mathematics"

    def test_fuzzy_tail_for_typos(self) -> None:
        results = search_subjects(ALL, SubjectSearchOptions(query="chemestry"))
        assert _names(results) == ["Chemistry"]

    def test_exact_tier_before_fuzzy_tier(self) -> None:
        results = search_subjects(ALL, SubjectSearchOptions(query="mathematical"))
        assert results[0].name == "Mathematical Methods"
        assert {"General Mathematics", "Specialist Mathematics"} <= set(_names(results[1:]))

    def test_results_carry_search_text(self) -> None:
        [result] = search_subjects([CHEMISTRY], SubjectSearchOptions(query="chemistry"))
        assert isinstance(result, EnrichedSubject)
        assert result.search_text == "Chemistry CHEM"
        assert result.mean == 29.8

    def test_limit(self) -> None:
        results = search_subjects(ALL, SubjectSearchOptions(query="mathematic", limit=1))
        assert len(results) == 1

    def test_non_positive_limit_ignored(self) -> None:
        results = search_subjects(ALL, SubjectSearchOptions(query="", limit=0))
        assert results == ALL

    def test_idempotent(self) -> None:
        options = SubjectSearchOptions(query="math")
        assert _names(search_subjects(ALL, options)) == _names(search_subjects(ALL, options))

    def test_cached_index_never_repeats_exact_hits(self) -> None:
        applied = Subject(name="Applied Physics", code="APH")
        subjects = [CHEMISTRY, PHYSICS, applied]
        search_subjects(subjects, SubjectSearchOptions(query="chem"))
        names = _names(search_subjects(subjects, SubjectSearchOptions(query="physic")))
        assert names[0] == "Physics"
        assert len(names) == len(set(names))
