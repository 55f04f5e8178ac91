"""Configuration models and YAML loader for the score search engine."""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

CourseCategoryFilter = Literal["all", "safe", "target", "reach"]


class FuzzyKey(BaseModel):
    """A record field searched by the fuzzy matcher, with its relative weight."""

    model_config = ConfigDict(frozen=True)

    name: str
    weight: float = Field(default=1.0, gt=0.0)


class SearchConfiguration(BaseModel):
    """Options for a fuzzy index.

    threshold: 0.0 requires an exact match, 1.0 matches anything.
    distance: only consulted when ignore_location is False.
    """

    model_config = ConfigDict(frozen=True)

    keys: list[FuzzyKey] = Field(default_factory=list)
    threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    min_match_char_length: int = Field(default=1, ge=1)
    should_sort: bool = True
    include_score: bool = True
    ignore_location: bool = True
    distance: int = Field(default=100, ge=0)

    @field_validator("keys", mode="before")
    @classmethod
    def bare_names_as_keys(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [{"name": k} if isinstance(k, str) else k for k in v]
        return v

    def cache_token(self) -> str:
        """Stable serialized form, used as part of the match cache key."""
        return self.model_dump_json()


COURSE_FUZZY_CONFIG = SearchConfiguration(
    keys=[
        FuzzyKey(name="search_text", weight=2.0),
        FuzzyKey(name="name", weight=1.5),
        FuzzyKey(name="institution", weight=1.5),
        FuzzyKey(name="code", weight=1.0),
    ],
    threshold=0.4,
    min_match_char_length=2,
)

SUBJECT_FUZZY_CONFIG = SearchConfiguration(
    keys=[
        FuzzyKey(name="name", weight=2.0),
        FuzzyKey(name="code", weight=1.0),
    ],
    threshold=0.3,
    min_match_char_length=2,
)


class CourseSearchOptions(BaseModel):
    """Filters for a course search. A non-positive limit means no limit."""

    search_term: str | None = None
    category: CourseCategoryFilter = "all"
    atar: float = 0.0
    limit: int | None = None

    @field_validator("atar", mode="before")
    @classmethod
    def atar_from_text(cls, v: Any) -> Any:
        if v is None:
            return 0.0
        if isinstance(v, str):
            v = v.strip()
            return float(v) if v else 0.0
        return v


class SubjectSearchOptions(BaseModel):
    """Query and alias table for a subject search."""

    query: str = ""
    aliases: dict[str, list[str]] = Field(default_factory=dict)
    limit: int = 50

    @field_validator("aliases")
    @classmethod
    def normalise_alias_keys(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        return {alias.strip().lower(): targets for alias, targets in v.items()}


class CacheConfig(BaseModel):
    """Match cache settings."""

    ttl_seconds: float = Field(default=300.0, gt=0.0)


class DataConfig(BaseModel):
    """Locations of the record files used by the CLI."""

    courses: str = "data/courses.json"
    subjects: str = "data/subjects.json"
    students_dir: str = "data"


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    cache: CacheConfig = Field(default_factory=CacheConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    aliases: dict[str, list[str]] = Field(default_factory=dict)
    course_fuzzy: SearchConfiguration = COURSE_FUZZY_CONFIG
    subject_fuzzy: SearchConfiguration = SUBJECT_FUZZY_CONFIG

    @field_validator("aliases")
    @classmethod
    def aliases_have_targets(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        for alias, targets in v.items():
            if not targets:
                msg = f"alias '{alias}' must map to at least one subject"
                raise ValueError(msg)
        return v

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
