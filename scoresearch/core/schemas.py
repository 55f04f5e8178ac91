"""Record models for courses, subjects and student scores.

All models are frozen: ranking derives new enriched records per call
instead of mutating the caller's.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

CourseCategory = Literal["safe", "target", "reach", "unknown"]


class Course(BaseModel):
    """A tertiary course. rank is text because sentinel codes (N/P, L/N, RC) occur.

    Source files spell the extended fields in camelCase (vtacUrl, fullTime,
    partTime); both spellings are accepted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    code: str
    name: str
    rank: str
    institution: str
    campus: str = ""
    prerequisites: list[str] = Field(default_factory=list)
    duration: str | None = None
    faculty: str | None = None
    vtac_url: str | None = Field(default=None, alias="vtacUrl")
    description: str | None = None
    full_time: bool | None = Field(default=None, alias="fullTime")
    part_time: bool | None = Field(default=None, alias="partTime")

    @field_validator("rank", mode="before")
    @classmethod
    def rank_as_text(cls, v: Any) -> Any:
        if isinstance(v, (int, float)):
            return str(v)
        return v


class EnrichedCourse(Course):
    """Course with a per-search classification against an ATAR."""

    category: CourseCategory
    rank_num: float
    search_text: str


class Subject(BaseModel):
    """A scaled subject. scaling maps a raw score key to its scaled value."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    mean: float | None = None
    stdev: float | None = None
    scaling: dict[str, float] | None = None


class EnrichedSubject(Subject):
    search_text: str


class SubjectScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject: str
    score: int = Field(ge=0, le=50)

    @property
    def is_perfect(self) -> bool:
        return self.score == 50


class Student(BaseModel):
    """A published study score record."""

    model_config = ConfigDict(frozen=True)

    name: str
    school: str = ""
    subjects: list[SubjectScore] = Field(default_factory=list)
    year: int | None = None
