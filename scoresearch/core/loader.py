"""Load course, subject and student records from JSON files.

Student files follow the students_<year>.json naming used by the score
exports; a record without its own year takes the year from the file name.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from scoresearch.core.schemas import Course, Student, Subject

logger = logging.getLogger(__name__)

_STUDENT_FILE = re.compile(r"^students_(\d{4})\.json$")


def _read_array(path: str | Path) -> list[dict[str, Any]]:
    path = Path(path)
    if not path.exists():
        msg = f"Data file not found: {path}"
        raise FileNotFoundError(msg)
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        msg = f"Expected a JSON array of records in {path}"
        raise ValueError(msg)
    return raw


def _load(path: str | Path, model: type[BaseModel]) -> list[Any]:
    records = [model.model_validate(r) for r in _read_array(path)]
    logger.info("Loaded %d %s records from %s", len(records), model.__name__, path)
    return records


def load_courses(path: str | Path) -> list[Course]:
    return _load(path, Course)


def load_subjects(path: str | Path) -> list[Subject]:
    return _load(path, Subject)


def load_students(path: str | Path, default_year: int | None = None) -> list[Student]:
    """Load students from one file, filling in default_year where a record has none."""
    students: list[Student] = []
    for raw in _read_array(path):
        if raw.get("year") is None and default_year is not None:
            raw = {**raw, "year": default_year}
        students.append(Student.model_validate(raw))
    logger.info("Loaded %d students from %s", len(students), path)
    return students


def load_student_directory(directory: str | Path) -> list[Student]:
    """Load every students_<year>.json file in a directory, oldest year first."""
    directory = Path(directory)
    if not directory.is_dir():
        msg = f"Student data directory not found: {directory}"
        raise FileNotFoundError(msg)
    files: list[tuple[int, Path]] = []
    for p in directory.iterdir():
        match = _STUDENT_FILE.match(p.name)
        if match:
            files.append((int(match.group(1)), p))
    files.sort()
    students: list[Student] = []
    for year, path in files:
        students.extend(load_students(path, default_year=year))
    return students
