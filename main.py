"""CLI entry point for the score search engine."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from scoresearch.core.config import (
    CourseSearchOptions,
    Settings,
    SubjectSearchOptions,
)
from scoresearch.core.loader import load_courses, load_student_directory, load_subjects
from scoresearch.search import (
    available_years,
    filter_students,
    get_default_cache,
    search_courses,
    search_subjects,
)


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: built-in settings)",
    )
    parser.add_argument(
        "--export",
        choices=["json"],
        help="Print results in the given format instead of a table",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Score search - rank courses, subjects and student scores",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- courses subcommand ---
    courses_parser = subparsers.add_parser("courses", help="Search courses")
    courses_parser.add_argument("query", nargs="?", default="", help="Search term")
    courses_parser.add_argument(
        "--atar",
        default="0",
        help="ATAR used to classify courses as safe/target/reach (default: 0)",
    )
    courses_parser.add_argument(
        "--category",
        default="all",
        choices=["all", "safe", "target", "reach"],
        help="Only show courses in this category (default: all)",
    )
    courses_parser.add_argument("--limit", type=int, default=20, help="Max results (default: 20)")
    _add_common_args(courses_parser)

    # --- subjects subcommand ---
    subjects_parser = subparsers.add_parser("subjects", help="Search subjects")
    subjects_parser.add_argument("query", nargs="?", default="", help="Subject name, code or alias")
    subjects_parser.add_argument("--limit", type=int, default=50, help="Max results (default: 50)")
    _add_common_args(subjects_parser)

    # --- students subcommand ---
    students_parser = subparsers.add_parser("students", help="Search student scores")
    students_parser.add_argument("query", help="Name, school or subject")
    students_parser.add_argument("--year", type=int, default=None, help="Only this year")
    students_parser.add_argument("--limit", type=int, default=100, help="Max results (default: 100)")
    _add_common_args(students_parser)

    # --- years subcommand ---
    years_parser = subparsers.add_parser("years", help="List years with student scores")
    _add_common_args(years_parser)

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(path: str | None) -> Settings:
    settings = Settings.from_yaml(path) if path else Settings()
    get_default_cache().ttl_seconds = settings.cache.ttl_seconds
    return settings


def export_results_json(results: list[BaseModel]) -> str:
    payload: list[dict[str, Any]] = [r.model_dump(exclude_none=True) for r in results]
    return json.dumps({"results": payload, "total": len(payload)}, indent=2)


def cmd_courses(args: argparse.Namespace, settings: Settings) -> list[BaseModel]:
    """Handle courses subcommand."""
    courses = load_courses(settings.data.courses)
    options = CourseSearchOptions(
        search_term=args.query or None,
        category=args.category,
        atar=args.atar,
        limit=args.limit,
    )
    results = search_courses(courses, options, fuzzy_config=settings.course_fuzzy)
    if args.export != "json":
        for c in results:
            print(f"  [{c.category:>7}] {c.rank:>6}  {c.institution} - {c.name} ({c.code})")
    return list(results)


def cmd_subjects(args: argparse.Namespace, settings: Settings) -> list[BaseModel]:
    """Handle subjects subcommand."""
    subjects = load_subjects(settings.data.subjects)
    options = SubjectSearchOptions(query=args.query, aliases=settings.aliases, limit=args.limit)
    results = search_subjects(subjects, options, fuzzy_config=settings.subject_fuzzy)
    if args.export != "json":
        for s in results:
            mean = f"mean {s.mean:.2f}" if s.mean is not None else ""
            print(f"  {s.code:<8} {s.name}  {mean}".rstrip())
    return list(results)


def cmd_students(args: argparse.Namespace, settings: Settings) -> list[BaseModel]:
    """Handle students subcommand."""
    students = load_student_directory(Path(settings.data.students_dir))
    results = filter_students(students, args.query, year=args.year, limit=args.limit)
    if args.export != "json":
        for s in results:
            best = ", ".join(
                f"{sub.subject} {sub.score}{'*' if sub.is_perfect else ''}" for sub in s.subjects
            )
            print(f"  {s.year or '-'}  {s.name} ({s.school}): {best}")
    return list(results)


def cmd_years(args: argparse.Namespace, settings: Settings) -> list[int]:
    """Handle years subcommand."""
    years = available_years(load_student_directory(Path(settings.data.students_dir)))
    if args.export == "json":
        print(json.dumps({"years": years}, indent=2))
    else:
        for year in years:
            print(f"  {year}")
    return years


_COMMANDS = {
    "courses": cmd_courses,
    "subjects": cmd_subjects,
    "students": cmd_students,
}


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "years":
            cmd_years(args, settings)
            return
        results = _COMMANDS[args.command](args, settings)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.export == "json":
        print(export_results_json(results))
    else:
        print(f"{len(results)} result(s)")


if __name__ == "__main__":
    main()
