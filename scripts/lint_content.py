#!/usr/bin/env python3
"""Lint question-bank content before it ships.

Loads each content file, runs the content validator and prints every issue.
Exits non-zero when any file fails to load or has ERROR-level issues, so
the script can gate a build.

Usage:
    uv run python scripts/lint_content.py content/questions.json
    uv run python scripts/lint_content.py content/*.json --strict
"""

import argparse
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from posture.assessment.content import ContentValidator, load_question_bank_file
from posture.assessment.models import Severity
from posture.exceptions import PostureError
from posture.config import get_settings
from posture.observability.logging import configure_logging


def lint_file(path: str, validator: ContentValidator, strict: bool = False) -> bool:
    """Lint one file and report its issues; returns whether it passed."""
    print(f"\n{path}")
    try:
        bank = load_question_bank_file(path)
    except PostureError as e:
        print(f"  ERROR   LOAD_FAILED: {e.message}")
        return False

    result = validator.validate(bank)
    for issue in result.issues:
        label = "ERROR  " if issue.severity == Severity.ERROR else "WARNING"
        print(f"  {label} {issue.code} [{issue.location}]: {issue.message}")

    passed = result.valid and not (strict and result.warnings)
    summary = f"{len(result.errors)} error(s), {len(result.warnings)} warning(s)"
    print(f"  {'OK' if passed else 'FAILED'} - {len(bank.questions)} questions, {summary}")
    return passed


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Validate question-bank content files")
    parser.add_argument("paths", nargs="+", help="Content JSON files to lint")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat warnings as failures",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured engine log level while linting",
    )
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except PostureError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 2
    configure_logging(settings, level=args.log_level)

    validator = ContentValidator()
    results = [lint_file(path, validator, strict=args.strict) for path in args.paths]

    failed = results.count(False)
    print(f"\n{len(results) - failed}/{len(results)} file(s) passed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
