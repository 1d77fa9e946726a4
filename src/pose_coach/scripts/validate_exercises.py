"""
Validate exercise definition files against the registry schema.

Usage:
    pose-coach-validate-exercises                       # configured data path
    pose-coach-validate-exercises data/arms.yaml data/  # explicit files/dirs

Exits with status 1 if any file is invalid or two files share an exercise id.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from ..config import EXERCISES_PATH, LOG_FORMAT
from ..exceptions import InvalidExerciseDefinition
from ..exercises.registry import ExerciseRegistry, load_definitions_file
from ..utils.io_utils import list_yaml_files

logger = logging.getLogger(__name__)


def validate_paths(paths: Sequence[Path]) -> List[str]:
    """Validate every YAML file under ``paths``; return one message per problem."""
    problems: List[str] = []
    definitions = []
    for path in paths:
        try:
            files = list_yaml_files(path)
        except FileNotFoundError as exc:
            problems.append(str(exc))
            continue
        for file in files:
            try:
                loaded = load_definitions_file(file)
            except InvalidExerciseDefinition as exc:
                logger.error("Invalid %s: %s", file, exc)
                problems.append(str(exc))
                continue
            logger.info("%s: %d exercises OK", file, len(loaded))
            definitions.extend(loaded)

    try:
        ExerciseRegistry(definitions)
    except InvalidExerciseDefinition as exc:
        logger.error("%s", exc)
        problems.append(str(exc))
    return problems


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Validate exercise definition YAML files.")
    ap.add_argument(
        "paths", nargs="*", type=Path,
        help=f"Files or directories to check (default: {EXERCISES_PATH})",
    )
    ap.add_argument("--quiet", action="store_true", help="Only report problems.")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO, format=LOG_FORMAT,
    )

    problems = validate_paths(args.paths or [EXERCISES_PATH])
    if problems:
        print(f"{len(problems)} problem(s) found.", file=sys.stderr)
        return 1
    print("All exercise files are valid!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
