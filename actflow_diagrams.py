#!/usr/bin/env python3
"""Command-line interface for the activity diagram generator."""

from __future__ import annotations

import argparse
import logging
import random
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from actflow import ActivityUnit, Diagrams, FlowError
from actflow.unit import ENTRY_ACTION


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("workflow", type=Path, help="Workflow JSON document to compile")
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=None,
        help="Directory receiving the .uml files (defaults to the workflow directory)",
    )
    parser.add_argument(
        "--entry",
        default=ENTRY_ACTION,
        help="Action the diagrams start from",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail a dimension when a successor names an unknown action",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the class color generator",
    )
    parser.add_argument(
        "--indent",
        default="\t",
        help="Indentation unit used inside blocks",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the diagrams instead of writing files",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    return parser.parse_args(argv)


def configure_logging(verbose: bool, quiet: bool = False) -> None:
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )


def validate_inputs(workflow: Path) -> None:
    if not workflow.exists():
        raise SystemExit(f"missing input file: {workflow}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    start_time = time.perf_counter()
    args = parse_args(argv)
    configure_logging(args.verbose, args.quiet)
    validate_inputs(args.workflow)

    try:
        unit = ActivityUnit.load(args.workflow)
    except (FlowError, ValueError) as error:
        raise SystemExit(f"invalid workflow {args.workflow}: {error}")

    rng = random.Random(args.seed) if args.seed is not None else None
    diagrams = Diagrams(unit, entry=args.entry, strict=args.strict, indent=args.indent, rng=rng)
    out_dir = args.out_dir or args.workflow.parent
    if not args.stdout:
        out_dir.mkdir(parents=True, exist_ok=True)

    for document in diagrams.generate():
        if args.stdout:
            sys.stdout.write(document.text)
            continue
        path = document.write(out_dir)
        print(f"diagram written to {path}")

    for failure in diagrams.failures:
        print(f"diagram failed for {failure.dimension.label!r}: {failure.error}", file=sys.stderr)

    if not args.stdout:
        total_time = time.perf_counter() - start_time
        print(f"total execution time: {total_time:.2f}s")
    return 1 if diagrams.failures else 0


if __name__ == "__main__":
    sys.exit(main())
