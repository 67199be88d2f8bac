#!/usr/bin/env python3
from __future__ import annotations

import argparse
import time

from knot.config import get_settings
from knot.logging_config import setup_logging
from knot.services.generator import generate_level, validate_level


def parse_args() -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Generate levels and check that each one is solvable."
    )
    parser.add_argument(
        "--start-level",
        type=int,
        default=1,
        help="First level to generate.",
    )
    parser.add_argument(
        "--end-level",
        type=int,
        default=settings.MAX_LEVEL,
        help="Last level to generate (inclusive).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Use this seed for every level instead of a random one.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print a line for every level, not only failures.",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    setup_logging("DEBUG" if args.verbose else None)

    if args.start_level < 1 or args.end_level < args.start_level:
        raise SystemExit(f"Invalid level range: {args.start_level}..{args.end_level}")

    checked = 0
    failed = 0

    for level in range(args.start_level, args.end_level + 1):
        start = time.perf_counter()
        level_data = generate_level(level, seed=args.seed)
        elapsed = (time.perf_counter() - start) * 1000
        report = validate_level(level_data)
        checked += 1

        meta = level_data.meta
        if args.verbose or not report["valid"]:
            status = "ok" if report["valid"] else "FAIL"
            print(
                f"level {level:4d} {status:4s} | seed={level_data.seed} "
                f"pins={meta.point_count} ropes={meta.rope_count} "
                f"tangled={meta.initial_tangled} difficulty={meta.difficulty} "
                f"| {elapsed:5.1f}ms"
            )

        if not report["valid"]:
            failed += 1
            for error in report["errors"]:
                print(f"  - {error}")

    print(f"Checked {checked} level(s), {failed} failed.")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
