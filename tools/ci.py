#!/usr/bin/env python3
# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run the Flowdraw CI checks locally.

Usage::

    tools/ci.py                 # every step
    tools/ci.py lint tests      # selected steps only
    tools/ci.py --fail-fast     # stop at the first failing step
"""

import argparse
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path

from yachalk import chalk

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class Step:
    """A named CI command."""

    key: str
    title: str
    command: list[str]


STEPS: list[Step] = [
    Step("format", "Format check", ["uv", "run", "ruff", "format", "--check", "src/", "tests/", "tools/"]),
    Step("lint", "Lint", ["uv", "run", "ruff", "check", "src/", "tests/", "tools/"]),
    Step("types", "Type check", ["uv", "run", "ty", "check", "src/"]),
    Step("tests", "Tests", ["uv", "run", "pytest", "--cov=flowdraw", "--cov-report=term-missing"]),
    Step("build", "Build", ["uv", "build"]),
]


def main() -> int:
    """Run the selected CI steps and print a summary."""
    parser = argparse.ArgumentParser(description="Run Flowdraw CI checks.")
    parser.add_argument(
        "steps",
        nargs="*",
        metavar="STEP",
        help=f"Steps to run: {', '.join(step.key for step in STEPS)} (default: all)",
    )
    parser.add_argument("--fail-fast", action="store_true", help="Stop after the first failing step")
    args = parser.parse_args()
    unknown = set(args.steps) - {step.key for step in STEPS}
    if unknown:
        parser.error(f"unknown step(s): {', '.join(sorted(unknown))}")

    selected = [step for step in STEPS if not args.steps or step.key in args.steps]
    outcomes: list[tuple[Step, bool, float]] = []
    for step in selected:
        passed, elapsed = _run_step(step)
        outcomes.append((step, passed, elapsed))
        if not passed and args.fail_fast:
            break

    _print_banner("Summary")
    for step, passed, elapsed in outcomes:
        paint = chalk.green if passed else chalk.red
        print(paint(f"  {'PASS' if passed else 'FAIL'}  {step.title} ({elapsed:.1f}s)"))
    skipped = len(selected) - len(outcomes)
    if skipped:
        print(chalk.yellow(f"  {skipped} step(s) skipped"))
    print()
    return 0 if all(passed for _, passed, _ in outcomes) and not skipped else 1


# ################
# Implementation
# ################

_ROOT = Path(__file__).resolve().parent.parent


def _print_banner(title: str) -> None:
    rule = "=" * 60
    print(f"\n{chalk.blue(rule)}")
    print(chalk.blue(f"  {title}"))
    print(chalk.blue(rule))


def _run_step(step: Step) -> tuple[bool, float]:
    _print_banner(step.title)
    start = time.monotonic()
    proc = subprocess.run(step.command, cwd=_ROOT)
    return proc.returncode == 0, time.monotonic() - start


if __name__ == "__main__":
    sys.exit(main())
