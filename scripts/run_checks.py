#!/usr/bin/env python3
"""Run repository checks: ruff, pyright and pytest.

Tests run with ``QT_QPA_PLATFORM=offscreen`` so the worker tests never need a
display. Exits non-zero on the first failing step.

Usage:
  python scripts/run_checks.py [--no-tests] [--no-types] [-- pytest args...]
"""

from __future__ import annotations

import argparse
import os
import shlex
import subprocess
import sys


def run(cmd: list[str], env: dict[str, str] | None = None) -> int:
    print("=>", " ".join(shlex.quote(c) for c in cmd))
    res = subprocess.run(cmd, check=False, env=env)
    return res.returncode


def main() -> int:
    parser = argparse.ArgumentParser(description="Lint, type-check and test photo_smith")
    parser.add_argument("--no-tests", action="store_true", help="Skip running pytest")
    parser.add_argument("--no-types", action="store_true", help="Skip pyright")
    parser.add_argument("--fix", action="store_true", help="Let ruff apply safe fixes")
    parser.add_argument("pytest_args", nargs=argparse.REMAINDER, help="Extra pytest arguments")
    args = parser.parse_args()

    ruff = [sys.executable, "-m", "ruff", "check", "photo_smith", "tests", "scripts"]
    if args.fix:
        ruff.append("--fix")
    rc = run(ruff)
    if rc != 0:
        print("ruff failed")
        return rc

    if not args.no_types:
        # pyright may only be on PATH on Windows
        rc = run([sys.executable, "-m", "pyright"]) if sys.platform != "win32" else run(["pyright"])
        if rc != 0:
            print("pyright failed")
            return rc

    if not args.no_tests:
        env = os.environ.copy()
        env.setdefault("QT_QPA_PLATFORM", "offscreen")
        extra = [a for a in args.pytest_args if a != "--"]
        rc = run([sys.executable, "-m", "pytest", "-q", *extra], env=env)
        if rc != 0:
            print("pytest failed")
            return rc

    print("All checks passed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
