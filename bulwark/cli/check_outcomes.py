"""Scan Python sources for discarded Outcomes, forced unwraps and library exits.

Usage: python -m bulwark.cli.check_outcomes [--select BW001,BW002] [--method NAME] PATH...

Exit status: 0 when clean, 1 when findings were reported, 2 when a path could
not be read.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from bulwark.lint import OUTCOME_METHODS, check_paths


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        prog="bulwark-check",
        description="Scan Python sources for discarded Outcomes and forced unwraps.",
    )
    ap.add_argument("paths", nargs="+", help="Files or directories to scan")
    ap.add_argument(
        "--select",
        default="",
        help="Comma-separated rule codes to report (default: all)",
    )
    ap.add_argument(
        "--method",
        action="append",
        default=[],
        metavar="NAME",
        help="Additional method name that returns an Outcome (repeatable)",
    )
    args = ap.parse_args(argv)

    selected = {code.strip().upper() for code in args.select.split(",") if code.strip()}
    outcome = check_paths(args.paths, methods=OUTCOME_METHODS | set(args.method))
    if outcome.is_failure:
        print(f"bulwark-check: {outcome.fault}", file=sys.stderr)
        return 2

    findings = [f for f in outcome.value_or([]) if not selected or f.code in selected]
    for finding in findings:
        print(finding)
    if findings:
        print(f"[bulwark-check] {len(findings)} finding(s)", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
