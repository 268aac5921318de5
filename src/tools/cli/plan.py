"""Command line entry point for the step planner."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List

from contracts.errors import (
    ConfigurationError,
    CyclicDependencyError,
    InputFileError,
    ReportValidationError,
    RuleParseError,
)
from planner import log
from planner.orchestrator import run_plan
from project_config import get_section
from tools.reports import event_report, gantt

# sysexits.h
EX_OK = 0
EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70
EX_CONFIG = 78

USAGE_EPILOG = """\
Rules files contain lines of the form
  "Step A must be finished before step B can begin."
'order' prints the order in which one worker completes the steps (ties go to
the step earliest in the alphabet).  'duration' prints how long the job takes
when each step costs its alphabet position plus a base offset and several
workers share the load.
"""


class _UsageParser(argparse.ArgumentParser):
    """Argument parser that exits with ``EX_USAGE`` on bad arguments."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(EX_USAGE, f"{self.prog}: error: {message}\n")


def _overrides(args: argparse.Namespace) -> Dict[str, str]:
    payload: Dict[str, str] = {}
    if getattr(args, "workers", None) is not None:
        payload["CLI_PLANNER_WORKERS"] = str(args.workers)
    if getattr(args, "base_offset", None) is not None:
        payload["CLI_PLANNER_BASE_OFFSET"] = str(args.base_offset)
    if getattr(args, "declared_only", False):
        payload["CLI_PLANNER_SEED_ALPHABET"] = "0"
    return payload


def cmd_order(args: argparse.Namespace) -> int:
    report = run_plan(args.file, mode="order", env_overrides=_overrides(args))
    print(report["answer"])
    return EX_OK


def cmd_duration(args: argparse.Namespace) -> int:
    report = run_plan(args.file, mode="duration", env_overrides=_overrides(args))
    print(report["answer"])
    return EX_OK


def cmd_report(args: argparse.Namespace) -> int:
    report = run_plan(args.file, mode=args.mode, env_overrides=_overrides(args))
    print(json.dumps(report, indent=2, sort_keys=True))
    return EX_OK


def cmd_gantt(args: argparse.Namespace) -> int:
    report = run_plan(args.file, mode=args.mode, env_overrides=_overrides(args))
    out = gantt.render(report, args.out)
    print(out)
    return EX_OK


def cmd_summarize_logs(args: argparse.Namespace) -> int:
    base_dir = Path(args.path)
    files = sorted(base_dir.glob("**/*.jsonl"))
    if not files:
        print(f"No JSONL logs found under {base_dir}", file=sys.stderr)
        return EX_NOINPUT
    summary = event_report.aggregate(files)
    print(json.dumps(summary, indent=2, sort_keys=True))
    return EX_OK


def _add_schedule_options(parser: argparse.ArgumentParser, *, tunable: bool) -> None:
    parser.add_argument("file", help="Rules file, one precedence sentence per line")
    parser.add_argument(
        "--declared-only",
        action="store_true",
        help="Schedule only the steps named in the rules instead of all 26 letters",
    )
    if tunable:
        parser.add_argument("--workers", type=int, default=None, help="Number of workers")
        parser.add_argument(
            "--base-offset",
            type=int,
            default=None,
            help="Time added to every step on top of its alphabet position",
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = _UsageParser(
        prog="step-planner",
        description="Plan dependency-ordered steps across a pool of workers",
        epilog=USAGE_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    order = sub.add_parser("order", help="Print the completion order for a single worker")
    _add_schedule_options(order, tunable=False)
    order.set_defaults(func=cmd_order)

    duration = sub.add_parser("duration", help="Print the total time to finish every step")
    _add_schedule_options(duration, tunable=True)
    duration.set_defaults(func=cmd_duration)

    report = sub.add_parser("report", help="Print the validated JSON schedule report")
    _add_schedule_options(report, tunable=True)
    report.add_argument("--mode", choices=("order", "duration"), default="duration")
    report.set_defaults(func=cmd_report)

    chart = sub.add_parser("gantt", help="Render the schedule as a per-worker timeline")
    _add_schedule_options(chart, tunable=True)
    chart.add_argument("--mode", choices=("order", "duration"), default="duration")
    chart.add_argument("--out", required=True, help="Image path (format from suffix)")
    chart.set_defaults(func=cmd_gantt)

    logs = sub.add_parser("summarize-logs", help="Aggregate schedule event logs")
    logs.add_argument("path", help="Directory containing JSONL logs")
    logs.set_defaults(func=cmd_summarize_logs)

    return parser


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else str(get_section("logging.level", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: List[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if getattr(args, "mode", None) == "order" and getattr(args, "workers", None) is not None:
        parser.error("--workers cannot be combined with --mode order, which runs a single worker")

    try:
        _configure_logging(args.verbose)
        log.configure_from_config(os.environ)
        return args.func(args)
    except InputFileError as exc:
        print(exc)
        print()
        parser.print_help()
        return EX_NOINPUT
    except (RuleParseError, CyclicDependencyError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EX_DATAERR
    except ConfigurationError as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return EX_CONFIG
    except ReportValidationError as exc:
        print(f"internal error: {exc}", file=sys.stderr)
        return EX_SOFTWARE


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
