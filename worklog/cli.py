"""
Command line front end for the worklog timeclock.

Examples::

    worklog --in --memo "standup"
    worklog --out --time "5:30pm"
    worklog --in --time _15m
    worklog --summary --round +15m
"""

import argparse
import logging
import sys
from typing import List, Optional

from worklog.core.config import load_settings
from worklog.core.exceptions import WorklogError
from worklog.main import mark_time, open_session, render_report, summarize, week_start
from worklog.models.schema import Direction
from worklog.utils.grammar import parse_rounding
from worklog.utils.helper import current_time, load_punches


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worklog",
        description="Record clock-in/clock-out punches and summarize worked hours per day.",
    )
    clock = parser.add_mutually_exclusive_group()
    clock.add_argument("-i", "--in", dest="clock_in", action="store_true", help="Record an In punch")
    clock.add_argument("-o", "--out", dest="clock_out", action="store_true", help="Record an Out punch")
    clock.add_argument("-s", "--summary", action="store_true", help="Print a summary of every day")
    clock.add_argument("-l", "--log", action="store_true", help="Print every recorded punch")

    parser.add_argument(
        "-t", "--time", default="now",
        help="When the punch happened: now, 9:30pm, '4/2 9:30', +15m, _1:30 (default: now)",
    )
    parser.add_argument("-m", "--memo", default="", help="Memo for the punch")
    parser.add_argument("-r", "--round", dest="rounding", help="Rounding for reported hours, e.g. +15m, D30m, =1h")
    parser.add_argument("--ledger", help="Path to the ledger file (default: $WORKLOG_LEDGER or ~/.worklog.csv)")
    return parser


def run(args: argparse.Namespace) -> None:
    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(message)s")

    ledger = args.ledger or settings.ledger_path
    now = current_time()

    if args.clock_in or args.clock_out:
        direction = Direction.IN if args.clock_in else Direction.OUT
        punch = mark_time(direction, args.time, args.memo, now, ledger)
        print(f"Clocked {direction.value.lower()} at {punch.stamp}")
        return

    punches = load_punches(ledger)
    if args.log:
        for punch in punches:
            print(punch)
        return

    rounding = parse_rounding(args.rounding) if args.rounding else settings.rounding
    since = None if args.summary else week_start(now.date(), settings.week_start)
    for line in render_report(summarize(punches, now, since), rounding):
        print(line)

    still_open = open_session(punches)
    if still_open is not None:
        logging.warning(f"Still clocked in since {still_open.instant.isoformat()}")


def main(argv: Optional[List[str]] = None) -> int:
    args = create_parser().parse_args(argv)
    try:
        run(args)
    except (WorklogError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
