import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, List, Optional, Tuple

from worklog.models.schema import DailyRecord, Direction, Interval, Punch, RoundingSpec
from worklog.utils.grammar import parse_when
from worklog.utils.helper import PathLike, append_punch
from worklog.utils.rounding import round_duration

# The pairing slot holds the punch waiting for its counterpart: an In, an
# Out, or nothing (None).
Slot = Optional[Punch]


def _synthetic(direction: Direction, instant: datetime) -> Punch:
    return Punch(direction=direction, instant=instant, memo="")


def step(slot: Slot, following: Optional[Punch], now: datetime) -> Tuple[Optional[Interval], Slot]:
    """Consume one punch from the sequence and maybe emit an interval.

    An In followed by another In, or left open at the end, is closed by a
    synthetic Out: at its own instant when a new In follows, at ``now``
    when the sequence ends. An Out without a preceding In gets a synthetic
    In at its own instant. Any interval with a synthetic side is incomplete.
    """
    if slot is None:
        if following is None:
            return None, None
        raise ValueError("an empty slot must be refilled before stepping")

    if slot.direction is Direction.IN:
        if following is None:
            return Interval.pair(slot, _synthetic(Direction.OUT, now), False), None
        if following.direction is Direction.IN:
            return Interval.pair(slot, _synthetic(Direction.OUT, slot.instant), False), following
        return Interval.pair(slot, following, True), None

    interval = Interval.pair(_synthetic(Direction.IN, slot.instant), slot, False)
    return interval, following


def pair_punches(punches: Iterable[Punch], now: datetime) -> Iterator[Interval]:
    """Turn punches sorted ascending by instant into work intervals."""
    entries = iter(punches)
    slot: Slot = None
    while True:
        if slot is None:
            slot = next(entries, None)
            if slot is None:
                return
        interval, slot = step(slot, next(entries, None), now)
        if not interval.complete:
            logging.warning(f"Synthesized a missing punch for the session starting {interval.start.instant.isoformat()}")
        yield interval


def collect_daily_records(intervals: Iterable[Interval]) -> List[DailyRecord]:
    """Merge adjacent intervals that share a calendar date.

    Only neighbours are merged, which is enough because intervals built from
    sorted punches arrive in date order.
    """
    records: List[DailyRecord] = []
    for interval in intervals:
        record = DailyRecord.from_interval(interval)
        if records and records[-1].combine(record):
            continue
        records.append(record)
    return records


def summarize(punches: Iterable[Punch], now: datetime, since: Optional[date] = None) -> List[DailyRecord]:
    ordered = sorted(punches, key=lambda p: p.instant)
    records = collect_daily_records(pair_punches(ordered, now))
    if since is not None:
        records = [r for r in records if r.date >= since]
    return records


def rounded_seconds(record: DailyRecord, rounding: Optional[RoundingSpec]) -> float:
    if rounding is None:
        return record.duration
    return round_duration(record.duration, rounding)


def total_hours(records: Iterable[DailyRecord], rounding: Optional[RoundingSpec] = None) -> float:
    return sum(rounded_seconds(r, rounding) for r in records) / 3600.0


def render_report(records: List[DailyRecord], rounding: Optional[RoundingSpec] = None) -> List[str]:
    lines = [r.render(rounded_seconds(r, rounding)) for r in records]
    lines.append(f"Total Hours: {total_hours(records, rounding):.2f}")
    return lines


def week_start(today: date, first_weekday: int) -> date:
    return today - timedelta(days=(today.weekday() - first_weekday) % 7)


def open_session(punches: List[Punch]) -> Optional[Punch]:
    """The last punch when it is an In still waiting for its Out."""
    if punches and punches[-1].direction is Direction.IN:
        return punches[-1]
    return None


def mark_time(direction: Direction, when: str, memo: str, now: datetime, ledger_path: PathLike) -> Punch:
    instant = parse_when(when, now)
    punch = Punch(direction=direction, instant=instant, memo=memo)
    append_punch(ledger_path, punch)
    logging.info(f"Recorded {direction.value} punch at {instant.isoformat()}")
    return punch
