import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, TextIO, Union

from worklog.core.exceptions import LedgerError
from worklog.models.schema import Direction, Punch

TIMESTAMP_FORMATS = ("%Y-%m-%dT%H:%M:%S%z", "%Y-%m-%dT%H:%M:%S.%f%z")

PathLike = Union[str, Path]


def current_time() -> datetime:
    """Wall clock as a fixed-offset datetime. Only the outer surfaces call this."""
    return datetime.now().astimezone()


def encode_timestamp(instant: datetime) -> str:
    return instant.isoformat(timespec="seconds")


def decode_timestamp(text: str) -> datetime:
    value = text.strip()
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f"Timestamp needs an explicit UTC offset: {text!r}")


def encode_punch(punch: Punch) -> List[str]:
    return [punch.direction.value, encode_timestamp(punch.instant), punch.memo]


def decode_punch(row: List[str], line_number: int = 0) -> Punch:
    if len(row) != 3:
        raise LedgerError(line_number, ",".join(row), f"expected 3 fields, found {len(row)}")
    direction, timestamp, memo = row
    try:
        return Punch(
            direction=Direction.parse(direction),
            instant=decode_timestamp(timestamp),
            memo=memo,
        )
    except ValueError as exc:
        raise LedgerError(line_number, ",".join(row), str(exc)) from exc


def read_ledger(stream: Iterable[str]) -> List[Punch]:
    """Decode every ledger row and return the punches sorted by instant.

    The first malformed row aborts the load.
    """
    punches = []
    for line_number, row in enumerate(csv.reader(stream), start=1):
        if not row:
            continue
        try:
            punches.append(decode_punch(row, line_number))
        except LedgerError:
            logging.error(f"Ledger row {line_number} could not be decoded")
            raise
    return sorted(punches, key=lambda p: p.instant)


def load_punches(path: PathLike) -> List[Punch]:
    ledger = Path(path)
    if not ledger.exists():
        logging.info(f"No ledger at {ledger}, starting empty")
        return []
    with ledger.open("r", newline="", encoding="utf-8") as f:
        return read_ledger(f)


def write_punch(stream: TextIO, punch: Punch) -> None:
    csv.writer(stream, lineterminator="\n").writerow(encode_punch(punch))


def append_punch(path: PathLike, punch: Punch) -> None:
    ledger = Path(path)
    ledger.parent.mkdir(parents=True, exist_ok=True)
    with ledger.open("a", newline="", encoding="utf-8") as f:
        write_punch(f, punch)
