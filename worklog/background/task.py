import logging
from datetime import date, datetime
from typing import Optional

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException

from worklog.core.config import load_settings
from worklog.core.exceptions import LedgerError
from worklog.main import open_session, rounded_seconds, summarize, total_hours, week_start
from worklog.models.schema import Direction, Punch
from worklog.utils.grammar import parse_rounding, parse_when
from worklog.utils.helper import append_punch, current_time, load_punches

app = FastAPI(title="worklog")


def _load_ledger():
    try:
        return load_punches(load_settings().ledger_path)
    except LedgerError as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/punch")
def receive_punch(
    direction: str,
    background_tasks: BackgroundTasks,
    time: str = "now",
    memo: str = "",
    now: datetime = Depends(current_time),
):
    try:
        punch = Punch(direction=Direction.parse(direction), instant=parse_when(time, now), memo=memo)
    except (ValueError, OverflowError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    background_tasks.add_task(append_punch, load_settings().ledger_path, punch)
    logging.info(f"Accepted {punch.direction.value} punch at {punch.instant.isoformat()}")
    return {"status": "Punch received, recording in background.", "punch": punch.model_dump(mode="json")}


@app.get("/log")
def list_punches():
    return [p.model_dump(mode="json") for p in _load_ledger()]


@app.get("/report")
def report(
    since: Optional[date] = None,
    rounding: Optional[str] = None,
    full: bool = False,
    now: datetime = Depends(current_time),
):
    settings = load_settings()
    try:
        spec = parse_rounding(rounding) if rounding else settings.rounding
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if since is None and not full:
        since = week_start(now.date(), settings.week_start)

    records = summarize(_load_ledger(), now, since)
    return {
        "records": [
            {
                "date": r.date.isoformat(),
                "hours": round(rounded_seconds(r, spec) / 3600.0, 2),
                "memo": r.memo,
                "complete": r.complete,
                "line": r.render(rounded_seconds(r, spec)),
            }
            for r in records
        ],
        "total_hours": round(total_hours(records, spec), 2),
    }


def run_open_session_check() -> Optional[Punch]:
    logging.info("Running open session check")
    still_open = open_session(load_punches(load_settings().ledger_path))
    if still_open is not None:
        logging.warning(f"Still clocked in since {still_open.instant.isoformat()}")
    logging.info("Open session check completed.")
    return still_open
