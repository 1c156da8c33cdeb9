from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from worklog.background.task import app, run_open_session_check
from worklog.utils.helper import current_time, load_punches

CST = timezone(timedelta(hours=-6))
NOW = datetime(2017, 1, 9, 18, 0, tzinfo=CST)


@pytest.fixture
def ledger(tmp_path, monkeypatch):
    path = tmp_path / "worklog.csv"
    monkeypatch.setenv("WORKLOG_LEDGER", str(path))
    monkeypatch.delenv("WORKLOG_ROUNDING", raising=False)
    monkeypatch.delenv("WORKLOG_WEEK_START", raising=False)
    return path


@pytest.fixture
def client(ledger):
    app.dependency_overrides[current_time] = lambda: NOW
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_punch_is_written_in_background(client, ledger):
    response = client.post("/punch", params={"direction": "in", "time": "9:00am", "memo": "standup"})
    assert response.status_code == 200
    body = response.json()
    assert body["punch"]["direction"] == "In"
    assert body["punch"]["memo"] == "standup"

    punches = load_punches(ledger)
    assert len(punches) == 1
    assert punches[0].instant == datetime(2017, 1, 9, 9, 0, tzinfo=CST)


def test_bad_time_is_rejected(client, ledger):
    response = client.post("/punch", params={"direction": "in", "time": "2017-1-99:00"})
    assert response.status_code == 400
    assert not ledger.exists()


def test_bad_direction_is_rejected(client):
    response = client.post("/punch", params={"direction": "up"})
    assert response.status_code == 400


def test_report_and_log(client):
    client.post("/punch", params={"direction": "in", "time": "9:00am"})
    client.post("/punch", params={"direction": "out", "time": "12:10pm", "memo": "lunch"})
    client.post("/punch", params={"direction": "in", "time": "1:00pm"})

    log = client.get("/log").json()
    assert [p["direction"] for p in log] == ["In", "Out", "In"]

    report = client.get("/report", params={"rounding": "+15m"}).json()
    assert len(report["records"]) == 1
    day = report["records"][0]
    assert day["date"] == "2017-01-09"
    assert day["complete"] is False
    # 3h10m closed, 5h still open at NOW, rounded up to the quarter hour
    assert day["hours"] == 8.25
    assert report["total_hours"] == 8.25
    assert day["line"] == "2017-01-09 8.25 lunch Missing record(s)"


def test_report_since_excludes_older_days(client, ledger):
    ledger.write_text(
        "In,2016-12-01T09:00:00-06:00,\n"
        "Out,2016-12-01T10:00:00-06:00,\n"
    )
    assert client.get("/report").json()["records"] == []
    assert len(client.get("/report", params={"full": True}).json()["records"]) == 1


def test_malformed_ledger_is_a_server_error(client, ledger):
    ledger.write_text("nonsense\n")
    assert client.get("/log").status_code == 500


def test_open_session_check(ledger):
    ledger.write_text("In,2017-01-09T09:00:00-06:00,\n")
    assert run_open_session_check() is not None
    ledger.write_text("In,2017-01-09T09:00:00-06:00,\nOut,2017-01-09T10:00:00-06:00,\n")
    assert run_open_session_check() is None
