from __future__ import annotations

import json
from pathlib import Path

import pytest

from planner import log
from planner.orchestrator import run_plan

DATA = Path(__file__).parent / "data" / "example_rules.txt"


@pytest.fixture(autouse=True)
def _reset_log(tmp_path):
    yield
    log.configure(tmp_path / "unused", enabled=False)


def test_disabled_log_writes_nothing(tmp_path):
    log.configure(tmp_path, enabled=False)
    assert log.emit("schedule.completed", mode="order") is None
    assert list(tmp_path.iterdir()) == []


def test_run_plan_emits_completed_event(tmp_path):
    log.configure(tmp_path)
    report = run_plan(DATA, mode="order", env_overrides={"CLI_PLANNER_SEED_ALPHABET": "0"})

    path = log.current_log_path()
    assert path is not None and path.name == "schedule_00.jsonl"
    events = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert len(events) == 1
    event = events[0]
    assert event["event"] == "schedule.completed"
    assert event["answer"] == "CABDFE"
    assert event["report_id"] == report["report_id"]
    assert event["decision_source"] == "cli"
    assert "ts" in event


def test_log_rotates_when_file_is_full(tmp_path):
    log.configure(tmp_path, max_bytes=10)
    first = log.append_event({"event": "a"})
    second = log.append_event({"event": "b"})
    assert first != second
    assert second.name == "schedule_01.jsonl"


def test_configure_from_config_honours_env_toggle(tmp_path):
    assert log.configure_from_config({}) is False
    assert log.configure_from_config({"PLANNER_EVENT_LOG": "1"}) is True
    assert log.is_enabled()
