"""Command line entry point tests."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from faxsync import cli
from faxsync.worker import CycleReport


def _shutdown_logging() -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


def test_write_config_creates_both_files(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"

    assert cli.main(["--config", str(config_path), "--write-config"]) == 0

    assert json.loads(config_path.read_text(encoding="utf-8"))["tick_rate"] == 5
    assert (tmp_path / "srfaxes.json").exists()


def test_missing_config_writes_defaults_and_exits(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "config.json"

    assert cli.main(["--config", str(config_path)]) == 0

    assert config_path.exists()
    assert "config does not exist" in capsys.readouterr().out


def test_once_runs_a_single_cycle(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps({"tick_rate": 60, "log": {"dir": "logs", "stdout": False}}),
        encoding="utf-8",
    )
    (tmp_path / "srfaxes.json").write_text("[]", encoding="utf-8")

    calls = []

    class FakeScheduler:
        def run_once(self):
            calls.append("once")
            return [CycleReport(account="A", downloaded=["a|1", "b|2"])]

        def run_forever(self, tick_time):  # pragma: no cover - not expected
            calls.append("forever")

    def fake_build_scheduler(config, notifier):
        calls.append(("build", config.tick_rate))
        return FakeScheduler()

    monkeypatch.setattr(cli, "build_scheduler", fake_build_scheduler)

    try:
        assert cli.main(["--config", str(config_path), "--once"]) == 0
    finally:
        _shutdown_logging()

    assert calls == [("build", 60.0), "once"]
    assert list((tmp_path / "logs").glob("*.log"))


def test_forever_stops_on_keyboard_interrupt(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps({"tick_rate": 30, "log": {"dir": "logs", "stdout": False}}),
        encoding="utf-8",
    )
    (tmp_path / "srfaxes.json").write_text("[]", encoding="utf-8")

    events = []

    class InterruptedScheduler:
        def run_forever(self, tick_time):
            events.append(("forever", tick_time))
            raise KeyboardInterrupt

        def stop(self):
            events.append("stop")

    monkeypatch.setattr(cli, "build_scheduler", lambda config, notifier: InterruptedScheduler())

    try:
        assert cli.main(["--config", str(config_path)]) == 0
    finally:
        _shutdown_logging()

    assert events == [("forever", 30.0), "stop"]
