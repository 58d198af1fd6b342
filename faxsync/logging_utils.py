"""Log sink setup for the faxsync service."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Callable, List


class DailyLogFileHandler(logging.FileHandler):
    """File handler that keeps one ``<YYYY-MM-DD>.log`` per day.

    Account worker threads share this handler; ``logging.Handler.handle``
    holds the handler lock around ``emit``, so the day rollover happens once.
    Files older than ``keep_days`` are removed whenever a day's file is opened.
    """

    def __init__(
        self,
        log_dir: Path,
        *,
        keep_days: int = 7,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.log_dir = Path(log_dir)
        self.keep_days = max(keep_days, 1)
        self._today = today
        self._day = today()
        self.log_dir.mkdir(parents=True, exist_ok=True)
        super().__init__(self.path_for(self._day), encoding="utf-8", delay=True)
        self.prune_expired(self._day)

    def path_for(self, day: date) -> Path:
        return self.log_dir / f"{day.isoformat()}.log"

    def emit(self, record: logging.LogRecord) -> None:
        day = self._today()
        if day != self._day:
            self._roll_to(day)
        super().emit(record)

    def prune_expired(self, today: date) -> List[Path]:
        """Delete dated log files older than the retention window."""

        cutoff = today - timedelta(days=self.keep_days - 1)
        removed: List[Path] = []
        for path in sorted(self.log_dir.glob("*.log")):
            try:
                file_day = date.fromisoformat(path.stem)
            except ValueError:
                continue
            if file_day >= cutoff:
                continue
            try:
                path.unlink()
            except OSError:
                continue
            removed.append(path)
        return removed

    def _roll_to(self, day: date) -> None:
        if self.stream is not None:
            self.stream.close()
            self.stream = None  # type: ignore[assignment]
        self._day = day
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.baseFilename = str(self.path_for(day).absolute())
        self.prune_expired(day)


def configure_logging(
    level: int = logging.INFO,
    log_dir: Path | None = None,
    *,
    stdout: bool = True,
    keep_days: int = 7,
) -> None:
    """Send faxsync logs to the console and the daily file in ``log_dir``."""

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    root.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if stdout:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        console.setLevel(level)
        root.addHandler(console)

    log_directory = log_dir or Path.cwd() / "logs"
    file_handler = DailyLogFileHandler(log_directory, keep_days=keep_days)
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)
    root.addHandler(file_handler)

    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(
        logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    )
    logging.captureWarnings(True)


__all__ = ["configure_logging", "DailyLogFileHandler"]
