"""Tick-driven fan-out of account workers."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, List, Optional, Sequence

from .alerts import Notifier
from .config import AccountConfig, AppConfig, load_accounts
from .provider.srfax import SRFaxClient
from .worker import AccountWorker, CycleReport

LOGGER = logging.getLogger(__name__)

AccountsSource = Callable[[], Sequence[AccountConfig]]
WorkerFactory = Callable[[AccountConfig], AccountWorker]


class CycleScheduler:
    """Start one worker thread per account every ``tick_time`` seconds.

    The interval is measured from the start of each dispatch; the scheduler
    never waits for the workers it started. An account whose previous run is
    still in flight is skipped for that cycle, so at most one run per account
    exists at any time.
    """

    def __init__(
        self,
        accounts_source: AccountsSource,
        worker_factory: WorkerFactory,
        notifier: Notifier,
    ) -> None:
        self._accounts_source = accounts_source
        self._worker_factory = worker_factory
        self._notifier = notifier
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._in_flight: Dict[str, threading.Thread] = {}
        self.reports: Dict[str, CycleReport] = {}

    def dispatch_cycle(self) -> List[str]:
        """Start a run for every account that is not already running."""

        return list(self._dispatch())

    def run_once(self) -> List[CycleReport]:
        """Dispatch a single cycle and wait for all of its workers."""

        threads = self._dispatch()
        for thread in threads.values():
            thread.join()
        with self._lock:
            return [self.reports[name] for name in threads if name in self.reports]

    def run_forever(self, tick_time: float) -> None:
        LOGGER.info("Starting srfax service loop (tick=%ss)", tick_time)
        self._stop.clear()
        while not self._stop.is_set():
            started = time.monotonic()
            self.dispatch_cycle()
            remaining = tick_time - (time.monotonic() - started)
            if self._stop.wait(max(0.0, remaining)):
                break
        LOGGER.info("srfax service loop stopped")

    def stop(self) -> None:
        self._stop.set()

    def in_flight(self) -> List[str]:
        with self._lock:
            return [name for name, thread in self._in_flight.items() if thread.is_alive()]

    def _dispatch(self) -> Dict[str, threading.Thread]:
        try:
            accounts = list(self._accounts_source())
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("could not load srfax accounts: %s", exc)
            self._notifier.notify(
                "error loading accounts", f"could not load srfax accounts! error={exc}"
            )
            return {}

        started: Dict[str, threading.Thread] = {}
        with self._lock:
            self._forget_removed({account.name for account in accounts})
            for account in accounts:
                current = self._in_flight.get(account.name)
                if current is not None and current.is_alive():
                    LOGGER.warning(
                        "previous run for %s still in progress; skipping this cycle",
                        account.name,
                    )
                    continue
                thread = threading.Thread(
                    target=self._run_account,
                    args=(account,),
                    name=f"faxsync-{account.name}",
                    daemon=True,
                )
                self._in_flight[account.name] = thread
                self.reports.pop(account.name, None)
                # Must be alive before the lock is released.
                thread.start()
                started[account.name] = thread
        return started

    def _forget_removed(self, current: set[str]) -> None:
        for name in [name for name in self._in_flight if name not in current]:
            if not self._in_flight[name].is_alive():
                del self._in_flight[name]
                self.reports.pop(name, None)

    def _run_account(self, account: AccountConfig) -> None:
        try:
            worker = self._worker_factory(account)
            try:
                report = worker.run()
            finally:
                worker.close()
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("error running srfax! name=%s error=%s", account.name, exc)
            self._notifier.notify(
                "error running",
                f"error running srfax! name={account.name} error={exc!r}",
            )
            return

        with self._lock:
            self.reports[account.name] = report
        LOGGER.info("updated srfax! name=%s %s", account.name, report.summary())


def build_scheduler(
    config: AppConfig,
    notifier: Notifier,
    *,
    accounts_source: Optional[AccountsSource] = None,
) -> CycleScheduler:
    """Wire the scheduler to the accounts file and the SRFax client."""

    def _load() -> Sequence[AccountConfig]:
        return load_accounts(config.accounts_path)

    def _make_worker(account: AccountConfig) -> AccountWorker:
        client = SRFaxClient(
            api_url=config.provider.api_url,
            root_url=config.provider.root_url,
            timeout=config.provider.timeout,
        )
        return AccountWorker(account, client, notifier)

    return CycleScheduler(accounts_source or _load, _make_worker, notifier)


__all__ = ["AccountsSource", "CycleScheduler", "WorkerFactory", "build_scheduler"]
