"""Per-account synchronisation run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

import httpx

from .alerts import Notifier
from .config import AccountConfig
from .downloader import DownloadResult, FaxDownloader
from .errors import DeleteFailedError, FaxSyncError, InboxFetchError, NoConnectionError
from .provider.base import Direction, FaxProvider, InboxItem
from .resolver import resolve

LOGGER = logging.getLogger(__name__)

# Errors that only affect the item being processed.
ITEM_ERRORS = (FaxSyncError, httpx.HTTPError, OSError)


@dataclass(slots=True)
class CycleReport:
    """Outcome of one account run."""

    account: str
    downloaded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    delete_failed: List[str] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"downloaded={len(self.downloaded)} skipped={len(self.skipped)} "
            f"failed={len(self.failed)} deleted={len(self.deleted)} "
            f"delete_failed={len(self.delete_failed)}"
        )


class AccountWorker:
    """Download every inbound fax for one account, then optionally delete it.

    Account-level problems (no connectivity, inbox request refused) raise and
    end the run. Anything that goes wrong with a single item is logged and
    alerted, and the run moves on to the next item.
    """

    def __init__(
        self,
        account: AccountConfig,
        client: FaxProvider,
        notifier: Notifier,
        *,
        downloader: FaxDownloader | None = None,
        direction: Direction = Direction.IN,
    ) -> None:
        self.account = account
        self.client = client
        self.notifier = notifier
        self.downloader = downloader or FaxDownloader(client)
        self.direction = direction

    def run(self) -> CycleReport:
        account = self.account
        report = CycleReport(account=account.name)

        if not self.client.probe():
            raise NoConnectionError(getattr(self.client, "root_url", "provider"))

        inbox = self.client.list_inbox(account)
        if not inbox.ok:
            raise InboxFetchError(account.name, inbox.error)

        if not inbox.items:
            LOGGER.debug("Inbox for %s is empty", account.name)
            return report

        for item in inbox.items:
            LOGGER.debug("srfax item for %s: %s", account.name, item)
            result = self._download(item, report)
            if result is None:
                continue
            if account.delete_after:
                self._delete(item, report)

        return report

    def close(self) -> None:
        self.client.close()

    def _download(self, item: InboxItem, report: CycleReport) -> DownloadResult | None:
        try:
            resolved = resolve(item)
            result = self.downloader.download(
                self.account, item, resolved, self.direction
            )
        except ITEM_ERRORS as exc:
            self._report_failure(
                "error retrieving fax",
                f"error retrieving fax! account={self.account.name} "
                f"item={item.file_name} remote_id={item.remote_id} error={exc}",
            )
            report.failed.append(item.file_name)
            return None

        if result.skipped:
            report.skipped.append(item.file_name)
        else:
            report.downloaded.append(item.file_name)
        return result

    def _delete(self, item: InboxItem, report: CycleReport) -> None:
        try:
            response = self.client.delete(self.account, item, self.direction)
            if not response.ok:
                raise DeleteFailedError(item, response.message)
        except ITEM_ERRORS as exc:
            self._report_failure(
                "error deleting fax",
                f"error deleting fax! account={self.account.name} "
                f"FileName=[{item.file_name}] RemoteID=[{item.remote_id}] error={exc}",
            )
            report.delete_failed.append(item.file_name)
            return
        report.deleted.append(item.file_name)

    def _report_failure(self, subject: str, body: str) -> None:
        LOGGER.warning(body)
        self.notifier.notify(subject, body)


__all__ = ["AccountWorker", "CycleReport", "ITEM_ERRORS"]
