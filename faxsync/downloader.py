"""Fetch fax documents and store them in an account's target directory."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from pathlib import Path

from .config import AccountConfig
from .errors import DocumentDecodeError, DownloadFailedError
from .provider.base import Direction, FaxProvider, InboxItem
from .resolver import ResolvedItem

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DownloadResult:
    path: Path
    skipped: bool = False


def destination_for(account: AccountConfig, resolved: ResolvedItem) -> Path:
    # The format replaces any extension already present in the remote name.
    path = Path(account.file_dir) / resolved.file_name
    return path.with_suffix(f".{account.download_format.value}")


def decode_document(data: str) -> bytes:
    """Decode the provider's base64 body, which is wrapped at a fixed width."""

    cleaned = data.replace("\r", "").replace("\n", "")
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DocumentDecodeError(f"invalid base64 document: {exc}") from exc


class FaxDownloader:
    """Download inbox items exactly once per resolved file name.

    The presence of the destination file is the only record that an item was
    downloaded. Files are created exclusively so two overlapping writers can
    never overwrite each other.
    """

    def __init__(self, client: FaxProvider) -> None:
        self._client = client

    def download(
        self,
        account: AccountConfig,
        item: InboxItem,
        resolved: ResolvedItem,
        direction: Direction = Direction.IN,
    ) -> DownloadResult:
        destination = destination_for(account, resolved)
        destination.parent.mkdir(parents=True, exist_ok=True)

        if destination.exists():
            LOGGER.debug("%s already exists, skipping", destination)
            return DownloadResult(path=destination, skipped=True)

        response = self._client.retrieve(account, item, direction)
        if not response.ok or response.data is None:
            raise DownloadFailedError(item, reason=response.error)

        try:
            content = decode_document(response.data)
        except DocumentDecodeError as exc:
            raise DownloadFailedError(item, reason=str(exc)) from exc

        self._write_new_file(item, destination, content)
        LOGGER.info("Wrote %s (%s bytes)", destination, len(content))
        return DownloadResult(path=destination)

    @staticmethod
    def _write_new_file(item: InboxItem, destination: Path, content: bytes) -> None:
        try:
            handle = destination.open("xb")
        except FileExistsError as exc:
            raise DownloadFailedError(
                item, reason=f"{destination} was created by another writer"
            ) from exc
        except ValueError as exc:
            raise DownloadFailedError(item, reason=f"cannot create {destination!r}: {exc}") from exc

        try:
            with handle:
                handle.write(content)
        except OSError:
            destination.unlink(missing_ok=True)
            raise


__all__ = ["DownloadResult", "FaxDownloader", "decode_document", "destination_for"]
