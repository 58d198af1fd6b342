"""Exception types raised while synchronising fax inboxes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .provider.base import InboxItem


class FaxSyncError(RuntimeError):
    """Base class for every error raised by faxsync."""


class NoConnectionError(FaxSyncError):
    """The provider root could not be reached."""

    def __init__(self, url: str) -> None:
        super().__init__(f"could not connect to {url}")
        self.url = url


class InboxFetchError(FaxSyncError):
    """The provider answered the inbox request with a non-success status."""

    def __init__(self, account: str, message: str | None = None) -> None:
        detail = f": {message}" if message else ""
        super().__init__(f"failed to get inbox for {account}{detail}")
        self.account = account
        self.message = message


class MalformedIdentifierError(FaxSyncError):
    """A remote file name did not contain the ``|`` delimiter."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"malformed fax identifier: {identifier!r}")
        self.identifier = identifier


class UnsafePathError(FaxSyncError):
    """A resolved file name would escape the target directory."""

    def __init__(self, file_name: str) -> None:
        super().__init__(f"possible directory traversal attack! filename={file_name!r}")
        self.file_name = file_name


class DownloadFailedError(FaxSyncError):
    """A fax could not be retrieved or written to disk."""

    def __init__(self, item: "InboxItem", reason: str | None = None) -> None:
        message = f"failed to download item {item.file_name!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.item = item
        self.reason = reason


class DocumentDecodeError(FaxSyncError):
    """The retrieved document body was not valid base64."""


class DeleteFailedError(FaxSyncError):
    """The provider refused to delete a fax."""

    def __init__(self, item: "InboxItem", message: str | None = None) -> None:
        detail = f": {message}" if message else ""
        super().__init__(f"failed to delete item {item.file_name!r}{detail}")
        self.item = item
        self.message = message


class TransportError(FaxSyncError):
    """Raised on network failures or unexpected HTTP status codes."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResponseDecodeError(FaxSyncError):
    """The provider response body did not match the expected envelope."""


__all__ = [
    "DeleteFailedError",
    "DocumentDecodeError",
    "DownloadFailedError",
    "FaxSyncError",
    "InboxFetchError",
    "MalformedIdentifierError",
    "NoConnectionError",
    "ResponseDecodeError",
    "TransportError",
    "UnsafePathError",
]
