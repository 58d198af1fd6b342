"""Fax provider clients for faxsync."""

from .base import (
    DeleteFaxResponse,
    Direction,
    DownloadFormat,
    FaxProvider,
    InboxItem,
    InboxResponse,
    ResultStatus,
    RetrieveFaxResponse,
)

__all__ = [
    "DeleteFaxResponse",
    "Direction",
    "DownloadFormat",
    "FaxProvider",
    "InboxItem",
    "InboxResponse",
    "ResultStatus",
    "RetrieveFaxResponse",
]
