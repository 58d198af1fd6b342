"""Types describing the fax provider's inbox items and response envelopes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Protocol, Sequence, TYPE_CHECKING

from ..errors import ResponseDecodeError

if TYPE_CHECKING:  # pragma: no cover
    from ..config import AccountConfig


class _ValuesMixin:
    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class Direction(_ValuesMixin, str, Enum):
    """Queue a provider operation applies to."""

    IN = "IN"
    OUT = "OUT"


class DownloadFormat(_ValuesMixin, str, Enum):
    """Document format requested from the provider; also the file extension."""

    PDF = "PDF"
    TIF = "TIF"


class ResultStatus(_ValuesMixin, str, Enum):
    SUCCESS = "Success"
    FAILED = "Failed"


@dataclass(frozen=True, slots=True)
class InboxItem:
    """A single fax reported by the provider's inbox listing."""

    file_name: str
    receive_status: str = ""
    date: str = ""
    caller_id: str = ""
    remote_id: str = ""
    pages: str = ""
    size: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InboxItem":
        file_name = data.get("FileName")
        if not isinstance(file_name, str):
            raise ResponseDecodeError("inbox item is missing a FileName")
        return cls(
            file_name=file_name,
            receive_status=_opaque(data.get("ReceiveStatus")),
            date=_opaque(data.get("Date")),
            caller_id=_opaque(data.get("CallerID")),
            remote_id=_opaque(data.get("RemoteID")),
            pages=_opaque(data.get("Pages")),
            size=_opaque(data.get("Size")),
        )


@dataclass(frozen=True, slots=True)
class InboxResponse:
    """Envelope returned by ``Get_Fax_Inbox``.

    ``items`` is only populated when ``status`` is ``Success``; a successful
    response for an empty inbox may carry ``None``.
    """

    status: ResultStatus
    items: Optional[tuple[InboxItem, ...]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.SUCCESS

    @classmethod
    def from_payload(cls, payload: Any) -> "InboxResponse":
        status, result = _split_envelope(payload)
        if status is not ResultStatus.SUCCESS:
            return cls(status=status, error=_opaque(result) or None)
        if result is None:
            return cls(status=status)
        if not isinstance(result, list):
            raise ResponseDecodeError("inbox Result must be a list")
        items = []
        for entry in result:
            if not isinstance(entry, Mapping):
                raise ResponseDecodeError("inbox Result entries must be objects")
            items.append(InboxItem.from_dict(entry))
        return cls(status=status, items=tuple(items))


@dataclass(frozen=True, slots=True)
class RetrieveFaxResponse:
    """Envelope returned by ``Retrieve_Fax``; ``data`` is base64 text."""

    status: ResultStatus
    data: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.SUCCESS

    @classmethod
    def from_payload(cls, payload: Any) -> "RetrieveFaxResponse":
        status, result = _split_envelope(payload)
        if status is not ResultStatus.SUCCESS:
            return cls(status=status, error=_opaque(result) or None)
        if not isinstance(result, str):
            raise ResponseDecodeError("retrieve Result must be a base64 string")
        return cls(status=status, data=result)


@dataclass(frozen=True, slots=True)
class DeleteFaxResponse:
    """Envelope returned by ``Delete_Fax``; ``message`` is human readable."""

    status: ResultStatus
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.SUCCESS

    @classmethod
    def from_payload(cls, payload: Any) -> "DeleteFaxResponse":
        status, result = _split_envelope(payload)
        return cls(status=status, message=_opaque(result))


class FaxProvider(Protocol):
    """Operations the account worker needs from a fax provider."""

    def probe(self) -> bool:
        """Return ``True`` when the provider is reachable."""

    def list_inbox(self, account: "AccountConfig") -> InboxResponse:
        """List every inbound fax for the account."""

    def retrieve(
        self, account: "AccountConfig", item: InboxItem, direction: Direction
    ) -> RetrieveFaxResponse:
        """Fetch the base64 encoded document for ``item``."""

    def delete(
        self, account: "AccountConfig", item: InboxItem, direction: Direction
    ) -> DeleteFaxResponse:
        """Remove ``item`` from the provider."""

    def close(self) -> None:
        """Release network resources."""


def _split_envelope(payload: Any) -> tuple[ResultStatus, Any]:
    if not isinstance(payload, Mapping):
        raise ResponseDecodeError("response body must be a JSON object")
    raw_status = payload.get("Status")
    try:
        status = ResultStatus(raw_status)
    except ValueError as exc:
        raise ResponseDecodeError(f"unexpected Status value: {raw_status!r}") from exc
    return status, payload.get("Result")


def _opaque(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Sequence) and not isinstance(value, str):
        return ", ".join(str(part) for part in value)
    return str(value)


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
