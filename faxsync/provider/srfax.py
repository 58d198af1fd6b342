"""HTTP client for the SRFax secure web service."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, TYPE_CHECKING

import httpx

from ..errors import ResponseDecodeError, TransportError
from ..resolver import split_fax_filename
from .base import (
    DeleteFaxResponse,
    Direction,
    FaxProvider,
    InboxItem,
    InboxResponse,
    RetrieveFaxResponse,
)

if TYPE_CHECKING:  # pragma: no cover
    from ..config import AccountConfig

LOGGER = logging.getLogger(__name__)

SRFAX_ROOT = "https://www.srfax.com"
SRFAX_API = "https://www.srfax.com/SRF_SecWebSvc.php"

ACTION_GET_INBOX = "Get_Fax_Inbox"
ACTION_RETRIEVE = "Retrieve_Fax"
ACTION_DELETE = "Delete_Fax"


class SRFaxClient(FaxProvider):
    """Issue form-encoded POST requests against the SRFax API.

    The client carries no credentials of its own; each operation receives the
    account it acts for and attaches ``access_id``/``access_pwd`` to the body.
    Provider-level ``Failed`` statuses are returned to the caller untouched.
    Only transport problems and undecodable bodies are raised.
    """

    def __init__(
        self,
        http: Optional[httpx.Client] = None,
        *,
        api_url: str = SRFAX_API,
        root_url: str = SRFAX_ROOT,
        timeout: float = 30.0,
    ) -> None:
        self.api_url = api_url
        self.root_url = root_url
        self._owns_http = http is None
        self._http = http or httpx.Client(timeout=timeout, follow_redirects=True)

    def probe(self) -> bool:
        try:
            response = self._http.get(self.root_url)
        except httpx.HTTPError as exc:
            LOGGER.warning("could not connect to srfax! %s", exc)
            return False
        if not response.is_success:
            LOGGER.warning(
                "srfax connectivity check returned HTTP %s", response.status_code
            )
            return False
        return True

    def list_inbox(self, account: AccountConfig) -> InboxResponse:
        payload = self._post(account, ACTION_GET_INBOX, {"sPeriod": "ALL"})
        return InboxResponse.from_payload(payload)

    def retrieve(
        self,
        account: AccountConfig,
        item: InboxItem,
        direction: Direction = Direction.IN,
    ) -> RetrieveFaxResponse:
        payload = self._post(
            account,
            ACTION_RETRIEVE,
            {
                "sFaxFileName": item.file_name,
                "sDirection": Direction(direction).value,
                "sFaxFormat": account.download_format.value,
            },
        )
        return RetrieveFaxResponse.from_payload(payload)

    def delete(
        self,
        account: AccountConfig,
        item: InboxItem,
        direction: Direction = Direction.IN,
    ) -> DeleteFaxResponse:
        _file_name, details_id = split_fax_filename(item.file_name)
        payload = self._post(
            account,
            ACTION_DELETE,
            {
                "sDirection": Direction(direction).value,
                "sFaxFilename_x": item.file_name,
                "sFaxDetailsID_x": details_id,
            },
        )
        return DeleteFaxResponse.from_payload(payload)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "SRFaxClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _post(
        self, account: AccountConfig, action: str, params: Mapping[str, str]
    ) -> Any:
        data: Dict[str, str] = dict(params)
        data["action"] = action
        data["access_id"] = account.access_id
        data["access_pwd"] = account.access_pwd

        LOGGER.debug("POST %s action=%s account=%s", self.api_url, action, account.name)
        try:
            response = self._http.post(self.api_url, data=data)
        except httpx.HTTPError as exc:
            raise TransportError(f"{action} request failed: {exc}") from exc

        if not response.is_success:
            raise TransportError(
                f"{action} request failed with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            snippet = (response.text or "").strip()[:200]
            raise ResponseDecodeError(
                f"{action} response was not valid JSON: {snippet!r}"
            ) from exc


__all__ = [
    "ACTION_DELETE",
    "ACTION_GET_INBOX",
    "ACTION_RETRIEVE",
    "SRFAX_API",
    "SRFAX_ROOT",
    "SRFaxClient",
]
