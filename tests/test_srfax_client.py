"""Tests for the SRFax wire protocol client."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable
from urllib.parse import parse_qs

import httpx
import pytest

from faxsync.config import AccountConfig
from faxsync.errors import ResponseDecodeError, TransportError
from faxsync.provider.base import Direction, DownloadFormat, InboxItem, ResultStatus
from faxsync.provider.srfax import SRFAX_API, SRFAX_ROOT, SRFaxClient


def _account(tmp_path: Path, **overrides) -> AccountConfig:
    values = {
        "name": "A",
        "access_id": "12345",
        "access_pwd": "secret",
        "file_dir": tmp_path / "A",
        "download_format": DownloadFormat.PDF,
        "delete_after": False,
    }
    values.update(overrides)
    return AccountConfig(**values)


class _Recorder:
    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self._responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    def form(self, index: int = -1) -> dict[str, str]:
        body = self.requests[index].content.decode()
        return {key: values[0] for key, values in parse_qs(body, keep_blank_values=True).items()}


def _client(responder: Callable[[httpx.Request], httpx.Response]) -> tuple[SRFaxClient, _Recorder]:
    recorder = _Recorder(responder)
    http = httpx.Client(transport=httpx.MockTransport(recorder))
    return SRFaxClient(http), recorder


def test_list_inbox_posts_credentials_and_parses_items(tmp_path: Path) -> None:
    payload = {
        "Status": "Success",
        "Result": [
            {
                "FileName": "20240101|100",
                "ReceiveStatus": "Ok",
                "Date": "Jan 01/24 10:00 AM",
                "CallerID": "5551234567",
                "RemoteID": "Clinic",
                "Pages": 3,
                "Size": 12345,
            }
        ],
    }
    client, recorder = _client(lambda request: httpx.Response(200, json=payload))

    response = client.list_inbox(_account(tmp_path))

    request = recorder.requests[0]
    assert request.method == "POST"
    assert str(request.url) == SRFAX_API
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"
    assert recorder.form() == {
        "sPeriod": "ALL",
        "action": "Get_Fax_Inbox",
        "access_id": "12345",
        "access_pwd": "secret",
    }
    assert response.ok
    assert response.items is not None
    item = response.items[0]
    assert item.file_name == "20240101|100"
    assert item.pages == "3"
    assert item.size == "12345"
    assert item.caller_id == "5551234567"


def test_list_inbox_failed_status_keeps_message(tmp_path: Path) -> None:
    client, _ = _client(
        lambda request: httpx.Response(200, json={"Status": "Failed", "Result": "Invalid Access"})
    )

    response = client.list_inbox(_account(tmp_path))

    assert response.status is ResultStatus.FAILED
    assert response.items is None
    assert response.error == "Invalid Access"


def test_list_inbox_success_without_result_is_empty(tmp_path: Path) -> None:
    client, _ = _client(lambda request: httpx.Response(200, json={"Status": "Success"}))

    response = client.list_inbox(_account(tmp_path))

    assert response.ok
    assert response.items is None


def test_retrieve_sends_direction_and_format(tmp_path: Path) -> None:
    client, recorder = _client(
        lambda request: httpx.Response(200, json={"Status": "Success", "Result": "aGVsbG8="})
    )
    account = _account(tmp_path, download_format=DownloadFormat.TIF)

    response = client.retrieve(account, InboxItem(file_name="fax|9"), Direction.OUT)

    form = recorder.form()
    assert form["action"] == "Retrieve_Fax"
    assert form["sFaxFileName"] == "fax|9"
    assert form["sDirection"] == "OUT"
    assert form["sFaxFormat"] == "TIF"
    assert response.ok
    assert response.data == "aGVsbG8="


def test_delete_sends_details_id_without_delimiter(tmp_path: Path) -> None:
    client, recorder = _client(
        lambda request: httpx.Response(200, json={"Status": "Success", "Result": "Deleted"})
    )

    response = client.delete(_account(tmp_path), InboxItem(file_name="report.pdf|42"), Direction.IN)

    form = recorder.form()
    assert form["action"] == "Delete_Fax"
    assert form["sDirection"] == "IN"
    assert form["sFaxFilename_x"] == "report.pdf|42"
    assert form["sFaxDetailsID_x"] == "42"
    assert response.ok
    assert response.message == "Deleted"


def test_non_json_body_raises_decode_error(tmp_path: Path) -> None:
    client, _ = _client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

    with pytest.raises(ResponseDecodeError):
        client.list_inbox(_account(tmp_path))


def test_unknown_status_raises_decode_error(tmp_path: Path) -> None:
    client, _ = _client(
        lambda request: httpx.Response(200, content=json.dumps({"Status": "Maybe"}).encode())
    )

    with pytest.raises(ResponseDecodeError):
        client.list_inbox(_account(tmp_path))


def test_success_with_wrong_payload_shape_raises_decode_error(tmp_path: Path) -> None:
    client, _ = _client(
        lambda request: httpx.Response(200, json={"Status": "Success", "Result": {"a": 1}})
    )

    with pytest.raises(ResponseDecodeError):
        client.retrieve(_account(tmp_path), InboxItem(file_name="x|1"), Direction.IN)


def test_http_error_status_raises_transport_error(tmp_path: Path) -> None:
    client, _ = _client(lambda request: httpx.Response(502))

    with pytest.raises(TransportError) as excinfo:
        client.list_inbox(_account(tmp_path))
    assert excinfo.value.status_code == 502


def test_network_failure_raises_transport_error(tmp_path: Path) -> None:
    def _boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = _client(_boom)

    with pytest.raises(TransportError):
        client.list_inbox(_account(tmp_path))


def test_probe_reports_success_for_2xx() -> None:
    client, recorder = _client(lambda request: httpx.Response(200, text="ok"))

    assert client.probe() is True
    assert recorder.requests[0].method == "GET"
    assert str(recorder.requests[0].url).rstrip("/") == SRFAX_ROOT


def test_probe_reports_failure_for_server_error() -> None:
    client, _ = _client(lambda request: httpx.Response(500))

    assert client.probe() is False


def test_probe_reports_failure_for_transport_error() -> None:
    def _boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    client, _ = _client(_boom)

    assert client.probe() is False


def test_close_leaves_injected_client_open() -> None:
    http = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    client = SRFaxClient(http)

    client.close()

    assert not http.is_closed
    http.close()
