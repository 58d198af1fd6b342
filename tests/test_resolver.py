"""Tests for splitting and validating remote fax file names."""

from __future__ import annotations

import pytest

from faxsync.errors import MalformedIdentifierError, UnsafePathError
from faxsync.provider.base import InboxItem
from faxsync.resolver import ResolvedItem, resolve, split_fax_filename, validate_file_name


@pytest.mark.parametrize(
    ("identifier", "expected"),
    [
        ("report.pdf|42", ("report.pdf", "42")),
        ("20240101-1234-5678_0|31914563", ("20240101-1234-5678_0", "31914563")),
        ("name|", ("name", "")),
        ("a|b|c", ("a", "b|c")),
    ],
)
def test_split_excludes_delimiter(identifier: str, expected: tuple[str, str]) -> None:
    assert split_fax_filename(identifier) == expected


def test_split_without_delimiter_is_malformed() -> None:
    with pytest.raises(MalformedIdentifierError) as excinfo:
        split_fax_filename("no-delimiter-here")
    assert excinfo.value.identifier == "no-delimiter-here"


@pytest.mark.parametrize("name", ["../evil", "a/b", "a\\b", "..", ".", "", "bad\x00name", "line\nbreak", "tab\there"])
def test_validate_rejects_unsafe_names(name: str) -> None:
    with pytest.raises(UnsafePathError):
        validate_file_name(name)


def test_validate_accepts_plain_names() -> None:
    assert validate_file_name("fax 2024-01-01.tif") == "fax 2024-01-01.tif"


def test_resolve_returns_name_and_details_id() -> None:
    item = InboxItem(file_name="report.pdf|42")
    assert resolve(item) == ResolvedItem(file_name="report.pdf", details_id="42")


def test_resolve_rejects_traversal_in_file_part() -> None:
    with pytest.raises(UnsafePathError):
        resolve(InboxItem(file_name="../../etc/passwd|7"))
