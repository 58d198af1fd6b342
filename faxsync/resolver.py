"""Turn the provider's composite file names into safe local names."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import MalformedIdentifierError, UnsafePathError
from .provider.base import InboxItem

DELIMITER = "|"
_UNSAFE_SEQUENCES = ("..", "/", "\\")


@dataclass(frozen=True, slots=True)
class ResolvedItem:
    """Local file name and provider details id for one inbox item."""

    file_name: str
    details_id: str


def split_fax_filename(identifier: str) -> tuple[str, str]:
    """Split ``<file-name>|<details-id>`` at the first delimiter.

    The delimiter itself is dropped from both halves.
    """

    file_name, sep, details_id = identifier.partition(DELIMITER)
    if not sep:
        raise MalformedIdentifierError(identifier)
    return file_name, details_id


def validate_file_name(file_name: str) -> str:
    if (
        file_name in ("", ".")
        or any(seq in file_name for seq in _UNSAFE_SEQUENCES)
        or any(ord(char) < 0x20 or ord(char) == 0x7F for char in file_name)
    ):
        raise UnsafePathError(file_name)
    return file_name


def resolve(item: InboxItem) -> ResolvedItem:
    file_name, details_id = split_fax_filename(item.file_name)
    return ResolvedItem(file_name=validate_file_name(file_name), details_id=details_id)


__all__ = [
    "DELIMITER",
    "ResolvedItem",
    "resolve",
    "split_fax_filename",
    "validate_file_name",
]
