"""Entry model and the serialization of the entry collection.

The decrypted vault payload is a JSON array of entry objects::

    [{"id": "...", "serviceName": "Mail", "username": "a@b.com",
      "secret": "x", "createdAt": "2026-01-31T12:00:00.000Z",
      "updatedAt": "2026-01-31T12:00:00.000Z"}]

Optional fields (``url``, ``notes``, ``category``) are omitted when unset.
There is no version field in the payload.
"""

import json
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from .exceptions import FormatError

# (attribute, wire name) in serialization order
_REQUIRED_FIELDS = (
    ("id", "id"),
    ("service_name", "serviceName"),
    ("username", "username"),
    ("secret", "secret"),
)
_OPTIONAL_FIELDS = (
    ("url", "url"),
    ("notes", "notes"),
    ("category", "category"),
)
_TIMESTAMP_FIELDS = (
    ("created_at", "createdAt"),
    ("updated_at", "updatedAt"),
)

# Fields callers may change through an update
EDITABLE_FIELDS = frozenset(
    ["service_name", "username", "secret", "url", "notes", "category"]
)


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC text with millisecond precision, e.g. ``2026-01-31T12:00:00.000Z``."""
    moment = moment or datetime.now(timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp written by :func:`utc_timestamp` (or any ISO-8601 text)."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Entry:
    """One stored credential."""

    id: str
    service_name: str
    username: str
    secret: str
    created_at: str
    updated_at: str
    url: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation (camelCase keys, unset optionals omitted)."""
        data: Dict[str, Any] = {}
        for attr, wire in _REQUIRED_FIELDS:
            data[wire] = getattr(self, attr)
        for attr, wire in _OPTIONAL_FIELDS:
            value = getattr(self, attr)
            if value is not None:
                data[wire] = value
        for attr, wire in _TIMESTAMP_FIELDS:
            data[wire] = getattr(self, attr)
        return data

    def to_public_dict(self) -> Dict[str, Any]:
        """Wire representation without the secret (for listings)."""
        data = self.to_dict()
        data.pop("secret")
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entry":
        """
        Build an entry from its wire representation.

        Raises:
            FormatError: If a required field is missing or any field has
                the wrong type.
        """
        if not isinstance(data, dict):
            raise FormatError(f"Entry must be an object, got {type(data).__name__}")

        kwargs: Dict[str, Any] = {}
        for attr, wire in _REQUIRED_FIELDS + _TIMESTAMP_FIELDS:
            value = data.get(wire)
            if not isinstance(value, str):
                raise FormatError(f"Entry field '{wire}' is missing or not a string")
            kwargs[attr] = value
        for attr, wire in _OPTIONAL_FIELDS:
            value = data.get(wire)
            if value is not None and not isinstance(value, str):
                raise FormatError(f"Entry field '{wire}' must be a string")
            kwargs[attr] = value
        return cls(**kwargs)

    def with_changes(self, **changes: Any) -> "Entry":
        """Copy with editable fields replaced (timestamps untouched)."""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        return replace(self, **changes)

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match over the searchable text fields."""
        needle = query.lower()
        haystack = (self.service_name, self.username, self.url, self.notes, self.category)
        return any(value and needle in value.lower() for value in haystack)


def encode_entries(entries: Sequence[Entry]) -> bytes:
    """Serialize the entry collection to canonical UTF-8 JSON."""
    payload = [entry.to_dict() for entry in entries]
    text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    # lone surrogates can only sit inside JSON strings; escape them as \uXXXX
    return text.encode("utf-8", "backslashreplace")


def decode_entries(data: bytes) -> List[Entry]:
    """
    Deserialize the entry collection, preserving stored order.

    Raises:
        FormatError: On invalid UTF-8, invalid JSON, a non-array payload,
            malformed entries or duplicate ids.
    """
    try:
        raw = json.loads(bytes(data).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise FormatError(f"Vault data is not valid JSON: {e}") from None

    if not isinstance(raw, list):
        raise FormatError(f"Vault data must be an array, got {type(raw).__name__}")

    entries: List[Entry] = []
    seen_ids = set()
    for index, item in enumerate(raw):
        try:
            entry = Entry.from_dict(item)
        except FormatError as e:
            raise FormatError(f"Entry {index}: {e}") from None
        if entry.id in seen_ids:
            raise FormatError(f"Entry {index}: duplicate id {entry.id!r}")
        seen_ids.add(entry.id)
        entries.append(entry)
    return entries


__all__ = [
    "Entry",
    "EDITABLE_FIELDS",
    "decode_entries",
    "encode_entries",
    "parse_timestamp",
    "utc_timestamp",
]
