"""
Typed views of the records returned by the /query endpoint.

Each record family is its own dataclass; the only thing they share is the
envelope (``totalSize`` plus ``records``) that ``QueryEnvelope.decode`` parses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from .exceptions import DecodeError

# Salesforce REST timestamps, e.g. 2024-03-05T14:07:00.000+0000
SF_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"


def _str(record: Dict[str, Any], key: str) -> Optional[str]:
    value = record.get(key)
    if value is None:
        return None
    return str(value)


def _related(record: Dict[str, Any], relationship: str, key: str) -> Optional[str]:
    """Read `relationship.key`; the relationship itself is null when unset."""
    parent = record.get(relationship)
    if not isinstance(parent, dict):
        return None
    return _str(parent, key)


def parse_sf_datetime(value: str) -> datetime:
    """Parse a Salesforce timestamp; raises ValueError if it does not match."""
    return datetime.strptime(value, SF_DATETIME_FORMAT)


@dataclass
class Account:
    id: Optional[str]
    name: Optional[str]
    type: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> Account:
        return cls(
            id=_str(record, "Id"),
            name=_str(record, "Name"),
            type=_str(record, "Type"),
            description=_str(record, "Description"),
            website=_str(record, "Website"),
            industry=_str(record, "Industry"),
        )


@dataclass
class Contact:
    id: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]
    email: Optional[str] = None
    phone: Optional[str] = None
    description: Optional[str] = None
    account_name: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> Contact:
        return cls(
            id=_str(record, "Id"),
            first_name=_str(record, "FirstName"),
            last_name=_str(record, "LastName"),
            email=_str(record, "Email"),
            phone=_str(record, "Phone"),
            description=_str(record, "Description"),
            account_name=_related(record, "Account", "Name"),
        )


@dataclass
class Task:
    id: Optional[str]
    subject: Optional[str]
    description: Optional[str] = None
    who_first_name: Optional[str] = None
    who_last_name: Optional[str] = None
    created_by_first_name: Optional[str] = None
    created_by_last_name: Optional[str] = None
    account_name: Optional[str] = None
    created_date: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> Task:
        return cls(
            id=_str(record, "Id"),
            subject=_str(record, "Subject"),
            description=_str(record, "Description"),
            who_first_name=_related(record, "Who", "FirstName"),
            who_last_name=_related(record, "Who", "LastName"),
            created_by_first_name=_related(record, "CreatedBy", "FirstName"),
            created_by_last_name=_related(record, "CreatedBy", "LastName"),
            account_name=_related(record, "Account", "Name"),
            created_date=_str(record, "CreatedDate"),
        )

    @property
    def created_at(self) -> Optional[datetime]:
        if self.created_date is None:
            return None
        return parse_sf_datetime(self.created_date)


@dataclass
class CountOnly:
    """Placeholder record type for ``SELECT COUNT()`` queries (no rows come back)."""

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> CountOnly:
        return cls()


T = TypeVar("T")


@dataclass
class QueryEnvelope(Generic[T]):
    total_size: int
    records: List[T] = field(default_factory=list)

    @classmethod
    def decode(cls, payload: Any, record_type: Type[T]) -> QueryEnvelope[T]:
        """Validate a /query JSON body and convert each row with `record_type`."""
        if not isinstance(payload, dict):
            raise DecodeError(f"expected a JSON object, got {type(payload).__name__}")

        total = payload.get("totalSize")
        # bool is an int subclass; reject it explicitly
        if not isinstance(total, int) or isinstance(total, bool):
            raise DecodeError(f"totalSize missing or not an integer: {total!r}")

        rows = payload.get("records", [])
        if not isinstance(rows, list):
            raise DecodeError("records is not a list")
        if total < len(rows):
            raise DecodeError(f"totalSize {total} is smaller than the {len(rows)} records returned")

        records: List[T] = []
        for idx, row in enumerate(rows):
            if not isinstance(row, dict):
                raise DecodeError(f"record {idx} is not a JSON object")
            records.append(record_type.from_record(row))  # type: ignore[attr-defined]
        return cls(total_size=total, records=records)
