"""
CSV codec for list records.

File layout:
    id,name,quantity,store,price,addedBy
    <one row per record, six fields, standard CSV quoting>

Rows are terminated with ``\\n`` and the file always ends with a
newline. Reading accepts ``\\r\\n`` as well, and quoted fields may span
several physical lines.
"""

from __future__ import annotations

import csv
import io
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from .exceptions import RecordValidationError

logger = logging.getLogger(__name__)

HEADER_FIELDS = ("id", "name", "quantity", "store", "price", "addedBy")
CSV_HEADER = ",".join(HEADER_FIELDS)
FIELD_COUNT = len(HEADER_FIELDS)

_SPECIAL_CHARS = (",", '"', "\n", "\r")
_HEADER_KEYS = tuple(name.lower() for name in HEADER_FIELDS)
_BOM = "\ufeff"


@dataclass(frozen=True)
class ListRecord:
    """One entry of a list.

    Attributes:
        id: Identity key, unique within a feature and never regenerated
        name: Display name (non-empty once trimmed)
        quantity: Free-form magnitude, "1" when not supplied
        store: Optional store name
        price: Free-form price, parsed only for aggregation
        added_by: Optional attribution (CSV column ``addedBy``)
    """

    id: str
    name: str
    quantity: str = "1"
    store: str = ""
    price: str = ""
    added_by: str = ""

    @classmethod
    def create(
        cls,
        name: str,
        quantity: str | None = None,
        store: str = "",
        price: str = "",
        added_by: str = "",
    ) -> ListRecord:
        """Build a new record with a freshly generated id."""
        record = cls(
            id=uuid.uuid4().hex,
            name=name.strip(),
            quantity=quantity.strip() if quantity and quantity.strip() else "1",
            store=store.strip(),
            price=price.strip(),
            added_by=added_by.strip(),
        )
        record.validate()
        return record

    def validate(self) -> None:
        """Raise RecordValidationError if the record cannot be stored."""
        if not self.id:
            raise RecordValidationError("id", "must not be empty")
        if not self.name.strip():
            raise RecordValidationError("name", "must not be empty", self.name)

    def to_fields(self) -> tuple[str, ...]:
        return (self.id, self.name, self.quantity, self.store, self.price, self.added_by)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary keyed by CSV column names."""
        return dict(zip(HEADER_FIELDS, self.to_fields()))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ListRecord:
        """Create from dictionary keyed by CSV column names."""
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            quantity=str(data.get("quantity", "1")),
            store=str(data.get("store", "")),
            price=str(data.get("price", "")),
            added_by=str(data.get("addedBy", "")),
        )


@dataclass
class DecodedDocument:
    """Result of decoding a whole CSV file."""

    records: list[ListRecord] = field(default_factory=list)
    malformed: int = 0


def escape_field(value: str) -> str:
    """Quote a field if it contains a comma, a quote or a line break."""
    if any(char in value for char in _SPECIAL_CHARS):
        return '"' + value.replace('"', '""') + '"'
    return value


def encode_record(record: ListRecord) -> str:
    """Serialize a record to a single CSV row without a line terminator."""
    return ",".join(escape_field(value) for value in record.to_fields())


def _fields_to_record(fields: list[str]) -> ListRecord | None:
    if len(fields) < FIELD_COUNT:
        return None
    return ListRecord(*fields[:FIELD_COUNT])


def decode_record(line: str) -> ListRecord | None:
    """Parse one CSV row.

    Returns:
        The record, or None if the row has fewer than six fields
    """
    try:
        row = next(csv.reader(io.StringIO(line, newline="")), [])
    except csv.Error:
        return None
    return _fields_to_record(row)


def _is_header(row: list[str]) -> bool:
    return tuple(value.strip().lower() for value in row) == _HEADER_KEYS


def _is_blank(row: list[str]) -> bool:
    return all(not value.strip() for value in row)


def decode_document(content: str) -> DecodedDocument:
    """Decode a full file, skipping the header row and blank lines.

    Malformed rows are dropped and counted rather than raised.
    """
    result = DecodedDocument()
    # Spreadsheet apps often save with a byte order mark
    content = content.removeprefix(_BOM)
    reader = csv.reader(io.StringIO(content, newline=""))
    first = True

    try:
        for row in reader:
            if not row or (len(row) < FIELD_COUNT and _is_blank(row)):
                continue
            if first:
                first = False
                if _is_header(row):
                    continue
            record = _fields_to_record(row)
            if record is None:
                result.malformed += 1
                continue
            result.records.append(record)
    except csv.Error as e:
        # The reader cannot resume after a hard parse error
        logger.warning(f"Stopped decoding CSV at line {reader.line_num}: {e}")
        result.malformed += 1

    return result


def encode_document(records: list[ListRecord]) -> str:
    """Serialize records to a full file: header, rows, trailing newline."""
    rows = [CSV_HEADER, *(encode_record(record) for record in records)]
    return "\n".join(rows) + "\n"
