"""Attendee records that card fields are merged against."""
from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

ID_KEY = "id"

Record = Dict[str, str]

SAMPLE_ATTENDEES: Tuple[Mapping[str, str], ...] = (
    {"id": "1", "Full Name": "Alex Johnson", "Role": "Staff", "ID Number": "STF-001"},
    {"id": "2", "Full Name": "Sarah Connor", "Role": "Speaker", "ID Number": "SPK-204"},
    {"id": "3", "Full Name": "Mike Chen", "Role": "Attendee", "ID Number": "ATT-883"},
)

_EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}


def new_record_id() -> str:
    return uuid.uuid4().hex


def parse_bulk_text(text: str) -> Optional[List[Record]]:
    """Parse comma separated text whose first line holds the attribute names.

    Returns ``None`` when there is no data row. Values are split on every
    comma; quoting is not supported. Empty values are left out of the record,
    and values beyond the last header are ignored.
    """

    lines = text.strip().split("\n")
    if len(lines) < 2:
        return None

    headers = [header.strip() for header in lines[0].split(",")]
    records: List[Record] = []
    for line in lines[1:]:
        values = [value.strip() for value in line.split(",")]
        record: Record = {ID_KEY: new_record_id()}
        for index, header in enumerate(headers):
            if index < len(values) and values[index]:
                record[header] = values[index]
        records.append(record)
    return records


def _normalise_cell(value: object) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def load_records_from_file(path: Path) -> List[Record]:
    """Read attendee rows from a CSV or Excel sheet. Blank cells are dropped."""

    path = Path(path)
    if path.suffix.lower() in _EXCEL_SUFFIXES:
        frame = pd.read_excel(path, dtype=str)
    else:
        frame = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")

    records: List[Record] = []
    for row in frame.to_dict(orient="records"):
        record: Record = {}
        for key, value in row.items():
            text = _normalise_cell(value)
            if text:
                record[str(key).strip()] = text
        records.append(record)
    logger.info("Loaded %d attendee row(s) from %s", len(records), path)
    return records


class AttendeeTable:
    """Ordered attendee records keyed by a generated ``id``."""

    def __init__(self, records: Optional[Iterable[Mapping[str, str]]] = None) -> None:
        self._records: Tuple[Record, ...] = ()
        self.version = 0
        if records is not None:
            self.replace_all(records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records())

    def records(self) -> Tuple[Record, ...]:
        return tuple(dict(record) for record in self._records)

    def get(self, record_id: str) -> Optional[Record]:
        for record in self._records:
            if record[ID_KEY] == record_id:
                return dict(record)
        return None

    def _commit(self, records: Iterable[Record]) -> None:
        self._records = tuple(records)
        self.version += 1

    def replace_all(self, records: Iterable[Mapping[str, str]]) -> None:
        seen = set()
        accepted: List[Record] = []
        for record in records:
            record = dict(record)
            record_id = record.get(ID_KEY)
            if not record_id or record_id in seen:
                record[ID_KEY] = record_id = new_record_id()
            seen.add(record_id)
            accepted.append(record)
        self._commit(accepted)

    def append(self, record: Mapping[str, str]) -> Record:
        """Add a manually entered record under a freshly generated id."""

        stored = dict(record)
        stored[ID_KEY] = new_record_id()
        self._commit(self._records + (stored,))
        return dict(stored)

    def remove(self, record_id: str) -> bool:
        remaining = [record for record in self._records if record[ID_KEY] != record_id]
        if len(remaining) == len(self._records):
            return False
        self._commit(remaining)
        return True

    def clear(self) -> None:
        self._commit(())

    def bulk_import(self, text: str) -> int:
        """Replace the table with the rows in ``text``; see :func:`parse_bulk_text`.

        Input without a data row leaves the table untouched and returns ``0``.
        """

        records = parse_bulk_text(text)
        if records is None:
            logger.debug("Bulk import ignored: no data rows")
            return 0
        self._commit(records)
        return len(records)
