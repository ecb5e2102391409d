"""Merge the card template with attendee records into print-ready page descriptors.

The merge never fails on template or record content: a field whose key is
missing from a record shows the field's own name, a side without a background
image gets a white fill, and the back page is left out entirely when the
template has nothing to put on it. Coordinates are millimetres on the card,
passed through exactly as designed; converting them for a particular output
format is the renderer's job.
"""
from __future__ import annotations

import logging
from typing import Iterable, Mapping, NamedTuple, Optional, Sequence, Tuple

from card_geometry import CardSpec, validate_card
from field_model import BACK, FRONT, Field

logger = logging.getLogger(__name__)


class EmptyAttendeeListError(ValueError):
    """Raised when an export is requested without any attendee records."""


class BlankFill(NamedTuple):
    color: str = "#FFFFFF"


BLANK_FILL = BlankFill()


class TextRun(NamedTuple):
    text: str
    x_mm: float
    y_mm: float
    font_size: int
    color: str
    font_family: str
    align: str


class PageDescriptor(NamedTuple):
    side: str
    background: object
    text_runs: Tuple[TextRun, ...]
    record_id: Optional[str] = None


class MergedDocument(NamedTuple):
    width_mm: float
    height_mm: float
    orientation: str
    pages: Tuple[PageDescriptor, ...]

    def page_count(self) -> int:
        return len(self.pages)


def resolve_field_text(field: Field, record: Mapping[str, object]) -> str:
    value = record.get(field.name)
    if value is None or str(value) == "":
        return field.name
    return str(value)


def has_back_content(fields: Iterable[Field], back_image: object = None) -> bool:
    if back_image is not None:
        return True
    return any(field.side == BACK for field in fields)


def _build_runs(fields: Sequence[Field], record: Mapping[str, object]) -> Tuple[TextRun, ...]:
    return tuple(
        TextRun(
            text=resolve_field_text(field, record),
            x_mm=field.x,
            y_mm=field.y,
            font_size=field.font_size,
            color=field.color,
            font_family=field.font_family,
            align=field.align,
        )
        for field in fields
    )


def merge_document(
    card: CardSpec,
    fields: Iterable[Field],
    people: Iterable[Mapping[str, object]],
    front_image: object = None,
    back_image: object = None,
) -> MergedDocument:
    """Build one front page per record, plus a back page when the template has back content.

    ``fields`` keep their definition order within each page, so later fields
    paint over earlier ones. Whether a back page is emitted depends only on
    the template, never on the record, so every record gets the same number
    of pages.
    """

    fields = tuple(fields)
    people = tuple(dict(person) for person in people)

    front_fields = tuple(field for field in fields if field.side == FRONT)
    back_fields = tuple(field for field in fields if field.side == BACK)
    emit_back = has_back_content(fields, back_image)
    front_background = front_image if front_image is not None else BLANK_FILL
    back_background = back_image if back_image is not None else BLANK_FILL

    pages = []
    for person in people:
        record_id = person.get("id")
        pages.append(
            PageDescriptor(FRONT, front_background, _build_runs(front_fields, person), record_id)
        )
        if emit_back:
            pages.append(
                PageDescriptor(BACK, back_background, _build_runs(back_fields, person), record_id)
            )

    logger.info(
        "Merged %d record(s) into %d page(s)%s",
        len(people),
        len(pages),
        "" if emit_back else " (front only)",
    )
    return MergedDocument(card.width_mm(), card.height_mm(), card.orientation(), tuple(pages))


def check_export_preconditions(card: CardSpec, people: Sequence[Mapping[str, object]]) -> None:
    validate_card(card)
    if not people:
        raise EmptyAttendeeListError("Add at least one attendee before exporting")
