"""Named text fields placed on the front or back of the card."""
from __future__ import annotations

import logging
import uuid
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from card_geometry import CardSpec, drag_to_position

logger = logging.getLogger(__name__)

FRONT = "front"
BACK = "back"
SIDES = (FRONT, BACK)

ALIGNMENTS = ("left", "center", "right")

DEFAULT_FIELD_NAME = "New Field"
DEFAULT_FONT_SIZE = 14
DEFAULT_COLOR = "#000000"
DEFAULT_FONT_FAMILY = "helvetica"
DEFAULT_ALIGN = "left"

COLOR_PALETTE = (
    "#000000",
    "#FFFFFF",
    "#1F2937",
    "#DC2626",
    "#2563EB",
    "#059669",
    "#D97706",
)


class Field(NamedTuple):
    id: str
    name: str
    x: float
    y: float
    font_size: int = DEFAULT_FONT_SIZE
    color: str = DEFAULT_COLOR
    font_family: str = DEFAULT_FONT_FAMILY
    align: str = DEFAULT_ALIGN
    side: str = FRONT


def new_field_id() -> str:
    # uuid4 gives 122 random bits; collisions are negligible for any table size.
    return uuid.uuid4().hex


def _check_choice(value: str, choices: Sequence[str], label: str) -> str:
    if value not in choices:
        raise ValueError(f"Unknown {label} {value!r}; expected one of {', '.join(choices)}")
    return value


def default_fields() -> List[Field]:
    return [
        Field("f1", "Full Name", 70, 40, font_size=24, color="#000000", align="center"),
        Field("f2", "Role", 70, 55, font_size=16, color="#2563EB", align="center"),
    ]


class FieldLayout:
    """Ordered field collection plus the editor's selected-field reference.

    Every mutation replaces the internal tuple and bumps :attr:`version`, so a
    tuple handed out by :attr:`fields` is never changed afterwards.
    """

    def __init__(self, fields: Optional[Iterable[Field]] = None) -> None:
        self._fields: Tuple[Field, ...] = tuple(fields or ())
        self.version = 0
        self._selected_id: Optional[str] = None

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self):
        return iter(self._fields)

    @property
    def fields(self) -> Tuple[Field, ...]:
        return self._fields

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    def _commit(self, fields: Iterable[Field]) -> None:
        self._fields = tuple(fields)
        self.version += 1

    def get(self, field_id: str) -> Optional[Field]:
        for field in self._fields:
            if field.id == field_id:
                return field
        return None

    def select(self, field_id: Optional[str]) -> None:
        if field_id is not None and self.get(field_id) is None:
            field_id = None
        self._selected_id = field_id

    def selected_field(self) -> Optional[Field]:
        if self._selected_id is None:
            return None
        return self.get(self._selected_id)

    def add_field(self, side: str, card: CardSpec) -> Field:
        """Append a default-styled field centred on ``card`` and select it."""

        _check_choice(side, SIDES, "side")
        field = Field(
            id=new_field_id(),
            name=DEFAULT_FIELD_NAME,
            x=card.width * 5,
            y=card.height * 5,
            side=side,
        )
        self._commit(self._fields + (field,))
        self._selected_id = field.id
        return field

    def update_field(self, field_id: str, **changes: object) -> Optional[Field]:
        """Apply ``changes`` to one field. An unknown id is ignored.

        Change names must be :class:`Field` attributes, whether or not the id exists.
        """

        changes.pop("id", None)
        unknown = sorted(set(changes) - set(Field._fields))
        if unknown:
            raise ValueError(f"Unknown field attribute(s): {', '.join(unknown)}")
        if "side" in changes:
            _check_choice(changes["side"], SIDES, "side")
        if "align" in changes:
            _check_choice(changes["align"], ALIGNMENTS, "alignment")

        updated: Optional[Field] = None
        fields = []
        for field in self._fields:
            if field.id == field_id:
                field = field._replace(**changes)
                updated = field
            fields.append(field)
        if updated is None:
            logger.debug("Ignoring update for unknown field %s", field_id)
            return None
        self._commit(fields)
        return updated

    def move_field(
        self,
        field_id: str,
        card: CardSpec,
        start: Tuple[float, float],
        delta_px: Tuple[float, float],
        displayed_width_px: float,
    ) -> Optional[Field]:
        x, y = drag_to_position(card, start, delta_px, displayed_width_px)
        return self.update_field(field_id, x=x, y=y)

    def remove_field(self, field_id: str) -> bool:
        remaining = [field for field in self._fields if field.id != field_id]
        removed = len(remaining) != len(self._fields)
        if removed:
            self._commit(remaining)
        self._check_selection_integrity()
        return removed

    def _check_selection_integrity(self) -> None:
        # The selection must always name an existing field.
        if self._selected_id is not None and self.get(self._selected_id) is None:
            logger.debug("Clearing selection of removed field %s", self._selected_id)
            self._selected_id = None

    def fields_for_side(self, side: str) -> Tuple[Field, ...]:
        return tuple(field for field in self._fields if field.side == side)

    def front_fields(self) -> Tuple[Field, ...]:
        return self.fields_for_side(FRONT)

    def back_fields(self) -> Tuple[Field, ...]:
        return self.fields_for_side(BACK)

    def data_keys(self) -> List[str]:
        """Distinct field names in definition order; the attendee attributes the template reads."""

        seen: Dict[str, None] = {}
        for field in self._fields:
            seen.setdefault(field.name, None)
        return list(seen)
