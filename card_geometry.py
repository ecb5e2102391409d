"""Card dimensions and the geometry shared by the editor and the PDF export."""
from __future__ import annotations

import math
import re
from typing import NamedTuple, Optional, Tuple

from units import cm_to_mm, cm_to_pixels

DEFAULT_WIDTH_CM = 14.0
DEFAULT_HEIGHT_CM = 9.5
DEFAULT_RESOLUTION = 96

LANDSCAPE = "landscape"
PORTRAIT = "portrait"

_NUMBER_PREFIX_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class InvalidCardGeometryError(ValueError):
    """Raised when a card cannot be exported because it has no printable area."""


def coerce_dimension(value: object) -> float:
    """Interpret free-text dimension input, falling back to ``0`` when it is not numeric.

    Leading numeric text is honoured (``"12cm"`` reads as ``12``) so that a
    half-typed value in the editor does not reset the card.
    """

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _NUMBER_PREFIX_RE.match(str(value).strip())
        if not match:
            return 0.0
        number = float(match.group(0))
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


class CardSpec(NamedTuple):
    width: float = DEFAULT_WIDTH_CM
    height: float = DEFAULT_HEIGHT_CM
    resolution: int = DEFAULT_RESOLUTION

    def width_mm(self) -> float:
        return cm_to_mm(self.width)

    def height_mm(self) -> float:
        return cm_to_mm(self.height)

    def page_size_mm(self) -> Tuple[float, float]:
        return self.width_mm(), self.height_mm()

    def aspect_ratio(self) -> float:
        if self.height == 0:
            return 0.0
        return self.width / self.height

    def orientation(self) -> str:
        return LANDSCAPE if self.width > self.height else PORTRAIT

    def resized(
        self,
        width: object = None,
        height: object = None,
        resolution: object = None,
    ) -> "CardSpec":
        """Return a new spec with any supplied dimension replaced.

        Values go through :func:`coerce_dimension`, so editor text boxes can
        pass their raw contents straight in.
        """

        changes = {}
        if width is not None:
            changes["width"] = coerce_dimension(width)
        if height is not None:
            changes["height"] = coerce_dimension(height)
        if resolution is not None:
            changes["resolution"] = int(coerce_dimension(resolution))
        return self._replace(**changes)


def validate_card(card: CardSpec) -> None:
    if card.width <= 0 or card.height <= 0:
        raise InvalidCardGeometryError(
            f"Card has no printable area: {card.width}cm x {card.height}cm"
        )
    if card.resolution <= 0:
        raise InvalidCardGeometryError(f"Resolution must be positive, got {card.resolution}")


def display_size_px(card: CardSpec, resolution: Optional[int] = None) -> Tuple[float, float]:
    dpi = resolution if resolution is not None else card.resolution
    return cm_to_pixels(card.width, dpi), cm_to_pixels(card.height, dpi)


def display_fraction(card: CardSpec, x_mm: float, y_mm: float) -> Tuple[float, float]:
    """Position of a field as a fraction of the displayed card's width and height."""

    width_mm = card.width_mm()
    height_mm = card.height_mm()
    left = x_mm / width_mm if width_mm > 0 else 0.0
    top = y_mm / height_mm if height_mm > 0 else 0.0
    return left, top


def pixels_per_mm(card: CardSpec, displayed_width_px: float) -> float:
    width_mm = card.width_mm()
    if width_mm <= 0:
        return 0.0
    return displayed_width_px / width_mm


def _round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


def drag_to_position(
    card: CardSpec,
    start: Tuple[float, float],
    delta_px: Tuple[float, float],
    displayed_width_px: float,
) -> Tuple[float, float]:
    """Map a pointer drag on the displayed card to a new field position in mm.

    ``start`` is the field position when the drag began. The result is rounded
    to the nearest whole millimetre.
    """

    scale = pixels_per_mm(card, displayed_width_px)
    start_x, start_y = start
    if scale <= 0:
        return start_x, start_y
    dx_px, dy_px = delta_px
    return (
        _round_half_up(start_x + dx_px / scale),
        _round_half_up(start_y + dy_px / scale),
    )
