"""Conversions between centimetres, millimetres and device pixels."""
from __future__ import annotations

CM_PER_INCH = 2.54
MM_PER_INCH = 25.4
MM_PER_CM = 10.0

DEFAULT_DPI = 96


def cm_to_pixels(cm: float, dpi: float = DEFAULT_DPI) -> float:
    return (cm / CM_PER_INCH) * dpi


def mm_to_pixels(mm: float, dpi: float = DEFAULT_DPI) -> float:
    return (mm / MM_PER_INCH) * dpi


def pixels_to_mm(px: float, dpi: float = DEFAULT_DPI) -> float:
    """Inverse of :func:`mm_to_pixels`. No rounding is applied."""

    return (px * MM_PER_INCH) / dpi


def cm_to_mm(cm: float) -> float:
    return cm * MM_PER_CM

