"""Render merged card pages to PDF with ReportLab."""
from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Tuple, Union

from PIL import Image, ImageFile, UnidentifiedImageError
from reportlab.lib.colors import HexColor, black
from reportlab.lib.pagesizes import landscape, portrait
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from card_geometry import LANDSCAPE
from document_merge import BlankFill, MergedDocument, PageDescriptor, TextRun

ImageFile.LOAD_TRUNCATED_IMAGES = True

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_NAME = "event-id-cards.pdf"
ACCEPTED_IMAGE_FORMAT = "JPEG"

DEFAULT_FONT = "Helvetica"
_STANDARD_FONTS = (
    "Courier",
    "Courier-Bold",
    "Courier-BoldOblique",
    "Courier-Oblique",
    "Helvetica",
    "Helvetica-Bold",
    "Helvetica-BoldOblique",
    "Helvetica-Oblique",
    "Symbol",
    "Times-Bold",
    "Times-BoldItalic",
    "Times-Italic",
    "Times-Roman",
    "ZapfDingbats",
)
_FONT_ALIASES = {
    "helvetica": "Helvetica",
    "arial": "Helvetica",
    "sans-serif": "Helvetica",
    "times": "Times-Roman",
    "times new roman": "Times-Roman",
    "serif": "Times-Roman",
    "courier": "Courier",
    "monospace": "Courier",
}


class UnsupportedImageError(ValueError):
    """Raised when a background upload is not a readable JPEG image."""


def load_background_image(source: Union[str, Path, bytes, BinaryIO]) -> Image.Image:
    """Decode a background upload. Only JPEG files are accepted."""

    if isinstance(source, bytes):
        source = BytesIO(source)
    try:
        image = Image.open(source)
        image_format = image.format
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise UnsupportedImageError(f"Could not read background image: {exc}") from exc
    if image_format != ACCEPTED_IMAGE_FORMAT:
        raise UnsupportedImageError(
            f"Background images must be JPEG files, got {image_format or 'unknown format'}"
        )
    if image.mode != "RGB":
        image = image.convert("RGB")
    return image


def resolve_font_name(font_family: str) -> str:
    if font_family in pdfmetrics.getRegisteredFontNames():
        return font_family
    key = (font_family or "").strip().lower()
    if key in _FONT_ALIASES:
        return _FONT_ALIASES[key]
    for name in _STANDARD_FONTS:
        if name.lower() == key:
            return name
    logger.debug("Unknown font family %r, using %s", font_family, DEFAULT_FONT)
    return DEFAULT_FONT


def _parse_color(value: str):
    try:
        return HexColor(value)
    except (ValueError, TypeError):
        logger.debug("Invalid colour %r, using black", value)
        return black


def page_size_points(document: MergedDocument) -> Tuple[float, float]:
    size = (document.width_mm * mm, document.height_mm * mm)
    if document.orientation == LANDSCAPE:
        return landscape(size)
    return portrait(size)


def _as_image_reader(background: object) -> ImageReader:
    if isinstance(background, ImageReader):
        return background
    if isinstance(background, bytes):
        background = BytesIO(background)
    elif isinstance(background, Path):
        background = str(background)
    return ImageReader(background)


def _draw_background(pdf: canvas.Canvas, background: object, width: float, height: float) -> None:
    if isinstance(background, BlankFill):
        pdf.setFillColor(_parse_color(background.color))
        pdf.rect(0, 0, width, height, stroke=0, fill=1)
        return
    pdf.drawImage(_as_image_reader(background), 0, 0, width=width, height=height)


def _draw_text_run(pdf: canvas.Canvas, run: TextRun, page_height: float) -> None:
    # Runs are positioned from the card's top-left corner; PDF space starts bottom-left.
    x = run.x_mm * mm
    y = page_height - run.y_mm * mm
    pdf.setFont(resolve_font_name(run.font_family), run.font_size)
    pdf.setFillColor(_parse_color(run.color))
    if run.align == "center":
        pdf.drawCentredString(x, y, run.text)
    elif run.align == "right":
        pdf.drawRightString(x, y, run.text)
    else:
        pdf.drawString(x, y, run.text)


def _draw_page(pdf: canvas.Canvas, page: PageDescriptor, size: Tuple[float, float]) -> None:
    width, height = size
    pdf.setPageSize(size)
    _draw_background(pdf, page.background, width, height)
    for run in page.text_runs:
        _draw_text_run(pdf, run, height)
    pdf.showPage()


def render_pdf(document: MergedDocument, target: Union[str, Path, BinaryIO, None] = None) -> bytes:
    """Draw every page of ``document``; returns the PDF bytes.

    ``invariant`` output keeps repeated exports of the same input byte-identical.
    """

    buffer = BytesIO()
    size = page_size_points(document)
    pdf = canvas.Canvas(buffer, pagesize=size, invariant=1)
    pdf.setTitle("Event ID cards")
    for page in document.pages:
        _draw_page(pdf, page, size)
    pdf.save()
    data = buffer.getvalue()

    if target is not None:
        if hasattr(target, "write"):
            target.write(data)
        else:
            Path(target).write_bytes(data)
    logger.info(
        "Rendered %d page(s) at %.1fmm x %.1fmm",
        document.page_count(),
        document.width_mm,
        document.height_mm,
    )
    return data


def write_pdf(document: MergedDocument, output_dir: Union[str, Path] = ".", name: str = DEFAULT_OUTPUT_NAME) -> Path:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / name
    render_pdf(document, path)
    return path
