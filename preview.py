"""Rasterise exported card PDFs for on-screen preview."""
from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Union

import fitz  # PyMuPDF
from PIL import Image

from card_geometry import CardSpec

logger = logging.getLogger(__name__)


def rasterize_pages(pdf_bytes: bytes, dpi: int, pages: Optional[List[int]] = None) -> List[Image.Image]:
    """Convert pages of a rendered PDF to Pillow images at ``dpi``."""

    images = []
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        indices = range(doc.page_count) if pages is None else pages
        for index in indices:
            pix = doc[index].get_pixmap(dpi=dpi)
            images.append(Image.open(BytesIO(pix.tobytes("png"))))
    finally:
        doc.close()
    return images


def render_preview(pdf_bytes: bytes, card: CardSpec, pages: Optional[List[int]] = None) -> List[Image.Image]:
    # Display resolution only; the PDF itself is defined in millimetres.
    return rasterize_pages(pdf_bytes, card.resolution, pages)


def save_preview(
    pdf_bytes: bytes,
    card: CardSpec,
    output_dir: Union[str, Path],
    stem: str = "card",
) -> List[Path]:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for number, image in enumerate(render_preview(pdf_bytes, card), start=1):
        path = output_dir / f"{stem}_{number:02}.png"
        image.save(path)
        paths.append(path)
    logger.info("Wrote %d preview image(s) to %s", len(paths), output_dir)
    return paths
