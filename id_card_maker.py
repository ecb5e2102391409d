"""Design event ID cards, bind them to attendee data and export a print-ready PDF."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from attendees import SAMPLE_ATTENDEES, AttendeeTable, load_records_from_file
from card_geometry import CardSpec, InvalidCardGeometryError
from document_merge import (
    EmptyAttendeeListError,
    MergedDocument,
    check_export_preconditions,
    merge_document,
)
from field_model import BACK, FRONT, SIDES, Field, FieldLayout, default_fields
from pdf_renderer import DEFAULT_OUTPUT_NAME, UnsupportedImageError, load_background_image, render_pdf
from preview import save_preview
from template_store import TemplateFormatError, load_template, save_template

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_ROOT = Path(".")


class IdCardProject:
    """Everything one card design needs: size, fields, attendees and background images."""

    def __init__(
        self,
        card: Optional[CardSpec] = None,
        fields: Optional[Iterable[Field]] = None,
        attendees: Optional[Iterable[Mapping[str, str]]] = None,
    ) -> None:
        self.card = card if card is not None else CardSpec()
        self.layout = FieldLayout(default_fields() if fields is None else fields)
        self.attendees = AttendeeTable(SAMPLE_ATTENDEES if attendees is None else attendees)
        self.backgrounds: Dict[str, object] = {side: None for side in SIDES}
        self.active_side = FRONT

    def resize(self, width: object = None, height: object = None, resolution: object = None) -> CardSpec:
        self.card = self.card.resized(width=width, height=height, resolution=resolution)
        return self.card

    def set_background(self, side: str, source: object) -> None:
        if side not in SIDES:
            raise ValueError(f"Unknown side {side!r}")
        self.backgrounds[side] = None if source is None else load_background_image(source)

    def add_field(self) -> Field:
        return self.layout.add_field(self.active_side, self.card)

    def merge(self) -> MergedDocument:
        return merge_document(
            self.card,
            self.layout.fields,
            self.attendees.records(),
            front_image=self.backgrounds[FRONT],
            back_image=self.backgrounds[BACK],
        )

    def export_pdf(
        self,
        output_root: Path = DEFAULT_OUTPUT_ROOT,
        name: str = DEFAULT_OUTPUT_NAME,
    ) -> Tuple[Path, MergedDocument]:
        """Validate, merge and write the PDF. Raises on an empty table or a zero-area card."""

        check_export_preconditions(self.card, self.attendees.records())
        document = self.merge()
        output_root = Path(output_root)
        output_root.mkdir(parents=True, exist_ok=True)
        path = output_root / name
        render_pdf(document, path)
        return path, document

    def save_template(self, path: Path) -> Path:
        return save_template(path, self.card, list(self.layout.fields))

    @classmethod
    def from_template(cls, path: Path, attendees: Optional[Iterable[Mapping[str, str]]] = None) -> "IdCardProject":
        card, fields = load_template(path)
        return cls(card=card, fields=fields, attendees=attendees)


def generate_id_cards(
    records: Optional[Iterable[Mapping[str, str]]] = None,
    *,
    template_path: Optional[Path] = None,
    front_image: Optional[Path] = None,
    back_image: Optional[Path] = None,
    width: object = None,
    height: object = None,
    resolution: object = None,
    output_root: Path = DEFAULT_OUTPUT_ROOT,
    output_name: str = DEFAULT_OUTPUT_NAME,
    preview_dir: Optional[Path] = None,
    save_template_path: Optional[Path] = None,
) -> int:
    """Build a project from the given inputs, export it and return the page count."""

    if template_path is not None:
        project = IdCardProject.from_template(template_path, attendees=records)
    else:
        project = IdCardProject(attendees=records)
    project.resize(width=width, height=height, resolution=resolution)
    if front_image is not None:
        project.set_background(FRONT, front_image)
    if back_image is not None:
        project.set_background(BACK, back_image)

    path, document = project.export_pdf(output_root, output_name)
    if preview_dir is not None:
        save_preview(path.read_bytes(), project.card, preview_dir, stem=Path(output_name).stem)
    if save_template_path is not None:
        project.save_template(save_template_path)
    logger.info("Wrote %s", path)
    return document.page_count()


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate event ID cards from attendee data.")
    parser.add_argument(
        "records",
        type=Path,
        nargs="?",
        help="CSV or Excel sheet of attendees (defaults to the built-in sample attendees)",
    )
    parser.add_argument("--template", type=Path, help="JSON card template with card size and fields")
    parser.add_argument("--front", type=Path, help="JPEG background for the front of the card")
    parser.add_argument("--back", type=Path, help="JPEG background for the back of the card")
    parser.add_argument("--width", help="Card width in cm")
    parser.add_argument("--height", help="Card height in cm")
    parser.add_argument("--resolution", help="Display resolution in dpi, used for previews")
    parser.add_argument(
        "--output-root",
        type=Path,
        default=DEFAULT_OUTPUT_ROOT,
        help="Directory where the PDF will be written",
    )
    parser.add_argument("--output", default=DEFAULT_OUTPUT_NAME, help="File name of the generated PDF")
    parser.add_argument("--preview-dir", type=Path, help="Also write PNG previews of every page here")
    parser.add_argument("--save-template", type=Path, help="Write the effective template to this JSON file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log fallbacks and progress")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    records: Optional[List[Dict[str, str]]] = None
    try:
        if args.records is not None:
            records = load_records_from_file(args.records)
        count = generate_id_cards(
            records,
            template_path=args.template,
            front_image=args.front,
            back_image=args.back,
            width=args.width,
            height=args.height,
            resolution=args.resolution,
            output_root=args.output_root,
            output_name=args.output,
            preview_dir=args.preview_dir,
            save_template_path=args.save_template,
        )
    except (
        FileNotFoundError,
        pd.errors.EmptyDataError,
        EmptyAttendeeListError,
        InvalidCardGeometryError,
        UnsupportedImageError,
        TemplateFormatError,
    ) as exc:
        logger.error("%s", exc)
        return 1

    print(f"Generated {count} page(s)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
