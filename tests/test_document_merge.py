import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from card_geometry import CardSpec, InvalidCardGeometryError
from document_merge import (
    BLANK_FILL,
    EmptyAttendeeListError,
    check_export_preconditions,
    has_back_content,
    merge_document,
    resolve_field_text,
)
from field_model import BACK, FRONT, Field

PEOPLE = [
    {"id": "1", "Full Name": "Ada Lovelace", "Role": "Speaker"},
    {"id": "2", "Full Name": "Linus Torvalds"},
    {"id": "3", "Full Name": "Grace Hopper", "Role": ""},
]

FRONT_FIELDS = [
    Field("f1", "Full Name", 70, 40, font_size=24, align="center"),
    Field("f2", "Role", 70, 55, font_size=16, color="#2563EB", align="center"),
]


class ResolveTextTests(unittest.TestCase):
    def test_value_from_record(self):
        field = Field("f", "Role", 0, 0)
        self.assertEqual(resolve_field_text(field, {"Role": "Speaker"}), "Speaker")

    def test_missing_key_falls_back_to_field_name(self):
        field = Field("f", "Role", 0, 0)
        self.assertEqual(resolve_field_text(field, {"Full Name": "Ada"}), "Role")

    def test_empty_value_falls_back_to_field_name(self):
        field = Field("f", "Role", 0, 0)
        self.assertEqual(resolve_field_text(field, {"Role": ""}), "Role")


class PageCountTests(unittest.TestCase):
    def test_front_only_when_no_back_content(self):
        document = merge_document(CardSpec(), FRONT_FIELDS, PEOPLE)
        self.assertEqual(document.page_count(), len(PEOPLE))
        self.assertTrue(all(page.side == FRONT for page in document.pages))

    def test_back_field_adds_back_page_for_everyone(self):
        fields = FRONT_FIELDS + [Field("b1", "Role", 10, 10, side=BACK)]
        document = merge_document(CardSpec(), fields, PEOPLE)
        self.assertEqual(document.page_count(), 2 * len(PEOPLE))
        self.assertEqual([page.side for page in document.pages], [FRONT, BACK] * len(PEOPLE))
        self.assertEqual(
            [page.record_id for page in document.pages],
            ["1", "1", "2", "2", "3", "3"],
        )

    def test_back_image_alone_adds_back_page(self):
        image = object()
        document = merge_document(CardSpec(), FRONT_FIELDS, PEOPLE, back_image=image)
        self.assertEqual(document.page_count(), 2 * len(PEOPLE))
        back_pages = [page for page in document.pages if page.side == BACK]
        self.assertTrue(all(page.background is image for page in back_pages))
        self.assertTrue(all(page.text_runs == () for page in back_pages))

    def test_has_back_content(self):
        self.assertFalse(has_back_content(FRONT_FIELDS))
        self.assertTrue(has_back_content(FRONT_FIELDS, back_image=b"jpeg"))
        self.assertTrue(has_back_content([Field("b", "X", 0, 0, side=BACK)]))

    def test_no_people_no_pages(self):
        self.assertEqual(merge_document(CardSpec(), FRONT_FIELDS, []).page_count(), 0)


class PageContentTests(unittest.TestCase):
    def test_missing_background_gets_white_fill(self):
        document = merge_document(CardSpec(), FRONT_FIELDS, PEOPLE[:1])
        self.assertIs(document.pages[0].background, BLANK_FILL)
        self.assertEqual(BLANK_FILL.color, "#FFFFFF")

    def test_front_image_used(self):
        image = object()
        document = merge_document(CardSpec(), FRONT_FIELDS, PEOPLE[:1], front_image=image)
        self.assertIs(document.pages[0].background, image)

    def test_text_resolution_and_fallback(self):
        document = merge_document(CardSpec(), FRONT_FIELDS, PEOPLE)
        texts = [[run.text for run in page.text_runs] for page in document.pages]
        self.assertEqual(
            texts,
            [
                ["Ada Lovelace", "Speaker"],
                ["Linus Torvalds", "Role"],
                ["Grace Hopper", "Role"],
            ],
        )

    def test_coordinates_and_style_pass_through(self):
        document = merge_document(CardSpec(14, 9.5, 300), FRONT_FIELDS, PEOPLE[:1])
        run = document.pages[0].text_runs[1]
        self.assertEqual((run.x_mm, run.y_mm), (70, 55))
        self.assertEqual(run.font_size, 16)
        self.assertEqual(run.color, "#2563EB")
        self.assertEqual(run.font_family, "helvetica")
        self.assertEqual(run.align, "center")

    def test_position_independent_of_resolution(self):
        field = [Field("f", "Full Name", 70, 40)]
        low = merge_document(CardSpec(14, 9.5, 72), field, PEOPLE[:1])
        high = merge_document(CardSpec(14, 9.5, 600), field, PEOPLE[:1])
        self.assertEqual(low.pages[0].text_runs[0].x_mm, 70)
        self.assertEqual(low.pages[0].text_runs[0].y_mm, 40)
        self.assertEqual(low.pages, high.pages)

    def test_runs_keep_definition_order(self):
        fields = [
            Field("z", "Role", 5, 5),
            Field("a", "Full Name", 5, 5),
            Field("m", "Role", 5, 5),
        ]
        document = merge_document(CardSpec(), fields, PEOPLE[:1])
        self.assertEqual(
            [run.text for run in document.pages[0].text_runs],
            ["Speaker", "Ada Lovelace", "Speaker"],
        )

    def test_off_card_fields_are_kept(self):
        document = merge_document(CardSpec(), [Field("f", "Role", -20, 500)], PEOPLE[:1])
        run = document.pages[0].text_runs[0]
        self.assertEqual((run.x_mm, run.y_mm), (-20, 500))

    def test_page_size_and_orientation(self):
        landscape = merge_document(CardSpec(14, 9.5), FRONT_FIELDS, PEOPLE[:1])
        self.assertEqual((landscape.width_mm, landscape.height_mm), (140, 95))
        self.assertEqual(landscape.orientation, "landscape")
        portrait = merge_document(CardSpec(5.4, 8.6), FRONT_FIELDS, PEOPLE[:1])
        self.assertEqual(portrait.orientation, "portrait")

    def test_inputs_are_snapshotted(self):
        people = [dict(PEOPLE[0])]
        fields = list(FRONT_FIELDS)
        document = merge_document(CardSpec(), fields, people)
        people[0]["Full Name"] = "Changed"
        fields.clear()
        self.assertEqual(document.pages[0].text_runs[0].text, "Ada Lovelace")


class PreconditionTests(unittest.TestCase):
    def test_empty_people_rejected(self):
        with self.assertRaises(EmptyAttendeeListError):
            check_export_preconditions(CardSpec(), [])

    def test_zero_area_card_rejected(self):
        with self.assertRaises(InvalidCardGeometryError):
            check_export_preconditions(CardSpec(0, 0), PEOPLE)

    def test_valid_inputs_pass(self):
        check_export_preconditions(CardSpec(), PEOPLE)


if __name__ == "__main__":
    unittest.main()
