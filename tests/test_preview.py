import sys
import tempfile
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from card_geometry import CardSpec, display_size_px
from document_merge import merge_document
from field_model import default_fields
from pdf_renderer import render_pdf
from preview import render_preview, save_preview

PEOPLE = [{"id": "1", "Full Name": "Ada"}, {"id": "2", "Full Name": "Linus"}]


class PreviewTests(unittest.TestCase):
    def setUp(self):
        self.card = CardSpec(14, 9.5, 96)
        self.pdf_bytes = render_pdf(merge_document(self.card, default_fields(), PEOPLE))

    def test_preview_size_follows_display_resolution(self):
        images = render_preview(self.pdf_bytes, self.card)
        self.assertEqual(len(images), 2)
        expected_width, expected_height = display_size_px(self.card)
        self.assertLessEqual(abs(images[0].width - expected_width), 1)
        self.assertLessEqual(abs(images[0].height - expected_height), 1)

    def test_higher_resolution_gives_larger_preview(self):
        low = render_preview(self.pdf_bytes, self.card, pages=[0])[0]
        high = render_preview(self.pdf_bytes, self.card._replace(resolution=192), pages=[0])[0]
        self.assertAlmostEqual(high.width, low.width * 2, delta=2)

    def test_save_preview_writes_one_png_per_page(self):
        with tempfile.TemporaryDirectory() as tmp:
            paths = save_preview(self.pdf_bytes, self.card, tmp, stem="cards")
            self.assertEqual([path.name for path in paths], ["cards_01.png", "cards_02.png"])
            self.assertTrue(all(path.exists() for path in paths))


if __name__ == "__main__":
    unittest.main()
