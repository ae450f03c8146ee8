from __future__ import annotations

import unittest

from pdfminer.pdffont import PDFUnicodeNotDefined
from pdfminer.pdfinterp import PDFResourceManager, PDFTextState

from models.pdf_types import ImageRenderInfo, TextRenderInfo
from processors.layout_text import LayoutTextReconstructor
from processors.layout_text_device import LayoutTextDevice


class _FixedWidthFont:
    """Single-byte font where every glyph is half an em wide; cid 0 has no unicode."""

    fontname = "FakeMono"

    def is_multibyte(self) -> bool:
        return False

    def is_vertical(self) -> bool:
        return False

    def decode(self, data: bytes):
        return list(data)

    def to_unichr(self, cid: int) -> str:
        if cid == 0:
            raise PDFUnicodeNotDefined(None, cid)
        return chr(cid)

    def char_width(self, cid: int) -> float:
        return 0.5


class _Recorder:
    def __init__(self) -> None:
        self.texts: list[TextRenderInfo] = []
        self.images: list[ImageRenderInfo] = []

    def render_text(self, render_info: TextRenderInfo) -> None:
        self.texts.append(render_info)

    def render_image(self, render_info=None) -> None:
        self.images.append(render_info)


def _textstate(rise: float = 0.0) -> PDFTextState:
    ts = PDFTextState()
    ts.font = _FixedWidthFont()
    ts.fontsize = 10
    ts.scaling = 100
    ts.rise = rise
    ts.matrix = (1, 0, 0, 1, 72, 700)
    ts.linematrix = (0, 0)
    return ts


class TestLayoutTextDevice(unittest.TestCase):
    def setUp(self) -> None:
        self.listener = _Recorder()
        self.device = LayoutTextDevice(PDFResourceManager(), self.listener)
        self.device.ctm = (1, 0, 0, 1, 0, 0)

    def test_one_run_per_string_operand(self) -> None:
        ts = _textstate()
        self.device.render_string(ts, [b"AB", -1000, b"CD"], None, None)

        self.assertEqual([t.text for t in self.listener.texts], ["AB", "CD"])
        first, second = self.listener.texts
        self.assertEqual(first.baseline.start, (72.0, 700.0))
        self.assertEqual(first.baseline.end, (82.0, 700.0))
        # TJ adjustment of -1000 moves the pen one em (10 units) right
        self.assertEqual(second.baseline.start, (92.0, 700.0))
        self.assertEqual(second.baseline.end, (102.0, 700.0))
        self.assertAlmostEqual(first.single_space_width, 5.0)
        self.assertEqual(first.font_name, "FakeMono")
        self.assertEqual(first.font_size, 10)
        self.assertEqual(ts.linematrix, (30.0, 0))
        self.assertEqual(self.device.text_run_count, 2)

    def test_runs_lay_out_through_reconstructor(self) -> None:
        reconstructor = LayoutTextReconstructor()
        device = LayoutTextDevice(PDFResourceManager(), reconstructor)
        device.ctm = (1, 0, 0, 1, 0, 0)
        device.render_string(_textstate(), [b"AB", -1000, b"CD"], None, None)

        self.assertEqual(reconstructor.get_resultant_text(), " " * 12 + "AB CD")

    def test_rise_is_part_of_the_baseline(self) -> None:
        self.device.render_string(_textstate(rise=2), [b"x"], None, None)

        info = self.listener.texts[0]
        self.assertEqual(info.rise, 2)
        self.assertEqual(info.baseline.start, (72.0, 702.0))

    def test_space_width_follows_the_ctm(self) -> None:
        self.device.ctm = (2, 0, 0, 2, 0, 0)
        self.device.render_string(_textstate(), [b"x"], None, None)

        info = self.listener.texts[0]
        self.assertAlmostEqual(info.single_space_width, 10.0)
        self.assertEqual(info.baseline.start, (144.0, 1400.0))

    def test_undefined_glyph_is_reported_by_cid(self) -> None:
        self.device.render_string(_textstate(), [b"\x00A"], None, None)
        self.assertEqual(self.listener.texts[0].text, "(cid:0)A")

    def test_empty_string_emits_nothing(self) -> None:
        ts = _textstate()
        self.device.render_string(ts, [b""], None, None)
        self.assertEqual(self.listener.texts, [])

    def test_without_font_nothing_is_emitted(self) -> None:
        ts = _textstate()
        ts.font = None
        self.device.render_string(ts, [b"AB"], None, None)
        self.assertEqual(self.listener.texts, [])

    def test_images_are_forwarded(self) -> None:
        self.device.render_image("/Im0", None)

        self.assertEqual(len(self.listener.images), 1)
        self.assertEqual(self.listener.images[0].name, "Im0")
        self.assertEqual(self.listener.images[0].ctm, (1.0, 0.0, 0.0, 1.0, 0.0, 0.0))
        self.assertEqual(self.device.image_count, 1)


if __name__ == "__main__":
    unittest.main()
