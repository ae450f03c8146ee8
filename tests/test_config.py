from __future__ import annotations

import unittest

from engine.config import MIN_FIXED_CHAR_WIDTH, EngineConfig, LayoutTextOptions, PageRange


class TestLayoutTextOptions(unittest.TestCase):
    def test_defaults(self) -> None:
        options = LayoutTextOptions()
        self.assertEqual(options.page_left, 0.0)
        self.assertEqual(options.fixed_char_width, 6.0)
        self.assertFalse(options.dump_state)
        self.assertTrue(options.validate())

    def test_char_width_must_be_positive(self) -> None:
        self.assertFalse(LayoutTextOptions(fixed_char_width=0).validate())
        self.assertFalse(LayoutTextOptions(fixed_char_width=-2).validate())

    def test_page_left_must_be_finite(self) -> None:
        self.assertFalse(LayoutTextOptions(page_left=float("nan")).validate())
        self.assertFalse(LayoutTextOptions(page_left=float("-inf")).validate())
        self.assertTrue(LayoutTextOptions(page_left=-36).validate())

    def test_char_width_has_a_lower_bound(self) -> None:
        self.assertFalse(LayoutTextOptions(fixed_char_width=1e-9).validate())
        self.assertFalse(LayoutTextOptions(fixed_char_width=MIN_FIXED_CHAR_WIDTH / 2).validate())
        self.assertTrue(LayoutTextOptions(fixed_char_width=MIN_FIXED_CHAR_WIDTH).validate())

    def test_char_width_must_be_finite(self) -> None:
        self.assertFalse(LayoutTextOptions(fixed_char_width=float("nan")).validate())
        self.assertFalse(LayoutTextOptions(fixed_char_width=float("inf")).validate())

    def test_negative_timeout_is_invalid(self) -> None:
        self.assertFalse(LayoutTextOptions(timeout_seconds=-1).validate())

    def test_from_dict_ignores_unknown_keys(self) -> None:
        with self.assertLogs("engine.config", level="WARNING") as captured:
            options = LayoutTextOptions.from_dict({'page_left': 36, 'colour': 'blue'})
        self.assertEqual(options.page_left, 36)
        self.assertTrue(any("colour" in line for line in captured.output))

    def test_dict_round_trip(self) -> None:
        options = LayoutTextOptions(page_left=10, fixed_char_width=4.5, dump_state=True)
        self.assertEqual(LayoutTextOptions.from_dict(options.to_dict()), options)


class TestEngineConfig(unittest.TestCase):
    def test_default_is_valid(self) -> None:
        self.assertTrue(EngineConfig.default().validate())

    def test_limits(self) -> None:
        self.assertFalse(EngineConfig(timeout_seconds=5).validate())
        self.assertFalse(EngineConfig(max_file_size_mb=0).validate())

    def test_nested_layout_options_are_checked(self) -> None:
        self.assertFalse(EngineConfig(layout_text_options={'fixed_char_width': 0}).validate())
        self.assertFalse(EngineConfig(layout_text_options={'page_left': float("nan")}).validate())
        self.assertTrue(EngineConfig(layout_text_options={'fixed_char_width': 8}).validate())

    def test_from_dict(self) -> None:
        config = EngineConfig.from_dict({'max_file_size_mb': 10, 'unknown': True})
        self.assertEqual(config.max_file_size_mb, 10)
        self.assertEqual(config.to_dict()['max_file_size_mb'], 10)


class TestPageRange(unittest.TestCase):
    def test_open_ended(self) -> None:
        self.assertEqual(PageRange(start=5).to_page_numbers(7), [5, 6, 7])
        self.assertEqual(PageRange.all_pages().to_page_numbers(3), [1, 2, 3])

    def test_clamped_to_document(self) -> None:
        self.assertEqual(PageRange(start=2, end=10).to_page_numbers(4), [2, 3, 4])
        self.assertEqual(PageRange(start=9).to_page_numbers(4), [4])
        self.assertEqual(PageRange(start=1).to_page_numbers(0), [])

    def test_single_page(self) -> None:
        self.assertEqual(PageRange.single_page(3).to_page_numbers(5), [3])

    def test_invalid_ranges(self) -> None:
        with self.assertRaises(ValueError):
            PageRange(start=0)
        with self.assertRaises(ValueError):
            PageRange(start=3, end=2)


if __name__ == "__main__":
    unittest.main()
