from __future__ import annotations

import itertools
import json
import os
import tempfile
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from main import app

from sample_pdfs import FIRST_PAGE_TEXT, SECOND_PAGE_TEXT, write_pdf


class TestLayoutTextAPI(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.client = TestClient(app)
        with tempfile.TemporaryDirectory() as tmp:
            path = write_pdf(os.path.join(tmp, "sample.pdf"))
            with open(path, 'rb') as f:
                cls.pdf_bytes = f.read()

    def _post(self, data=None, filename="sample.pdf", content=None):
        return self.client.post(
            "/extract-layout-text",
            files={"file": (filename, content if content is not None else self.pdf_bytes, "application/pdf")},
            data=data or {},
        )

    def test_root(self) -> None:
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "PDF Layout Text API")

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "healthy")
        self.assertIn("pdfminer", body["dependencies"])

    def test_extract_defaults(self) -> None:
        response = self._post()
        self.assertEqual(response.status_code, 200)

        body = response.json()
        self.assertEqual(body["pageLeft"], 0.0)
        self.assertEqual(body["fixedCharWidth"], 6.0)
        self.assertEqual([p["text"] for p in body["pages"]], [FIRST_PAGE_TEXT, SECOND_PAGE_TEXT])
        self.assertEqual(body["pages"][0]["chunkCount"], 5)

    def test_extract_single_page_with_regions(self) -> None:
        regions = [{"x": 140, "y": 710, "width": 160, "height": 20}]
        response = self._post(data={
            "start_page": "1",
            "end_page": "1",
            "regions": json.dumps(regions),
        })
        self.assertEqual(response.status_code, 200)

        pages = response.json()["pages"]
        self.assertEqual(len(pages), 1)
        self.assertEqual(pages[0]["regions"], [" " * 25 + "World"])

    def test_page_left_shifts_columns(self) -> None:
        response = self._post(data={"page_left": "72", "start_page": "2"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["pages"][0]["text"], "Page two")

    def test_rejects_non_pdf_filename(self) -> None:
        response = self._post(filename="notes.txt")
        self.assertEqual(response.status_code, 400)

    def test_rejects_content_without_signature(self) -> None:
        response = self._post(content=b"not a pdf at all")
        self.assertEqual(response.status_code, 400)

    def test_rejects_malformed_regions(self) -> None:
        response = self._post(data={"regions": "{not json"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid regions", response.json()["detail"])

    def test_rejects_region_with_negative_size(self) -> None:
        response = self._post(data={"regions": json.dumps([{"x": 0, "y": 0, "width": -5, "height": 5}])})
        self.assertEqual(response.status_code, 400)

    def test_rejects_non_positive_char_width(self) -> None:
        response = self._post(data={"fixed_char_width": "0"})
        self.assertEqual(response.status_code, 422)

    def test_rejects_char_width_below_minimum(self) -> None:
        response = self._post(data={"fixed_char_width": "1e-9"})
        self.assertEqual(response.status_code, 422)

    def test_rejects_non_finite_page_left(self) -> None:
        response = self._post(data={"page_left": "nan"})
        self.assertEqual(response.status_code, 422)

    @patch("extractors.text_extractor.time")
    def test_exhausted_budget_maps_to_timeout(self, fake_time) -> None:
        fake_time.monotonic.side_effect = itertools.count(0, 100)

        response = self.client.post(
            "/extract-layout-text?processing_timeout=30",
            files={"file": ("sample.pdf", self.pdf_bytes, "application/pdf")},
        )
        self.assertEqual(response.status_code, 408)


if __name__ == "__main__":
    unittest.main()
