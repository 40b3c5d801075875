# tests/test_detection_engine.py

"""Tests for the single-pass detection engine."""

import unittest
from pathlib import Path
from unittest.mock import MagicMock

from product_detector.document.accessor import DocumentAccessor
from product_detector.services.detection_engine import DetectionEngine

FIXTURES_DIR = Path(__file__).parent / "fixtures"

URL = "https://basics.example/classic-tee"


class TestDetectionEngine(unittest.TestCase):
    """Verify classification gating and fault handling."""

    def test_product_page(self) -> None:
        """Product pages run the chain."""
        html = (FIXTURES_DIR / "classic_tee.html").read_text(encoding="utf-8")
        record = DetectionEngine().run(URL, DocumentAccessor(html, URL))
        self.assertTrue(record.is_product_page)
        self.assertTrue(record.success)

    def test_non_product_page(self) -> None:
        """Non-product pages skip extraction entirely."""
        chain = MagicMock()
        engine = DetectionEngine(chain=chain)
        record = engine.run(
            "https://basics.example/",
            DocumentAccessor("<p>Welcome</p>", "https://basics.example/"),
        )
        self.assertFalse(record.is_product_page)
        self.assertFalse(record.success)
        self.assertIsNone(record.extraction_method)
        chain.run.assert_not_called()

    def test_chain_fault(self) -> None:
        """An exception in the chain becomes a fault record."""
        chain = MagicMock()
        chain.run.side_effect = ValueError("bad markup")
        engine = DetectionEngine(chain=chain)
        with self.assertLogs("product_detector.engine", level="ERROR"):
            record = engine.run(
                "https://basics.example/products/x",
                DocumentAccessor("", "https://basics.example/products/x"),
            )
        self.assertEqual(record.error, "bad markup")
        self.assertEqual(record.extraction_method, "error")
        self.assertTrue(record.is_product_page)

    def test_classifier_fault(self) -> None:
        """A classifier exception is reported with its type name."""
        classifier = MagicMock()
        classifier.is_product_page.side_effect = KeyError()
        engine = DetectionEngine(classifier=classifier, chain=MagicMock())
        with self.assertLogs("product_detector.engine", level="ERROR"):
            record = engine.run(URL, DocumentAccessor("", URL))
        self.assertEqual(record.error, "KeyError")
        self.assertFalse(record.is_product_page)


if __name__ == "__main__":
    unittest.main()
