# tests/test_content_scan_strategy.py

"""Tests for the text-scanning fallback strategy."""

import unittest
from decimal import Decimal
from pathlib import Path

from product_detector.document.accessor import DocumentAccessor
from product_detector.strategies.content_scan_strategy import (
    PRICE_PATTERN,
    ContentScanStrategy,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"

URL = "https://atolye.example/kupa"


class TestPricePattern(unittest.TestCase):
    """Verify currency-amount recognition."""

    def test_symbol_and_code_orders(self) -> None:
        """Both symbol-first and amount-first forms match."""
        for text, expected in (
            ("only $19.99 today", "$19.99"),
            ("Şimdi 39,90 TL", "39,90 TL"),
            ("€ 1.234,56", "€ 1.234,56"),
            ("price 1234.56 USD", "1234.56 USD"),
        ):
            with self.subTest(text=text):
                match = PRICE_PATTERN.search(text)
                assert match is not None
                self.assertEqual(match.group(0), expected)

    def test_plain_numbers_ignored(self) -> None:
        """Numbers without a currency marker are not prices."""
        self.assertIsNone(PRICE_PATTERN.search("Order 3 for 20 days"))


class TestContentScanStrategy(unittest.TestCase):
    """Verify proximity-based price choice and image choice."""

    def setUp(self) -> None:
        html = (FIXTURES_DIR / "content_scan.html").read_text(encoding="utf-8")
        self.doc = DocumentAccessor(html, URL)
        self.strategy = ContentScanStrategy()

    def test_finds_every_price(self) -> None:
        """All currency amounts in visible text are candidates."""
        amounts = [c.amount for c in ContentScanStrategy.find_prices(self.doc)]
        self.assertEqual(
            amounts, [Decimal("39.90"), Decimal("45.00"), Decimal("500")]
        )

    def test_price_nearest_title(self) -> None:
        """The price right under the heading wins over the footer."""
        record = self.strategy.extract(self.doc)
        self.assertTrue(record.success)
        self.assertEqual(record.extraction_method, "content_scan")
        self.assertEqual(record.title, "El Yapımı Kupa")
        self.assertEqual(record.price, Decimal("39.90"))
        self.assertEqual(record.currency, "TRY")

    def test_original_price_from_sibling(self) -> None:
        """A higher amount in the same container is the original price."""
        record = self.strategy.extract(self.doc)
        self.assertEqual(record.original_price, Decimal("45.00"))

    def test_largest_visible_image(self) -> None:
        """The large visible product image is chosen."""
        record = self.strategy.extract(self.doc)
        self.assertEqual(record.image_url, "https://atolye.example/img/mug.jpg")

    def test_no_prices(self) -> None:
        """Without prices the record is unsuccessful."""
        record = self.strategy.extract(
            DocumentAccessor("<h1>Kupa</h1><p>Yakında</p>", URL)
        )
        self.assertEqual(record.title, "Kupa")
        self.assertIsNone(record.price)
        self.assertFalse(record.success)

    def test_zero_amounts_skipped(self) -> None:
        """A zero amount is never a candidate."""
        doc = DocumentAccessor("<h1>Gift</h1><p>$0.00 shipping</p>", URL)
        self.assertEqual(ContentScanStrategy.find_prices(doc), [])


if __name__ == "__main__":
    unittest.main()
