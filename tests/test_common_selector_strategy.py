# tests/test_common_selector_strategy.py

"""Tests for selector-list based DOM extraction."""

import unittest
from decimal import Decimal
from pathlib import Path

from product_detector.document.accessor import DocumentAccessor
from product_detector.models.product import Availability
from product_detector.strategies.common_selector_strategy import (
    CommonSelectorStrategy,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"

URL = "https://basics.example/classic-tee"


class TestCommonSelectorStrategy(unittest.TestCase):
    """Verify ordered selector extraction."""

    def setUp(self) -> None:
        self.strategy = CommonSelectorStrategy()

    def test_classic_tee(self) -> None:
        """h1 plus .price give a USD record."""
        html = (FIXTURES_DIR / "classic_tee.html").read_text(encoding="utf-8")
        record = self.strategy.extract(DocumentAccessor(html, URL))
        self.assertTrue(record.success)
        self.assertEqual(record.extraction_method, "common_selectors")
        self.assertEqual(record.title, "Classic Tee")
        self.assertEqual(record.price, Decimal("25.00"))
        self.assertEqual(record.currency, "USD")

    def test_microdata_fields(self) -> None:
        """itemprop content attributes win over visible text."""
        html = """
        <div class="product-detail">
          <h1 class="product-title">Canvas Bag</h1>
          <span itemprop="price" content="1249.50">1.249,50 TL</span>
          <del>1.499,00 TL</del>
          <img src="/img/bag.jpg">
          <div class="product-description">Sturdy canvas.</div>
          <span class="sku">CB-1</span>
          <link itemprop="availability" href="https://schema.org/OutOfStock">
          <span class="brand">Canvasco</span>
        </div>
        """
        record = self.strategy.extract(DocumentAccessor(html, URL))
        self.assertEqual(record.title, "Canvas Bag")
        self.assertEqual(record.price, Decimal("1249.50"))
        self.assertEqual(record.original_price, Decimal("1499.00"))
        self.assertEqual(record.image_url, "https://basics.example/img/bag.jpg")
        self.assertEqual(record.description, "Sturdy canvas.")
        self.assertEqual(record.sku, "CB-1")
        self.assertEqual(record.availability, Availability.OUT_OF_STOCK)
        self.assertEqual(record.brand, "Canvasco")

    def test_data_price_attribute(self) -> None:
        """data-price is read before the element text."""
        html = '<h1>Lamp</h1><div class="price" data-price="45.00">Sale!</div>'
        record = self.strategy.extract(DocumentAccessor(html, URL))
        self.assertEqual(record.price, Decimal("45.00"))

    def test_title_from_document_title(self) -> None:
        """Without a heading the <title> prefix is used."""
        html = (
            "<head><title>Linen Shirt - Basics Co.</title></head>"
            '<body><span class="price">€30</span></body>'
        )
        record = self.strategy.extract(DocumentAccessor(html, URL))
        self.assertEqual(record.title, "Linen Shirt")
        self.assertEqual(record.currency, "EUR")

    def test_title_from_document_pipe(self) -> None:
        """The pipe delimiter is tried before the dash."""
        doc = DocumentAccessor(
            "<head><title>Classic Tee | Basics - Shop</title></head>", URL
        )
        self.assertEqual(
            CommonSelectorStrategy.title_from_document(doc), "Classic Tee"
        )

    def test_empty_price_element_skipped(self) -> None:
        """An empty .price does not hide a later .product-price."""
        html = (
            "<h1>Classic Tee</h1>"
            '<span class="price"></span>'
            '<div class="product-price">$25.00</div>'
        )
        record = self.strategy.extract(DocumentAccessor(html, URL))
        self.assertTrue(record.success)
        self.assertEqual(record.price, Decimal("25.00"))
        self.assertEqual(record.currency, "USD")

    def test_price_without_amount_skipped(self) -> None:
        """Label-only matches of a selector give way to later matches."""
        html = (
            "<h1>Classic Tee</h1>"
            '<span class="price">Price</span>'
            '<span class="price">19,99 €</span>'
        )
        record = self.strategy.extract(DocumentAccessor(html, URL))
        self.assertEqual(record.price, Decimal("19.99"))
        self.assertEqual(record.currency, "EUR")

    def test_empty_name_meta_does_not_hide_heading(self) -> None:
        """A textless itemprop=name in the brand block falls through to h1."""
        html = (
            '<div itemprop="brand"><meta itemprop="name" content="Basics">'
            "</div>"
            "<h1>Classic Tee</h1>"
            '<span class="price">$25.00</span>'
        )
        record = self.strategy.extract(DocumentAccessor(html, URL))
        self.assertTrue(record.success)
        self.assertEqual(record.title, "Classic Tee")

    def test_empty_sku_element_skipped(self) -> None:
        """Empty detail fields fall through to the next selector."""
        html = (
            '<h1>Mug</h1><span class="price">$8</span>'
            '<span itemprop="sku"></span><span class="sku">MUG-9</span>'
        )
        record = self.strategy.extract(DocumentAccessor(html, URL))
        self.assertEqual(record.sku, "MUG-9")

    def test_missing_price(self) -> None:
        """A heading without a price is unsuccessful."""
        record = self.strategy.extract(
            DocumentAccessor("<h1>Only a title</h1>", URL)
        )
        self.assertFalse(record.success)
        self.assertIsNone(record.price)


if __name__ == "__main__":
    unittest.main()
