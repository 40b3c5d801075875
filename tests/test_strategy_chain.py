# tests/test_strategy_chain.py

"""Tests for the extractor registry and the strategy cascade."""

import unittest
from decimal import Decimal
from pathlib import Path

from product_detector.document.accessor import DocumentAccessor
from product_detector.models.product import ProductRecord
from product_detector.models.variant_option import VariantOption
from product_detector.strategies.base_strategy import ExtractionStrategy
from product_detector.strategies.common_selector_strategy import (
    CommonSelectorStrategy,
)
from product_detector.strategies.mango_strategy import MangoStrategy
from product_detector.strategies.registry import ExtractorRegistry
from product_detector.strategies.strategy_chain import PARTIAL, StrategyChain

FIXTURES_DIR = Path(__file__).parent / "fixtures"

NEUTRAL_URL = "https://basics.example/classic-tee"


def _fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


class _BoomStrategy(ExtractionStrategy):
    name = "boom"

    def extract(self, doc: DocumentAccessor) -> ProductRecord:
        raise RuntimeError("selector engine exploded")


class _DuplicateSizesStrategy(ExtractionStrategy):
    name = "dupes"

    def extract(self, doc: DocumentAccessor) -> ProductRecord:
        record = self._new_record(doc)
        record.title = "Tee"
        record.price = Decimal("10")
        record.variants.sizes = [
            VariantOption(text="M"), VariantOption(text="M", selected=True),
        ]
        return record


class TestExtractorRegistry(unittest.TestCase):
    """Verify dynamic strategy loading."""

    def test_default_entries_load(self) -> None:
        """Configured site and platform strategies are instantiated."""
        registry = ExtractorRegistry()
        self.assertEqual(
            [s.name for s in registry.site_strategies()], ["mango"]
        )
        self.assertEqual(
            [s.name for s in registry.platform_strategies()], ["shopify"]
        )

    def test_instances_are_cached(self) -> None:
        """Each strategy is built once per registry."""
        registry = ExtractorRegistry()
        self.assertIs(
            registry.site_strategies()[0], registry.site_strategies()[0]
        )

    def test_broken_entry_skipped(self) -> None:
        """An unimportable entry is logged and skipped."""
        registry = ExtractorRegistry(
            site_extractors=[
                {
                    "id": "ghost",
                    "label": "Ghost",
                    "extractor": "product_detector.strategies.nope.Ghost",
                },
                {
                    "id": "mango",
                    "label": "Mango",
                    "extractor": (
                        "product_detector.strategies.mango_strategy."
                        "MangoStrategy"
                    ),
                },
            ],
            platform_extractors=[],
        )
        with self.assertLogs("product_detector.strategies", level="ERROR"):
            strategies = registry.site_strategies()
        self.assertEqual(len(strategies), 1)
        self.assertIsInstance(strategies[0], MangoStrategy)


class TestStrategyChain(unittest.TestCase):
    """Verify priority, fallbacks and finalisation."""

    def setUp(self) -> None:
        self.chain = StrategyChain()

    def _run(self, html: str, url: str = NEUTRAL_URL) -> ProductRecord:
        return self.chain.run(url, DocumentAccessor(html, url))

    def test_generic_order(self) -> None:
        """Only applicable site strategies precede the generic ones."""
        doc = DocumentAccessor(_fixture("classic_tee.html"), NEUTRAL_URL)
        names = [s.name for s in self.chain.strategies_for(NEUTRAL_URL, doc)]
        self.assertEqual(
            names,
            ["structured_data", "meta_tags", "common_selectors", "content_scan"],
        )

    def test_site_strategy_first(self) -> None:
        """Mango pages are handled by the Mango strategy."""
        url = "https://shop.mango.com/tr/kadin/elbise_1.html"
        record = self._run(_fixture("mango_product.html"), url)
        self.assertEqual(record.extraction_method, "mango")

    def test_platform_strategy_before_structured_data(self) -> None:
        """Shopify pages are handled by the Shopify strategy."""
        record = self._run(_fixture("shopify_product.html"))
        self.assertEqual(record.extraction_method, "shopify")
        self.assertEqual(record.currency, "CAD")

    def test_classic_tee_end_to_end(self) -> None:
        """A bare heading and price fall through to common selectors."""
        record = self._run(_fixture("classic_tee.html"))
        self.assertTrue(record.success)
        self.assertEqual(record.extraction_method, "common_selectors")
        self.assertEqual(record.title, "Classic Tee")
        self.assertEqual(record.price, Decimal("25.00"))
        self.assertEqual(record.currency, "USD")

    def test_structured_data_wins_over_dom(self) -> None:
        """JSON-LD is preferred over DOM selectors."""
        record = self._run(_fixture("jsonld_product.html"))
        self.assertEqual(record.extraction_method, "structured_data")

    def test_partial_result(self) -> None:
        """With no success, the most complete failure is tagged partial."""
        html = (
            '<head><meta property="og:title" content="Mug">'
            '<meta property="og:image" content="/m.jpg"></head>'
        )
        record = self._run(html)
        self.assertFalse(record.success)
        self.assertEqual(record.extraction_method, PARTIAL)
        self.assertEqual(record.title, "Mug")
        self.assertEqual(record.image_url, "https://basics.example/m.jpg")

    def test_empty_page_partial(self) -> None:
        """An empty page still yields a partial product-page record."""
        chain = StrategyChain(
            registry=ExtractorRegistry([], []), generic=[_BoomStrategy()]
        )
        record = chain.run(NEUTRAL_URL, DocumentAccessor("", NEUTRAL_URL))
        self.assertEqual(record.extraction_method, PARTIAL)
        self.assertTrue(record.is_product_page)

    def test_raising_strategy_is_skipped(self) -> None:
        """An exception in one strategy does not stop the cascade."""
        chain = StrategyChain(
            registry=ExtractorRegistry([], []),
            generic=[_BoomStrategy(), CommonSelectorStrategy()],
        )
        with self.assertLogs("product_detector.strategies", level="ERROR"):
            record = chain.run(
                NEUTRAL_URL,
                DocumentAccessor(_fixture("classic_tee.html"), NEUTRAL_URL),
            )
        self.assertTrue(record.success)

    def test_variants_collected_when_strategy_has_none(self) -> None:
        """Generic collection fills empty variant lists."""
        html = _fixture("variants.html").replace(
            "<body>", '<body><h1>Tee</h1><span class="price">$9.00</span>'
        )
        record = self._run(html)
        self.assertEqual([c.text for c in record.variants.colors], ["Red", "Blue"])
        self.assertEqual([s.text for s in record.variants.sizes], ["S", "M"])

    def test_strategy_variants_deduplicated(self) -> None:
        """Variants supplied by a strategy are deduplicated."""
        chain = StrategyChain(
            registry=ExtractorRegistry([], []),
            generic=[_DuplicateSizesStrategy()],
        )
        record = chain.run(NEUTRAL_URL, DocumentAccessor("", NEUTRAL_URL))
        self.assertEqual(len(record.variants.sizes), 1)
        self.assertTrue(record.variants.sizes[0].selected)

    def test_brand_default_by_host(self) -> None:
        """Known retailers get their brand when none was found."""
        url = "https://www.zara.com/tr/en/shirt-p01234.html"
        record = self._run(_fixture("classic_tee.html"), url)
        self.assertEqual(record.brand, "Zara")

    def test_regional_currency_override(self) -> None:
        """US Louis Vuitton pages are always priced in USD."""
        url = "https://us.louisvuitton.com/eng-us/products/bag"
        html = '<h1>Bag</h1><span class="price">2.450,00 €</span>'
        record = self._run(html, url)
        self.assertEqual(record.currency, "USD")
        self.assertEqual(record.brand, "Louis Vuitton")


if __name__ == "__main__":
    unittest.main()
