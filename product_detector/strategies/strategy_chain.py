# product_detector/strategies/strategy_chain.py

"""Fixed-priority cascade of extraction strategies."""

import logging

from product_detector.config.settings import Settings
from product_detector.document.accessor import DocumentAccessor
from product_detector.models.product import ProductRecord
from product_detector.strategies.base_strategy import ExtractionStrategy
from product_detector.strategies.common_selector_strategy import (
    CommonSelectorStrategy,
)
from product_detector.strategies.content_scan_strategy import (
    ContentScanStrategy,
)
from product_detector.strategies.meta_tag_strategy import MetaTagStrategy
from product_detector.strategies.registry import ExtractorRegistry
from product_detector.strategies.structured_data_strategy import (
    StructuredDataStrategy,
)
from product_detector.variants.collector import VariantCollector
from product_detector.variants.deduplicator import VariantDeduplicator

logger = logging.getLogger("product_detector.strategies")

PARTIAL = "partial"


class StrategyChain:
    """Site → platform → structured data → meta → selectors → content scan.

    Site and platform strategies only run when ``applicable`` matches.
    The first record with ``success`` wins; otherwise the most complete
    failure is returned tagged ``partial``.
    """

    def __init__(
        self,
        registry: ExtractorRegistry | None = None,
        generic: list[ExtractionStrategy] | None = None,
    ) -> None:
        self.settings = Settings()
        self.registry = registry or ExtractorRegistry()
        self.generic: list[ExtractionStrategy] = generic or [
            StructuredDataStrategy(),
            MetaTagStrategy(),
            CommonSelectorStrategy(),
            ContentScanStrategy(),
        ]
        self.collector = VariantCollector()

    def strategies_for(
        self, url: str, doc: DocumentAccessor,
    ) -> list[ExtractionStrategy]:
        """Strategies to try for *url*, in priority order."""
        ordered: list[ExtractionStrategy] = []
        for strategy in (
            self.registry.site_strategies()
            + self.registry.platform_strategies()
        ):
            try:
                if strategy.applicable(url, doc):
                    ordered.append(strategy)
            except Exception as exc:
                logger.error(
                    "Applicability check of '%s' failed: %s",
                    strategy.name,
                    exc,
                    exc_info=True,
                )
        return ordered + self.generic

    def run(self, url: str, doc: DocumentAccessor) -> ProductRecord:
        """Return the winning record, or the best failure tagged ``partial``."""
        best: ProductRecord | None = None
        for strategy in self.strategies_for(url, doc):
            try:
                record = strategy.extract(doc)
            except Exception as exc:
                logger.error(
                    "Strategy '%s' raised on %s: %s",
                    strategy.name,
                    url,
                    exc,
                    exc_info=True,
                )
                continue
            if record.success:
                logger.info("Product extracted by '%s' on %s", strategy.name, url)
                return self.finalise(record, doc)
            logger.debug(
                "Strategy '%s' incomplete (%d fields)",
                strategy.name,
                record.filled_fields,
            )
            if best is None or record.filled_fields > best.filled_fields:
                best = record

        if best is None:
            best = ProductRecord(url=url, is_product_page=True)
        best.extraction_method = PARTIAL
        logger.info("No strategy succeeded on %s", url)
        return self.finalise(best, doc)

    def finalise(
        self, record: ProductRecord, doc: DocumentAccessor,
    ) -> ProductRecord:
        """Fill and deduplicate variants, then apply host defaults."""
        if record.variants.is_empty():
            record.variants = self.collector.collect(doc)
        record.variants = VariantDeduplicator.deduplicate_all(record.variants)
        self.apply_site_defaults(record)
        return record

    def apply_site_defaults(self, record: ProductRecord) -> None:
        """Brand for known hosts and fixed currencies for regional sites."""
        url = record.url.lower()
        host = ExtractionStrategy.hostname(record.url)
        if not record.brand:
            for domain, brand in self.settings.SITE_BRANDS.items():
                if host == domain or host.endswith("." + domain):
                    record.brand = brand
                    break
        for fragment, currency in self.settings.SITE_CURRENCIES.items():
            if fragment in url:
                record.currency = currency
                break
