# product_detector/strategies/base_strategy.py

"""Abstract base class for all extraction strategies."""

import logging
from abc import ABC, abstractmethod
from urllib.parse import urlparse

from product_detector.config.settings import Settings
from product_detector.document.accessor import DocumentAccessor
from product_detector.models.product import ProductRecord


class ExtractionStrategy(ABC):
    """One self-contained extraction algorithm in the cascade.

    ``extract`` never raises for missing data: a strategy that cannot
    find both a title and a price returns a record whose ``success``
    is ``False`` so the chain can move on.
    """

    #: Tag written to ``ProductRecord.extraction_method``
    name: str = "base"

    def __init__(self) -> None:
        self.logger = logging.getLogger(
            f"product_detector.strategies.{self.name}"
        )
        self.settings = Settings()

    def applicable(self, url: str, doc: DocumentAccessor) -> bool:
        """Whether this strategy should run for *url* (generic: always)."""
        return True

    def _new_record(self, doc: DocumentAccessor) -> ProductRecord:
        """Fresh record tagged with this strategy's name."""
        return ProductRecord(
            url=doc.url,
            is_product_page=True,
            extraction_method=self.name,
        )

    @staticmethod
    def _clean(text: str | None) -> str | None:
        """Collapse whitespace; empty strings become ``None``."""
        if text is None:
            return None
        cleaned = " ".join(str(text).split())
        return cleaned or None

    @staticmethod
    def hostname(url: str) -> str:
        """Lower-cased host of *url*."""
        return (urlparse(url).hostname or "").lower()

    @abstractmethod
    def extract(self, doc: DocumentAccessor) -> ProductRecord:
        """Build a record from *doc*."""
        ...
