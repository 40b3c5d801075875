# product_detector/strategies/content_scan_strategy.py

"""Last-resort extraction by scanning visible text for prices."""

import re
from dataclasses import dataclass
from decimal import Decimal

from bs4 import Tag

from product_detector.config.selector_store import load_selectors
from product_detector.document.accessor import Box, DocumentAccessor
from product_detector.models.product import ProductRecord
from product_detector.normalizers.price_normalizer import (
    detect_currency,
    parse_price,
)
from product_detector.strategies.base_strategy import ExtractionStrategy
from product_detector.strategies.common_selector_strategy import (
    CommonSelectorStrategy,
)

_SYMBOLS = r"(?:US\$|C\$|A\$|R\$|\$|€|£|¥|₹|₽|₺)"
_CODES = r"(?:TL|TRY|USD|EUR|GBP|AED|SAR|CHF|JPY|CAD|AUD)"
_NUMBER = r"\d+(?:[.,]\d+)*"

PRICE_PATTERN = re.compile(
    rf"(?:{_SYMBOLS}|\b{_CODES})\s*(?:{_NUMBER})"
    rf"|(?:{_NUMBER})\s*(?:{_SYMBOLS}|{_CODES}\b)"
)


@dataclass
class PriceCandidate:
    """A currency-amount match found in one text node."""

    raw: str
    amount: Decimal
    element: Tag
    distance: float = 0.0


class ContentScanStrategy(ExtractionStrategy):
    """Pick the price closest to the title; take the largest image."""

    name = "content_scan"

    def __init__(self) -> None:
        super().__init__()
        self.title_selectors = load_selectors("common").get("title", [])

    def _title_element(self, doc: DocumentAccessor) -> Tag | None:
        element = doc.find(self.title_selectors)
        if element is not None and doc.text(element):
            return element
        return doc.query("h1")

    @staticmethod
    def find_prices(doc: DocumentAccessor) -> list[PriceCandidate]:
        """Every currency-amount match in document order."""
        candidates: list[PriceCandidate] = []
        for text, parent in doc.text_nodes():
            for match in PRICE_PATTERN.finditer(text):
                raw = match.group(0)
                amount = parse_price(raw.replace(" ", ""))
                if amount is None or amount <= 0:
                    continue
                candidates.append(PriceCandidate(raw, amount, parent))
        return candidates

    @staticmethod
    def _original_price(
        chosen: PriceCandidate, candidates: list[PriceCandidate],
    ) -> Decimal | None:
        """Highest other amount shown alongside the chosen price."""
        container = chosen.element.parent
        siblings = [
            c.amount
            for c in candidates
            if c is not chosen
            and (
                c.element is chosen.element
                or (container is not None and c.element.parent is container)
            )
            and c.amount > chosen.amount
        ]
        return max(siblings) if siblings else None

    def extract(self, doc: DocumentAccessor) -> ProductRecord:
        record = self._new_record(doc)

        title_el = self._title_element(doc)
        record.title = self._clean(doc.text(title_el))
        if not record.title:
            record.title = CommonSelectorStrategy.title_from_document(doc)

        candidates = self.find_prices(doc)
        if candidates:
            anchor = (
                doc.box(title_el) if title_el is not None
                else Box(0.0, 0.0, 0.0, 0.0)
            )
            for candidate in candidates:
                candidate.distance = doc.box(candidate.element).distance_below(
                    anchor
                )
            chosen = min(candidates, key=lambda c: c.distance)
            record.price = chosen.amount
            record.currency = detect_currency(chosen.raw)
            record.original_price = self._original_price(chosen, candidates)
            self.logger.debug(
                "Chose %r out of %d price candidates", chosen.raw,
                len(candidates),
            )

        image = doc.largest_visible_image(
            self.settings.MIN_IMAGE_SIDE, self.settings.PREFERRED_IMAGE_SIDE
        )
        if image is not None:
            record.image_url = doc.image_source(image)
        return record
