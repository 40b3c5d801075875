# product_detector/strategies/common_selector_strategy.py

"""Generic DOM extraction through ordered per-field selector lists."""

import re

from bs4 import Tag

from product_detector.config.selector_store import load_selectors
from product_detector.document.accessor import DocumentAccessor
from product_detector.models.product import ProductRecord
from product_detector.normalizers.price_normalizer import (
    detect_currency,
    format_availability,
    parse_price,
)
from product_detector.strategies.base_strategy import ExtractionStrategy

_AMOUNT_RE = re.compile(r"\d[\d.,]*")

_TITLE_DELIMITERS = ("|", " - ")


class CommonSelectorStrategy(ExtractionStrategy):
    """Try selector A, else B, else C for each field in turn.

    Selector lists live in ``config/selectors.json`` under ``common``.
    """

    name = "common_selectors"

    def __init__(self) -> None:
        super().__init__()
        self.selectors = load_selectors("common")

    def _find(self, doc: DocumentAccessor, field: str) -> Tag | None:
        return doc.find(self.selectors.get(field, []))

    def _find_filled(
        self, doc: DocumentAccessor, field: str, *attrs: str,
    ) -> Tag | None:
        """First match with a non-empty value in *attrs* or its text."""

        def filled(element: Tag) -> bool:
            return any(doc.attr(element, a).strip() for a in attrs) or bool(
                doc.text(element)
            )

        return doc.find_where(self.selectors.get(field, []), filled)

    def _find_amount(self, doc: DocumentAccessor, field: str) -> Tag | None:
        """First match whose price text holds a number."""
        return doc.find_where(
            self.selectors.get(field, []),
            lambda el: self._amount(self._price_text(doc, el)) is not None,
        )

    @staticmethod
    def _price_text(doc: DocumentAccessor, element: Tag | None) -> str:
        """Machine-readable ``content`` first, else the visible text."""
        if element is None:
            return ""
        content = doc.attr(element, "content").strip()
        if content:
            return content
        for name in ("data-price", "data-price-amount", "value"):
            value = doc.attr(element, name).strip()
            if value and _AMOUNT_RE.search(value):
                return value
        return doc.text(element)

    @staticmethod
    def _amount(text: str) -> str | None:
        match = _AMOUNT_RE.search(text)
        return match.group(0) if match else None

    @staticmethod
    def title_from_document(doc: DocumentAccessor) -> str | None:
        """Leading segment of ``<title>`` before the site-name delimiter."""
        title = doc.title
        for delimiter in _TITLE_DELIMITERS:
            if delimiter in title:
                title = title.split(delimiter)[0]
                break
        return " ".join(title.split()) or None

    def _image(self, doc: DocumentAccessor) -> str | None:
        element = self._find(doc, "image")
        if element is None:
            return None
        if element.name != "img":
            nested = element.find("img")
            if isinstance(nested, Tag) and not element.has_attr("content"):
                element = nested
        return doc.image_source(element)

    def extract(self, doc: DocumentAccessor) -> ProductRecord:
        record = self._new_record(doc)

        title_el = self._find_filled(doc, "title")
        record.title = self._clean(doc.text(title_el))
        if not record.title:
            record.title = self.title_from_document(doc)

        price_text = self._price_text(doc, self._find_amount(doc, "price"))
        record.price = parse_price(self._amount(price_text))
        record.currency = detect_currency(price_text)

        original_text = self._price_text(
            doc, self._find_amount(doc, "original_price")
        )
        original = parse_price(self._amount(original_text))
        if (
            original is not None
            and record.price is not None
            and original > record.price
        ):
            record.original_price = original

        record.image_url = self._image(doc)

        description_el = self._find_filled(doc, "description", "content")
        record.description = self._clean(
            doc.attr(description_el, "content") or doc.text(description_el)
        )
        sku_el = self._find_filled(doc, "sku", "content")
        record.sku = self._clean(
            doc.attr(sku_el, "content") or doc.text(sku_el)
        )
        availability_el = self._find_filled(
            doc, "availability", "href", "content"
        )
        if availability_el is not None:
            record.availability = format_availability(
                doc.attr(availability_el, "href")
                or doc.attr(availability_el, "content")
                or doc.text(availability_el)
            )
        brand_el = self._find_filled(doc, "brand", "content")
        record.brand = self._clean(
            doc.attr(brand_el, "content") or doc.text(brand_el)
        )

        self.logger.debug(
            "Selector extraction: title=%r price=%s", record.title, record.price
        )
        return record
