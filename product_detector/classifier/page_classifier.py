# product_detector/classifier/page_classifier.py

"""Decide whether the current document is a product detail page."""

import logging
import re
from dataclasses import dataclass

from product_detector.config.selector_store import load_selectors
from product_detector.config.settings import Settings
from product_detector.document.accessor import DocumentAccessor
from product_detector.document.structured_data import find_product

logger = logging.getLogger("product_detector.classifier")

PRODUCT_URL_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"/p/"),
    re.compile(r"/product/"),
    re.compile(r"/products/"),
    re.compile(r"/pd/"),
    re.compile(r"/item/"),
    re.compile(r"/urun/"),
    re.compile(r"/detay/"),
    re.compile(r"/goods/"),
    re.compile(r"/shop/products/"),
    re.compile(r"/product-p"),
    re.compile(r"/ProductDetails"),
    re.compile(r"/productdetail", re.I),
    re.compile(r"-p-\d+"),
    re.compile(r"/dp/[A-Z0-9]{10}", re.I),
    re.compile(r"/[a-z0-9_-]{6,}/p/[a-z0-9_-]{6,}", re.I),
]

PRICE_TEXT_RE = re.compile(
    r"(?:[0-9]+[.,][0-9]+\s*(?:TL|₺|\$|€|£))"
    r"|(?:(?:\$|€|£|₺)\s*[0-9]+(?:[.,][0-9]+)?)"
)

_META_SELECTORS = [
    'meta[property="og:type"][content="product"]',
    'meta[property="product:price:amount"]',
    'meta[property="og:price:amount"]',
]


@dataclass
class Classification:
    """Individual classifier signals for one document."""

    url_match: bool = False
    structured_data: bool = False
    meta_tags: bool = False
    add_to_cart: bool = False
    dom_score: int = 0
    threshold: int = Settings.CLASSIFIER_SCORE_THRESHOLD

    @property
    def is_product_page(self) -> bool:
        return (
            self.url_match
            or self.structured_data
            or self.meta_tags
            or self.add_to_cart
            or self.dom_score >= self.threshold
        )


class PageClassifier:
    """OR-combination of URL, structured-data, meta-tag and DOM signals.

    Nothing is cached: every call re-reads the document, because the
    page may have mutated since the previous decision.
    """

    def __init__(self) -> None:
        self.settings = Settings()
        self.selectors = load_selectors("classifier")

    @staticmethod
    def matches_url(url: str) -> bool:
        """True when the URL has a product-detail path shape."""
        return any(p.search(url) for p in PRODUCT_URL_PATTERNS)

    @staticmethod
    def has_structured_product(doc: DocumentAccessor) -> bool:
        """True when any JSON-LD payload contains a Product node."""
        return find_product(doc.json_ld_payloads()) is not None

    @staticmethod
    def has_product_meta(doc: DocumentAccessor) -> bool:
        """True for ``og:type=product`` or price-amount meta tags."""
        return doc.find(_META_SELECTORS) is not None

    def dom_score(self, doc: DocumentAccessor) -> int:
        """Weighted DOM indicator score (price/title 2, gallery/description 1)."""
        score = 0
        if doc.find(self.selectors.get("price", [])) is not None or (
            PRICE_TEXT_RE.search(doc.body_text())
        ):
            score += 2
        title_found = doc.find(self.selectors.get("title", [])) is not None
        if not title_found:
            headings = doc.query_all("h1")
            title_found = 0 < len(headings) < 3
        if title_found:
            score += 2
        if doc.find(
            self.selectors.get("gallery", [])
            + self.selectors.get("options", [])
        ) is not None:
            score += 1
        if doc.find(self.selectors.get("description", [])) is not None:
            score += 1
        return score

    def classify(self, url: str, doc: DocumentAccessor) -> Classification:
        """Evaluate every signal for *url* and *doc*."""
        result = Classification(
            threshold=self.settings.CLASSIFIER_SCORE_THRESHOLD
        )
        result.url_match = self.matches_url(url)
        if result.url_match:
            return result
        result.structured_data = self.has_structured_product(doc)
        if result.structured_data:
            return result
        result.meta_tags = self.has_product_meta(doc)
        if result.meta_tags:
            return result
        result.add_to_cart = (
            doc.find(self.selectors.get("add_to_cart", [])) is not None
        )
        if result.add_to_cart:
            return result
        result.dom_score = self.dom_score(doc)
        logger.debug(
            "DOM score for %s: %d (threshold %d)",
            url,
            result.dom_score,
            result.threshold,
        )
        return result

    def is_product_page(self, url: str, doc: DocumentAccessor) -> bool:
        """Boolean verdict for *url* and *doc*."""
        return self.classify(url, doc).is_product_page
