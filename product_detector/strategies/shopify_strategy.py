# product_detector/strategies/shopify_strategy.py

"""Shopify storefronts: read the theme's product JSON directly."""

import json
import re
from decimal import Decimal
from typing import Any
from urllib.parse import parse_qs, urlparse

from product_detector.document.accessor import DocumentAccessor
from product_detector.models.product import Availability, ProductRecord, Variants
from product_detector.models.variant_option import VariantOption
from product_detector.normalizers.price_normalizer import parse_price
from product_detector.strategies.base_strategy import ExtractionStrategy
from product_detector.strategies.common_selector_strategy import (
    CommonSelectorStrategy,
)

SHOPIFY_FINGERPRINT_RE = re.compile(
    r"cdn\.shopify|Shopify\.shop|ShopifyAnalytics|/cart\.js", re.I
)
SHOPIFY_ANALYTICS_RE = re.compile(
    r"ShopifyAnalytics\.meta\s*=\s*(\{.*?\});", re.S
)
SHOPIFY_CURRENCY_RE = re.compile(
    r"Shopify\.currency\s*=\s*\{[^}]*[\"']active[\"']\s*:\s*[\"']([A-Z]{3})[\"']"
)

_COLOR_NAMES = ("color", "colour", "renk", "farbe", "couleur")
_SIZE_NAMES = ("size", "beden", "größe", "taille", "talla")


def minor_units_to_price(value: Any) -> Decimal | None:
    """Shopify reports integer prices in cents; decimals pass through."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return Decimal(value) / 100
    text = str(value).strip()
    if text.isdigit():
        return Decimal(text) / 100
    return parse_price(text)


class ShopifyStrategy(ExtractionStrategy):
    """Product JSON from ``ProductJson`` scripts, ``data-product-json``
    attributes, or ``ShopifyAnalytics.meta``; otherwise generic DOM
    extraction under the ``shopify`` tag.
    """

    name = "shopify"

    def __init__(self) -> None:
        super().__init__()
        self.fallback = CommonSelectorStrategy()

    def applicable(self, url: str, doc: DocumentAccessor) -> bool:
        if any(
            SHOPIFY_FINGERPRINT_RE.search(src) for src in doc.script_sources()
        ):
            return True
        return any(
            SHOPIFY_FINGERPRINT_RE.search(script)
            for script in doc.inline_scripts()
        )

    # ------------------------------------------------------------------
    # Payload discovery
    # ------------------------------------------------------------------

    def product_json(self, doc: DocumentAccessor) -> dict[str, Any] | None:
        """First decodable product payload on the page."""
        raw_blocks: list[str] = []
        for script in doc.query_all('script[id^="ProductJson"]'):
            raw_blocks.append(script.string or script.get_text())
        for element in doc.query_all("[data-product-json]"):
            raw_blocks.append(doc.attr(element, "data-product-json"))
        for element in doc.query_all("script[data-product-json]"):
            raw_blocks.append(element.string or element.get_text())

        for raw in raw_blocks:
            if not raw or not raw.strip():
                continue
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError as exc:
                self.logger.debug("Skipping malformed product JSON: %s", exc)
                continue
            if isinstance(payload, dict):
                product = payload.get("product", payload)
                if isinstance(product, dict) and product.get("variants"):
                    return product

        for script in doc.inline_scripts():
            match = SHOPIFY_ANALYTICS_RE.search(script or "")
            if not match:
                continue
            try:
                meta = json.loads(match.group(1))
            except json.JSONDecodeError as exc:
                self.logger.debug("Skipping malformed analytics meta: %s", exc)
                continue
            product = meta.get("product") if isinstance(meta, dict) else None
            if isinstance(product, dict):
                product.setdefault("_currency", meta.get("currency"))
                return product
        return None

    def _currency(self, doc: DocumentAccessor, product: dict[str, Any]) -> str:
        for script in doc.inline_scripts():
            match = SHOPIFY_CURRENCY_RE.search(script or "")
            if match:
                return match.group(1)
        meta = doc.query('meta[property="og:price:currency"]')
        if doc.attr(meta, "content"):
            return doc.attr(meta, "content").upper()
        if product.get("_currency"):
            return str(product["_currency"]).upper()
        return self.settings.DEFAULT_CURRENCY

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _selected_variant(
        url: str, variants: list[dict[str, Any]],
    ) -> dict[str, Any]:
        """Variant named by ``?variant=`` else the first available one."""
        wanted = parse_qs(urlparse(url).query).get("variant", [None])[0]
        if wanted:
            for variant in variants:
                if str(variant.get("id")) == wanted:
                    return variant
        for variant in variants:
            if variant.get("available", True):
                return variant
        return variants[0]

    @staticmethod
    def _option_names(product: dict[str, Any]) -> list[str]:
        names: list[str] = []
        for option in product.get("options") or []:
            if isinstance(option, dict):
                names.append(str(option.get("name", "")))
            else:
                names.append(str(option))
        return names

    def _variants(
        self, product: dict[str, Any], selected: dict[str, Any],
    ) -> Variants:
        """Map ``option1..3`` of every variant onto option categories."""
        names = self._option_names(product)
        variants = Variants()
        for index, name in enumerate(n.lower() for n in names[:3]):
            key = f"option{index + 1}"
            if any(word in name for word in _COLOR_NAMES):
                target = variants.colors
            elif any(word in name for word in _SIZE_NAMES):
                target = variants.sizes
            else:
                target = variants.other_options
            seen: set[str] = set()
            for variant in product.get("variants") or []:
                text = variant.get(key)
                if not text or text == "Default Title" or text in seen:
                    continue
                seen.add(text)
                in_stock = any(
                    v.get("available", True)
                    for v in product["variants"]
                    if v.get(key) == text
                )
                target.append(VariantOption(
                    text=str(text),
                    selected=selected.get(key) == text,
                    value=json.dumps({"inStock": in_stock}),
                ))
        return variants

    def _image(self, doc: DocumentAccessor, product: dict[str, Any]) -> str | None:
        image = product.get("featured_image")
        if not image:
            images = product.get("images") or []
            image = images[0] if images else None
        if isinstance(image, dict):
            image = image.get("src")
        return doc.absolute_url(image) if image else None

    def extract(self, doc: DocumentAccessor) -> ProductRecord:
        product = self.product_json(doc)
        if product is None:
            self.logger.debug("No Shopify product JSON on %s", doc.url)
            record = self.fallback.extract(doc)
            record.extraction_method = self.name
            return record

        record = self._new_record(doc)
        variants = [
            v for v in product.get("variants") or [] if isinstance(v, dict)
        ]
        selected = self._selected_variant(doc.url, variants) if variants else {}

        record.title = self._clean(product.get("title") or product.get("name"))
        if record.title is None:
            # analytics payloads carry no product name
            og_title = doc.query('meta[property="og:title"]')
            record.title = self._clean(
                doc.attr(og_title, "content")
            ) or CommonSelectorStrategy.title_from_document(doc)
        record.brand = self._clean(product.get("vendor"))
        record.description = self._clean(
            re.sub(r"<[^>]+>", " ", str(product.get("description") or ""))
        )
        record.price = minor_units_to_price(
            selected.get("price", product.get("price"))
        )
        compare_at = minor_units_to_price(selected.get("compare_at_price"))
        if (
            compare_at is not None
            and record.price is not None
            and compare_at > record.price
        ):
            record.original_price = compare_at
        record.currency = self._currency(doc, product)
        record.sku = self._clean(selected.get("sku"))
        if "available" in selected:
            record.availability = (
                Availability.IN_STOCK
                if selected["available"]
                else Availability.OUT_OF_STOCK
            )
        record.image_url = self._image(doc, product)
        if record.image_url is None:
            record.image_url = self.fallback.extract(doc).image_url
        record.variants = self._variants(product, selected)
        return record
