# product_detector/strategies/structured_data_strategy.py

"""Extraction from schema.org ``Product`` nodes in JSON-LD."""

import json
from typing import Any

from product_detector.document.accessor import DocumentAccessor
from product_detector.document.structured_data import iter_typed_nodes
from product_detector.models.product import Availability, ProductRecord
from product_detector.models.variant_option import VariantOption
from product_detector.normalizers.price_normalizer import (
    detect_currency,
    format_availability,
    parse_price,
)
from product_detector.strategies.base_strategy import ExtractionStrategy
from product_detector.variants.deduplicator import VariantDeduplicator


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _name_of(value: Any) -> str | None:
    """A plain string, or the ``name`` of a nested object."""
    value = _first(value)
    if isinstance(value, dict):
        value = value.get("name")
    if value is None:
        return None
    return str(value)


def _image_of(value: Any) -> str | None:
    value = _first(value)
    if isinstance(value, dict):
        value = value.get("url") or value.get("contentUrl")
    return str(value) if value else None


class StructuredDataStrategy(ExtractionStrategy):
    """Map ``name/description/sku/brand/image/offers`` onto the record.

    A ``ProductGroup`` contributes its own fields plus the size/colour
    of every ``hasVariant`` product.  Offers may be a single object, a
    list, or an ``AggregateOffer`` with ``lowPrice``/``highPrice``.
    """

    name = "structured_data"

    @staticmethod
    def _pick_offer(offers: Any) -> dict[str, Any] | None:
        """First offer carrying a price (falls back to the first offer)."""
        if isinstance(offers, dict):
            nested = offers.get("offers")
            if isinstance(nested, list) and "price" not in offers and (
                "lowPrice" not in offers
            ):
                return StructuredDataStrategy._pick_offer(nested)
            return offers
        if isinstance(offers, list):
            dicts = [o for o in offers if isinstance(o, dict)]
            for offer in dicts:
                if offer.get("price") is not None or offer.get("lowPrice"):
                    return offer
            return dicts[0] if dicts else None
        return None

    @staticmethod
    def _offer_variants(
        nodes: list[Any], key: str,
    ) -> list[VariantOption]:
        options: list[VariantOption] = []
        for node in nodes:
            if not isinstance(node, dict):
                continue
            text = _name_of(node.get(key))
            if not text or not text.strip():
                continue
            availability = format_availability(node.get("availability"))
            if availability is None and isinstance(node.get("offers"), dict):
                availability = format_availability(
                    node["offers"].get("availability")
                )
            value = text.strip()
            if availability is not None:
                value = json.dumps({
                    key: text.strip(),
                    "inStock": availability != Availability.OUT_OF_STOCK,
                })
            options.append(VariantOption(text=text.strip(), value=value))
        return options

    def _apply_offer(
        self, record: ProductRecord, offer: dict[str, Any],
    ) -> None:
        price_raw = offer.get("price")
        if price_raw in (None, ""):
            price_raw = offer.get("lowPrice")
        record.price = parse_price(price_raw)

        currency = offer.get("priceCurrency")
        if not currency and isinstance(offer.get("priceSpecification"), dict):
            currency = offer["priceSpecification"].get("priceCurrency")
        record.currency = (
            str(currency).upper() if currency else detect_currency(price_raw)
        )
        record.availability = format_availability(offer.get("availability"))

        high = parse_price(offer.get("highPrice"))
        if (
            high is not None
            and record.price is not None
            and high > record.price
        ):
            record.original_price = high

    @staticmethod
    def candidates(payloads: list[Any]) -> list[dict[str, Any]]:
        """ProductGroup then Product nodes of each payload, in page order."""
        nodes: list[dict[str, Any]] = []
        seen: set[int] = set()
        for payload in payloads:
            for type_name in ("ProductGroup", "Product"):
                for node in iter_typed_nodes(payload, type_name):
                    if id(node) not in seen:
                        seen.add(id(node))
                        nodes.append(node)
        return nodes

    def extract(self, doc: DocumentAccessor) -> ProductRecord:
        """First product node that yields both title and price.

        Pages often carry a bare Product stub (a ``WebPage.mainEntity``,
        a breadcrumb item) ahead of the full node, so every candidate
        is mapped; without a success the most complete record is kept.
        """
        best: ProductRecord | None = None
        for product in self.candidates(doc.json_ld_payloads()):
            record = self._map_product(doc, product)
            if record.success:
                return record
            if best is None or record.filled_fields > best.filled_fields:
                best = record
        return best if best is not None else self._new_record(doc)

    def _map_product(
        self, doc: DocumentAccessor, product: dict[str, Any],
    ) -> ProductRecord:
        record = self._new_record(doc)
        record.title = self._clean(_name_of(product.get("name")))
        record.description = self._clean(product.get("description"))
        sku = product.get("sku") or product.get("mpn")
        record.sku = self._clean(str(sku)) if sku else None
        record.brand = self._clean(_name_of(product.get("brand")))
        record.image_url = doc.absolute_url(_image_of(product.get("image")))

        variant_nodes: list[Any] = []
        has_variant = product.get("hasVariant")
        if isinstance(has_variant, list):
            variant_nodes.extend(has_variant)

        offers = product.get("offers")
        if offers is None and variant_nodes:
            offers = [
                v.get("offers") for v in variant_nodes
                if isinstance(v, dict) and isinstance(v.get("offers"), dict)
            ]
        offer = self._pick_offer(offers)
        if offer is not None:
            self._apply_offer(record, offer)
        if isinstance(offers, list):
            variant_nodes.extend(offers)
        elif isinstance(offers, dict) and isinstance(offers.get("offers"), list):
            variant_nodes.extend(offers["offers"])

        if record.image_url is None and variant_nodes:
            first_variant = variant_nodes[0]
            if isinstance(first_variant, dict):
                record.image_url = doc.absolute_url(
                    _image_of(first_variant.get("image"))
                )

        record.variants.sizes, _ = VariantDeduplicator.deduplicate(
            self._offer_variants(variant_nodes, "size")
        )
        record.variants.colors, _ = VariantDeduplicator.deduplicate(
            self._offer_variants(variant_nodes, "color")
        )

        self.logger.debug(
            "JSON-LD product: title=%r price=%s currency=%s",
            record.title,
            record.price,
            record.currency,
        )
        return record
