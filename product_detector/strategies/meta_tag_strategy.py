# product_detector/strategies/meta_tag_strategy.py

"""Open Graph / Twitter Card / ``product:*`` meta tag extraction."""

from product_detector.document.accessor import DocumentAccessor
from product_detector.models.product import ProductRecord
from product_detector.normalizers.price_normalizer import (
    detect_currency,
    format_availability,
    parse_price,
)
from product_detector.strategies.base_strategy import ExtractionStrategy

_TITLE_TAGS = ["og:title", "twitter:title"]
_PRICE_TAGS = [
    "product:price:amount", "og:price:amount", "product:sale_price:amount",
    "twitter:data1",
]
_ORIGINAL_PRICE_TAGS = ["product:original_price:amount"]
_CURRENCY_TAGS = ["product:price:currency", "og:price:currency"]
_IMAGE_TAGS = [
    "og:image:secure_url", "og:image", "twitter:image", "twitter:image:src",
]
_DESCRIPTION_TAGS = ["og:description", "twitter:description", "description"]
_AVAILABILITY_TAGS = ["product:availability", "og:availability"]
_BRAND_TAGS = ["product:brand", "og:brand"]
_SKU_TAGS = ["product:retailer_item_id", "product:sku"]


class MetaTagStrategy(ExtractionStrategy):
    name = "meta_tags"

    @staticmethod
    def _meta(doc: DocumentAccessor, keys: list[str]) -> str | None:
        """Content of the first ``property``/``name`` meta tag present."""
        for key in keys:
            for attribute in ("property", "name"):
                tag = doc.query(f'meta[{attribute}="{key}"]')
                content = doc.attr(tag, "content").strip()
                if content:
                    return content
        return None

    def extract(self, doc: DocumentAccessor) -> ProductRecord:
        record = self._new_record(doc)
        record.title = self._clean(self._meta(doc, _TITLE_TAGS))

        raw_price = self._meta(doc, _PRICE_TAGS)
        record.price = parse_price(raw_price)
        currency = self._meta(doc, _CURRENCY_TAGS)
        record.currency = (
            currency.upper() if currency else detect_currency(raw_price)
        )

        original = parse_price(self._meta(doc, _ORIGINAL_PRICE_TAGS))
        if (
            original is not None
            and record.price is not None
            and original > record.price
        ):
            record.original_price = original

        record.image_url = doc.absolute_url(self._meta(doc, _IMAGE_TAGS))
        record.description = self._clean(self._meta(doc, _DESCRIPTION_TAGS))
        record.availability = format_availability(
            self._meta(doc, _AVAILABILITY_TAGS)
        )
        record.brand = self._clean(self._meta(doc, _BRAND_TAGS))
        record.sku = self._clean(self._meta(doc, _SKU_TAGS))
        return record
