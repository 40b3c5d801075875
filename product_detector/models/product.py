# product_detector/models/product.py

"""Product record model for inter-module data flow."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from product_detector.models.variant_option import VariantOption


class Availability(str, Enum):
    """Normalised stock state."""

    IN_STOCK = "InStock"
    OUT_OF_STOCK = "OutOfStock"
    LIMITED = "LimitedAvailability"
    PRE_ORDER = "PreOrder"
    UNKNOWN = "Unknown"


@dataclass
class Variants:
    """Option lists grouped by category."""

    colors: list[VariantOption] = field(
        default_factory=lambda: list[VariantOption]()
    )
    sizes: list[VariantOption] = field(
        default_factory=lambda: list[VariantOption]()
    )
    other_options: list[VariantOption] = field(
        default_factory=lambda: list[VariantOption]()
    )

    def is_empty(self) -> bool:
        """True when no category holds any option."""
        return not (self.colors or self.sizes or self.other_options)

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        """Serialise to the wire shape."""
        return {
            "colors": [o.to_dict() for o in self.colors],
            "sizes": [o.to_dict() for o in self.sizes],
            "otherOptions": [o.to_dict() for o in self.other_options],
        }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _number(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


@dataclass
class ProductRecord:
    """Result of one extraction attempt.

    A record is built fresh on every attempt.  ``success`` is derived
    from the data itself so that a successful record always carries a
    title and a price.
    """

    url: str
    is_product_page: bool = False
    title: str | None = None
    price: Decimal | None = None
    original_price: Decimal | None = None
    currency: str | None = None
    image_url: str | None = None
    description: str | None = None
    sku: str | None = None
    availability: Availability | str | None = None
    brand: str | None = None
    extraction_method: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)
    variants: Variants = field(default_factory=Variants)
    navigated: bool = False
    error: str | None = None

    @property
    def success(self) -> bool:
        """True iff a non-empty title and a price are present."""
        return bool(self.title and self.title.strip()) and (
            self.price is not None
        )

    @property
    def filled_fields(self) -> int:
        """How many optional data fields this record carries."""
        values = (
            self.title, self.price, self.original_price, self.currency,
            self.image_url, self.description, self.sku,
            self.availability, self.brand,
        )
        return sum(1 for v in values if v not in (None, ""))

    @classmethod
    def navigation(cls, url: str) -> "ProductRecord":
        """Record announcing a same-document URL change."""
        return cls(url=url, navigated=True)

    @classmethod
    def fault(
        cls, url: str, error: str, is_product_page: bool = False,
    ) -> "ProductRecord":
        """Minimal record sent when the pipeline itself failed."""
        return cls(
            url=url,
            is_product_page=is_product_page,
            extraction_method="error",
            error=error,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the JSON-compatible wire shape."""
        availability = self.availability
        if isinstance(availability, Availability):
            availability = availability.value
        data: dict[str, Any] = {
            "isProductPage": self.is_product_page,
            "success": self.success,
            "title": self.title,
            "price": _number(self.price),
            "originalPrice": _number(self.original_price),
            "currency": self.currency,
            "imageUrl": self.image_url,
            "description": self.description,
            "sku": self.sku,
            "availability": availability,
            "brand": self.brand,
            "extractionMethod": self.extraction_method,
            "url": self.url,
            "timestamp": self.timestamp.isoformat(),
            "variants": self.variants.to_dict(),
        }
        if self.navigated:
            data["navigated"] = True
        if self.error is not None:
            data["error"] = self.error
        return data
