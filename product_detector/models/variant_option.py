# product_detector/models/variant_option.py

"""Selectable product option (colour, size or other)."""

import json
import re
from dataclasses import dataclass
from typing import Any

_OUT_OF_STOCK_WORDS = (
    "out of stock",
    "out-of-stock",
    "sold out",
    "unavailable",
    "disabled",
    "tükendi",
)

_RGB_RE = re.compile(r"rgba?\([^)]+\)")


@dataclass
class VariantOption:
    """A single option with display text and optional swatch/stock value.

    ``value`` may hold a swatch colour, an absolute image URL, or a
    JSON-encoded object such as ``{"size": "M", "inStock": true}``.
    """

    text: str
    selected: bool = False
    value: str | None = None

    def details(self) -> dict[str, Any]:
        """Decode ``value`` when it carries a JSON object."""
        if not self.value or not self.value.lstrip().startswith("{"):
            return {}
        try:
            decoded = json.loads(self.value)
        except (json.JSONDecodeError, TypeError):
            return {}
        return decoded if isinstance(decoded, dict) else {}

    @property
    def richness(self) -> int:
        """Number of structured fields carried by ``value``."""
        return len(self.details())

    @property
    def in_stock(self) -> bool:
        """Stock state from structured details or value keywords.

        Defaults to ``True`` when nothing says otherwise.
        """
        details = self.details()
        if "inStock" in details:
            return details["inStock"] is True
        lowered = (self.value or "").lower()
        return not any(word in lowered for word in _OUT_OF_STOCK_WORDS)

    @property
    def rgb_value(self) -> str | None:
        """The ``rgb(...)`` swatch colour embedded in ``value``, if any."""
        if not self.value:
            return None
        match = _RGB_RE.search(self.value)
        return match.group(0) if match else None

    @property
    def image_url(self) -> str | None:
        """``value`` when it is an image URL."""
        if self.value and self.value.startswith(("http", "//")):
            return self.value
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the wire shape."""
        return {
            "text": self.text,
            "selected": self.selected,
            "value": self.value,
        }
