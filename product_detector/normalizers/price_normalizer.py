# product_detector/normalizers/price_normalizer.py

"""Locale-aware price, currency and availability normalisation."""

import logging
import re
from decimal import Decimal, InvalidOperation

from product_detector.config.settings import Settings
from product_detector.models.product import Availability

logger = logging.getLogger("product_detector.normalizers")

_NON_NUMERIC_RE = re.compile(r"[^\d.,]")

# Ordered: prefixed dollars before the bare "$", symbols before words
_CURRENCY_SYMBOLS: list[tuple[str, str]] = [
    ("US$", "USD"),
    ("C$", "CAD"),
    ("CA$", "CAD"),
    ("A$", "AUD"),
    ("AU$", "AUD"),
    ("R$", "BRL"),
    ("₺", "TRY"),
    ("€", "EUR"),
    ("£", "GBP"),
    ("¥", "JPY"),
    ("₹", "INR"),
    ("₽", "RUB"),
    ("$", "USD"),
]

_CURRENCY_WORDS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(?<![A-Za-z])TL\b"), "TRY"),
    (re.compile(r"(?<![A-Za-z])TRY\b"), "TRY"),
    (re.compile(r"(?<![A-Za-z])USD\b"), "USD"),
    (re.compile(r"(?<![A-Za-z])EUR\b"), "EUR"),
    (re.compile(r"(?<![A-Za-z])GBP\b"), "GBP"),
    (re.compile(r"(?<![A-Za-z])AED\b"), "AED"),
    (re.compile(r"(?<![A-Za-z])SAR\b"), "SAR"),
    (re.compile(r"(?<![A-Za-z])CHF\b"), "CHF"),
    (re.compile(r"(?<![A-Za-z])JPY\b"), "JPY"),
    (re.compile(r"(?<![A-Za-z])CAD\b"), "CAD"),
    (re.compile(r"(?<![A-Za-z])AUD\b"), "AUD"),
]

_AVAILABILITY_PHRASES: list[tuple[tuple[str, ...], Availability]] = [
    (
        ("outofstock", "out of stock", "sold out", "soldout",
         "tükendi", "stokta yok", "unavailable"),
        Availability.OUT_OF_STOCK,
    ),
    (
        ("limitedavailability", "limited", "low stock", "only a few",
         "few left", "son ürünler", "sınırlı stok"),
        Availability.LIMITED,
    ),
    (
        ("preorder", "pre-order", "pre order", "ön sipariş"),
        Availability.PRE_ORDER,
    ),
    (
        ("instock", "in stock", "available", "stokta", "in_stock"),
        Availability.IN_STOCK,
    ),
]


def parse_price(raw: object) -> Decimal | None:
    """Convert price text like ``'1.234,56 TL'`` into a Decimal.

    All characters except digits, ``.`` and ``,`` are dropped.  When
    both separators appear, ``.`` is the thousands separator and ``,``
    the decimal one; a lone ``,`` is the decimal separator.  Returns
    ``None`` when nothing numeric remains.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float, Decimal)):
        cleaned = str(raw)
    else:
        cleaned = _NON_NUMERIC_RE.sub("", str(raw)).strip(".,")
        if not cleaned:
            return None
        if "." in cleaned and "," in cleaned:
            cleaned = cleaned.replace(".", "").replace(",", ".")
        elif "," in cleaned:
            cleaned = cleaned.replace(",", ".")

    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        logger.debug("Unparsable price text: %r", raw)
        return None
    return value if value.is_finite() else None


def detect_currency(raw: object) -> str:
    """Map a currency symbol or code found in *raw* to its ISO code.

    Falls back to ``Settings.DEFAULT_CURRENCY`` (USD) when no symbol
    or code is present.
    """
    text = str(raw) if raw is not None else ""
    for symbol, code in _CURRENCY_SYMBOLS:
        if symbol in text:
            return code
    for pattern, code in _CURRENCY_WORDS:
        if pattern.search(text):
            return code
    return Settings.DEFAULT_CURRENCY


def format_availability(raw: object) -> Availability | str | None:
    """Normalise schema.org URIs and stock phrases to ``Availability``.

    Unrecognised values are returned unchanged.
    """
    if raw is None:
        return None
    if isinstance(raw, Availability):
        return raw
    text = str(raw).strip()
    if not text:
        return None

    key = text.rsplit("/", 1)[-1] if "schema.org" in text else text
    lowered = key.lower()
    if lowered == "unknown":
        return Availability.UNKNOWN
    for phrases, availability in _AVAILABILITY_PHRASES:
        if any(phrase in lowered for phrase in phrases):
            return availability
    return text


def format_price(amount: Decimal | None, currency: str | None) -> str:
    """Render an amount the way the host displays it."""
    if amount is None:
        return ""
    us_style = f"{amount:,.2f}"
    continental = (
        us_style.replace(",", "\x00")
        .replace(".", ",")
        .replace("\x00", ".")
    )
    if currency == "USD":
        return f"${us_style}"
    if currency == "EUR":
        return f"{continental}€"
    if currency == "GBP":
        return f"£{us_style}"
    return f"{continental} ₺"
