# tests/test_price_normalizer.py

"""Tests for price, currency and availability normalisation."""

import unittest
from decimal import Decimal

from product_detector.models.product import Availability
from product_detector.normalizers.price_normalizer import (
    detect_currency,
    format_availability,
    format_price,
    parse_price,
)


class TestParsePrice(unittest.TestCase):
    """Verify locale-aware numeric parsing."""

    def test_continental_thousands_and_decimal(self) -> None:
        """'1.234,56 TL' parses to 1234.56."""
        self.assertEqual(parse_price("1.234,56 TL"), Decimal("1234.56"))

    def test_comma_decimal(self) -> None:
        """A lone comma is the decimal separator."""
        self.assertEqual(parse_price("19,99 €"), Decimal("19.99"))

    def test_dot_decimal(self) -> None:
        """A lone dot is the decimal separator."""
        self.assertEqual(parse_price("$25.00"), Decimal("25.00"))

    def test_plain_number_types(self) -> None:
        """Numbers pass straight through."""
        self.assertEqual(parse_price(89), Decimal("89"))
        self.assertEqual(parse_price(19.5), Decimal("19.5"))

    def test_non_numeric_returns_none(self) -> None:
        """Text without digits gives None."""
        self.assertIsNone(parse_price("abc"))
        self.assertIsNone(parse_price(""))
        self.assertIsNone(parse_price(None))

    def test_booleans_rejected(self) -> None:
        """Booleans are not prices."""
        self.assertIsNone(parse_price(True))

    def test_surrounding_text_ignored(self) -> None:
        """Labels around the amount are dropped."""
        self.assertEqual(parse_price("Şimdi 39,90 TL"), Decimal("39.90"))


class TestDetectCurrency(unittest.TestCase):
    """Verify symbol and code detection."""

    def test_symbols(self) -> None:
        """Common symbols map to ISO codes."""
        cases = {
            "€19,99": "EUR",
            "£10": "GBP",
            "₺99": "TRY",
            "$5": "USD",
            "US$5": "USD",
            "C$5": "CAD",
            "CA$5": "CAD",
            "A$5": "AUD",
        }
        for raw, code in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(detect_currency(raw), code)

    def test_words(self) -> None:
        """Currency codes separated from the amount."""
        self.assertEqual(detect_currency("1.299,99 TL"), "TRY")
        self.assertEqual(detect_currency("45 CHF"), "CHF")

    def test_code_attached_to_amount(self) -> None:
        """A code glued to the digits still counts."""
        self.assertEqual(detect_currency("39,90TL"), "TRY")
        self.assertEqual(detect_currency("1.234,56TL"), "TRY")
        self.assertEqual(detect_currency("12.50EUR"), "EUR")

    def test_code_inside_word_ignored(self) -> None:
        """Letters right before a code mean it is part of a word."""
        self.assertEqual(detect_currency("COUNTRY 19.99"), "USD")

    def test_default_usd(self) -> None:
        """No symbol or code falls back to USD."""
        self.assertEqual(detect_currency("19.99"), "USD")
        self.assertEqual(detect_currency(None), "USD")


class TestFormatAvailability(unittest.TestCase):
    """Verify schema.org and phrase normalisation."""

    def test_schema_org_uris(self) -> None:
        """Full schema.org URIs normalise to enum members."""
        self.assertEqual(
            format_availability("https://schema.org/InStock"),
            Availability.IN_STOCK,
        )
        self.assertEqual(
            format_availability("http://schema.org/OutOfStock"),
            Availability.OUT_OF_STOCK,
        )
        self.assertEqual(
            format_availability("https://schema.org/PreOrder"),
            Availability.PRE_ORDER,
        )

    def test_phrases(self) -> None:
        """Human phrases map to the same enum."""
        self.assertEqual(
            format_availability("Sold out"), Availability.OUT_OF_STOCK
        )
        self.assertEqual(
            format_availability("Only a few left"), Availability.LIMITED
        )
        self.assertEqual(format_availability("in stock"), Availability.IN_STOCK)

    def test_unavailable_is_not_available(self) -> None:
        """'unavailable' must not match the in-stock phrase 'available'."""
        self.assertEqual(
            format_availability("Unavailable"), Availability.OUT_OF_STOCK
        )

    def test_unknown_and_empty(self) -> None:
        """Empty gives None; unrecognised text passes through."""
        self.assertIsNone(format_availability(None))
        self.assertIsNone(format_availability("  "))
        self.assertEqual(format_availability("unknown"), Availability.UNKNOWN)
        self.assertEqual(format_availability("Backorder"), "Backorder")


class TestFormatPrice(unittest.TestCase):
    """Verify host-style price rendering."""

    def test_usd(self) -> None:
        """USD uses a leading dollar sign."""
        self.assertEqual(format_price(Decimal("1234.5"), "USD"), "$1,234.50")

    def test_eur(self) -> None:
        """EUR uses continental separators with a trailing euro sign."""
        self.assertEqual(format_price(Decimal("1234.5"), "EUR"), "1.234,50€")

    def test_gbp(self) -> None:
        """GBP uses a leading pound sign."""
        self.assertEqual(format_price(Decimal("10"), "GBP"), "£10.00")

    def test_other_currencies_use_lira(self) -> None:
        """Everything else renders as Turkish lira."""
        self.assertEqual(format_price(Decimal("1299.99"), "TRY"), "1.299,99 ₺")
        self.assertEqual(format_price(Decimal("5"), None), "5,00 ₺")

    def test_none_amount(self) -> None:
        """Missing amounts render empty."""
        self.assertEqual(format_price(None, "USD"), "")


if __name__ == "__main__":
    unittest.main()
