# tests/test_selector_store.py

"""Tests for the selectors.json loader."""

import unittest

from product_detector.config.selector_store import (
    _read_selectors,
    load_selectors,
)


class TestLoadSelectors(unittest.TestCase):
    """Verify section lookup and caching."""

    def setUp(self) -> None:
        _read_selectors.cache_clear()

    def test_known_section(self) -> None:
        """A section maps fields to ordered selector lists."""
        common = load_selectors("common")
        self.assertIn("h1", common["title"])
        self.assertEqual(common["price"][0], ".price")

    def test_unknown_section_is_empty(self) -> None:
        """Missing sections give an empty mapping."""
        self.assertEqual(load_selectors("no_such_section"), {})

    def test_file_parsed_once(self) -> None:
        """Repeated loads reuse the parsed file."""
        load_selectors("common")
        load_selectors("variants")
        info = _read_selectors.cache_info()
        self.assertEqual(info.misses, 1)
        self.assertEqual(info.hits, 1)

    def test_callers_get_independent_lists(self) -> None:
        """Mutating one result does not leak into the next."""
        first = load_selectors("common")
        first["title"].clear()
        self.assertTrue(load_selectors("common")["title"])


if __name__ == "__main__":
    unittest.main()
