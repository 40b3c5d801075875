# product_detector/config/selector_store.py

"""Ordered CSS selector lists loaded from selectors.json."""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from product_detector.config.settings import Settings


@lru_cache(maxsize=4)
def _read_selectors(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        data: dict[str, Any] = json.load(f)
    return data


def load_selectors(section: str) -> dict[str, list[str]]:
    """Load the selector lists for one section of selectors.json.

    The file is parsed once per path; each call gets its own copy of
    the lists.  Each field maps to an ordered list; callers try the
    selectors in order and stop at the first one that matches.
    """
    all_selectors = _read_selectors(Path(Settings.SELECTORS_PATH))
    section_data: dict[str, Any] = all_selectors.get(section, {})
    return {field: list(values) for field, values in section_data.items()}
