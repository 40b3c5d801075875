# product_detector/strategies/registry.py

"""Load-once registry of site and platform extraction strategies."""

import importlib
import logging
from typing import Any

from product_detector.config.settings import Settings
from product_detector.strategies.base_strategy import ExtractionStrategy

logger = logging.getLogger("product_detector.strategies")


def _load_strategy_class(dotted_path: str) -> type[Any]:
    """Dynamically import a strategy class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[Any] = getattr(module, class_name)
    return cls


class ExtractorRegistry:
    """Instantiates the configured strategies once per engine.

    Entries are dicts with ``id``, ``label`` and a dotted ``extractor``
    path.  An entry that cannot be imported is logged and skipped so
    the generic strategies still run.
    """

    def __init__(
        self,
        site_extractors: list[dict[str, str]] | None = None,
        platform_extractors: list[dict[str, str]] | None = None,
    ) -> None:
        self.settings = Settings()
        self._site_entries = (
            site_extractors
            if site_extractors is not None
            else self.settings.SITE_EXTRACTORS
        )
        self._platform_entries = (
            platform_extractors
            if platform_extractors is not None
            else self.settings.PLATFORM_EXTRACTORS
        )
        self._cache: dict[str, ExtractionStrategy | None] = {}

    def _instantiate(self, entry: dict[str, str]) -> ExtractionStrategy | None:
        dotted_path = entry["extractor"]
        if dotted_path in self._cache:
            return self._cache[dotted_path]
        strategy: ExtractionStrategy | None = None
        try:
            strategy = _load_strategy_class(dotted_path)()
            logger.debug("Loaded %s extractor from %s", entry["id"], dotted_path)
        except (ImportError, AttributeError, TypeError) as exc:
            logger.error(
                "Cannot load extractor '%s' (%s): %s",
                entry.get("id"),
                dotted_path,
                exc,
            )
        self._cache[dotted_path] = strategy
        return strategy

    def _load(self, entries: list[dict[str, str]]) -> list[ExtractionStrategy]:
        strategies: list[ExtractionStrategy] = []
        for entry in entries:
            strategy = self._instantiate(entry)
            if strategy is not None:
                strategies.append(strategy)
        return strategies

    def site_strategies(self) -> list[ExtractionStrategy]:
        return self._load(self._site_entries)

    def platform_strategies(self) -> list[ExtractionStrategy]:
        return self._load(self._platform_entries)
