# product_detector/variants/deduplicator.py

"""Variant option deduplication."""

import logging

from product_detector.models.product import Variants
from product_detector.models.variant_option import VariantOption

logger = logging.getLogger("product_detector.variants")


class VariantDeduplicator:
    """Merge options that share the same display text."""

    @staticmethod
    def _normalise_text(text: str) -> str:
        """Collapse whitespace so ``'M '`` and ``'M'`` group together."""
        return " ".join(text.split())

    @staticmethod
    def _prefer(
        existing: VariantOption, candidate: VariantOption,
    ) -> VariantOption:
        """Pick the survivor of two options with the same text.

        A selected option beats an unselected one.  Otherwise the
        option whose value carries more structured data (stock or
        delivery details) wins, keeping any selection state.
        """
        if candidate.selected and not existing.selected:
            return candidate
        if existing.selected and not candidate.selected:
            return existing
        if candidate.richness > existing.richness:
            return VariantOption(
                text=candidate.text,
                selected=existing.selected or candidate.selected,
                value=candidate.value,
            )
        return existing

    @staticmethod
    def deduplicate(
        options: list[VariantOption],
    ) -> tuple[list[VariantOption], int]:
        """Remove options with duplicate text, keeping first-seen order.

        Returns the deduplicated list and the count of removed dupes.
        """
        if not options:
            return [], 0

        seen: dict[str, int] = {}
        kept: list[VariantOption] = []
        removed = 0

        for option in options:
            key = VariantDeduplicator._normalise_text(option.text)
            if key in seen:
                idx = seen[key]
                kept[idx] = VariantDeduplicator._prefer(kept[idx], option)
                removed += 1
                continue
            seen[key] = len(kept)
            kept.append(option)

        if removed:
            logger.debug(
                "Deduplication removed %d duplicate options", removed,
            )

        return kept, removed

    @staticmethod
    def deduplicate_all(variants: Variants) -> Variants:
        """Deduplicate every category of *variants*."""
        colors, _ = VariantDeduplicator.deduplicate(variants.colors)
        sizes, _ = VariantDeduplicator.deduplicate(variants.sizes)
        others, _ = VariantDeduplicator.deduplicate(variants.other_options)
        return Variants(colors=colors, sizes=sizes, other_options=others)
