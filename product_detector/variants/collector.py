# product_detector/variants/collector.py

"""Generic colour/size/option collection from product page markup."""

import logging
import re

from bs4 import Tag

from product_detector.config.selector_store import load_selectors
from product_detector.document.accessor import DocumentAccessor
from product_detector.models.product import Variants
from product_detector.models.variant_option import VariantOption
from product_detector.variants.deduplicator import VariantDeduplicator

logger = logging.getLogger("product_detector.variants")

_PLACEHOLDER_PREFIXES = (
    "select", "choose", "pick ", "please", "seç", "lütfen", "bitte",
)
_PLACEHOLDER_TEXTS = frozenset({"-", "--", "---", "—", "..."})

_HONORIFICS = frozenset({
    "mr", "mrs", "ms", "miss", "mx", "dr", "prof", "sir", "madam",
    "mme", "bay", "bayan", "herr", "frau",
})

_CALLING_CODE_RE = re.compile(r"\(?\+\d{1,4}\)?")

# Substrings of a field's label/name that mark it as unrelated to the product
_DENY_LABELS = (
    "country", "phone", "address", "salutation", "title",
    "gender", "ülke", "telefon", "adres", "cinsiyet", "unvan",
)

_SELECTED_CLASSES = frozenset({
    "selected", "active", "is-selected", "is-active", "checked", "current",
})

_VALUE_ATTRIBUTES = (
    "data-value", "data-color", "data-swatch", "data-option-value",
    "data-variant", "data-size",
)

_TEXT_ATTRIBUTES = (
    "aria-label", "title", "data-tooltip", "data-title", "data-name",
)

_EMPTY_COLORS = frozenset({
    "", "transparent", "none", "initial", "inherit", "rgba(0, 0, 0, 0)",
})


def is_noise_text(text: str) -> bool:
    """Placeholders, honorifics and calling codes are not options."""
    lowered = text.strip().lower()
    if not lowered or lowered in _PLACEHOLDER_TEXTS:
        return True
    if lowered.startswith(_PLACEHOLDER_PREFIXES):
        return True
    if lowered.rstrip(".") in _HONORIFICS:
        return True
    return bool(_CALLING_CODE_RE.search(lowered))


def is_selected(doc: DocumentAccessor, element: Tag) -> bool:
    """Selection state from attributes, ARIA state or classes."""
    if element.has_attr("selected") or element.has_attr("checked"):
        return True
    for name in ("aria-selected", "aria-checked", "aria-pressed"):
        if doc.attr(element, name).lower() == "true":
            return True
    current = doc.attr(element, "aria-current", "false").lower()
    if element.has_attr("aria-current") and current != "false":
        return True
    classes = set(doc.attr(element, "class").lower().split())
    if classes & _SELECTED_CLASSES:
        return True
    return element.find("input", checked=True) is not None


class VariantCollector:
    """Collect option lists using per-category ordered selector lists."""

    def __init__(self) -> None:
        self.selectors = load_selectors("variants")

    # ------------------------------------------------------------------
    # Candidate inspection
    # ------------------------------------------------------------------

    @staticmethod
    def _label_context(doc: DocumentAccessor, element: Tag) -> str:
        """Name/id/label text of the form field that owns *element*."""
        field = element
        if element.name == "option":
            owner = element.find_parent("select")
            if isinstance(owner, Tag):
                field = owner
        parts = [
            doc.attr(field, name)
            for name in ("name", "id", "aria-label", "autocomplete",
                         "data-option-name")
        ]
        field_id = doc.attr(field, "id")
        if field_id:
            label = doc.soup.find("label", attrs={"for": field_id})
            if isinstance(label, Tag):
                parts.append(doc.text(label))
        wrapping = field.find_parent("label")
        if isinstance(wrapping, Tag):
            parts.append(doc.text(wrapping))
        previous = field.find_previous_sibling("label")
        if isinstance(previous, Tag):
            parts.append(doc.text(previous))
        return " ".join(parts).lower()

    @staticmethod
    def _display_text(doc: DocumentAccessor, element: Tag) -> str:
        text = doc.text(element)
        if text:
            return text
        for name in _TEXT_ATTRIBUTES:
            value = doc.attr(element, name).strip()
            if value:
                return value
        if element.name == "input":
            element_id = doc.attr(element, "id")
            if element_id:
                label = doc.soup.find("label", attrs={"for": element_id})
                if isinstance(label, Tag) and doc.text(label):
                    return doc.text(label)
            return doc.attr(element, "value").strip()
        image = element.find("img")
        if isinstance(image, Tag):
            return doc.attr(image, "alt").strip()
        return ""

    @staticmethod
    def _option_value(
        doc: DocumentAccessor, element: Tag, text: str,
    ) -> str:
        """Data attribute, swatch colour, image URL, or the text itself."""
        for name in _VALUE_ATTRIBUTES:
            value = doc.attr(element, name).strip()
            if value:
                return value
        if element.name in ("option", "input"):
            value = doc.attr(element, "value").strip()
            if value:
                return value
        swatches = [element] + element.find_all(style=True)
        for swatch in swatches:
            color = doc.computed_style(swatch, "background-color")
            if color.lower() not in _EMPTY_COLORS:
                return color
        image = element if element.name == "img" else element.find("img")
        if isinstance(image, Tag):
            source = doc.image_source(image)
            if source:
                return source
        return text

    def _expand(self, doc: DocumentAccessor, elements: list[Tag]) -> list[Tag]:
        """Replace ``<select>`` elements by their options."""
        expanded: list[Tag] = []
        for element in elements:
            if element.name == "select":
                expanded.extend(doc.query_all("option", element))
            else:
                expanded.append(element)
        return expanded

    def option_from_element(
        self, doc: DocumentAccessor, element: Tag,
    ) -> VariantOption | None:
        """Build an option from one candidate, or ``None`` for noise."""
        text = self._display_text(doc, element)
        if is_noise_text(text):
            return None
        context = self._label_context(doc, element)
        if any(word in context for word in _DENY_LABELS):
            logger.debug("Skipping %r from unrelated field (%s)", text, context)
            return None
        return VariantOption(
            text=text,
            selected=is_selected(doc, element),
            value=self._option_value(doc, element, text),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def collect_category(
        self, doc: DocumentAccessor, category: str,
    ) -> list[VariantOption]:
        """Collect and deduplicate one category (``colors``, ``sizes``, ...)."""
        candidates = self._expand(
            doc, doc.find_all(self.selectors.get(category, []))
        )
        options: list[VariantOption] = []
        for element in candidates:
            option = self.option_from_element(doc, element)
            if option is not None:
                options.append(option)
        kept, _removed = VariantDeduplicator.deduplicate(options)
        return kept

    def collect(self, doc: DocumentAccessor) -> Variants:
        """Collect every category from *doc*."""
        variants = Variants(
            colors=self.collect_category(doc, "colors"),
            sizes=self.collect_category(doc, "sizes"),
            other_options=self.collect_category(doc, "other_options"),
        )
        logger.debug(
            "Collected %d colours, %d sizes, %d other options",
            len(variants.colors),
            len(variants.sizes),
            len(variants.other_options),
        )
        return variants
