# product_detector/strategies/mango_strategy.py

"""Mango product pages (``mango.com``).

Mango renders sizes lazily: the size list only appears after the add
button is pressed.  When the list is missing the strategy activates the
button with default actions intercepted, waits briefly for the list or
the bottom sheet, and falls back to size data embedded in inline
scripts.
"""

import json
import re
from typing import Any

from bs4 import Tag

from product_detector.document.accessor import DocumentAccessor
from product_detector.models.product import ProductRecord
from product_detector.models.variant_option import VariantOption
from product_detector.normalizers.price_normalizer import (
    detect_currency,
    parse_price,
)
from product_detector.strategies.base_strategy import ExtractionStrategy
from product_detector.variants.collector import is_selected
from product_detector.variants.deduplicator import VariantDeduplicator

TITLE_SELECTORS = [
    ".ProductDetail_title___WrC_", '[class*="ProductDetail_title"]',
    ".product-name h1", ".product-title h1", "h1",
]
PRICE_SELECTORS = [
    ".SinglePrice_center__mfcM3.texts_bodyM__lR_K7",
    '[class*="SinglePrice_center"]',
    '.Price_wrapper__qlieq span[itemprop="price"]',
    '[class*="Price_wrapper"] span[itemprop="price"]',
    ".price__current", ".product-price",
]
ORIGINAL_PRICE_SELECTORS = [
    ".price__amount--crossed", '[class*="SinglePrice_crossed"]',
    ".was-price", ".original-price", ".old-price",
]
IMAGE_SELECTORS = [
    '[class*="ImageGrid"] img', ".product-images img", ".product-photo img",
    ".image-gallery img",
]
DESCRIPTION_SELECTORS = [
    '[class*="Description_description"]', ".description",
    ".product-description", ".description-content",
]

COLOR_CONTAINER_SELECTORS = [
    ".ColorsSelector_colorsSelector__roWxg", '[class*="ColorsSelector_colorsSelector"]',
]
COLOR_LABEL_SELECTORS = [
    ".ColorsSelector_label__52wJk", '[class*="ColorsSelector_label"]',
]
COLOR_ITEM_SELECTORS = [".ColorList_color__n635i", '[class*="ColorList_color_"]']
COLOR_SELECTED_SELECTORS = [
    ".ColorSelectorPicker_selected__n16Ry", '[class*="ColorSelectorPicker_selected"]',
]
ALT_COLOR_SELECTORS = [
    'button[aria-label*="color" i]', 'div[role="radiogroup"] button',
]

SIZE_LIST_SELECTORS = [
    ".SizesList_sizesList__SFVLW", '[class*="SizesList_sizesList"]',
    ".SizeSelector_sizes__bN_5W", ".size-selector",
]
SHEET_SIZE_SELECTORS = [
    ".modal .SizesList_sizesList__SFVLW", ".size-selector-modal .sizes",
    ".size-modal", ".SheetContent_content__sJjkI",
    '[class*="SheetContent_content"]',
]
ADD_BUTTON_SELECTORS = [
    'button:-soup-contains("Ekle")', 'button:-soup-contains("Add")',
    ".add-to-cart", "[data-testid='add-to-cart']",
    ".PrimaryActions_addToBag__59Qzv", '[class*="PrimaryActions_addToBag"]',
]
SIZE_ITEM_SELECTOR = 'li button, li, button[class*="SizeItem_sizeItem"]'
SIZE_TEXT_SELECTORS = [
    ".texts_bodyMRegular__j0yfK", '[class*="texts_bodyMRegular"]', ".size-text",
]
DELAYED_LABEL_SELECTORS = [
    ".SizeDelayedLabel_sizeDelayedLabel__lLZqd",
    '[class*="SizeDelayedLabel_sizeDelayedLabel"]',
]

_UNAVAILABLE_MARKERS = ("SizeItemContent_notAvailable__", "SizeItemContent_notifyMe__")
_SIZE_KEY_RE = re.compile(r'"sizes?"\s*:\s*(?=\[)')


class MangoStrategy(ExtractionStrategy):
    name = "mango"

    HOSTS = ("mango.com", "shop.mango.com")

    def applicable(self, url: str, doc: DocumentAccessor) -> bool:
        host = self.hostname(url)
        return any(host == h or host.endswith("." + h) for h in self.HOSTS)

    # ------------------------------------------------------------------
    # Colours
    # ------------------------------------------------------------------

    def _colors(self, doc: DocumentAccessor) -> list[VariantOption]:
        container = doc.find(COLOR_CONTAINER_SELECTORS)
        if container is None:
            return self._alternative_colors(doc)

        label = doc.text(doc.find(COLOR_LABEL_SELECTORS, container))
        colors: list[VariantOption] = []
        for item in doc.find_all(COLOR_ITEM_SELECTORS):
            selected = doc.find(COLOR_SELECTED_SELECTORS, item) is not None
            name = ""
            value = None
            image = item.find("img")
            if isinstance(image, Tag):
                alt = doc.attr(image, "alt")
                if "color" in alt.lower():
                    name = alt[alt.lower().index("color") + len("color"):].strip()
                value = doc.image_source(image)
            if not name:
                name = doc.attr(item, "aria-label").strip() or doc.attr(
                    item, "data-tooltip"
                ).strip()
            if not name and selected and label:
                name = label
            if not name:
                self.logger.debug("Mango colour item without a name skipped")
                continue
            colors.append(VariantOption(text=name, selected=selected, value=value or name))
        return colors

    def _alternative_colors(self, doc: DocumentAccessor) -> list[VariantOption]:
        colors: list[VariantOption] = []
        for button in doc.find_all(ALT_COLOR_SELECTORS):
            name = doc.attr(button, "aria-label").strip() or doc.text(button)
            if not name:
                continue
            value = None
            image = button.find("img")
            if isinstance(image, Tag):
                value = doc.image_source(image)
            else:
                swatch = doc.computed_style(button, "background-color")
                if swatch and swatch.lower() != "transparent":
                    value = swatch
            colors.append(VariantOption(
                text=name, selected=is_selected(doc, button), value=value or name,
            ))
        return colors

    # ------------------------------------------------------------------
    # Sizes
    # ------------------------------------------------------------------

    def reveal_sizes(self, doc: DocumentAccessor) -> Tag | None:
        """Press the add button so the size list renders, without side effects."""
        button = doc.find(ADD_BUTTON_SELECTORS)
        if button is None:
            self.logger.debug("No add button to reveal sizes on %s", doc.url)
            return None
        with doc.intercept_default_actions():
            if not doc.activate(button):
                self.logger.debug("Add button has no reveal behaviour")
            container = doc.wait_for(
                SIZE_LIST_SELECTORS + SHEET_SIZE_SELECTORS,
                timeout=self.settings.REVEAL_WAIT_TIMEOUT,
                interval=self.settings.REVEAL_POLL_INTERVAL,
            )
        if container is not None:
            self.logger.info("Sizes revealed after pressing the add button")
        return container

    def _size_option(self, doc: DocumentAccessor, item: Tag) -> VariantOption | None:
        text_el = doc.find(SIZE_TEXT_SELECTORS, item)
        delayed = doc.find(DELAYED_LABEL_SELECTORS, item)
        delivery_info = doc.text(delayed) if delayed is not None else None
        text = doc.text(text_el) if text_el is not None else doc.text(item)
        if text_el is None and delivery_info:
            # label text is part of the item text
            text = text.replace(delivery_info, "").strip()
        lowered = text.lower()
        if not text or "select" in lowered or "seçin" in lowered:
            return None
        markup = str(item)
        details: dict[str, Any] = {
            "size": text,
            "inStock": not any(marker in markup for marker in _UNAVAILABLE_MARKERS),
            "delayedDelivery": delayed is not None,
            "deliveryInfo": delivery_info,
        }
        classes = doc.attr(item, "class")
        return VariantOption(
            text=text,
            selected=is_selected(doc, item) or "SizeItem_selected" in classes,
            value=json.dumps(details, ensure_ascii=False),
        )

    def _sizes_from_container(
        self, doc: DocumentAccessor, container: Tag,
    ) -> list[VariantOption]:
        options: list[VariantOption] = []
        for item in doc.query_all(SIZE_ITEM_SELECTOR, container):
            option = self._size_option(doc, item)
            if option is not None:
                options.append(option)
        kept, removed = VariantDeduplicator.deduplicate(options)
        self.logger.debug("%d Mango sizes (%d duplicates merged)", len(kept), removed)
        return kept

    def _sizes_from_scripts(self, doc: DocumentAccessor) -> list[VariantOption]:
        """Size arrays embedded in inline script payloads."""
        decoder = json.JSONDecoder()
        for script in doc.inline_scripts():
            if not script or '"size' not in script:
                continue
            for match in _SIZE_KEY_RE.finditer(script):
                try:
                    sizes, _ = decoder.raw_decode(script, match.end())
                except json.JSONDecodeError:
                    continue
                options = [
                    VariantOption(
                        text=str(size.get("name") or size.get("text")),
                        selected=bool(size.get("selected", False)),
                        value=json.dumps({
                            "size": str(size.get("name") or size.get("text")),
                            "inStock": size.get("inStock") is not False,
                            "delayedDelivery": False,
                        }, ensure_ascii=False),
                    )
                    for size in sizes
                    if isinstance(size, dict) and (size.get("name") or size.get("text"))
                ]
                if options:
                    return options
        return []

    def _sizes(self, doc: DocumentAccessor) -> list[VariantOption]:
        container = doc.find(SIZE_LIST_SELECTORS)
        if container is None:
            self.logger.debug("Sizes not visible, trying the add button")
            container = self.reveal_sizes(doc)
        sizes = (
            self._sizes_from_container(doc, container)
            if container is not None else []
        )
        if not sizes:
            sizes = self._sizes_from_scripts(doc)
        if not sizes:
            self.logger.warning("Could not extract sizes from Mango page %s", doc.url)
        return sizes

    # ------------------------------------------------------------------

    def extract(self, doc: DocumentAccessor) -> ProductRecord:
        record = self._new_record(doc)
        record.brand = "Mango"
        record.title = self._clean(doc.text(doc.find(TITLE_SELECTORS)))

        price_el = doc.find(PRICE_SELECTORS)
        price_text = doc.attr(price_el, "content") or doc.text(price_el)
        record.price = parse_price(price_text)
        record.currency = detect_currency(price_text)
        original = parse_price(doc.text(doc.find(ORIGINAL_PRICE_SELECTORS)))
        if original is not None and record.price is not None and original > record.price:
            record.original_price = original

        image = doc.find(IMAGE_SELECTORS)
        if image is not None:
            record.image_url = doc.image_source(image)
        record.description = self._clean(doc.text(doc.find(DESCRIPTION_SELECTORS)))

        record.variants.colors = self._colors(doc)
        record.variants.sizes = self._sizes(doc)
        return record
