# product_detector/document/accessor.py

"""Uniform query surface over a parsed product page.

Every strategy expresses "try selector A, else B, else C" through
:meth:`DocumentAccessor.find`.  Selector problems never escape this
module: an invalid or unsupported selector is logged and treated as
"no match".

The accessor works on a static BeautifulSoup tree, so geometry is an
approximation: sizes come from ``width``/``height`` attributes or
inline ``px`` styles, and vertical position follows document order
unless an inline ``top`` is given.
"""

import contextlib
import json
import logging
import math
import re
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

import soupsieve
from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from soupsieve import SelectorSyntaxError

from product_detector.normalizers.url_normalizer import (
    absolute_url,
    largest_srcset_candidate,
)

logger = logging.getLogger("product_detector.document")

ActivationHandler = Callable[["DocumentAccessor", Tag], None]

_SELECTOR_ERRORS = (SelectorSyntaxError, NotImplementedError, ValueError)

_SKIP_TEXT_PARENTS = frozenset(
    {"script", "style", "noscript", "template", "head", "title"}
)

_INHERITED_PROPERTIES = frozenset(
    {"color", "visibility", "cursor", "direction",
     "font-family", "font-size", "font-style", "font-weight"}
)

_PX_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(?:px)?\s*$")

_ROW_HEIGHT = 20.0  # px per element in document order


@dataclass(frozen=True)
class Box:
    """Static bounding box of an element."""

    left: float
    top: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def distance_below(self, anchor: "Box") -> float:
        """Distance from the bottom-left of *anchor* to this box's top-left."""
        return math.hypot(self.top - anchor.bottom, self.left - anchor.left)


def _parse_px(value: str | None) -> float | None:
    if not value:
        return None
    match = _PX_RE.match(value)
    return float(match.group(1)) if match else None


def _first_px(*values: str | None) -> float | None:
    for value in values:
        parsed = _parse_px(value)
        if parsed is not None:
            return parsed
    return None


def _parse_style(style: str) -> dict[str, str]:
    declarations: dict[str, str] = {}
    for chunk in style.split(";"):
        name, sep, value = chunk.partition(":")
        if sep:
            declarations[name.strip().lower()] = (
                value.replace("!important", "").strip()
            )
    return declarations


class DocumentAccessor:
    """Selector, text, style and geometry access over one document."""

    def __init__(
        self,
        markup: str | BeautifulSoup,
        url: str,
        navigator: Callable[[str], None] | None = None,
    ) -> None:
        self.soup: BeautifulSoup = (
            markup
            if isinstance(markup, BeautifulSoup)
            else BeautifulSoup(markup, "lxml")
        )
        self.url = url
        self._navigator = navigator
        self._activation_handlers: list[
            tuple[str, ActivationHandler]
        ] = []
        self._intercept_depth = 0
        self._order: dict[int, int] | None = None

    # ------------------------------------------------------------------
    # Selector queries
    # ------------------------------------------------------------------

    def query_all(self, selector: str, scope: Tag | None = None) -> list[Tag]:
        """All matches of one selector; invalid selectors match nothing."""
        root = scope if scope is not None else self.soup
        try:
            return list(root.select(selector))
        except _SELECTOR_ERRORS as exc:
            logger.debug("Selector %r rejected: %s", selector, exc)
            return []

    def query(self, selector: str, scope: Tag | None = None) -> Tag | None:
        """First match of one selector, or ``None``."""
        matches = self.query_all(selector, scope)
        return matches[0] if matches else None

    def find(
        self, selectors: list[str], scope: Tag | None = None,
    ) -> Tag | None:
        """First element of the first selector (in order) that matches."""
        for selector in selectors:
            element = self.query(selector, scope)
            if element is not None:
                return element
        return None

    def find_where(
        self,
        selectors: list[str],
        predicate: Callable[[Tag], bool],
        scope: Tag | None = None,
    ) -> Tag | None:
        """First element, across every match of every selector, that
        satisfies *predicate*.
        """
        for selector in selectors:
            for element in self.query_all(selector, scope):
                if predicate(element):
                    return element
        return None

    def find_all(
        self, selectors: list[str], scope: Tag | None = None,
    ) -> list[Tag]:
        """All elements of the first selector (in order) that matches."""
        for selector in selectors:
            elements = self.query_all(selector, scope)
            if elements:
                return elements
        return []

    def matches(self, element: Tag, selector: str) -> bool:
        """Whether *element* itself matches *selector*."""
        try:
            return bool(soupsieve.match(selector, element))
        except _SELECTOR_ERRORS as exc:
            logger.debug("Selector %r rejected: %s", selector, exc)
            return False

    # ------------------------------------------------------------------
    # Text, attributes, style
    # ------------------------------------------------------------------

    @staticmethod
    def text(element: Tag | None) -> str:
        """Whitespace-collapsed, trimmed text content."""
        if element is None:
            return ""
        return " ".join(element.get_text(" ", strip=True).split())

    @staticmethod
    def attr(element: Tag | None, name: str, default: str = "") -> str:
        """Attribute value as a string (class lists are space-joined)."""
        if element is None:
            return default
        value = element.get(name)
        if value is None:
            return default
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    def computed_style(self, element: Tag, prop: str) -> str:
        """Inline style value, resolving inherited properties upwards."""
        prop = prop.lower()
        node: Any = element
        while isinstance(node, Tag):
            declarations = _parse_style(self.attr(node, "style"))
            if prop in declarations:
                return declarations[prop]
            if prop not in _INHERITED_PROPERTIES:
                return ""
            node = node.parent
        return ""

    def is_visible(self, element: Tag) -> bool:
        """Not hidden by attribute or style, and not an explicitly empty box."""
        if (
            element.name == "input"
            and self.attr(element, "type").lower() == "hidden"
        ):
            return False
        node: Any = element
        while isinstance(node, Tag):
            if node.has_attr("hidden"):
                return False
            declarations = _parse_style(self.attr(node, "style"))
            if declarations.get("display", "").lower() == "none":
                return False
            if declarations.get("visibility", "").lower() in (
                "hidden", "collapse",
            ):
                return False
            opacity = _parse_px(declarations.get("opacity"))
            if opacity is not None and opacity <= 0:
                return False
            node = node.parent
        width, height = self._declared_size(element)
        return width != 0 and height != 0

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def _declared_size(self, element: Tag) -> tuple[float | None, float | None]:
        declarations = _parse_style(self.attr(element, "style"))
        width = _first_px(
            declarations.get("width"), self.attr(element, "width")
        )
        height = _first_px(
            declarations.get("height"), self.attr(element, "height")
        )
        return width, height

    def _order_index(self, element: Tag) -> int:
        if self._order is None:
            self._order = {
                id(tag): index
                for index, tag in enumerate(self.soup.find_all(True))
            }
        return self._order.get(id(element), 0)

    def box(self, element: Tag) -> Box:
        """Static bounding box; unknown sizes are zero."""
        declarations = _parse_style(self.attr(element, "style"))
        width, height = self._declared_size(element)
        top = _parse_px(declarations.get("top"))
        left = _parse_px(declarations.get("left"))
        return Box(
            left=left if left is not None else 0.0,
            top=(
                top
                if top is not None
                else self._order_index(element) * _ROW_HEIGHT
            ),
            width=width or 0.0,
            height=height or 0.0,
        )

    def image_source(self, element: Tag) -> str | None:
        """Absolute URL of an image element (src, lazy attrs, srcset)."""
        for name in ("src", "data-src", "data-lazy-src", "data-original"):
            candidate = self.absolute_url(self.attr(element, name))
            if candidate:
                return candidate
        for name in ("srcset", "data-srcset"):
            candidate = self.absolute_url(
                largest_srcset_candidate(self.attr(element, name))
            )
            if candidate:
                return candidate
        if element.name != "img":
            return self.absolute_url(self.attr(element, "content"))
        return None

    def largest_visible_image(
        self, min_side: int, preferred_side: int,
    ) -> Tag | None:
        """Largest visible image above *preferred_side*, else above *min_side*."""
        preferred: list[tuple[float, Tag]] = []
        acceptable: list[tuple[float, Tag]] = []
        for image in self.query_all("img"):
            if not self.is_visible(image):
                continue
            box = self.box(image)
            if box.width > preferred_side and box.height > preferred_side:
                preferred.append((box.area, image))
            elif box.width > min_side and box.height > min_side:
                acceptable.append((box.area, image))
        for pool in (preferred, acceptable):
            if pool:
                return max(pool, key=lambda item: item[0])[1]
        return None

    # ------------------------------------------------------------------
    # Document-level content
    # ------------------------------------------------------------------

    @property
    def title(self) -> str:
        """Text of the ``<title>`` element."""
        tag = self.soup.find("title")
        return self.text(tag) if isinstance(tag, Tag) else ""

    @property
    def base_url(self) -> str:
        base = self.soup.find("base", href=True)
        if isinstance(base, Tag):
            resolved = absolute_url(self.attr(base, "href"), self.url)
            if resolved:
                return resolved
        return self.url

    def absolute_url(self, src: str | None) -> str | None:
        """Resolve *src* against the document base URL."""
        return absolute_url(src, self.base_url)

    def body_text(self) -> str:
        body = self.soup.body
        return self.text(body if body is not None else self.soup)

    def text_nodes(self) -> Iterator[tuple[str, Tag]]:
        """Yield ``(text, parent)`` for every non-empty visible-content text node."""
        root = self.soup.body if self.soup.body is not None else self.soup
        for node in root.descendants:
            if not isinstance(node, NavigableString) or isinstance(
                node, Comment
            ):
                continue
            parent = node.parent
            if not isinstance(parent, Tag) or parent.name in _SKIP_TEXT_PARENTS:
                continue
            text = " ".join(str(node).split())
            if text:
                yield text, parent

    def json_ld_payloads(self) -> list[Any]:
        """Decoded JSON-LD documents; malformed scripts are skipped."""
        payloads: list[Any] = []
        scripts = self.soup.find_all(
            "script",
            attrs={"type": re.compile(r"ld\+json", re.I)},
        )
        for script in scripts:
            raw = script.string or script.get_text()
            if not raw or not raw.strip():
                continue
            try:
                payloads.append(json.loads(raw))
            except (json.JSONDecodeError, TypeError) as exc:
                logger.debug("Skipping malformed JSON-LD block: %s", exc)
        return payloads

    def inline_scripts(self) -> list[str]:
        """Source text of every inline (``src``-less) script."""
        return [
            script.string or script.get_text()
            for script in self.soup.find_all("script")
            if not script.has_attr("src")
        ]

    def script_sources(self) -> list[str]:
        """``src`` attribute of every external script."""
        return [
            self.attr(script, "src")
            for script in self.soup.find_all("script", src=True)
        ]

    # ------------------------------------------------------------------
    # Reveal triggers
    # ------------------------------------------------------------------

    def on_activate(self, selector: str, handler: ActivationHandler) -> None:
        """Register the behaviour run when a matching element is activated."""
        self._activation_handlers.append((selector, handler))

    def activate(self, element: Tag) -> bool:
        """Run the activation handlers matching *element*.

        Returns ``True`` when at least one handler ran.
        """
        ran = False
        for selector, handler in list(self._activation_handlers):
            if self.matches(element, selector):
                handler(self, element)
                ran = True
        if ran:
            self._order = None
        return ran

    @contextlib.contextmanager
    def intercept_default_actions(self) -> Iterator[None]:
        """Neutralise navigation and form submission for the duration."""
        self._intercept_depth += 1
        try:
            yield
        finally:
            self._intercept_depth -= 1

    @property
    def intercepting(self) -> bool:
        return self._intercept_depth > 0

    def navigate(self, url: str) -> bool:
        """Ask the host to navigate; dropped while intercepting."""
        if self.intercepting:
            logger.info("Intercepted navigation to %s", url)
            return False
        if self._navigator is None:
            return False
        self._navigator(url)
        return True

    def submit(self, form: Tag) -> bool:
        """Submit *form* through the host; dropped while intercepting."""
        action = self.absolute_url(self.attr(form, "action")) or self.url
        if self.intercepting:
            logger.info("Intercepted form submission to %s", action)
            return False
        return self.navigate(action)

    def wait_for(
        self,
        selectors: list[str],
        timeout: float,
        interval: float,
    ) -> Tag | None:
        """Poll for *selectors* until found or *timeout* elapses."""
        attempts = max(1, int(timeout / interval) if interval > 0 else 1)
        for attempt in range(attempts + 1):
            element = self.find(selectors)
            if element is not None:
                return element
            if attempt < attempts:
                time.sleep(interval)
        return None
