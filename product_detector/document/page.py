# product_detector/document/page.py

"""Live page handle shared between the host and the detection scheduler.

The host owns the page: it replaces the markup as the document
mutates, changes the URL on same-document navigation, and signals
``unload`` when the document goes away.  Listeners subscribe to
:class:`PageEvent` notifications instead of observing a browser tree.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from product_detector.document.accessor import (
    ActivationHandler,
    DocumentAccessor,
)

logger = logging.getLogger("product_detector.page")

EventKind = Literal["mutation", "navigation", "unload"]


@dataclass(frozen=True)
class PageEvent:
    """A notification from the page to its listeners."""

    kind: EventKind
    url: str
    mutations: int = 0


PageListener = Callable[[PageEvent], None]


class Page:
    """Current URL and markup, plus an event channel for changes."""

    def __init__(
        self,
        url: str,
        html: str,
        navigator: Callable[[str], None] | None = None,
    ) -> None:
        self._url = url
        self._html = html
        self._navigator = navigator
        self._document: DocumentAccessor | None = None
        self._listeners: list[PageListener] = []
        self._activation_handlers: list[tuple[str, ActivationHandler]] = []

    @property
    def url(self) -> str:
        return self._url

    @property
    def html(self) -> str:
        return self._html

    def document(self) -> DocumentAccessor:
        """Parsed view of the current markup (rebuilt after changes)."""
        if self._document is None:
            document = DocumentAccessor(
                self._html, self._url, navigator=self._navigator
            )
            for selector, handler in self._activation_handlers:
                document.on_activate(selector, handler)
            self._document = document
        return self._document

    def on_activate(self, selector: str, handler: ActivationHandler) -> None:
        """Register a reveal behaviour applied to every parsed document."""
        self._activation_handlers.append((selector, handler))
        self._document = None

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, listener: PageListener) -> Callable[[], None]:
        """Add *listener*; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: PageEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as exc:
                logger.error(
                    "Page listener failed on %s event: %s",
                    event.kind,
                    exc,
                    exc_info=True,
                )

    # ------------------------------------------------------------------
    # Host-side changes
    # ------------------------------------------------------------------

    def mutate(self, html: str, mutations: int = 1) -> None:
        """Replace the markup after *mutations* DOM changes."""
        self._html = html
        self._document = None
        self._emit(PageEvent("mutation", self._url, mutations))

    def navigate(self, url: str, html: str | None = None) -> None:
        """Same-document URL change, optionally with new markup."""
        self._url = url
        if html is not None:
            self._html = html
        self._document = None
        self._emit(PageEvent("navigation", url))

    def unload(self) -> None:
        """The document is going away; listeners must tear down."""
        self._emit(PageEvent("unload", self._url))
        self._listeners.clear()
