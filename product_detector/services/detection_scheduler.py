# product_detector/services/detection_scheduler.py

"""Re-run detection as the page loads, mutates and navigates.

All work happens on one event loop.  The scheduler only suspends
between timer callbacks and page events; each detection pass runs
synchronously to completion.  Timers go through an injected
``call_later(delay, callback)`` so tests can drive time by hand.

Timer slots:

``detect``      initial run, and the re-run after a URL change
``retry``       linear-backoff retries until the budget is spent
``poll``        periodic safety-net run (slower once a product is found)
``debounce``    collapses a burst of mutations into one run
``navigation``  URL comparison for same-document navigation
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from product_detector.config.settings import Settings
from product_detector.document.page import Page, PageEvent
from product_detector.models.product import ProductRecord
from product_detector.services.detection_engine import DetectionEngine
from product_detector.services.reporting_sink import ReportingSink

logger = logging.getLogger("product_detector.scheduler")


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


CallLater = Callable[[float, Callable[[], None]], TimerHandle]


class DetectionScheduler:
    """Owns the timers and the last reported record for one page lifecycle."""

    def __init__(
        self,
        page: Page,
        engine: DetectionEngine,
        sink: ReportingSink,
        settings: Settings | None = None,
        call_later: CallLater | None = None,
    ) -> None:
        self.page = page
        self.engine = engine
        self.sink = sink
        self.settings = settings or Settings()
        self._call_later = call_later
        self._timers: dict[str, TimerHandle] = {}
        self._unsubscribe: Callable[[], None] | None = None
        self._running = False

        self.retry_count = 0
        self.product_found = False
        self.last_reported: ProductRecord | None = None
        self._last_url = page.url
        self._last_record: ProductRecord | None = None
        self._pending_mutations = 0
        self._exhaustion_reported = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    def pending_timers(self) -> list[str]:
        """Names of the timer slots currently armed."""
        return sorted(self._timers)

    def start(self) -> None:
        """Subscribe to the page and arm the initial timers."""
        if self._running:
            return
        if self._call_later is None:
            self._call_later = asyncio.get_running_loop().call_later
        self._running = True
        self._last_url = self.page.url
        self._unsubscribe = self.page.subscribe(self._on_page_event)
        self._schedule("detect", self.settings.INITIAL_DELAY, self._begin_detection)
        self._schedule(
            "navigation",
            self.settings.NAVIGATION_POLL_INTERVAL,
            self._navigation_tick,
        )
        logger.info("Detection scheduled for %s", self.page.url)

    def stop(self) -> None:
        """Cancel every timer and stop listening; nothing is reported after."""
        if not self._running:
            return
        self._running = False
        for name in list(self._timers):
            self._cancel(name)
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        logger.info("Detection stopped for %s", self.page.url)

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _schedule(
        self, name: str, delay: float, callback: Callable[[], None],
    ) -> None:
        self._cancel(name)
        if self._call_later is None:
            raise RuntimeError("Scheduler has no timer source; call start()")

        def fire() -> None:
            self._timers.pop(name, None)
            if self._running:
                callback()

        self._timers[name] = self._call_later(delay, fire)

    def _cancel(self, name: str) -> None:
        handle = self._timers.pop(name, None)
        if handle is not None:
            handle.cancel()

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def detect(self) -> ProductRecord:
        """Run one detection pass and forward the result if warranted."""
        url = self.page.url
        try:
            record = self.engine.run(url, self.page.document())
        except Exception as exc:
            logger.error("Detection pass failed on %s: %s", url, exc, exc_info=True)
            record = ProductRecord.fault(url, str(exc) or type(exc).__name__)
        self._last_record = record
        self._forward(record)
        return record

    def _begin_detection(self) -> None:
        record = self.detect()
        if not record.success:
            self._schedule_retry()
        self._schedule_poll()

    def _schedule_retry(self) -> None:
        if self.product_found or not self._running:
            return
        if self.retry_count >= self.settings.MAX_RETRIES:
            self._report_exhaustion()
            return
        self.retry_count += 1
        self._schedule(
            "retry",
            self.settings.RETRY_DELAY * self.retry_count,
            self._retry,
        )

    def _retry(self) -> None:
        if self.product_found:
            return
        logger.debug("Retry %d for %s", self.retry_count, self.page.url)
        if not self.detect().success:
            self._schedule_retry()

    def _report_exhaustion(self) -> None:
        if self._exhaustion_reported:
            return
        self._exhaustion_reported = True
        logger.warning(
            "No product after %d retries on %s",
            self.retry_count,
            self.page.url,
        )
        record = self._last_record
        if record is not None and record.error is None:
            self._send(record)

    def _schedule_poll(self) -> None:
        interval = (
            self.settings.STEADY_STATE_INTERVAL
            if self.product_found
            else self.settings.CHECK_INTERVAL
        )
        self._schedule("poll", interval, self._poll)

    def _poll(self) -> None:
        self.detect()
        self._schedule_poll()

    # ------------------------------------------------------------------
    # Forwarding
    # ------------------------------------------------------------------

    def _forward(self, record: ProductRecord) -> None:
        """Send faults always, successes only when they changed."""
        if record.error is not None:
            self._send(record)
            return
        if not record.success:
            return
        if not record.is_product_page or record.url != self.page.url:
            logger.debug("Discarding record for stale page %s", record.url)
            return
        last = self.last_reported
        if (
            last is not None
            and last.title == record.title
            and last.price == record.price
        ):
            return
        self._send(record)
        self.last_reported = record
        if not self.product_found:
            self.product_found = True
            self._cancel("retry")
            logger.info(
                "Product found on %s; polling every %.1fs",
                record.url,
                self.settings.STEADY_STATE_INTERVAL,
            )

    def _send(self, record: ProductRecord) -> None:
        if not self._running:
            return
        try:
            self.sink.send(record.to_dict())
        except Exception as exc:
            logger.error("Reporting sink failed: %s", exc, exc_info=True)

    # ------------------------------------------------------------------
    # Page events
    # ------------------------------------------------------------------

    def _on_page_event(self, event: PageEvent) -> None:
        if event.kind == "unload":
            self.stop()
        elif event.kind == "navigation":
            self._check_navigation()
        elif event.kind == "mutation":
            self._pending_mutations += max(event.mutations, 1)
            self._schedule(
                "debounce",
                self.settings.MUTATION_DEBOUNCE,
                self._flush_mutations,
            )

    def _flush_mutations(self) -> None:
        count = self._pending_mutations
        self._pending_mutations = 0
        if (
            not self.product_found
            or count > self.settings.SIGNIFICANT_MUTATION_COUNT
        ):
            logger.debug("Re-detecting after %d mutations", count)
            self.detect()

    def _navigation_tick(self) -> None:
        self._check_navigation()
        self._schedule(
            "navigation",
            self.settings.NAVIGATION_POLL_INTERVAL,
            self._navigation_tick,
        )

    def _check_navigation(self) -> None:
        url = self.page.url
        if url == self._last_url:
            return
        logger.info("URL changed from %s to %s", self._last_url, url)
        self._last_url = url
        for name in ("detect", "retry", "poll", "debounce"):
            self._cancel(name)
        self.retry_count = 0
        self.product_found = False
        self.last_reported = None
        self._last_record = None
        self._pending_mutations = 0
        self._exhaustion_reported = False
        self._send(ProductRecord.navigation(url))
        self._schedule(
            "detect",
            self.settings.NAVIGATION_SETTLE_DELAY,
            self._begin_detection,
        )
