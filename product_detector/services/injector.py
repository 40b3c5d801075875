# product_detector/services/injector.py

"""Host entry point: attach a fresh detector to the current page."""

import logging

from product_detector.document.page import Page
from product_detector.services.detection_engine import DetectionEngine
from product_detector.services.detection_scheduler import (
    CallLater,
    DetectionScheduler,
)
from product_detector.services.reporting_sink import ReportingSink

logger = logging.getLogger("product_detector.injector")


def inject_detector(
    page: Page,
    sink: ReportingSink,
    call_later: CallLater | None = None,
    engine: DetectionEngine | None = None,
) -> DetectionScheduler:
    """Build engine and scheduler for this page lifecycle and start them.

    Call once after every full page load.  Nothing carries over from a
    previous page: strategies, timers and the last reported record all
    belong to the returned scheduler.
    """
    scheduler = DetectionScheduler(
        page,
        engine or DetectionEngine(),
        sink,
        call_later=call_later,
    )
    scheduler.start()
    logger.info("Detector injected into %s", page.url)
    return scheduler
