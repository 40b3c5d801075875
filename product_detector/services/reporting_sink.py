# product_detector/services/reporting_sink.py

"""One-way channels that deliver record dicts to the host."""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, TextIO

logger = logging.getLogger("product_detector.sink")


class ReportingSink(ABC):
    """Receives JSON-serialisable ``ProductRecord.to_dict()`` payloads."""

    @abstractmethod
    def send(self, payload: dict[str, Any]) -> None:
        ...


class CallbackSink(ReportingSink):
    """Hands every payload to a host callback."""

    def __init__(self, callback: Callable[[dict[str, Any]], None]) -> None:
        self._callback = callback

    def send(self, payload: dict[str, Any]) -> None:
        self._callback(payload)


class JsonLinesSink(ReportingSink):
    """Writes one JSON document per line to *stream*."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def send(self, payload: dict[str, Any]) -> None:
        self._stream.write(json.dumps(payload, ensure_ascii=False) + "\n")
        self._stream.flush()
        logger.debug("Sent record for %s", payload.get("url"))
