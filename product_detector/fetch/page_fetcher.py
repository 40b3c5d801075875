# product_detector/fetch/page_fetcher.py

"""Fetch product pages for standalone (non-embedded) detection."""

import logging
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

import cloudscraper  # type: ignore[import-untyped]
from curl_cffi import requests as curl_requests

from product_detector.config.settings import Settings


@dataclass
class FetchedPage:
    """Final URL (after redirects) and the markup served there."""

    url: str
    html: str


class PageFetcher:
    """Browser-impersonating GET with retries and a cloudscraper fallback."""

    def __init__(self) -> None:
        self.logger = logging.getLogger("product_detector.fetch")
        self.settings = Settings()
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._current_delay: float = self.settings.REQUEST_DELAY
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    @staticmethod
    def _origin(url: str) -> str:
        parts = urlparse(url)
        return f"{parts.scheme}://{parts.netloc}/"

    def _is_challenge(self, text: str) -> bool:
        """True for bot-challenge interstitials instead of the real page."""
        lower = text.lower()
        for marker in self.settings.CHALLENGE_MARKERS:
            if marker in lower:
                self.logger.warning(
                    "Challenge page detected (marker: '%s')", marker,
                )
                return True
        return False

    def _escalate_delay(self) -> None:
        """Double the current delay up to the configured max."""
        max_delay = (
            self.settings.REQUEST_DELAY * self.settings.MAX_DELAY_MULTIPLIER
        )
        self._current_delay = min(self._current_delay * 2, max_delay)
        self.logger.warning(
            "Rate-limited, delay escalated to %.1fs", self._current_delay,
        )

    def _fetch_get(
        self, url: str, headers: dict[str, str],
    ) -> FetchedPage | None:
        for attempt in range(self.settings.MAX_FETCH_RETRIES):
            try:
                resp = self.session.get(
                    url, headers=headers, timeout=self._request_timeout,
                )
                if resp.status_code == 200:
                    if self._is_challenge(resp.text):
                        self._escalate_delay()
                        time.sleep(self._current_delay)
                        continue
                    self._current_delay = self.settings.REQUEST_DELAY
                    return FetchedPage(url=str(resp.url or url), html=resp.text)
                self.logger.warning(
                    "HTTP %d on attempt %d for %s",
                    resp.status_code,
                    attempt + 1,
                    url,
                )
                if resp.status_code in (429, 403):
                    self._escalate_delay()
                    time.sleep(self._current_delay)
            except Exception as exc:
                self.logger.warning(
                    "Request error on attempt %d: %s",
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
                time.sleep(self._current_delay * (attempt + 1))
        return None

    def fetch(self, url: str) -> FetchedPage | None:
        """Fetch *url*, falling back to cloudscraper when curl_cffi fails."""
        headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            "Referer": self._origin(url),
        }
        page = self._fetch_get(url, headers)
        if page is not None:
            return page

        self.logger.info("curl_cffi exhausted, falling back to cloudscraper")
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            fallback_resp: Any = scraper.get(
                url, headers=headers, timeout=self._request_timeout,
            )
            if fallback_resp.status_code == 200 and not self._is_challenge(
                str(fallback_resp.text)
            ):
                return FetchedPage(
                    url=str(fallback_resp.url or url),
                    html=str(fallback_resp.text),
                )
        except Exception as e:
            self.logger.error(
                "cloudscraper fallback also failed: %s", e, exc_info=True,
            )
        return None
