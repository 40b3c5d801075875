# product_detector/config/settings.py

"""Central configuration for the product detector."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Read a boolean flag from the environment."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "t", "yes", "y", "on")


class Settings:
    """Central configuration for the product detector."""

    DEBUG: bool = _env_bool("PD_DEBUG", False)

    # --- Detection scheduling (seconds) ---
    INITIAL_DELAY: float = 1.0          # Settle delay before first run
    CHECK_INTERVAL: float = 1.0         # Aggressive poll period
    STEADY_STATE_INTERVAL: float = 5.0  # Poll period after a success
    MAX_RETRIES: int = 8                # Retry budget per URL
    RETRY_DELAY: float = 0.8            # Linear backoff step
    MUTATION_DEBOUNCE: float = 0.3      # Quiet period after DOM changes
    SIGNIFICANT_MUTATION_COUNT: int = 5  # Burst size worth re-checking
    NAVIGATION_POLL_INTERVAL: float = 0.5
    NAVIGATION_SETTLE_DELAY: float = 1.0
    REVEAL_WAIT_TIMEOUT: float = 0.2    # Bounded wait after a reveal click
    REVEAL_POLL_INTERVAL: float = 0.05

    # --- Classification ---
    CLASSIFIER_SCORE_THRESHOLD: int = 4

    # --- Imagery (pixels) ---
    MIN_IMAGE_SIDE: int = 100
    PREFERRED_IMAGE_SIDE: int = 200

    # --- Currency ---
    DEFAULT_CURRENCY: str = "USD"

    # --- Fetching ---
    REQUEST_DELAY: float = 1.0
    REQUEST_TIMEOUT: int = 15
    MAX_FETCH_RETRIES: int = 3
    MAX_DELAY_MULTIPLIER: int = 8
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "just a moment",
        "cf-turnstile",
        "verify you are human",
    ]
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9,tr;q=0.8",
        "sec-ch-ua": (
            '"Google Chrome";v="131", '
            '"Chromium";v="131", '
            '"Not_A Brand";v="24"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = (
        BASE_DIR / "product_detector" / "config" / "selectors.json"
    )
    LOGS_DIR: Path = Path(
        os.getenv("PD_LOGS_DIR", str(BASE_DIR / "logs"))
    )
    LOG_RETENTION: int = int(os.getenv("PD_LOG_RETENTION", "20"))

    # --- Extractor registries (loaded once per engine) ---
    SITE_EXTRACTORS: list[dict[str, str]] = [
        {
            "id": "mango",
            "label": "Mango",
            "extractor": (
                "product_detector.strategies.mango_strategy.MangoStrategy"
            ),
        },
    ]
    PLATFORM_EXTRACTORS: list[dict[str, str]] = [
        {
            "id": "shopify",
            "label": "Shopify",
            "extractor": (
                "product_detector.strategies.shopify_strategy.ShopifyStrategy"
            ),
        },
    ]

    # --- Host brand defaults (hostname fragment -> brand) ---
    SITE_BRANDS: dict[str, str] = {
        "zara.com": "Zara",
        "stradivarius.com": "Stradivarius",
        "louisvuitton.com": "Louis Vuitton",
        "mango.com": "Mango",
    }
    # URL fragments whose records are always priced in a fixed currency
    SITE_CURRENCIES: dict[str, str] = {
        "us.louisvuitton.com": "USD",
        "louisvuitton.com/eng-us": "USD",
    }
