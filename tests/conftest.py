# tests/conftest.py

"""Shared pytest fixtures for the detector tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from product_detector.config.settings import Settings


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep so fetch retries and reveal waits run instantly."""
    with patch("time.sleep"):
        yield


@pytest.fixture(autouse=True)
def isolated_logs_dir(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> Path:
    """Keep run logs written during tests out of the project tree."""
    logs_dir = tmp_path / "logs"
    monkeypatch.setattr(Settings, "LOGS_DIR", logs_dir)
    return logs_dir
