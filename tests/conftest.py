# tests/conftest.py

"""Shared pytest fixtures for all fx_convert tests."""

from collections.abc import Generator
from pathlib import Path

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    """Keep tests away from the real API key and the real rate cache."""
    monkeypatch.delenv(Settings.API_KEY_ENV, raising=False)
    monkeypatch.setattr(Settings, "RATES_PATH", tmp_path / "data.json")
    yield
