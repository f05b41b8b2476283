# tests/test_rate_refresher.py

"""Tests for the RateRefresher staleness and fallback policy."""

import json
import os
import tempfile
import time
import unittest
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

from src.config.settings import Settings
from src.models.errors import SnapshotDecodeError, SnapshotWriteError
from src.models.rate_snapshot import RateSnapshot, default_snapshot
from src.services.rate_refresher import (
    RateRefresher,
    RefreshOutcome,
    resolve_api_key,
)
from src.storage.rate_store import RateStore

NOW = 1_750_000_000.0


def _response(status: int = 200, body: Any = None) -> MagicMock:
    """Build a fake curl_cffi response."""
    resp = MagicMock()
    resp.status_code = status
    resp.text = body if isinstance(body, str) else json.dumps(body)
    return resp


def _api_body(timestamp: int = int(NOW)) -> dict[str, Any]:
    return {
        "disclaimer": "Usage subject to terms",
        "license": "https://openexchangerates.org/license",
        "timestamp": timestamp,
        "base": "USD",
        "rates": {"USD": 1, "EUR": 0.95, "GBP": 0.8, "KWD": 0.31},
    }


class TestRateRefresher(unittest.TestCase):
    """refresh() decision table."""

    def setUp(self) -> None:
        self.tmp_dir = Path(tempfile.mkdtemp())
        self.store = RateStore(self.tmp_dir / "data.json")
        self.session = MagicMock()

    def _refresher(self, api_key: str | None = "secret") -> RateRefresher:
        return RateRefresher(
            store=self.store,
            api_key=api_key,
            session=self.session,
            clock=lambda: NOW,
        )

    def _seed(self, age: float) -> RateSnapshot:
        snap = RateSnapshot(int(NOW - age), "USD", {"EUR": 0.9, "JPY": 150.0})
        self.store.write(snap)
        return snap

    # ── No credential ────────────────────────────────────

    def test_no_api_key_returns_defaults_without_reading(self) -> None:
        """Missing key short-circuits to defaults; the cache is untouched."""
        self.store.read = MagicMock()  # type: ignore[method-assign]
        result = self._refresher(api_key=None).refresh()
        self.assertEqual(result.outcome, RefreshOutcome.DEFAULTS)
        self.assertEqual(result.snapshot, default_snapshot())
        self.store.read.assert_not_called()
        self.session.get.assert_not_called()

    def test_api_key_resolved_from_environment(self) -> None:
        """The env var is consulted when no key is injected."""
        self._seed(age=11 * 3600)
        self.session.get.return_value = _response(body=_api_body())
        with patch.dict(os.environ, {Settings.API_KEY_ENV: "from-env"}):
            result = self._refresher(api_key=None).refresh()
        self.assertEqual(result.outcome, RefreshOutcome.REFRESHED)
        url = self.session.get.call_args[0][0]
        self.assertIn("app_id=from-env", url)

    def test_blank_env_key_counts_as_missing(self) -> None:
        """Whitespace-only keys are treated as absent."""
        with patch.dict(os.environ, {Settings.API_KEY_ENV: "   "}):
            self.assertIsNone(resolve_api_key())

    # ── Cache hit ────────────────────────────────────────

    def test_fresh_snapshot_is_cache_hit(self) -> None:
        """A snapshot taken now is returned without network access."""
        seeded = self._seed(age=0)
        result = self._refresher().refresh()
        self.assertEqual(result.outcome, RefreshOutcome.CACHED)
        self.assertEqual(result.snapshot, seeded)
        self.session.get.assert_not_called()

    def test_just_under_threshold_is_cache_hit(self) -> None:
        """Age strictly below 10 hours is still fresh."""
        self._seed(age=Settings.STALENESS_THRESHOLD - 1)
        result = self._refresher().refresh()
        self.assertEqual(result.outcome, RefreshOutcome.CACHED)

    def test_first_run_with_key_seeds_and_uses_defaults(self) -> None:
        """No cache file: defaults stamped at process start are written."""
        refresher = RateRefresher(
            store=self.store, api_key="secret", session=self.session
        )
        result = refresher.refresh()
        self.assertEqual(result.outcome, RefreshOutcome.CACHED)
        self.assertTrue(self.store.exists())
        self.session.get.assert_not_called()

    # ── Stale + network failure ──────────────────────────

    def test_stale_with_network_error_returns_stale(self) -> None:
        """A transport error degrades to the stale snapshot."""
        seeded = self._seed(age=11 * 3600)
        self.session.get.side_effect = ConnectionError("offline")
        with self.assertLogs("fx_convert.refresher", level="WARNING"):
            result = self._refresher().refresh()
        self.assertEqual(result.outcome, RefreshOutcome.STALE)
        self.assertEqual(result.snapshot, seeded)
        self.assertEqual(self.store.read(), seeded)

    def test_stale_with_http_error_returns_stale(self) -> None:
        """A non-200 status is treated like a network failure."""
        seeded = self._seed(age=11 * 3600)
        self.session.get.return_value = _response(
            status=401, body={"error": True, "message": "invalid_app_id"}
        )
        result = self._refresher().refresh()
        self.assertEqual(result.outcome, RefreshOutcome.STALE)
        self.assertEqual(result.snapshot, seeded)

    def test_get_current_rates_does_not_raise_on_network_error(self) -> None:
        """get_current_rates returns the stale snapshot on failure."""
        seeded = self._seed(age=11 * 3600)
        self.session.get.side_effect = TimeoutError("timed out")
        self.assertEqual(self._refresher().get_current_rates(), seeded)

    # ── Successful refresh ───────────────────────────────

    def test_stale_snapshot_is_refreshed_and_persisted(self) -> None:
        """A good response replaces the cache wholesale."""
        self._seed(age=11 * 3600)
        self.session.get.return_value = _response(body=_api_body())
        result = self._refresher().refresh()

        self.assertEqual(result.outcome, RefreshOutcome.REFRESHED)
        self.assertEqual(result.snapshot.timestamp, int(NOW))
        self.assertEqual(
            dict(result.snapshot.rates),
            {"EUR": 0.95, "GBP": 0.8, "KWD": 0.31},
        )
        self.assertEqual(self.store.read(), result.snapshot)
        self.assertNotIn("JPY", self.store.read().rates)

    def test_request_uses_key_and_timeout(self) -> None:
        """The GET carries the key and the configured timeout."""
        self._seed(age=11 * 3600)
        self.session.get.return_value = _response(body=_api_body())
        self._refresher().refresh()
        args, kwargs = self.session.get.call_args
        self.assertEqual(
            args[0], Settings.RATES_API_URL.format(api_key="secret")
        )
        self.assertEqual(kwargs["timeout"], Settings.REQUEST_TIMEOUT)

    # ── Fatal paths ──────────────────────────────────────

    def test_malformed_response_is_fatal(self) -> None:
        """A reachable service returning garbage raises."""
        seeded = self._seed(age=11 * 3600)
        self.session.get.return_value = _response(body="<html>oops</html>")
        with self.assertRaises(SnapshotDecodeError):
            self._refresher().refresh()
        self.assertEqual(self.store.read(), seeded)

    def test_response_missing_rates_is_fatal(self) -> None:
        """Valid JSON without a rates object raises."""
        self._seed(age=11 * 3600)
        self.session.get.return_value = _response(
            body={"timestamp": int(NOW), "base": "USD"}
        )
        with self.assertRaises(SnapshotDecodeError):
            self._refresher().refresh()

    def test_write_failure_is_fatal(self) -> None:
        """A snapshot that cannot be persisted fails the refresh."""
        self._seed(age=11 * 3600)
        self.session.get.return_value = _response(body=_api_body())
        with patch.object(
            self.store, "write", side_effect=SnapshotWriteError("read-only")
        ):
            with self.assertRaises(SnapshotWriteError):
                self._refresher().refresh()

    def test_corrupt_cache_is_fatal(self) -> None:
        """A corrupt cache file is surfaced, not replaced."""
        self.store.path.write_text("garbage", encoding="utf-8")
        with self.assertRaises(SnapshotDecodeError):
            self._refresher().refresh()
        self.session.get.assert_not_called()

    # ── Currency listing ─────────────────────────────────

    def test_list_currencies_from_defaults(self) -> None:
        """Fresh install lists exactly the default codes."""
        codes = self._refresher().list_available_currencies()
        self.assertEqual(
            codes,
            {
                "USD", "EUR", "GBP", "JPY", "AUD", "CAD",
                "CHF", "CNY", "INR", "NZD", "BRL",
            },
        )

    def test_list_currencies_from_cache(self) -> None:
        """Listing reflects the persisted snapshot."""
        self._seed(age=0)
        self.assertEqual(
            self._refresher().list_available_currencies(),
            {"USD", "EUR", "JPY"},
        )

    def test_list_currencies_falls_back_on_corrupt_cache(self) -> None:
        """A read error falls back to the default codes."""
        self.store.path.write_text("garbage", encoding="utf-8")
        codes = self._refresher().list_available_currencies()
        self.assertEqual(codes, default_snapshot().currencies)

    # ── Session lifecycle ────────────────────────────────

    def test_close_releases_session(self) -> None:
        """close() closes an injected session once."""
        refresher = self._refresher()
        refresher.close()
        refresher.close()
        self.session.close.assert_called_once()

    def test_default_clock_is_wall_time(self) -> None:
        """A snapshot stamped now is fresh with the real clock."""
        self.store.write(RateSnapshot(int(time.time()), "USD", {"EUR": 0.9}))
        refresher = RateRefresher(
            store=self.store, api_key="secret", session=self.session
        )
        self.assertEqual(refresher.refresh().outcome, RefreshOutcome.CACHED)


if __name__ == "__main__":
    unittest.main()
