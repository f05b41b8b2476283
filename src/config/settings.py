# src/config/settings.py

"""Central configuration for the fx_convert tool."""

from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the fx_convert tool."""

    # --- Remote rate service ---
    API_KEY_ENV: str = "CURRENCY_API"   # Env var holding the app_id
    RATES_API_URL: str = (
        "https://openexchangerates.org/api/latest.json?app_id={api_key}"
    )
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"

    # --- Cache ---
    STALENESS_THRESHOLD: int = 10 * 60 * 60  # Seconds before a refresh

    # --- Default rates (used without credentials or cache) ---
    DEFAULT_BASE: str = "USD"
    DEFAULT_RATES: dict[str, float] = {
        "EUR": 0.92,
        "GBP": 0.79,
        "JPY": 151.37,
        "AUD": 1.53,
        "CAD": 1.36,
        "CHF": 0.90,
        "CNY": 7.24,
        "INR": 83.31,
        "NZD": 1.65,
        "BRL": 5.04,
    }

    # --- Formatting ---
    ZERO_DECIMAL_CURRENCIES: frozenset[str] = frozenset(
        {"JPY", "KRW", "VND", "IDR", "CLP", "ISK", "HUF"}
    )
    THREE_DECIMAL_CURRENCIES: frozenset[str] = frozenset(
        {"BHD", "IQD", "KWD", "OMR"}
    )

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    RATES_PATH: Path = BASE_DIR / "data.json"
    LOGS_DIR: Path = BASE_DIR / "logs"
