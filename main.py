# main.py

"""Entry point for fx_convert (interactive form or headless CLI)."""

import argparse
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("fx_convert.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="fx_convert",
        description="Convert amounts between currencies using cached rates.",
        epilog=(
            f"Set {Settings.API_KEY_ENV} (environment or .env) to fetch "
            "live rates; without it the built-in defaults are used."
        ),
    )
    parser.add_argument(
        "amount",
        nargs="?",
        default=None,
        help="Amount to convert. Omit to launch the interactive form.",
    )
    parser.add_argument(
        "source",
        nargs="?",
        default=None,
        help="Source currency code (e.g. USD).",
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help="Target currency code (e.g. EUR).",
    )
    parser.add_argument(
        "-l",
        "--list",
        action="store_true",
        default=False,
        dest="list_currencies",
        help="List the currencies available for conversion.",
    )
    parser.add_argument(
        "-r",
        "--rates-file",
        default=None,
        dest="rates_file",
        help=f"Rate cache file (default: {Settings.RATES_PATH.name}).",
    )
    return parser


def _run_tui(rates_file: str | None) -> None:
    """Launch the interactive Textual form."""
    from pathlib import Path

    from src.services.rate_refresher import RateRefresher
    from src.storage.rate_store import RateStore
    from src.ui.app import FxConvertApp

    store = RateStore(Path(rates_file)) if rates_file else RateStore()
    try:
        app = FxConvertApp(RateRefresher(store=store))
        app.run()
    except Exception:
        logger.critical("Fatal error during TUI run", exc_info=True)
        raise
    finally:
        logger.info("fx_convert TUI shutting down")


def _run_cli(args: argparse.Namespace) -> None:
    """Run a single headless conversion and exit."""
    from src.cli.runner import cli_convert

    exit_code = cli_convert(
        amount_text=args.amount,
        source=args.source,
        target=args.target,
        rates_file=args.rates_file,
    )
    sys.exit(exit_code)


def _run_list(rates_file: str | None) -> None:
    """Print the available currencies and exit."""
    from src.cli.runner import run_list_currencies

    sys.exit(run_list_currencies(rates_file))


def main() -> None:
    """Route to the form (no args), listing, or headless conversion."""
    log_file = setup_logging()
    logger.info("fx_convert starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    if args.list_currencies:
        _run_list(args.rates_file)
    elif args.amount is None:
        _run_tui(args.rates_file)
    elif args.source is None or args.target is None:
        parser.error("AMOUNT requires both SOURCE and TARGET currencies")
    else:
        _run_cli(args)


if __name__ == "__main__":
    main()
