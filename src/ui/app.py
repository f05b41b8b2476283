# src/ui/app.py

"""Terminal form for fx_convert: pick currencies, enter an amount."""

import asyncio
import logging

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import (
    Button,
    Footer,
    Header,
    Input,
    Select,
    Static,
)

from src.cli.runner import render_conversion
from src.models.errors import FxError, InvalidAmountError
from src.models.rate_snapshot import RateSnapshot
from src.services.converter import (
    ConversionResult,
    build_conversion,
    validate_amount,
)
from src.services.rate_refresher import (
    RateRefresher,
    RefreshOutcome,
)

logger = logging.getLogger("fx_convert.ui")


class FxConvertApp(App[object]):
    """Terminal form for converting an amount between two currencies."""

    DEFAULT_CSS = """
    #main_container {
        padding: 1 2;
    }
    #title {
        text-style: bold;
        margin-bottom: 1;
    }
    #currency_row Select {
        width: 1fr;
    }
    #result {
        margin-top: 1;
        padding: 1 2;
        border: round $accent;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+s", "swap", "Swap"),
    ]

    def __init__(self, refresher: RateRefresher | None = None) -> None:
        super().__init__()
        self.refresher = refresher if refresher is not None else RateRefresher()
        self.snapshot: RateSnapshot | None = None
        self.currencies: list[str] = []
        self.last_result: ConversionResult | None = None

    def compose(self) -> ComposeResult:
        """Build the widget tree for the form."""
        yield Header()
        yield Container(
            Static("💱 Currency Converter", id="title"),
            Horizontal(
                Select[str](
                    [], prompt="Source currency", id="source_select"
                ),
                Select[str](
                    [], prompt="Target currency", id="target_select"
                ),
                id="currency_row",
            ),
            Input(placeholder="Enter amount", id="amount_input"),
            Button("Convert", variant="primary", id="convert_btn"),
            Static("Loading rates...", id="status"),
            Static("", id="result"),
            id="main_container",
        )
        yield Footer()

    async def on_mount(self) -> None:
        """Load rates off the event loop, then fill the currency pickers."""
        await self.load_rates()

    async def load_rates(self) -> None:
        """Refresh the snapshot and populate both currency selects."""
        status = self.query_one("#status", Static)
        try:
            refresh = await asyncio.to_thread(self.refresher.refresh)
        except FxError as exc:
            logger.error("Loading rates failed: %s", exc, exc_info=True)
            status.update(Text(f"❌ {exc}"))
            self.notify(str(exc), severity="error")
            return
        finally:
            self.refresher.close()

        self.snapshot = refresh.snapshot
        # Only offer codes the conversion snapshot can actually convert
        self.currencies = sorted(self.snapshot.currencies)
        options = [(code, code) for code in self.currencies]
        self.query_one("#source_select", Select).set_options(options)
        self.query_one("#target_select", Select).set_options(options)

        if refresh.outcome is RefreshOutcome.DEFAULTS:
            status.update("⚠️ No API key found, using default rates")
        elif refresh.outcome is RefreshOutcome.STALE:
            status.update(f"⚠️ Using cached rates ({refresh.reason})")
        else:
            status.update(
                f"✅ {len(self.currencies)} currencies "
                f"(base {self.snapshot.base})"
            )

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button click events."""
        if event.button.id == "convert_btn":
            self.perform_conversion()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        """Handle Enter key in the amount input."""
        if event.input.id == "amount_input":
            self.perform_conversion()

    def _selected(self, selector: str) -> str | None:
        value = self.query_one(selector, Select).value
        return value if isinstance(value, str) else None

    def perform_conversion(self) -> None:
        """Validate the form and show the converted amount."""
        result_view = self.query_one("#result", Static)
        if self.snapshot is None:
            self.notify("Rates are not loaded yet", severity="warning")
            return

        source = self._selected("#source_select")
        target = self._selected("#target_select")
        if source is None or target is None:
            self.notify(
                "Select both a source and a target currency",
                severity="warning",
            )
            return

        amount_text = self.query_one("#amount_input", Input).value
        try:
            amount = validate_amount(amount_text)
        except InvalidAmountError as exc:
            self.notify(str(exc), severity="error")
            result_view.update("")
            return

        try:
            self.last_result = build_conversion(
                amount, source, target, self.snapshot
            )
        except FxError as exc:
            logger.error("Conversion failed: %s", exc)
            self.notify(str(exc), severity="error")
            result_view.update("")
            return

        result_view.update(
            Text("\n".join(render_conversion(self.last_result)))
        )

    def action_swap(self) -> None:
        """Swap the source and target currencies."""
        source_select = self.query_one("#source_select", Select)
        target_select = self.query_one("#target_select", Select)
        source = self._selected("#source_select")
        target = self._selected("#target_select")
        if source is None or target is None:
            return
        source_select.value = target
        target_select.value = source
