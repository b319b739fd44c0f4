"""Textual dashboard - status bar, order entry, bid/ask ladders, trades and order history."""

from __future__ import annotations

from typing import Any

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import Button, DataTable, Footer, Header, Input, Select, Static

from minidex.book import BookView
from minidex.cli.render import format_number, format_time
from minidex.config import Settings
from minidex.models import Order
from minidex.sync import ExchangeSync


class StatusBar(Static):
    """Counts, LIVE/IDLE and the current error banner."""

    summary = reactive("Loading...")
    live = reactive(False)
    busy = reactive(False)
    error = reactive("")

    def render(self) -> str:
        state = "[bold green]LIVE[/]" if self.live else "[dim]IDLE[/]"
        text = f"{self.summary}  |  {state}"
        if self.busy:
            text += "  |  Working..."
        if self.error:
            text += f"\n[bold red]{self.error}[/]"
        return text


class LadderTable(DataTable):
    """One side of the book. Row keys are order ids."""

    def on_mount(self) -> None:
        self.cursor_type = "row"
        self.add_columns("ID", "Qty", "Price", "Status", "Created")

    def show(self, ladder: tuple[Order, ...]) -> None:
        self.clear()
        for o in ladder:
            self.add_row(
                f"#{o.id}",
                format_number(o.quantity),
                f"${format_number(o.price)}",
                o.status.value,
                format_time(o.created_at),
                key=o.id,
            )

    def highlighted_order_id(self) -> str | None:
        if self.row_count == 0:
            return None
        row_key, _ = self.coordinate_to_cell_key(self.cursor_coordinate)
        return row_key.value


class MiniDexTUI(App[None]):
    """MiniDex dashboard - polls the service and renders the projected book."""

    TITLE = "Mini Exchange Dashboard"
    CSS = """
    #entry { height: auto; }
    #entry Input { width: 1fr; }
    #side { width: 16; }
    #ladders { height: 1fr; }
    #ladders > Vertical { width: 1fr; }
    #trades, #history { height: 1fr; }
    """
    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "refresh_book", "Refresh"),
        ("x", "cancel_order", "Cancel highlighted"),
        ("ctrl+s", "submit_order", "Submit order"),
    ]

    def __init__(self, sync: ExchangeSync, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._sync = sync
        self._shown_version = -1

    def compose(self) -> ComposeResult:
        yield Header()
        yield StatusBar(id="status")
        with Horizontal(id="entry"):
            yield Select([("Buy", "buy"), ("Sell", "sell")], value="buy", allow_blank=False, id="side")
            yield Input(placeholder="Price", id="price")
            yield Input(placeholder="Quantity", id="quantity")
            yield Button("Submit", id="submit", variant="primary")
        with Horizontal(id="ladders"):
            with Vertical():
                yield Static("[bold green]Buy Orders[/]")
                yield LadderTable(id="buys")
            with Vertical():
                yield Static("[bold red]Sell Orders[/]")
                yield LadderTable(id="sells")
        yield Static("[bold]Trades[/]")
        yield DataTable(id="trades")
        yield Static("[bold]Order History[/]")
        yield DataTable(id="history")
        yield Footer()

    async def on_mount(self) -> None:
        self.query_one("#trades", DataTable).add_columns("Buy", "Sell", "Qty", "Price", "Time")
        self.query_one("#history", DataTable).add_columns("ID", "Type", "Price", "Qty", "Status", "Created")
        await self._sync.start()
        self.set_interval(0.5, self._refresh_view)

    def _refresh_view(self) -> None:
        view = self._sync.view()
        if view.version == self._shown_version:
            return
        self._shown_version = view.version
        self._render_view(view)

    def _render_view(self, view: BookView) -> None:
        status = self.query_one(StatusBar)
        status.summary = view.summary
        status.live = view.live
        status.busy = view.busy
        status.error = view.last_error or ""
        for widget in self.query("#entry Select, #entry Input, #entry Button"):
            widget.disabled = view.busy
        self.query_one("#buys", LadderTable).show(view.buys)
        self.query_one("#sells", LadderTable).show(view.sells)
        trades = self.query_one("#trades", DataTable)
        trades.clear()
        for t in view.trades:
            trades.add_row(
                t.buy_order_id,
                t.sell_order_id,
                format_number(t.quantity),
                f"${format_number(t.price)}",
                format_time(t.created_at),
            )
        history = self.query_one("#history", DataTable)
        history.clear()
        for o in view.orders:
            history.add_row(
                f"#{o.id}",
                o.side.value.upper(),
                f"${format_number(o.price)}",
                format_number(o.quantity),
                o.status.value,
                format_time(o.created_at),
            )

    def action_refresh_book(self) -> None:
        if not self._sync.snapshot.busy:
            self.run_worker(self._sync.refresh(), exclusive=False)

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id == "side" and isinstance(event.value, str):
            self._sync.update_form(side=event.value)

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id in ("price", "quantity"):
            self._sync.update_form(**{event.input.id: event.value})

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.action_submit_order()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "submit":
            self.action_submit_order()

    def action_submit_order(self) -> None:
        if not self._sync.snapshot.busy:
            self.run_worker(self._submit_form(), exclusive=False)

    async def _submit_form(self) -> None:
        result = await self._sync.submit_form()
        if result.ok:
            self._show_form()

    def _show_form(self) -> None:
        form = self._sync.form
        self.query_one("#side", Select).value = form.side
        self.query_one("#price", Input).value = form.price
        self.query_one("#quantity", Input).value = form.quantity

    def action_cancel_order(self) -> None:
        focused = self.focused
        if not isinstance(focused, LadderTable):
            self.notify("Select an order in the buy or sell ladder first", severity="warning")
            return
        order_id = focused.highlighted_order_id()
        if order_id is None:
            return
        self.run_worker(self._sync.cancel(order_id), exclusive=False)

    async def on_unmount(self) -> None:
        await self._sync.stop()


def run_tui(settings: Settings) -> None:
    """Entry point: build the sync engine from settings and run the dashboard."""
    sync = ExchangeSync.from_settings(settings)
    app = MiniDexTUI(sync)
    app.run()
