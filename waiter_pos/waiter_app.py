"""Main Textual app class."""

from __future__ import annotations

import logging

from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from waiter_pos.constant import CATEGORY_ALL, CATEGORY_FILTERS
from waiter_pos.errors import PosError
from waiter_pos.item_entry_modal import ItemEntry, ItemEntryModal
from waiter_pos.models import ActivationResult, MenuItem
from waiter_pos.prompt_modal import ConfirmModal, PromptModal
from waiter_pos.rendering import format_cart_line, format_category_tabs, format_menu_row
from waiter_pos.workflow import OrderingWorkflow, Stage

logger = logging.getLogger(__name__)


class WaiterOrderApp(App):
    """A Textual app for taking table orders and sending them to the backend."""

    TITLE = "Waiter POS"
    SUB_TITLE = "Table orders"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #cart-pane {
        width: 2fr;
        border: round $primary;
        padding: 1;
    }

    #menu-pane {
        width: 3fr;
        border: round $secondary;
        padding: 1;
    }

    #search-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #category-tabs {
        margin-bottom: 1;
    }

    #results {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #cart-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    BINDINGS = [
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("tab", "cycle_category(1)", "Next category"),
        ("enter", "select", "Select"),
        ("backspace", "backspace_search", "Delete search char"),
        ("escape", "back", "Back"),
        Binding("ctrl+s", "continue", "Continue / Submit", priority=True),
        ("ctrl+d", "remove_selected", "Remove one"),
        ("ctrl+r", "refresh_menu", "Refresh menu"),
        ("ctrl+l", "clear_order", "Clear order"),
        ("ctrl+t", "change_table", "Change table"),
        ("ctrl+w", "change_waiter", "Change waiter"),
        ("ctrl+e", "change_server", "Change server"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, workflow: OrderingWorkflow) -> None:
        super().__init__()
        self.workflow = workflow
        self.category = CATEGORY_ALL
        self.search_text = ""
        self.selected_index = 0
        self.line_index = 0
        self.system_status = ""
        self.busy = False
        self.show_device_id = False
        self.menu_requested = False

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="cart-pane"):
                yield Static("Order", id="cart-title", classes="pane-title")
                yield Static("(no items yet)", id="cart-list")
            with Vertical(id="menu-pane"):
                yield Static(id="search-bar")
                yield Static(id="category-tabs")
                yield Static(id="results")

    def on_mount(self) -> None:
        logger.info("app mounted stage=%s", self.workflow.stage.value)
        self._sync_stage()

    # -- stage handling ------------------------------------------------

    def _modal_open(self) -> bool:
        return isinstance(self.screen, ModalScreen)

    def _locked(self) -> bool:
        """True while a modal is up or a backend call is in flight."""
        return self._modal_open() or self.busy

    def _sync_stage(self) -> None:
        """Open whatever prompt the current stage is waiting on, then redraw."""
        stage = self.workflow.stage
        if not self._modal_open() and not self.busy:
            session = self.workflow.session
            if stage is Stage.AWAITING_SESSION:
                if not session.waiter_id:
                    self._prompt_waiter()
                elif not session.endpoint:
                    self._prompt_endpoint()
            elif stage is Stage.AWAITING_TABLE:
                self._prompt_table()
            elif stage is Stage.BROWSING and not self.menu_requested:
                self.menu_requested = True
                self._load_menu()
        self._refresh_all()

    def _set_status(self, message: str) -> None:
        self.system_status = message
        self._refresh_all()

    def _run_intent(self, intent, *args) -> bool:
        """Call a workflow intent, turning any client error into a status message."""
        try:
            intent(*args)
        except PosError as exc:
            logger.info("%s rejected: %s", getattr(intent, "__name__", intent), exc)
            self._set_status(str(exc))
            return False
        return True

    def _prompt_waiter(self) -> None:
        self.push_screen(PromptModal("Waiter Code", "Waiter code"), self._on_waiter_entered)

    def _prompt_endpoint(self) -> None:
        self.push_screen(
            PromptModal("Server", "Server IP", value=self.workflow.session.endpoint), self._on_endpoint_entered
        )

    def _prompt_table(self) -> None:
        self.push_screen(
            PromptModal(
                "Table",
                "Table number",
                value=self.workflow.session.table_number,
                digits_only=True,
                max_length=4,
            ),
            self._on_table_entered,
        )

    def _on_waiter_entered(self, value: str | None) -> None:
        if value is not None and self._run_intent(self.workflow.configure, value, None):
            self.system_status = f"Welcome, {value}"
        self.call_later(self._sync_stage)

    def _on_endpoint_entered(self, value: str | None) -> None:
        if value is not None and self._run_intent(self.workflow.configure, None, value):
            self.system_status = f"Server set to {value}"
        self.call_later(self._sync_stage)

    def _on_table_entered(self, value: str | None) -> None:
        if value is not None and self._run_intent(self.workflow.select_table, value):
            self.system_status = f"You're at table {self.workflow.session.table_number}"
            self.selected_index = 0
        self.call_later(self._sync_stage)

    # -- backend calls ---------------------------------------------------

    @work(thread=True, exclusive=True, group="backend")
    def _activate(self) -> None:
        try:
            result = self.workflow.activate()
        except PosError as exc:
            self.call_from_thread(self._after_backend_error, str(exc))
            return
        self.call_from_thread(self._after_activation, result)

    @work(thread=True, exclusive=True, group="backend")
    def _fetch_menu(self, explicit: bool) -> None:
        try:
            items = self.workflow.refresh_menu() if explicit else self.workflow.load_menu()
        except PosError as exc:
            self.call_from_thread(self._after_backend_error, str(exc))
            return
        self.call_from_thread(self._after_menu_loaded, len(items))

    @work(thread=True, exclusive=True, group="backend")
    def _submit(self, customer_name: str) -> None:
        try:
            self.workflow.submit(customer_name)
        except PosError as exc:
            self.call_from_thread(self._after_backend_error, str(exc))
            return
        self.call_from_thread(self._after_submit, customer_name)

    def _start_backend_call(self, message: str) -> bool:
        if self.busy:
            return False
        self.busy = True
        self._set_status(message)
        return True

    def _load_menu(self, explicit: bool = False) -> None:
        if self._start_backend_call("Refreshing menu..." if explicit else "Loading menu..."):
            self._fetch_menu(explicit)

    def _after_backend_error(self, message: str) -> None:
        self.busy = False
        self._set_status(message)
        self._sync_stage()

    def _after_activation(self, result: ActivationResult) -> None:
        self.busy = False
        self.system_status = result.message
        self._sync_stage()

    def _after_menu_loaded(self, count: int) -> None:
        self.busy = False
        self.selected_index = 0
        self.system_status = f"{count} menu items"
        self._sync_stage()

    def _after_submit(self, customer_name: str) -> None:
        self.busy = False
        self.line_index = 0
        self.search_text = ""
        self.system_status = f"Order for {customer_name} submitted successfully!"
        self._sync_stage()

    # -- key handling ----------------------------------------------------

    def on_key(self, event: Key) -> None:
        if self._locked():
            return

        stage = self.workflow.stage
        if stage is Stage.AWAITING_ACTIVATION and event.character:
            key = event.character.lower()
            if key == "a":
                if not self.workflow.session.endpoint:
                    self._prompt_endpoint()
                elif self._start_backend_call("Activating..."):
                    self._activate()
                event.stop()
                return
            if key == "s":
                self._prompt_endpoint()
                event.stop()
                return
            if key == "i":
                self.show_device_id = not self.show_device_id
                self._refresh_all()
                event.stop()
                return
            return

        if stage is Stage.REVIEWING_ORDER and event.character in {"+", "-"}:
            self._adjust_selected_line(1 if event.character == "+" else -1)
            event.stop()
            return

        if stage is not Stage.BROWSING:
            return
        if not event.is_printable or not event.character or event.character in "\t\r\n":
            return

        self.search_text += event.character
        self.selected_index = 0
        self._refresh_all()
        event.stop()

    def action_move_cursor(self, delta: int) -> None:
        if self._modal_open():
            return
        if self.workflow.stage is Stage.BROWSING:
            results = self._filtered_results()
            self.selected_index = (self.selected_index + delta) % len(results) if results else 0
        elif self.workflow.stage is Stage.REVIEWING_ORDER:
            lines = self.workflow.cart
            self.line_index = (self.line_index + delta) % len(lines) if lines else 0
        self._refresh_all()

    def action_cycle_category(self, delta: int) -> None:
        if self._modal_open() or self.workflow.stage is not Stage.BROWSING:
            return
        idx = CATEGORY_FILTERS.index(self.category)
        self.category = CATEGORY_FILTERS[(idx + delta) % len(CATEGORY_FILTERS)]
        self.selected_index = 0
        self._refresh_all()

    def action_backspace_search(self) -> None:
        if self._modal_open() or self.workflow.stage is not Stage.BROWSING:
            return
        if not self.search_text:
            return
        self.search_text = self.search_text[:-1]
        self.selected_index = 0
        self._refresh_all()

    def action_select(self) -> None:
        if self._locked() or self.workflow.stage is not Stage.BROWSING:
            return
        item = self._selected_item()
        if item is None:
            return
        self.push_screen(ItemEntryModal(item, self.workflow.quantity_for(item.code)), self._on_item_entered)

    def _on_item_entered(self, entry: ItemEntry | None) -> None:
        if entry is None:
            return
        if self._run_intent(self.workflow.add_item, entry.item, entry.note, entry.quantity):
            self.system_status = f"Added {entry.quantity} x {entry.item.full_name}"
        self.call_later(self._refresh_all)

    def action_remove_selected(self) -> None:
        if self._locked():
            return
        if self.workflow.stage is Stage.REVIEWING_ORDER:
            self._adjust_selected_line(-1)
            return
        item = self._selected_item()
        if item is None:
            return
        self._run_intent(self.workflow.remove_item, item.code)
        self._refresh_all()

    def _adjust_selected_line(self, delta: int) -> None:
        lines = self.workflow.cart
        if not lines:
            return
        entry = lines[min(self.line_index, len(lines) - 1)]
        self._run_intent(self.workflow.adjust_line, entry.item.code, entry.note, delta)
        self._refresh_all()

    def action_refresh_menu(self) -> None:
        if self._locked() or self.workflow.stage is not Stage.BROWSING:
            return
        self._load_menu(explicit=True)

    def action_clear_order(self) -> None:
        if self._locked():
            return
        if self._run_intent(self.workflow.clear_order):
            self.system_status = "Order cleared"
        self._refresh_all()

    def action_change_table(self) -> None:
        if self._locked():
            return
        if self._run_intent(self.workflow.change_table):
            self.search_text = ""
        self._sync_stage()

    def action_change_waiter(self) -> None:
        if self._locked():
            return
        self.push_screen(ConfirmModal("You will change the Waiter Code."), self._on_change_waiter_confirmed)

    def _on_change_waiter_confirmed(self, confirmed: bool | None) -> None:
        if confirmed:
            self._run_intent(self.workflow.clear_waiter)
        self.call_later(self._sync_stage)

    def action_change_server(self) -> None:
        if self._locked():
            return
        self.push_screen(ConfirmModal("You will change the Server IP."), self._on_change_server_confirmed)

    def _on_change_server_confirmed(self, confirmed: bool | None) -> None:
        if confirmed and self._run_intent(self.workflow.clear_endpoint):
            self.menu_requested = False
        self.call_later(self._sync_stage)

    def action_back(self) -> None:
        if self._locked() or self.workflow.stage is not Stage.REVIEWING_ORDER:
            return
        self._run_intent(self.workflow.back_to_menu)
        self._refresh_all()

    def action_continue(self) -> None:
        if self._locked():
            return
        stage = self.workflow.stage
        if stage is Stage.BROWSING:
            if self._run_intent(self.workflow.review):
                self.line_index = 0
                self.system_status = "Review the order, then Ctrl+S to submit"
            self._refresh_all()
            return
        if stage is Stage.REVIEWING_ORDER:
            self.push_screen(
                PromptModal("Customer", "Customer name", value=self.workflow.customer_name),
                self._on_customer_entered,
            )

    def _on_customer_entered(self, value: str | None) -> None:
        if value is None:
            return
        if self._start_backend_call("Submitting order..."):
            self._submit(value)

    # -- rendering -------------------------------------------------------

    def _filtered_results(self) -> list[MenuItem]:
        return self.workflow.visible_items(self.category, self.search_text)

    def _selected_item(self) -> MenuItem | None:
        results = self._filtered_results()
        if not results:
            return None
        if self.selected_index >= len(results):
            self.selected_index = 0
        return results[self.selected_index]

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        if selected is None:
            start = 0
        else:
            start = max(0, selected - rows // 2)
            start = min(start, total - rows)

        return (start, start + rows)

    def _refresh_all(self) -> None:
        try:
            self._refresh_cart()
            self._refresh_search_bar()
            self._refresh_results()
        except NoMatches:
            return

    def _refresh_cart(self) -> None:
        title = self.query_one("#cart-title", Static)
        cart_widget = self.query_one("#cart-list", Static)
        session = self.workflow.session
        reviewing = self.workflow.stage is Stage.REVIEWING_ORDER

        heading = "Summary" if reviewing else "Order"
        if self.workflow.stage in (Stage.BROWSING, Stage.REVIEWING_ORDER):
            heading = f"{heading} - table {session.table_number}"
        title.update(Text(heading))

        lines = self.workflow.cart
        if not lines:
            cart_widget.update("(no items yet)")
            return

        selected = min(self.line_index, len(lines) - 1) if reviewing else None
        start, end = self._window_bounds(len(lines), self._visible_rows(cart_widget) // 2, selected)

        text = Text()
        if start > 0:
            text.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                text.append("\n")
            text.append("➤ " if idx == selected else "  ")
            text.append_text(format_cart_line(lines[idx]))
        if end < len(lines):
            text.append("\n⋮", style="dim")
        text.append(f"\n\nTotal items: {self.workflow.total_quantity}", style="bold")
        cart_widget.update(text)

    def _refresh_search_bar(self) -> None:
        bar = self.query_one("#search-bar", Static)
        stage = self.workflow.stage
        status = self.system_status or "Ready"

        if stage is Stage.BROWSING:
            text = Text()
            text.append("Search: ", style="bold")
            text.append(f"{self.search_text}|")
            hint = "Ctrl+S continue" if self.workflow.can_review else "Add items to continue"
            text.append(f"\nEnter add, Ctrl+D remove, Ctrl+R refresh, {hint}\n{status}", style="dim")
            bar.update(text)
            return

        if stage is Stage.REVIEWING_ORDER:
            bar.update(Text(f"Up/Down select, +/- quantity, Ctrl+S submit, Esc back\n{status}"))
            return

        if stage is Stage.AWAITING_ACTIVATION:
            bar.update(Text(f"Activate your device to access the menu.\nA activate, S set server, I device id\n{status}"))
            return

        bar.update(Text(status))

    def _refresh_results(self) -> None:
        tabs = self.query_one("#category-tabs", Static)
        results_widget = self.query_one("#results", Static)
        stage = self.workflow.stage

        if stage is Stage.AWAITING_ACTIVATION:
            tabs.update("")
            if self.show_device_id:
                results_widget.update(Text(f"Device ID: {self.workflow.session.device_id}"))
            else:
                results_widget.update("")
            return

        if stage is not Stage.BROWSING:
            tabs.update("")
            results_widget.update("")
            return

        tabs.update(format_category_tabs(self.category))
        results = self._filtered_results()
        if not results:
            results_widget.update("No results")
            return

        if self.selected_index >= len(results):
            self.selected_index = 0

        start, end = self._window_bounds(len(results), self._visible_rows(results_widget), self.selected_index)

        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            item = results[idx]
            lines.append("➤ " if idx == self.selected_index else "  ")
            lines.append_text(format_menu_row(item, self.workflow.quantity_for(item.code)))
        if end < len(results):
            lines.append("\n⋮", style="dim")

        results_widget.update(lines)
