"""Add-to-cart modal: note text and quantity for one menu item."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from waiter_pos.models import MenuItem
from waiter_pos.rendering import format_menu_row

MAX_NOTE_LENGTH = 120


@dataclass(frozen=True)
class ItemEntry:
    """What the waiter confirmed in the dialog."""

    item: MenuItem
    note: str
    quantity: int


class ItemEntryModal(ModalScreen[ItemEntry | None]):
    """Centered modal to type a note and pick a quantity before adding."""

    CSS = """
    ItemEntryModal {
        align: center middle;
        background: $background 60%;
    }

    #entry-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #entry-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #entry-body {
        margin-bottom: 1;
        color: white;
    }

    #entry-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(self, item: MenuItem, in_cart: int = 0) -> None:
        super().__init__()
        self.item = item
        self.in_cart = in_cart
        self.note = ""
        self.quantity = 1

    def compose(self) -> ComposeResult:
        with Container(id="entry-dialog"):
            yield Static("Add Item", id="entry-title")
            yield Static(id="entry-body")
            yield Static("Type a note. Up/Down change quantity. Enter add, Esc cancel.", id="entry-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self.dismiss(ItemEntry(item=self.item, note=self.note.strip(), quantity=self.quantity))
            event.stop()
            return

        if event.key == "up":
            self.quantity += 1
        elif event.key == "down":
            self.quantity = max(1, self.quantity - 1)
        elif event.key == "backspace":
            self.note = self.note[:-1]
        elif event.is_printable and event.character:
            if len(self.note) < MAX_NOTE_LENGTH:
                self.note += event.character
        else:
            return

        self._refresh_content()
        event.stop()

    def _refresh_content(self) -> None:
        body = self.query_one("#entry-body", Static)
        content = Text(style="white")
        content.append_text(format_menu_row(self.item, self.in_cart))
        content.append("\n\nNotes: ")
        content.append(f"{self.note}|", style="bold white")
        content.append("\nQuantity: ")
        content.append(f"- {self.quantity} +", style="bold white")
        body.update(content)
