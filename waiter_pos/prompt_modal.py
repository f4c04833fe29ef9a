"""Single-value text entry modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static


class PromptModal(ModalScreen[str | None]):
    """Prompt for one value: waiter code, server IP, table number or customer name."""

    CSS = """
    PromptModal {
        align: center middle;
        background: $background 60%;
    }

    #prompt-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #prompt-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #prompt-label {
        color: white;
        margin-bottom: 1;
    }

    #prompt-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #prompt-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #prompt-help {
        color: #dddddd;
    }
    """

    def __init__(
        self,
        title: str,
        label: str,
        value: str = "",
        digits_only: bool = False,
        max_length: int = 64,
    ) -> None:
        super().__init__()
        self.title_text = title
        self.label_text = label
        self.value = value
        self.digits_only = digits_only
        self.max_length = max_length
        self.error = ""

    def compose(self) -> ComposeResult:
        help_text = "Enter confirm. Backspace delete. Esc cancel."
        if self.digits_only:
            help_text = f"Digits only. {help_text}"
        with Container(id="prompt-dialog"):
            yield Static(self.title_text, id="prompt-title")
            yield Static(self.label_text, id="prompt-label")
            yield Static(id="prompt-value")
            yield Static(id="prompt-error")
            yield Static(help_text, id="prompt-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key == "backspace":
            if self.value:
                self.value = self.value[:-1]
                self.error = ""
                self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character:
            if self.digits_only and not event.character.isdigit():
                event.stop()
                return
            if len(self.value) < self.max_length:
                self.value += event.character
            self.error = ""
            self._refresh_content()
            event.stop()

    def _confirm(self) -> None:
        normalized = self.value.strip()
        if not normalized:
            self.error = f"{self.label_text} is required."
            self._refresh_content()
            return
        self.dismiss(normalized)

    def _refresh_content(self) -> None:
        value_widget = self.query_one("#prompt-value", Static)
        error_widget = self.query_one("#prompt-error", Static)
        value_widget.update(Text(f"{self.value}|"))
        error_widget.update(Text(self.error or ""))


class ConfirmModal(ModalScreen[bool]):
    """Yes/no confirmation before discarding a stored setting."""

    CSS = """
    ConfirmModal {
        align: center middle;
        background: $background 60%;
    }

    #confirm-dialog {
        width: 48;
        height: auto;
        border: round $warning;
        background: $panel;
        padding: 1 2;
    }

    #confirm-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #confirm-help {
        color: #dddddd;
    }
    """

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Container(id="confirm-dialog"):
            yield Static("Are you sure?", id="confirm-title")
            yield Static(Text(self.message), id="confirm-message")
            yield Static("Y/Enter confirm. N/Esc cancel.", id="confirm-help")

    def on_key(self, event: Key) -> None:
        if event.key in {"y", "enter"}:
            self.dismiss(True)
            event.stop()
            return
        if event.key in {"n", "escape", "ctrl+c"}:
            self.dismiss(False)
            event.stop()
