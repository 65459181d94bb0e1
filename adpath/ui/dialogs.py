"""Modal dialogs for adpath."""

from typing import List, Optional, Tuple

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, ListItem, ListView, Static


class ADSelectionDialog(ModalScreen[Optional[str]]):
    """Dialog to choose one of the configured AD domains."""

    def __init__(self, domains: List[str]):
        super().__init__()
        self.domains = domains

    def compose(self) -> ComposeResult:
        yield Vertical(
            Static("[bold cyan]Select Active Directory[/bold cyan]\n", id="question"),
            ListView(*[ListItem(Label(domain)) for domain in self.domains], id="domain-list"),
            Horizontal(
                Button("Cancel", variant="primary", id="cancel"),
                id="dialog-buttons"
            ),
            id="dialog"
        )

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        index = event.list_view.index
        self.dismiss(self.domains[index] if index is not None else None)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(None)


class LoginDialog(ModalScreen[Optional[Tuple[str, str]]]):
    """Dialog asking for username and password."""

    def __init__(self, last_user: str, domain: str):
        super().__init__()
        self.last_user = last_user
        self.domain = domain

    def compose(self) -> ComposeResult:
        yield Vertical(
            Static(f"[bold cyan]Login to {self.domain}[/bold cyan]\n", id="question"),
            Input(placeholder="Username", value=self.last_user, id="username"),
            Input(placeholder="Password", password=True, id="password"),
            Horizontal(
                Button("Login", variant="success", id="login"),
                Button("Cancel", variant="primary", id="cancel"),
                id="dialog-buttons"
            ),
            id="dialog"
        )

    def on_mount(self) -> None:
        target = "#password" if self.last_user else "#username"
        self.query_one(target, Input).focus()

    def _submit(self) -> None:
        username = self.query_one("#username", Input).value.strip()
        password = self.query_one("#password", Input).value
        if not username or not password:
            self.app.notify("Username and password are required", severity="warning")
            return
        self.dismiss((username, password))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "login":
            self._submit()
        else:
            self.dismiss(None)
