"""Interactive login flow, run once before any directory work starts."""

from typing import List, Optional, Tuple

from textual.app import App, ComposeResult
from textual.widgets import Static

from .dialogs import ADSelectionDialog, LoginDialog

Credentials = Tuple[str, str, str]


class LoginFlowApp(App[Optional[Credentials]]):
    """Chains domain selection and login; exits with (domain, username, password)."""

    CSS = """
    Screen {
        align: center middle;
    }

    #dialog {
        width: 60;
        height: auto;
        border: thick $primary;
        padding: 1 2;
    }

    #dialog-buttons {
        height: auto;
        align: center middle;
    }
    """

    def __init__(self, domains: List[str], selected_domain: Optional[str] = None,
                 last_user: str = ""):
        super().__init__()
        self.domains = domains
        self.selected_domain = selected_domain
        self.last_user = last_user

    def compose(self) -> ComposeResult:
        yield Static("[bold cyan]adpath[/bold cyan]\n")

    def on_mount(self) -> None:
        if self.selected_domain is None and len(self.domains) > 1:
            self.push_screen(ADSelectionDialog(self.domains), self.handle_ad_selection)
        else:
            if self.selected_domain is None and self.domains:
                self.selected_domain = self.domains[0]
            self.show_login_dialog()

    def handle_ad_selection(self, domain: Optional[str]) -> None:
        if domain:
            self.selected_domain = domain
            self.show_login_dialog()
        else:
            self.exit(None)

    def show_login_dialog(self) -> None:
        self.push_screen(LoginDialog(self.last_user, self.selected_domain or ""),
                         self.handle_login_result)

    def handle_login_result(self, result: Optional[Tuple[str, str]]) -> None:
        if result:
            username, password = result
            self.exit((self.selected_domain, username, password))
        else:
            self.exit(None)

    def on_key(self, event) -> None:
        if event.key == "escape":
            self.exit(None)


def prompt_credentials(domains: List[str], selected_domain: Optional[str] = None,
                       last_user: str = "") -> Optional[Credentials]:
    """Run the login flow and return (domain, username, password), or None if cancelled."""
    return LoginFlowApp(domains, selected_domain, last_user).run()
