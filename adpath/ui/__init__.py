"""UI module for adpath."""

from .dialogs import ADSelectionDialog, LoginDialog
from .login_flow import LoginFlowApp, prompt_credentials

__all__ = [
    'ADSelectionDialog',
    'LoginDialog',
    'LoginFlowApp',
    'prompt_credentials',
]
