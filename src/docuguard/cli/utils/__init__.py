"""CLI utility modules for DocuGuard."""

from docuguard.cli.utils.session import (
    BasePathOption,
    JsonOption,
    fail,
    print_notifications,
    workspace_session,
)

__all__ = [
    "BasePathOption",
    "JsonOption",
    "fail",
    "print_notifications",
    "workspace_session",
]
