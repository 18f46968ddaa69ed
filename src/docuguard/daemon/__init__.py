"""DocuGuard daemon module - HTTP API server."""

from docuguard.daemon.server import create_app, error_status, run_server

__all__ = [
    "create_app",
    "error_status",
    "run_server",
]
