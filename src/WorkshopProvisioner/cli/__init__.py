"""CLI package exports."""

from .app import app, main, register_client_builder

__all__ = ["app", "main", "register_client_builder"]
