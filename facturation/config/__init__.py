"""Configuration module."""

from facturation.config.logging import configure_logging, get_logger, invoice_log_context
from facturation.config.settings import Settings, get_settings, reset_settings

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "get_logger",
    "invoice_log_context",
]
