"""Diagnostics package."""

from src.diagnostics.logger import DiagnosticsLogger, configure_log_level

__all__ = ["DiagnosticsLogger", "configure_log_level"]
