"""Logging setup for the proxy server and CLI tools.

Usage:
    from lato_travel.logging_config import setup_logging

    setup_logging("Server", "INFO")

Modules keep using ``logging.getLogger(__name__)``; this only installs the
handler and formatter on the root logger.
"""
import logging
import sys

_HANDLER_NAME = "lato-travel"


class RoleFormatter(logging.Formatter):
    """Produces lines like:

    2026-02-17 14:30:00 [Server][INFO] lato_travel.routers.trips:41 - Fetching trip ...
    """

    def __init__(self, role: str) -> None:
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")
        self.role = role

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, self.datefmt)
        prefix = f"[{self.role}][{record.levelname}]" if self.role else f"[{record.levelname}]"
        formatted = f"{timestamp} {prefix} {record.name}:{record.lineno} - {record.getMessage()}"
        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            formatted += "\n" + record.exc_text
        return formatted


def setup_logging(role: str = "", level: str = "INFO") -> None:
    """Install the stream handler on the root logger. Safe to call twice."""
    root = logging.getLogger()
    root.setLevel(level.upper())
    for handler in root.handlers:
        if handler.get_name() == _HANDLER_NAME:
            handler.setFormatter(RoleFormatter(role))
            return
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(RoleFormatter(role))
    root.addHandler(handler)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
