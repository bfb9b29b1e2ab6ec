"""Structured logging package."""

from homeledger.observability.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
