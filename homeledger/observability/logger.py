"""
Structured Logger

Every module logs through structlog with keyword context, e.g.
`log.info("transaction_saved", transaction_id=..., type=...)`.

The engine is pure and logs only what a caller would want to know about
its lenient fallbacks (missing rates, totals that do not cross-check).
Mutations and storage operations log in the orchestrator and the storage
backends.
"""

import logging
from typing import Optional

import structlog


_configured = False


def configure_logging(level: Optional[str] = None, force: bool = False) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Safe to call repeatedly; only the first call (or a forced one)
    changes the configuration.
    """
    global _configured
    if _configured and not force:
        return

    if level is None:
        # Imported lazily so the logger never forces settings to load on import.
        from homeledger.config import get_settings
        level = get_settings().app.log_level

    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: Optional[str] = None):
    """
    Return a lazy structlog logger.

    The logger binds to whatever configuration is active when it is first
    used, so modules can create it at import time before
    `configure_logging()` runs.
    """
    return structlog.get_logger(name)
