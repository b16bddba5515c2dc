import logging

from query_console.core.config import settings

_CONFIGURED = False


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once for the console process."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = (level or settings.LOG_LEVEL or "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, resolved, logging.INFO),
        format=settings.LOG_FORMAT,
    )
    # httpx logs every request line at INFO, which would echo the endpoint on each query.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _CONFIGURED = True
