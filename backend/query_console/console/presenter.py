import logging

from markupsafe import escape

from query_console.core.templates import templates

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "An error occurred"


def present_error(message: str | None) -> str:
    """Render a failure as the single error message of the result area. Never raises."""
    text = FALLBACK_MESSAGE
    try:
        if message:
            text = str(message)
        return templates.get_template("partials/error.html").render(message=text)
    except Exception:  # noqa: BLE001
        logger.exception("Failed to render error message, using plain markup")
        return f'<div class="error">{escape(text)}</div>'
