import json
import logging
from typing import Any

from pydantic import ValidationError

from query_console.console.schemas import TabularResult
from query_console.core.templates import templates

logger = logging.getLogger(__name__)

MALFORMED_RESULT_MESSAGE = "Malformed query result: expected columns and rows."
ROW_CLASSES = ("row-even", "row-odd")


def format_cell(value: Any) -> str:
    """Display a JSON cell the way the endpoint sent it, without type coercion."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


templates.env.filters["cell"] = format_cell


def parse_result(payload: Any) -> TabularResult | None:
    try:
        return TabularResult.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Query result does not match the column/row shape: %d error(s)", exc.error_count())
        return None


def render_diagnostic() -> str:
    return templates.get_template("partials/diagnostic.html").render(message=MALFORMED_RESULT_MESSAGE)


def render_table(result: TabularResult) -> str:
    return templates.get_template("partials/result_table.html").render(
        columns=result.columns,
        rows=result.rows,
        row_classes=ROW_CLASSES,
    )


def render_result(payload: Any) -> str:
    """Render a decoded query payload as an HTML table fragment.

    Anything that is not a complete column/row result renders the fixed
    diagnostic instead of a partial table.
    """
    result = parse_result(payload)
    if result is None:
        return render_diagnostic()
    return render_table(result)
