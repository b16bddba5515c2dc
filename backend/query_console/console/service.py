import logging
from dataclasses import dataclass

from fastapi.responses import StreamingResponse

from query_console.console.builder import build_submission
from query_console.console.presenter import present_error
from query_console.console.renderer import render_result
from query_console.console.saver import FileSaver
from query_console.console.schemas import (
    ConsoleState,
    ConsoleView,
    Failure,
    FileSuccess,
    InteractiveSuccess,
    QueryMode,
)
from query_console.console.state import ResultArea
from query_console.console.transport import TransportClient

logger = logging.getLogger(__name__)


@dataclass
class DownloadResult:
    response: StreamingResponse | None = None
    view: ConsoleView | None = None
    superseded: bool = False


def _error_view(outcome: Failure) -> ConsoleView:
    return ConsoleView(state=ConsoleState.ERRORED, html=present_error(outcome.message))


def view_for_outcome(outcome: InteractiveSuccess | Failure) -> ConsoleView:
    if isinstance(outcome, Failure):
        return _error_view(outcome)
    return ConsoleView(state=ConsoleState.RENDERED, html=render_result(outcome.payload))


async def submit_query(
    area: ResultArea,
    transport: TransportClient,
    query: str,
    credential: str,
) -> ConsoleView | None:
    """Run an interactive query and replace the result area with its outcome.

    Returns the applied view, or None when a newer submission took over the
    result area while this one was in flight.
    """
    token = area.dispatch()
    submission = build_submission(query, credential, QueryMode.INTERACTIVE)
    outcome = await transport.send(submission)
    view = view_for_outcome(outcome)

    if not area.commit(token, view):
        logger.debug("Query outcome %d superseded by a newer submission", token)
        return None
    return view


async def download_csv(
    area: ResultArea,
    transport: TransportClient,
    query: str,
    credential: str,
    saver: FileSaver | None = None,
) -> DownloadResult:
    """Export a query as CSV.

    An export is a submission like any other: it takes a sequence token, so
    an older query still in flight cannot overwrite its error. A successful
    export keeps the displayed fragment and only records the DOWNLOADED state.
    """
    token = area.dispatch()
    submission = build_submission(query, credential, QueryMode.FILE_EXPORT)
    outcome = await transport.send(submission)

    if isinstance(outcome, FileSuccess):
        response = (saver or FileSaver()).save(outcome.artifact)
        area.settle(token, ConsoleState.DOWNLOADED)
        return DownloadResult(response=response)

    view = _error_view(outcome)
    if not area.commit(token, view):
        logger.debug("CSV export failure superseded by a newer submission")
        return DownloadResult(superseded=True)
    return DownloadResult(view=view)
