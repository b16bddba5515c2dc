import json
from unittest.mock import patch

import httpx
import pytest

from query_console.console.builder import build_submission
from query_console.console.schemas import (
    Failure,
    FailureKind,
    FileSuccess,
    InteractiveSuccess,
    QueryMode,
)
from query_console.console.transport import TransportClient

pytestmark = pytest.mark.anyio


async def test_success_json_is_interactive_success(endpoint, transport):
    endpoint.respond(200, json={"cols": ["x"], "rows": [[1]]})

    outcome = await transport.send(build_submission("SELECT 1", "abc"))

    assert isinstance(outcome, InteractiveSuccess)
    assert outcome.payload == {"cols": ["x"], "rows": [[1]]}


async def test_request_carries_body_and_headers(endpoint, transport):
    await transport.send(build_submission("SELECT 1", "abc", QueryMode.FILE_EXPORT))

    sent = endpoint.last_request
    assert sent.method == "POST"
    assert sent.url.path == "/federations/query"
    assert json.loads(sent.content) == {"query": "SELECT 1"}
    assert sent.headers["Authorization"] == "Bearer abc"
    assert sent.headers["Content-Type"] == "application/json"
    assert sent.headers["Accept"] == "text/csv"


async def test_empty_credential_is_not_suppressed(endpoint, transport):
    await transport.send(build_submission("SELECT 1", ""))

    assert endpoint.last_request.headers["Authorization"] == "Bearer "


async def test_non_success_body_is_plain_text(endpoint, transport):
    endpoint.respond(400, text="syntax error near SELECT")

    outcome = await transport.send(build_submission("SELECT", "abc"))

    assert outcome == Failure(kind=FailureKind.REMOTE, message="syntax error near SELECT")


async def test_non_success_json_looking_body_is_not_parsed(endpoint, transport):
    endpoint.respond(500, text='{"cols": ["x"], "rows": [[1]]}')

    outcome = await transport.send(build_submission("SELECT 1", "abc"))

    assert isinstance(outcome, Failure)
    assert outcome.kind == FailureKind.REMOTE
    assert outcome.message == '{"cols": ["x"], "rows": [[1]]}'


async def test_non_success_empty_body(endpoint, transport):
    endpoint.respond(401, content=b"")

    outcome = await transport.send(build_submission("SELECT 1", ""))

    assert outcome == Failure(kind=FailureKind.REMOTE, message="")


async def test_connection_refused_is_transport_failure(endpoint, transport):
    endpoint.refuse()

    outcome = await transport.send(build_submission("SELECT 1", "abc"))

    assert outcome == Failure(kind=FailureKind.TRANSPORT, message=None)


async def test_success_body_that_is_not_json(endpoint, transport):
    endpoint.respond(200, text="<html>proxy page</html>")

    outcome = await transport.send(build_submission("SELECT 1", "abc"))

    assert isinstance(outcome, InteractiveSuccess)
    assert outcome.payload is None


async def test_file_export_materializes_artifact(endpoint, transport):
    body = b"x,y\n1,2\n3,4\n"
    endpoint.respond(200, content=body, headers={"Content-Type": "text/csv"})

    outcome = await transport.send(build_submission("SELECT 1", "abc", QueryMode.FILE_EXPORT))

    assert isinstance(outcome, FileSuccess)
    artifact = outcome.artifact
    try:
        assert artifact.filename == "query_result.csv"
        assert artifact.media_type == "text/csv"
        assert artifact.size == len(body)
        assert artifact.read() == body
    finally:
        artifact.release()


async def test_file_export_failure_is_plain_text(endpoint, transport):
    endpoint.respond(403, text="Invalid bearer token")

    outcome = await transport.send(build_submission("SELECT 1", "nope", QueryMode.FILE_EXPORT))

    assert outcome == Failure(kind=FailureKind.REMOTE, message="Invalid bearer token")


async def test_invalid_endpoint_url_is_transport_failure():
    async with httpx.AsyncClient() as http_client:
        transport = TransportClient(client=http_client)
        outcome = await transport.send(
            build_submission("SELECT 1", "abc", endpoint_url="ftp://federation.test/federations/query")
        )

    assert outcome == Failure(kind=FailureKind.TRANSPORT, message=None)


async def test_file_export_spool_error_is_transport_failure(endpoint, transport):
    endpoint.respond(200, content=b"x\n1\n", headers={"Content-Type": "text/csv"})

    with patch(
        "query_console.console.transport.DownloadArtifact.materialize",
        side_effect=OSError("No space left on device"),
    ):
        outcome = await transport.send(build_submission("SELECT 1", "abc", QueryMode.FILE_EXPORT))

    assert outcome == Failure(kind=FailureKind.TRANSPORT, message=None)
