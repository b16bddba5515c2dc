from __future__ import annotations

import logging

import httpx

from query_console.console.artifact import DownloadArtifact
from query_console.console.builder import CSV_MEDIA_TYPE
from query_console.console.schemas import (
    Failure,
    FailureKind,
    FileSuccess,
    InteractiveSuccess,
    Outcome,
    QueryMode,
    SubmissionRequest,
)
from query_console.core.config import settings

logger = logging.getLogger(__name__)


class TransportClient:
    """Sends submissions to the query endpoint and classifies the response.

    Classification happens on the status code before the body is touched: a
    non-2xx body is contractually plain text and is never decoded as JSON.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        download_filename: str | None = None,
        spool_max_bytes: int | None = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=settings.QUERY_TIMEOUT_SECONDS,
            follow_redirects=True,
        )
        self._download_filename = download_filename or settings.DOWNLOAD_FILENAME
        self._spool_max_bytes = spool_max_bytes or settings.DOWNLOAD_SPOOL_MAX_BYTES

    async def send(self, submission: SubmissionRequest) -> Outcome:
        try:
            request = self._client.build_request(
                submission.method,
                submission.url,
                headers=submission.headers,
                json=submission.body,
            )
            response = await self._client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as exc:
            logger.warning(
                "Query request to %s failed before a response: %s",
                submission.url,
                exc,
            )
            return Failure(kind=FailureKind.TRANSPORT)

        try:
            return await self._classify(submission, response)
        except httpx.HTTPError as exc:
            logger.warning("Reading response from %s failed: %s", submission.url, exc)
            return Failure(kind=FailureKind.TRANSPORT)
        except OSError as exc:
            logger.warning("Could not spool export from %s: %s", submission.url, exc)
            return Failure(kind=FailureKind.TRANSPORT)
        finally:
            await response.aclose()

    async def _classify(self, submission: SubmissionRequest, response: httpx.Response) -> Outcome:
        if not response.is_success:
            await response.aread()
            logger.warning(
                "Query endpoint answered %d for %s query",
                response.status_code,
                submission.mode.value,
            )
            return Failure(kind=FailureKind.REMOTE, message=response.text)

        if submission.mode == QueryMode.FILE_EXPORT:
            artifact = await DownloadArtifact.materialize(
                response.aiter_bytes(),
                filename=self._download_filename,
                media_type=response.headers.get("content-type", CSV_MEDIA_TYPE),
                spool_max_bytes=self._spool_max_bytes,
            )
            logger.info("Received CSV export (%d bytes)", artifact.size)
            return FileSuccess(artifact=artifact)

        await response.aread()
        try:
            payload = response.json()
        except ValueError:
            logger.warning("Query endpoint returned a success body that is not JSON")
            payload = None
        return InteractiveSuccess(payload=payload)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


_instance: TransportClient | None = None


def get_transport_client() -> TransportClient:
    global _instance
    if _instance is None:
        _instance = TransportClient()
    return _instance


async def close_transport_client() -> None:
    global _instance
    if _instance is not None:
        await _instance.aclose()
        _instance = None
