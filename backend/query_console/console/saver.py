import logging
from collections.abc import Iterator
from urllib.parse import quote

from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from query_console.console.artifact import DownloadArtifact

logger = logging.getLogger(__name__)


def content_disposition(filename: str) -> str:
    ascii_name = filename.encode("ascii", "ignore").decode("ascii").replace('"', "") or "download"
    if ascii_name == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


class FileSaver:
    """Hands a DownloadArtifact to the browser as a file attachment.

    The artifact is released once the response is finished, whether the body
    was fully sent or the client went away. ``release()`` is idempotent, so
    the stream's own cleanup and the background task never double-close it.
    """

    def save(self, artifact: DownloadArtifact) -> StreamingResponse:
        logger.info("Saving %s (%d bytes)", artifact.filename, artifact.size)
        return StreamingResponse(
            self._stream(artifact),
            media_type=artifact.media_type,
            headers={
                "Content-Disposition": content_disposition(artifact.filename),
                "Content-Length": str(artifact.size),
            },
            background=BackgroundTask(artifact.release),
        )

    @staticmethod
    def _stream(artifact: DownloadArtifact) -> Iterator[bytes]:
        try:
            yield from artifact.iter_chunks()
        finally:
            artifact.release()
