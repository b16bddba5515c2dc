from __future__ import annotations

import logging
import tempfile
from collections.abc import AsyncIterator, Iterator

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "text/csv"
_CHUNK_SIZE = 64 * 1024


class DownloadArtifact:
    """One-shot binary payload destined for a local file save.

    The body is held in a spooled temporary file that stays in memory up to
    ``spool_max_bytes`` and rolls over to disk beyond that. The spool is the
    artifact's only transient reference and is closed by ``release()``.
    """

    def __init__(
        self,
        filename: str,
        media_type: str = DEFAULT_MEDIA_TYPE,
        spool_max_bytes: int = 8 * 1024 * 1024,
    ):
        self.filename = filename
        self.media_type = media_type or DEFAULT_MEDIA_TYPE
        self._spool = tempfile.SpooledTemporaryFile(max_size=spool_max_bytes, mode="w+b")
        self._size = 0
        self._released = False

    @classmethod
    async def materialize(
        cls,
        chunks: AsyncIterator[bytes],
        filename: str,
        media_type: str = DEFAULT_MEDIA_TYPE,
        spool_max_bytes: int = 8 * 1024 * 1024,
    ) -> DownloadArtifact:
        artifact = cls(filename=filename, media_type=media_type, spool_max_bytes=spool_max_bytes)
        try:
            async for chunk in chunks:
                artifact.write(chunk)
        except BaseException:
            artifact.release()
            raise
        return artifact

    @property
    def size(self) -> int:
        return self._size

    @property
    def released(self) -> bool:
        return self._released

    def write(self, chunk: bytes) -> None:
        if self._released:
            raise RuntimeError("Cannot write to a released download artifact.")
        if chunk:
            self._spool.write(chunk)
            self._size += len(chunk)

    def iter_chunks(self, chunk_size: int = _CHUNK_SIZE) -> Iterator[bytes]:
        if self._released:
            raise RuntimeError("Download artifact was already released.")
        self._spool.seek(0)
        while True:
            chunk = self._spool.read(chunk_size)
            if not chunk:
                break
            yield chunk

    def read(self) -> bytes:
        return b"".join(self.iter_chunks())

    def release(self) -> bool:
        """Close the spool. Returns True only for the call that actually released it."""
        if self._released:
            return False
        self._released = True
        self._spool.close()
        logger.debug("Released download artifact %s (%d bytes)", self.filename, self._size)
        return True
