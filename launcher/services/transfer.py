"""
Space-checked, cancellable, atomic downloads.

A transfer streams into `<destination>.part` and only renames it onto the
destination once the byte count matches the advertised content length, so a
file at the final path is always complete.
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

import aiofiles
import httpx

from launcher.domain.errors import ErrorKind, LauncherError, OperationResult
from launcher.domain.models import RemoteResource
from launcher.services.progress import ProgressSink

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 30.0
DEFAULT_READ_TIMEOUT = 5 * 60.0
DEFAULT_CHUNK_SIZE = 64 * 1024
PART_SUFFIX = ".part"


def part_path(destination: Path) -> Path:
    """Temporary sibling the body is streamed into."""
    return destination.with_name(destination.name + PART_SUFFIX)


def progress_percent(written: int, expected: int) -> int:
    """Percent to report after a chunk, clamped to 1..99."""
    if expected <= 0:
        return 99
    return min(99, max(1, (100 * written) // expected))


class TransferEngine:
    """Downloads remote resources to local files."""

    def __init__(
        self,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.chunk_size = chunk_size
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(self.read_timeout, connect=self.connect_timeout),
            transport=self._transport,
        )

    async def download(self, resource: RemoteResource, directory: Path, sink: ProgressSink) -> OperationResult:
        """Transfer a remote resource into `directory/<resource.filename>`."""
        result = await self.transfer(resource.url, Path(directory) / resource.filename, sink)
        if result.ok:
            logger.info(f"Finished downloading {resource.info}")
        return result

    async def transfer(self, url: str, destination: Path, sink: ProgressSink) -> OperationResult:
        """
        Download `url` to `destination`.

        Returns a completed result only when the file at `destination` is
        fully written; cancelled and failed transfers never touch it.
        """
        destination = Path(destination)
        try:
            finished = await self._transfer(url, destination, sink)
        except LauncherError as e:
            logger.error(f"Download of {url} failed: {e}")
            return OperationResult.failure(e)

        if not finished:
            logger.info(f"Download of {url} cancelled")
            return OperationResult.cancelled_result()
        return OperationResult.completed()

    async def _transfer(self, url: str, destination: Path, sink: ProgressSink) -> bool:
        logger.debug(f"Downloading {url} to {destination}")
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LauncherError(ErrorKind.IO_ERROR, f"Cannot create {destination.parent}: {e}") from e

        async with self._client() as client:
            expected = await self._content_length(client, url)
            self._check_space(destination.parent, expected)

            tmp_path = part_path(destination)
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError as e:
                raise LauncherError(ErrorKind.IO_ERROR, f"Cannot remove stale {tmp_path}: {e}") from e

            sink.notify(0)
            if sink.is_cancelled():
                return False

            written = await self._stream_to_file(client, url, tmp_path, expected, sink)
            if written is None:
                return False

        if written != expected:
            logger.error(f"Wrong file length after download of {url}: {written} != {expected}")
            raise LauncherError(
                ErrorKind.VERIFICATION_FAILED,
                f"Wrong file length after download: {written} != {expected}",
            )

        if sink.is_cancelled():
            return False

        try:
            tmp_path.replace(destination)
        except OSError as e:
            raise LauncherError(ErrorKind.IO_ERROR, f"Cannot move {tmp_path} to {destination}: {e}") from e

        sink.notify(100)
        logger.info(f"Downloaded {written} bytes to {destination}")
        return True

    async def _content_length(self, client: httpx.AsyncClient, url: str) -> int:
        try:
            response = await client.head(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise LauncherError(ErrorKind.TRANSFER_FAILED, f"Could not send HEAD request to {url}: {e}") from e

        raw = response.headers.get("content-length")
        try:
            length = int(raw)
        except (TypeError, ValueError):
            raise LauncherError(ErrorKind.TRANSFER_FAILED, f"No usable content length for {url}: {raw!r}")
        if length < 0:
            raise LauncherError(ErrorKind.TRANSFER_FAILED, f"Negative content length for {url}: {length}")

        logger.debug(f"Content length of {url}: {length}")
        return length

    def _check_space(self, directory: Path, expected: int) -> None:
        try:
            available = shutil.disk_usage(directory).free
        except OSError as e:
            raise LauncherError(ErrorKind.IO_ERROR, f"Cannot determine free space in {directory}: {e}") from e
        if available < expected:
            logger.error(f"Insufficient space in {directory}: need {expected}, have {available}")
            raise LauncherError(
                ErrorKind.INSUFFICIENT_SPACE,
                f"Insufficient space for downloading package: need {expected} bytes, {available} available",
            )

    async def _stream_to_file(
        self,
        client: httpx.AsyncClient,
        url: str,
        tmp_path: Path,
        expected: int,
        sink: ProgressSink,
    ) -> Optional[int]:
        """Returns the number of bytes written, or None when cancelled."""
        written = 0
        try:
            async with client.stream("GET", url) as response:
                response.raise_for_status()
                async with aiofiles.open(tmp_path, "wb") as f:
                    # raw bytes, so the count matches the advertised Content-Length
                    async for chunk in response.aiter_raw(self.chunk_size):
                        if sink.is_cancelled():
                            return None
                        await f.write(chunk)
                        written += len(chunk)
                        sink.notify(progress_percent(written, expected))
                        if sink.is_cancelled():
                            return None
        except httpx.HTTPError as e:
            raise LauncherError(ErrorKind.TRANSFER_FAILED, f"Could not download {url}: {e}") from e
        except OSError as e:
            raise LauncherError(ErrorKind.TRANSFER_FAILED, f"Could not write {tmp_path}: {e}") from e
        return written
