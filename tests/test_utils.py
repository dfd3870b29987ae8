"""
Shared helpers for the launcher tests: in-memory archives, fake HTTP servers and sinks.
"""

import io
import zipfile
from collections import namedtuple
from typing import Dict, List, Optional

import httpx

from launcher.domain.models import BuildChannel, PackageIdentifier, Profile

DiskUsage = namedtuple("DiskUsage", ["total", "used", "free"])

RELEASE_URL = "https://downloads.example.org/terasology/TerasologyOmega.zip"


def build_zip(entries: Dict[str, bytes], size: Optional[int] = None) -> bytes:
    """
    Build a stored (uncompressed) zip archive in memory.

    When `size` is given, the archive comment is padded so the archive is
    exactly that many bytes long.
    """

    def _build(comment: bytes) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_STORED) as archive:
            for name, data in entries.items():
                archive.writestr(zipfile.ZipInfo(name, date_time=(2021, 6, 1, 12, 0, 0)), data)
            archive.comment = comment
        return buffer.getvalue()

    data = _build(b"")
    if size is None:
        return data
    padding = size - len(data)
    if not 0 <= padding <= 0xFFFF:
        raise ValueError(f"Cannot pad a {len(data)} byte archive to {size} bytes")
    data = _build(b"x" * padding)
    assert len(data) == size
    return data


def build_engine_jar(engine_version: str) -> bytes:
    return build_zip({
        "org/terasology/engine/versionInfo.properties": f"# build info\nengineVersion={engine_version}\n".encode(),
    })


def build_game_archive(engine_version: str = "5.1.1", size: Optional[int] = None) -> bytes:
    return build_zip(
        {
            "Terasology.jar": b"game",
            "libs/engine-5.1.1.jar": build_engine_jar(engine_version),
            "README.md": b"Have fun!",
        },
        size=size,
    )


class FakeServer:
    """
    Serves one payload for HEAD and GET and records every request.

    `content_length` overrides what HEAD advertises; `status` applies to both.
    `get_headers` are sent with the GET body, e.g. a Content-Encoding.
    """

    def __init__(self, payload: bytes, content_length: Optional[int] = None, status: int = 200,
                 head_headers: Optional[Dict[str, str]] = None, get_headers: Optional[Dict[str, str]] = None):
        self.payload = payload
        self.content_length = len(payload) if content_length is None else content_length
        self.status = status
        self.head_headers = head_headers
        self.get_headers = get_headers or {}
        self.requests: List[httpx.Request] = []

    @property
    def methods(self) -> List[str]:
        return [r.method for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "HEAD":
            headers = self.head_headers
            if headers is None:
                headers = {"Content-Length": str(self.content_length)}
            return httpx.Response(self.status, headers=headers)
        payload = self.payload

        async def body():
            yield payload

        headers = {"Content-Length": str(len(payload)), **self.get_headers}
        return httpx.Response(self.status, headers=headers, content=body())

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class RecordingSink:
    """Records every notification; cancels itself once `cancel_at` percent is reached."""

    def __init__(self, cancelled: bool = False, cancel_at: Optional[int] = None):
        self.updates: List[Optional[int]] = []
        self.cancelled = cancelled
        self.cancel_at = cancel_at

    @property
    def percents(self) -> List[int]:
        return [u for u in self.updates if u is not None]

    def notify(self, percent: Optional[int] = None) -> None:
        self.updates.append(percent)
        if percent is not None and self.cancel_at is not None and percent >= self.cancel_at:
            self.cancelled = True

    def is_cancelled(self) -> bool:
        return self.cancelled


def full_stable(version: str = "5.1.1", engine_version: Optional[str] = None) -> PackageIdentifier:
    return PackageIdentifier(
        core_version=version,
        build_channel=BuildChannel.STABLE,
        profile=Profile.FULL,
        engine_version=engine_version,
    )
