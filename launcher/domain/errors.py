"""
Failure kinds and the result type returned by package lifecycle operations.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from launcher.domain.models import Platform


class ErrorKind(str, Enum):
    INSUFFICIENT_SPACE = "insufficient_space"
    TRANSFER_FAILED = "transfer_failed"
    VERIFICATION_FAILED = "verification_failed"
    UNSUPPORTED_RUNTIME = "unsupported_runtime"
    IO_ERROR = "io_error"


class LauncherError(Exception):
    """A typed failure surfaced to the immediate caller."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"LauncherError(kind={self.kind.value}, message={self.message!r})"


class UnsupportedRuntimeError(LauncherError):
    """No managed runtime is registered for the requested platform and major version."""

    def __init__(self, platform: "Platform", major_version: int):
        super().__init__(
            ErrorKind.UNSUPPORTED_RUNTIME,
            f"No managed runtime for major version {major_version} and platform {platform}",
        )
        self.platform = platform
        self.major_version = major_version


class OperationStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a transfer, install or remove."""

    status: OperationStatus
    error: Optional[LauncherError] = None

    @classmethod
    def completed(cls) -> "OperationResult":
        return cls(OperationStatus.COMPLETED)

    @classmethod
    def cancelled_result(cls) -> "OperationResult":
        return cls(OperationStatus.CANCELLED)

    @classmethod
    def failure(cls, error: LauncherError) -> "OperationResult":
        return cls(OperationStatus.FAILED, error)

    @property
    def ok(self) -> bool:
        return self.status == OperationStatus.COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.status == OperationStatus.CANCELLED

    @property
    def failed(self) -> bool:
        return self.status == OperationStatus.FAILED

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None
