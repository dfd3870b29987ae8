"""
Background execution of install and remove operations.
"""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Future, ThreadPoolExecutor

from launcher.domain.models import PackageIdentifier, ReleaseDescriptor
from launcher.domain.errors import OperationResult
from launcher.services.package_manager import PackageManager
from launcher.services.progress import ProgressSink

logger = logging.getLogger(__name__)


class PackageWorker:
    """
    Runs package operations on a single background thread.

    Operations are executed one at a time in submission order, so two
    operations on the same identifier never overlap. Progress and
    cancellation travel through the sink passed with each install.
    """

    def __init__(self, package_manager: PackageManager):
        self.package_manager = package_manager
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="package-worker")

    def submit_install(self, release: ReleaseDescriptor, sink: ProgressSink) -> "Future[OperationResult]":
        logger.debug(f"Queueing install of {release.id}")
        return self._executor.submit(self._run_install, release, sink)

    def submit_remove(self, identifier: PackageIdentifier) -> "Future[OperationResult]":
        logger.debug(f"Queueing removal of {identifier}")
        return self._executor.submit(self.package_manager.remove, identifier)

    def _run_install(self, release: ReleaseDescriptor, sink: ProgressSink) -> OperationResult:
        return asyncio.run(self.package_manager.install(release, sink))

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "PackageWorker":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
