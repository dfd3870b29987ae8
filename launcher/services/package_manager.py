"""
Package lifecycle: cache population, extraction, removal and the installed index.
"""
from __future__ import annotations

import logging
import os
import shutil
import zipfile
from pathlib import Path
from typing import Callable, FrozenSet

from launcher.domain.errors import ErrorKind, LauncherError, OperationResult
from launcher.domain.models import PackageIdentifier, ReleaseDescriptor, cache_filename
from launcher.services.installation import GameInstallation
from launcher.services.progress import ProgressSink
from launcher.services.transfer import TransferEngine
from launcher.storage.install_layout import install_path, scan_install_root
from launcher.storage.package_index import IndexListener, InstalledPackageIndex

logger = logging.getLogger(__name__)


class PackageManager:
    """
    Installs releases from the package cache into the install tree.

    The installed index is seeded once from the install directory and after
    that only changes when an install or remove issued here succeeds. Callers
    must not run two operations on the same identifier at once.
    """

    def __init__(self, cache_dir: Path, install_dir: Path, transfer_engine: TransferEngine):
        self.cache_dir = Path(cache_dir)
        self.install_dir = Path(install_dir)
        self.transfer_engine = transfer_engine
        self._index = InstalledPackageIndex(scan_install_root(self.install_dir))
        logger.debug(f"Found {len(self._index)} installed packages in {self.install_dir}")

    # ========================================================================
    # Queries
    # ========================================================================

    def get_installed_packages(self) -> FrozenSet[PackageIdentifier]:
        return self._index.snapshot()

    def is_installed(self, identifier: PackageIdentifier) -> bool:
        return identifier in self._index

    def subscribe(self, listener: IndexListener) -> Callable[[], None]:
        """Get notified with a fresh snapshot whenever the installed set changes."""
        return self._index.subscribe(listener)

    def get_install_path(self, identifier: PackageIdentifier) -> Path:
        return install_path(self.install_dir, identifier)

    def get_cache_path(self, identifier: PackageIdentifier) -> Path:
        return self.cache_dir / cache_filename(identifier)

    def _contained_install_path(self, identifier: PackageIdentifier) -> Path:
        """Install path, checked to sit directly below its <PROFILE>/<BUILD_CHANNEL> directory."""
        target = self.get_install_path(identifier)
        channel_dir = self.install_dir / identifier.profile.value / identifier.build_channel.value
        if target.parent.resolve() != channel_dir.resolve():
            raise ValueError(f"{target} is not inside {channel_dir}")
        return target

    def get_installation(self, identifier: PackageIdentifier) -> GameInstallation:
        if identifier not in self._index:
            raise FileNotFoundError(f"Package {identifier} is not installed")
        return GameInstallation.get_existing(self.get_install_path(identifier))

    # ========================================================================
    # Install / remove
    # ========================================================================

    async def install(self, release: ReleaseDescriptor, sink: ProgressSink) -> OperationResult:
        """
        Install a release, downloading it into the cache first if needed.

        On failure or cancellation the installed index is left untouched.
        """
        try:
            target = self._contained_install_path(release.id)
        except ValueError as e:
            logger.error(f"Refusing to install package {release.id}: {e}")
            return OperationResult.failure(LauncherError(ErrorKind.IO_ERROR, str(e)))

        cached_zip = self.get_cache_path(release.id)

        if not cached_zip.exists():
            result = await self.transfer_engine.transfer(release.download_url, cached_zip, sink)
            if not result.ok:
                return result

        if sink.is_cancelled():
            logger.info(f"Installation of {release.id} cancelled")
            return OperationResult.cancelled_result()

        try:
            extract_zip(cached_zip, target, sink)
        except LauncherError as e:
            logger.error(f"Failed to install package {release.id}: {e}")
            return OperationResult.failure(e)

        self._index.add(release.id)
        logger.info(f"Finished installing package: {release.id}")
        return OperationResult.completed()

    def remove(self, identifier: PackageIdentifier) -> OperationResult:
        """
        Delete the install tree of a package, children before parents.

        A failure may leave the tree partially deleted; the index entry is only
        dropped once the whole tree is gone, so retrying converges.
        """
        try:
            target = self._contained_install_path(identifier)
        except ValueError as e:
            logger.error(f"Refusing to remove package {identifier}: {e}")
            return OperationResult.failure(LauncherError(ErrorKind.IO_ERROR, str(e)))

        try:
            delete_tree(target)
        except OSError as e:
            logger.error(f"Failed to remove package {identifier}: {e}")
            return OperationResult.failure(
                LauncherError(ErrorKind.IO_ERROR, f"Could not delete {target}: {e}")
            )

        self._index.discard(identifier)
        logger.info(f"Finished removing package: {identifier}")
        return OperationResult.completed()


def extract_zip(archive: Path, target: Path, sink: ProgressSink) -> None:
    """
    Extract every entry of `archive` below `target`, overwriting existing files.

    Raises:
        LauncherError: IO_ERROR for unreadable archives, entries escaping
            `target`, or filesystem failures
    """
    logger.info(f"Extracting {archive} to {target}")
    try:
        target.mkdir(parents=True, exist_ok=True)
        root = target.resolve()
        with zipfile.ZipFile(archive, "r") as zip_ref:
            for info in zip_ref.infolist():
                destination = (root / info.filename).resolve()
                if destination != root and root not in destination.parents:
                    raise LauncherError(
                        ErrorKind.IO_ERROR,
                        f"Archive entry {info.filename!r} escapes {target}",
                    )
                if info.is_dir():
                    destination.mkdir(parents=True, exist_ok=True)
                    continue
                destination.parent.mkdir(parents=True, exist_ok=True)
                with zip_ref.open(info, "r") as src, open(destination, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                sink.notify()
    except zipfile.BadZipFile as e:
        raise LauncherError(ErrorKind.IO_ERROR, f"Corrupt archive {archive}: {e}") from e
    except OSError as e:
        raise LauncherError(ErrorKind.IO_ERROR, f"Could not extract {archive}: {e}") from e


def delete_tree(target: Path) -> None:
    """Remove `target` bottom-up; a missing tree counts as removed."""
    if target.is_symlink():
        # only the link belongs to the install tree
        target.unlink()
        return
    if not target.exists():
        return

    def _raise(error: OSError) -> None:
        raise error

    for root, dirs, files in os.walk(target, topdown=False, onerror=_raise):
        root_path = Path(root)
        for name in files:
            (root_path / name).unlink()
        for name in dirs:
            path = root_path / name
            if path.is_symlink():
                path.unlink()
            else:
                path.rmdir()
    target.rmdir()
