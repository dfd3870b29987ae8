"""
Startup wiring: builds the objects the launcher components share.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx

from launcher.data.settings import LauncherSettings, get_data_dir, load_settings
from launcher.domain.models import Platform, RuntimeArtefact
from launcher.services.package_manager import PackageManager
from launcher.services.platform import resolve_host_platform
from launcher.services.runtime_registry import RuntimeRegistry
from launcher.services.transfer import TransferEngine

logger = logging.getLogger(__name__)


@dataclass
class LauncherContext:
    """Everything resolved once at startup, passed to whoever needs it."""

    data_dir: Path
    settings: LauncherSettings
    host_platform: Platform
    runtime_registry: RuntimeRegistry
    transfer_engine: TransferEngine
    package_manager: PackageManager

    def host_runtime(self, major_version: Optional[int] = None) -> RuntimeArtefact:
        """Managed runtime for this host; raises UnsupportedRuntimeError if there is none."""
        if major_version is None:
            major_version = self.settings.runtime_major_version
        return self.runtime_registry.get_runtime_for(self.host_platform, major_version)


def build_context(
    data_dir: Optional[Path] = None,
    settings: Optional[LauncherSettings] = None,
    host_platform: Optional[Platform] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> LauncherContext:
    data_dir = get_data_dir(data_dir)
    if settings is None:
        settings = load_settings(data_dir)
    if host_platform is None:
        host_platform = resolve_host_platform()

    cache_dir = settings.resolve_cache_dir(data_dir)
    install_dir = settings.resolve_install_dir(data_dir)
    cache_dir.mkdir(parents=True, exist_ok=True)
    install_dir.mkdir(parents=True, exist_ok=True)

    transfer_engine = TransferEngine(
        connect_timeout=settings.connect_timeout_seconds,
        read_timeout=settings.read_timeout_seconds,
        chunk_size=settings.chunk_size,
        transport=transport,
    )
    logger.debug(f"Data directory {data_dir}, host platform {host_platform}")

    return LauncherContext(
        data_dir=data_dir,
        settings=settings,
        host_platform=host_platform,
        runtime_registry=RuntimeRegistry(),
        transfer_engine=transfer_engine,
        package_manager=PackageManager(cache_dir, install_dir, transfer_engine),
    )
