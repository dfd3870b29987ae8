"""
Registry of managed Java runtimes, keyed by platform and major version.
"""
from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from launcher.domain.errors import UnsupportedRuntimeError
from launcher.domain.models import Arch, OS, Platform, RuntimeArtefact

logger = logging.getLogger(__name__)

SUPPORTED_RUNTIME_VERSIONS: FrozenSet[int] = frozenset({8, 11, 17})

_LINUX_X64 = Platform(os=OS.LINUX, arch=Arch.X64)
_MAC_X64 = Platform(os=OS.MAC, arch=Arch.X64)
_WINDOWS_X64 = Platform(os=OS.WINDOWS, arch=Arch.X64)

DEFAULT_RUNTIME_ARTEFACTS: List[RuntimeArtefact] = [
    # Linux
    RuntimeArtefact(
        major_version=8,
        platform=_LINUX_X64,
        download_url="https://github.com/adoptium/temurin8-binaries/releases/download/jdk8u392-b08/OpenJDK8U-jre_x64_linux_hotspot_8u392b08.tar.gz",
        checksum="91d31027da0d985be3549714389593d9e0da3da5057d87e3831c7c538b9a2a0f",
    ),
    RuntimeArtefact(
        major_version=11,
        platform=_LINUX_X64,
        download_url="https://github.com/adoptium/temurin11-binaries/releases/download/jdk-11.0.21%2B9/OpenJDK11U-jre_x64_linux_hotspot_11.0.21_9.tar.gz",
        checksum="156861bb901ef18759e05f6f008595220c7d1318a46758531b957b0c950ef2c3",
    ),
    RuntimeArtefact(
        major_version=17,
        platform=_LINUX_X64,
        download_url="https://github.com/adoptium/temurin17-binaries/releases/download/jdk-17.0.9%2B9.1/OpenJDK17U-jre_x64_linux_hotspot_17.0.9_9.tar.gz",
        checksum="c37f729200b572884b8f8e157852c739be728d61d9a1da0f920104876d324733",
    ),
    # Mac
    RuntimeArtefact(
        major_version=8,
        platform=_MAC_X64,
        download_url="https://github.com/adoptium/temurin8-binaries/releases/download/jdk8u392-b08/OpenJDK8U-jre_x64_mac_hotspot_8u392b08.tar.gz",
        checksum="f1f15920ed299e10c789aef6274d88d45eb21b72f9a7b0d246a352107e344e6a",
    ),
    RuntimeArtefact(
        major_version=11,
        platform=_MAC_X64,
        download_url="https://github.com/adoptium/temurin11-binaries/releases/download/jdk-11.0.21%2B9/OpenJDK11U-jre_x64_mac_hotspot_11.0.21_9.tar.gz",
        checksum="43d29affe994a09de31bf2fb6f8ab6d6792ba4267b9a2feacaa1f6e042481b9b",
    ),
    RuntimeArtefact(
        major_version=17,
        platform=_MAC_X64,
        download_url="https://github.com/adoptium/temurin17-binaries/releases/download/jdk-17.0.9%2B9.1/OpenJDK17U-jre_x64_mac_hotspot_17.0.9_9.tar.gz",
        checksum="c69b37ea72136df49ce54972408803584b49b2c91b0fbc876d7125e963c7db37",
    ),
    # Windows
    RuntimeArtefact(
        major_version=8,
        platform=_WINDOWS_X64,
        download_url="https://github.com/adoptium/temurin8-binaries/releases/download/jdk8u392-b08/OpenJDK8U-jre_x64_windows_hotspot_8u392b08.zip",
        checksum="a6b7e671cc12f9fc16db59419bda8be00da037e14aaf5d5afb78042c145b76ed",
    ),
    RuntimeArtefact(
        major_version=11,
        platform=_WINDOWS_X64,
        download_url="https://github.com/adoptium/temurin11-binaries/releases/download/jdk-11.0.21%2B9/OpenJDK11U-jre_x64_windows_hotspot_11.0.21_9.zip",
        checksum="a93d8334a85f6cbb228694346aad0353a8cb9ff3c84b5dc3221daf2c54a11e54",
    ),
    RuntimeArtefact(
        major_version=17,
        platform=_WINDOWS_X64,
        download_url="https://github.com/adoptium/temurin17-binaries/releases/download/jdk-17.0.9%2B9.1/OpenJDK17U-jre_x64_windows_hotspot_17.0.9_9.zip",
        checksum="6c491d6f8c28c6f451f08110a30348696a04b009f8c58592191046e0fab1477b",
    ),
]


class RuntimeRegistry:
    """
    Read-only lookup table of managed runtimes.

    Built once at startup and handed to whoever needs to pick a runtime.
    """

    def __init__(self, artefacts: Optional[Iterable[RuntimeArtefact]] = None):
        if artefacts is None:
            artefacts = DEFAULT_RUNTIME_ARTEFACTS
        self._table: Dict[Tuple[Platform, int], RuntimeArtefact] = {}
        for artefact in artefacts:
            key = (artefact.platform, artefact.major_version)
            if key in self._table:
                raise ValueError(
                    f"Duplicate runtime entry for version {artefact.major_version} on {artefact.platform}"
                )
            self._table[key] = artefact

    def get_runtime_for(self, platform: Platform, major_version: int) -> RuntimeArtefact:
        """
        Look up the runtime for an exact (platform, major version) match.

        Raises:
            UnsupportedRuntimeError: if no entry matches
        """
        artefact = self._table.get((platform, major_version))
        if artefact is None:
            raise UnsupportedRuntimeError(platform, major_version)
        return artefact

    def missing_entries(self, platforms: Iterable[Platform], versions: Iterable[int]) -> List[Tuple[Platform, int]]:
        """List (platform, version) pairs from the given cross product that have no entry."""
        versions = sorted(versions)
        return [
            (platform, version)
            for platform in platforms
            for version in versions
            if (platform, version) not in self._table
        ]

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self):
        return iter(self._table.values())
