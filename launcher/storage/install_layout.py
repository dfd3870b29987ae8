"""
On-disk layout of installed packages: <install_root>/<PROFILE>/<BUILD_CHANNEL>/<core_version>/.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Set

from launcher.domain.models import BuildChannel, PackageIdentifier, Profile, is_single_path_component

logger = logging.getLogger(__name__)


def install_path(install_root: Path, identifier: PackageIdentifier) -> Path:
    """
    Directory a package is extracted into. Pure, no I/O.

    Raises:
        ValueError: if the core version would not stay a single directory level
    """
    if not is_single_path_component(identifier.core_version):
        raise ValueError(f"Core version {identifier.core_version!r} escapes the install layout")
    return install_root / identifier.profile.value / identifier.build_channel.value / identifier.core_version


def scan_install_root(install_root: Path) -> Set[PackageIdentifier]:
    """
    Collect identifiers from the three-level directory layout.

    Directories whose names are not a known profile or build channel are
    skipped. Rebuilt identifiers carry no engine version.
    """
    found: Set[PackageIdentifier] = set()
    if not install_root.is_dir():
        return found

    for profile_dir in install_root.iterdir():
        if not profile_dir.is_dir():
            continue
        try:
            profile = Profile(profile_dir.name)
        except ValueError:
            logger.debug(f"Skipping unknown profile directory {profile_dir}")
            continue

        for build_dir in profile_dir.iterdir():
            if not build_dir.is_dir():
                continue
            try:
                build = BuildChannel(build_dir.name)
            except ValueError:
                logger.debug(f"Skipping unknown build channel directory {build_dir}")
                continue

            for version_dir in build_dir.iterdir():
                if not version_dir.is_dir():
                    continue
                if not is_single_path_component(version_dir.name):
                    logger.debug(f"Skipping unusable version directory {version_dir}")
                    continue
                found.add(PackageIdentifier(
                    core_version=version_dir.name,
                    build_channel=build,
                    profile=profile,
                ))

    return found
