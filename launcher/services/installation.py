"""
Inspection of an installed game directory.
"""
from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path
from typing import Callable, Dict, List, Optional

from packaging.version import InvalidVersion, Version

from launcher.domain.models import BuildChannel, PackageIdentifier, Profile, is_single_path_component

logger = logging.getLogger(__name__)

LIB_DIRECTORIES = ("lib", "libs")
VERSION_INFO_FILE = "versionInfo.properties"
JAR_SEARCH_DEPTH = 3


class GameInstallation:
    """An extracted package below <install_root>/<PROFILE>/<BUILD_CHANNEL>/<core_version>."""

    def __init__(self, path: Path):
        self.path = Path(path)

    @classmethod
    def get_existing(cls, directory: Path) -> "GameInstallation":
        """Return an installation after confirming it is present."""
        if not Path(directory).exists():
            raise FileNotFoundError(f"No installation present in {directory}")
        return cls(directory)

    def identifier(self) -> Optional[PackageIdentifier]:
        """Derive the identifier from the last three path components, if they fit the layout."""
        parts = self.path.parts
        if len(parts) < 3:
            return None
        try:
            profile = Profile(parts[-3])
            build = BuildChannel(parts[-2])
        except ValueError:
            logger.debug(
                f"Expected directory format '.../<profile>/<build>/<version>' but got {self.path}"
            )
            return None
        if not is_single_path_component(parts[-1]):
            return None
        return PackageIdentifier(core_version=parts[-1], build_channel=build, profile=profile)

    def engine_jar(self) -> Path:
        return find_jar(self.path, lambda name: name.startswith("engine") and name.endswith(".jar"), "engine")

    def game_jar(self) -> Path:
        return find_jar(self.path, lambda name: name == "Terasology.jar", "game")

    def engine_version(self) -> Version:
        """
        Read the engine version from the engine jar's version info.

        Raises:
            FileNotFoundError: if the engine jar or its version info is missing
            ValueError: if the recorded version is not a valid version
        """
        jar = self.engine_jar()
        properties = read_version_properties(jar)
        raw = properties.get("engineVersion")
        if not raw:
            raise FileNotFoundError(f"No engineVersion recorded in {jar}")
        try:
            return Version(raw)
        except InvalidVersion as e:
            raise ValueError(f"Invalid engine version {raw!r} in {jar}") from e

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameInstallation):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __repr__(self) -> str:
        return f"GameInstallation(path={self.path})"


def find_jar(search_path: Path, matches: Callable[[str], bool], display_name: str) -> Path:
    """Find exactly one jar inside a lib/libs directory at most three levels below `search_path`."""
    found: List[Path] = []
    base_depth = len(search_path.parts)
    for root, dirs, files in os.walk(search_path):
        root_path = Path(root)
        depth = len(root_path.parts) - base_depth
        # jars sit one level below their directory
        if depth >= JAR_SEARCH_DEPTH - 1:
            dirs.clear()
        if root_path.name not in LIB_DIRECTORIES:
            continue
        found.extend(root_path / name for name in files if matches(name))

    if not found:
        raise FileNotFoundError(f"Could not find {display_name} jar in {search_path}")
    if len(found) > 1:
        raise FileNotFoundError(
            f"Ambiguous results while looking for {display_name} jar in {search_path}: {sorted(found)}"
        )
    return found[0]


def read_version_properties(jar: Path) -> Dict[str, str]:
    with zipfile.ZipFile(jar, "r") as archive:
        entry = next((n for n in archive.namelist() if n.endswith(VERSION_INFO_FILE)), None)
        if entry is None:
            raise FileNotFoundError(f"Found no {VERSION_INFO_FILE} in {jar}")
        text = archive.read(entry).decode("utf-8")
    return parse_properties(text)


def parse_properties(text: str) -> Dict[str, str]:
    """Minimal java.util.Properties reader: `key=value` or `key: value`, `#`/`!` comments."""
    properties: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line[0] in "#!":
            continue
        separators = [i for i in (line.find("="), line.find(":")) if i >= 0]
        if not separators:
            properties[line] = ""
            continue
        cut = min(separators)
        properties[line[:cut].strip()] = line[cut + 1:].strip()
    return properties
