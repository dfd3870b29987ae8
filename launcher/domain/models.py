"""
Value models shared across the launcher: package identity, release descriptors,
host platforms and managed runtime artefacts.
"""
from __future__ import annotations

import posixpath
import re
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Protocol, Tuple
from urllib.parse import urlparse

from packaging.version import InvalidVersion, Version
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Profile(str, Enum):
    """Which content bundle a release contains."""

    FULL = "FULL"
    ENGINE_ONLY = "ENGINE_ONLY"


class BuildChannel(str, Enum):
    """Release stability line."""

    STABLE = "STABLE"
    NIGHTLY = "NIGHTLY"


class OS(str, Enum):
    WINDOWS = "WINDOWS"
    MAC = "MAC"
    LINUX = "LINUX"


class Arch(str, Enum):
    X64 = "X64"
    X86 = "X86"
    ARM64 = "ARM64"


# <PROFILE>@<version>+<BUILD>; the version runs up to the last '+'
_IDENTIFIER_PATTERN = re.compile(r"^(?P<profile>[A-Z_]+)@(?P<version>.+)\+(?P<build>[A-Z_]+)$")

_PATH_SEPARATORS = ("/", "\\", "\0")


def is_single_path_component(name: str) -> bool:
    """True if `name` can be used as one directory name without leaving its parent."""
    return bool(name) and name not in (".", "..") and not any(s in name for s in _PATH_SEPARATORS)


class PackageIdentifier(BaseModel):
    """
    Identifies a package release.

    Equality and hashing only consider (core_version, build_channel, profile).
    The engine version is descriptive and is absent for identifiers that were
    rebuilt from the install directory layout.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    core_version: str = Field(..., min_length=1)
    build_channel: BuildChannel
    profile: Profile
    engine_version: Optional[Version] = Field(
        default=None,
        description="Semantic version of the bundled engine, if known.",
    )

    @field_validator("core_version")
    @classmethod
    def _check_core_version(cls, value: str) -> str:
        # used verbatim as a directory and file name component
        if not is_single_path_component(value):
            raise ValueError(f"Core version must be a single path component: {value!r}")
        return value

    @field_validator("engine_version", mode="before")
    @classmethod
    def _coerce_engine_version(cls, value: Any) -> Optional[Version]:
        if value is None or isinstance(value, Version):
            return value
        try:
            return Version(str(value))
        except InvalidVersion as e:
            raise ValueError(f"Invalid engine version: {value}") from e

    def _key(self) -> Tuple[str, BuildChannel, Profile]:
        return (self.core_version, self.build_channel, self.profile)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageIdentifier):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return f"{self.profile.value}@{self.core_version}+{self.build_channel.value}"

    @classmethod
    def parse(cls, text: str) -> Optional["PackageIdentifier"]:
        """
        Parse the `<PROFILE>@<version>+<BUILD>` form produced by `str()`.

        Returns None for anything that does not match exactly; enum names are
        case sensitive.
        """
        match = _IDENTIFIER_PATTERN.match(text or "")
        if not match:
            return None
        try:
            profile = Profile(match.group("profile"))
            build = BuildChannel(match.group("build"))
            return cls(core_version=match.group("version"), build_channel=build, profile=profile)
        except ValueError:
            return None


class RemoteResource(Protocol):
    """Anything the transfer engine can fetch: a URL, a file name and an info token."""

    @property
    def url(self) -> str: ...

    @property
    def filename(self) -> str: ...

    @property
    def info(self) -> Any: ...


class ReleaseDescriptor(BaseModel):
    """
    A remote release as handed over by the release feed.

    Two descriptors are equal when they describe the same identifier built at
    the same time.
    """

    model_config = ConfigDict(frozen=True)

    id: PackageIdentifier
    download_url: str
    changelog: Tuple[str, ...] = Field(default_factory=tuple)
    build_timestamp: datetime
    uses_alternate_runtime_loader: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReleaseDescriptor):
            return NotImplemented
        return self.id == other.id and self.build_timestamp == other.build_timestamp

    def __hash__(self) -> int:
        return hash((self.id, self.build_timestamp))

    @property
    def url(self) -> str:
        return self.download_url

    @property
    def filename(self) -> str:
        return cache_filename(self.id)

    @property
    def info(self) -> PackageIdentifier:
        return self.id


class Platform(BaseModel):
    """Operating system and architecture pair, usable as a lookup key."""

    model_config = ConfigDict(frozen=True)

    os: OS
    arch: Arch

    def is_linux(self) -> bool:
        return self.os == OS.LINUX

    def is_mac(self) -> bool:
        return self.os == OS.MAC

    def is_windows(self) -> bool:
        return self.os == OS.WINDOWS

    def __str__(self) -> str:
        return f"OS '{self.os.value}', arch '{self.arch.value}'"


class RuntimeArtefact(BaseModel):
    """
    A downloadable managed runtime for one platform and major version.

    The checksum is carried along for reference only.
    """

    model_config = ConfigDict(frozen=True)

    major_version: int
    platform: Platform
    download_url: str
    checksum: str

    @property
    def url(self) -> str:
        return self.download_url

    @property
    def filename(self) -> str:
        return posixpath.basename(urlparse(self.download_url).path)

    @property
    def info(self) -> str:
        return f"runtime {self.major_version} for {self.platform}"


def cache_filename(identifier: PackageIdentifier) -> str:
    """File name of the cached archive for a package release."""
    return (
        f"terasology-{identifier.profile.value.lower()}-{identifier.core_version}"
        f"-{identifier.build_channel.value.lower()}.zip"
    )
