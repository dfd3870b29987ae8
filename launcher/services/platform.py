"""
Host platform classification.
"""
from __future__ import annotations

import logging
import platform as _platform
from typing import FrozenSet, List, Optional, Tuple

from launcher.domain.models import Arch, OS, Platform

logger = logging.getLogger(__name__)

# Checked in order, first substring match wins. Markers are whole tokens so
# that e.g. "darwin" is never taken for "win".
_OS_MARKERS: List[Tuple[str, OS]] = [
    ("linux", OS.LINUX),
    ("windows", OS.WINDOWS),
    ("mac os", OS.MAC),
    ("macos", OS.MAC),
    ("darwin", OS.MAC),
]

_ARCH_TOKENS = {
    "x86_64": Arch.X64,
    "amd64": Arch.X64,
    "x64": Arch.X64,
    "x86": Arch.X86,
    "i386": Arch.X86,
    "i686": Arch.X86,
}

DEFAULT_OS = OS.LINUX
DEFAULT_ARCH = Arch.X64

# Platforms supported by both the game and the launcher.
SUPPORTED_PLATFORMS: FrozenSet[Platform] = frozenset({
    Platform(os=OS.WINDOWS, arch=Arch.X64),
    Platform(os=OS.LINUX, arch=Arch.X64),
})


def classify_os(os_name: str) -> OS:
    name = (os_name or "").lower()
    for marker, os_value in _OS_MARKERS:
        if marker in name:
            return os_value
    logger.debug(f"Unknown operating system '{os_name}', assuming {DEFAULT_OS.value}")
    return DEFAULT_OS


def classify_arch(arch_name: str) -> Arch:
    arch = _ARCH_TOKENS.get((arch_name or "").lower())
    if arch is None:
        logger.debug(f"Unknown architecture '{arch_name}', assuming {DEFAULT_ARCH.value}")
        return DEFAULT_ARCH
    return arch


def resolve_host_platform(os_name: Optional[str] = None, arch_name: Optional[str] = None) -> Platform:
    """
    Classify the host into a Platform. Never fails: unknown hosts get a best guess.

    Args:
        os_name: raw OS name, defaults to `platform.system()`
        arch_name: raw architecture name, defaults to `platform.machine()`
    """
    if os_name is None:
        os_name = _platform.system()
    if arch_name is None:
        arch_name = _platform.machine()
    return Platform(os=classify_os(os_name), arch=classify_arch(arch_name))


def is_supported(platform: Platform) -> bool:
    return platform in SUPPORTED_PLATFORMS
