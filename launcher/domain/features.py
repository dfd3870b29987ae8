"""
Engine features and the engine versions that introduced them.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from packaging.specifiers import SpecifierSet
from packaging.version import Version

from launcher.domain.models import PackageIdentifier


class EngineFeature(Enum):
    LWJGL3 = ">=4.1.0"
    PICOCLI = ">=5.1.0"

    @property
    def engine_versions(self) -> SpecifierSet:
        return SpecifierSet(self.value)

    def is_provided_by(self, engine_version: Optional[Version]) -> bool:
        # Unknown engine versions (e.g. identifiers rebuilt from disk) never count.
        if engine_version is None:
            return False
        return self.engine_versions.contains(engine_version, prereleases=True)

    def is_provided_by_package(self, identifier: PackageIdentifier) -> bool:
        return self.is_provided_by(identifier.engine_version)
