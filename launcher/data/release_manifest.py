"""
YAML release manifests: a file-based stand-in for the remote release feed.

Example:

    id: FULL@5.1.1+STABLE
    engine_version: 5.1.1
    url: https://example.org/TerasologyOmega.zip
    timestamp: 2021-06-01T12:00:00Z
    alternate_runtime_loader: true
    changelog:
      - Fix the thing
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import ValidationError

from launcher.domain.models import PackageIdentifier, ReleaseDescriptor


def load_release_manifest(path: Path) -> ReleaseDescriptor:
    return parse_release_manifest(Path(path).read_text(encoding="utf-8"))


def parse_release_manifest(content: str) -> ReleaseDescriptor:
    """
    Raises:
        ValueError: if the document is not a valid release manifest
    """
    try:
        manifest = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse release manifest: {e}") from e
    if not isinstance(manifest, dict):
        raise ValueError("Release manifest must be a mapping")

    for key in ("id", "url", "timestamp"):
        if key not in manifest:
            raise ValueError(f"Release manifest is missing '{key}'")

    parsed = PackageIdentifier.parse(str(manifest["id"]))
    if parsed is None:
        raise ValueError(f"Invalid package identifier: {manifest['id']}")

    try:
        identifier = PackageIdentifier(
            core_version=parsed.core_version,
            build_channel=parsed.build_channel,
            profile=parsed.profile,
            engine_version=manifest.get("engine_version"),
        )
        return ReleaseDescriptor(
            id=identifier,
            download_url=str(manifest["url"]),
            changelog=_changelog_lines(manifest.get("changelog")),
            build_timestamp=_timestamp(manifest["timestamp"]),
            uses_alternate_runtime_loader=bool(manifest.get("alternate_runtime_loader", False)),
        )
    except ValidationError as e:
        raise ValueError(f"Invalid release manifest: {e}") from e


def _changelog_lines(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.splitlines()
    return [str(line) for line in value]


def _timestamp(value: Any) -> datetime:
    # PyYAML already turns ISO timestamps into datetimes
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def dump_release_manifest(release: ReleaseDescriptor) -> str:
    data: Dict[str, Any] = {
        "id": str(release.id),
        "url": release.download_url,
        "timestamp": release.build_timestamp.isoformat(),
        "alternate_runtime_loader": release.uses_alternate_runtime_loader,
        "changelog": list(release.changelog),
    }
    if release.id.engine_version is not None:
        data["engine_version"] = str(release.id.engine_version)
    return yaml.safe_dump(data, sort_keys=False)
