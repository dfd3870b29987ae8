"""
Tests for YAML release manifests.
"""

from datetime import datetime, timezone

import pytest
from packaging.version import Version

from launcher.data.release_manifest import dump_release_manifest, load_release_manifest, parse_release_manifest
from launcher.domain.models import BuildChannel, Profile

MANIFEST = """
id: FULL@5.1.1+STABLE
engine_version: 5.1.1
url: https://downloads.example.org/terasology/TerasologyOmega.zip
timestamp: 2021-06-01T12:00:00Z
alternate_runtime_loader: true
changelog:
  - Fix crash on start
  - Faster world generation
"""


def test_parse_full_manifest():
    release = parse_release_manifest(MANIFEST)

    assert release.id.profile == Profile.FULL
    assert release.id.build_channel == BuildChannel.STABLE
    assert release.id.core_version == "5.1.1"
    assert release.id.engine_version == Version("5.1.1")
    assert release.download_url == "https://downloads.example.org/terasology/TerasologyOmega.zip"
    assert release.build_timestamp == datetime(2021, 6, 1, 12, 0, tzinfo=timezone.utc)
    assert release.uses_alternate_runtime_loader
    assert release.changelog == ("Fix crash on start", "Faster world generation")


def test_optional_fields():
    release = parse_release_manifest(
        "id: ENGINE_ONLY@2317+NIGHTLY\n"
        "url: https://example.org/engine.zip\n"
        "timestamp: '2022-01-05T08:30:00+00:00'\n"
    )

    assert release.id.engine_version is None
    assert release.changelog == ()
    assert not release.uses_alternate_runtime_loader
    assert release.build_timestamp == datetime(2022, 1, 5, 8, 30, tzinfo=timezone.utc)


def test_multiline_changelog_string():
    release = parse_release_manifest(
        "id: FULL@1.0.0+STABLE\n"
        "url: https://example.org/game.zip\n"
        "timestamp: 2020-01-01T00:00:00Z\n"
        "changelog: |\n"
        "  first\n"
        "  second\n"
    )
    assert release.changelog == ("first", "second")


@pytest.mark.parametrize("content", [
    "- just\n- a list\n",
    "id: FULL@1.0.0+STABLE\nurl: https://example.org/game.zip\n",
    "id: full@1.0.0+stable\nurl: https://example.org/game.zip\ntimestamp: 2020-01-01T00:00:00Z\n",
    "id: FULL@1.0.0+STABLE\nengine_version: not-a-version\nurl: u\ntimestamp: 2020-01-01T00:00:00Z\n",
    "id: FULL@1.0.0+STABLE\nurl: u\ntimestamp: yesterday\n",
    "id: [unclosed\n",
])
def test_invalid_manifests(content):
    with pytest.raises(ValueError):
        parse_release_manifest(content)


def test_dump_and_load(tmp_path):
    release = parse_release_manifest(MANIFEST)
    path = tmp_path / "release.yaml"
    path.write_text(dump_release_manifest(release), encoding="utf-8")

    loaded = load_release_manifest(path)

    assert loaded == release
    assert loaded.id.engine_version == release.id.engine_version
    assert loaded.changelog == release.changelog
