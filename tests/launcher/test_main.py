"""
Tests for the command-line entry point.
"""

import pytest

from launcher import main as cli
from launcher.core import dependencies
from launcher.domain.models import Arch, OS, Platform
from tests.test_utils import FakeServer, build_game_archive


@pytest.fixture(autouse=True)
def linux_host(monkeypatch):
    monkeypatch.setattr(dependencies, "resolve_host_platform", lambda: Platform(os=OS.LINUX, arch=Arch.X64))
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)


def _manifest(tmp_path):
    path = tmp_path / "release.yaml"
    path.write_text(
        "id: FULL@5.1.1+STABLE\n"
        "url: https://downloads.example.org/terasology/TerasologyOmega.zip\n"
        "timestamp: 2021-06-01T12:00:00Z\n"
    )
    return path


def test_list_empty(tmp_path, capsys):
    assert cli.main(["--data-dir", str(tmp_path), "list"]) == 0
    assert "No packages installed." in capsys.readouterr().out


def test_list_installed(tmp_path, capsys):
    (tmp_path / "games" / "ENGINE_ONLY" / "NIGHTLY" / "2317").mkdir(parents=True)

    assert cli.main(["--data-dir", str(tmp_path), "list"]) == 0
    assert "ENGINE_ONLY@2317+NIGHTLY" in capsys.readouterr().out


def test_install_and_remove(tmp_path, monkeypatch, capsys):
    real_build_context = dependencies.build_context
    transport = FakeServer(build_game_archive()).transport()
    monkeypatch.setattr(
        cli, "build_context", lambda data_dir: real_build_context(data_dir, transport=transport)
    )

    assert cli.main(["--data-dir", str(tmp_path), "install", str(_manifest(tmp_path))]) == 0
    assert (tmp_path / "games" / "FULL" / "STABLE" / "5.1.1" / "Terasology.jar").exists()
    assert "install FULL@5.1.1+STABLE: done" in capsys.readouterr().out

    assert cli.main(["--data-dir", str(tmp_path), "remove", "FULL@5.1.1+STABLE"]) == 0
    assert not (tmp_path / "games" / "FULL" / "STABLE" / "5.1.1").exists()


def test_install_failure_exit_code(tmp_path, monkeypatch, capsys):
    real_build_context = dependencies.build_context
    transport = FakeServer(b"", status=404).transport()
    monkeypatch.setattr(
        cli, "build_context", lambda data_dir: real_build_context(data_dir, transport=transport)
    )

    assert cli.main(["--data-dir", str(tmp_path), "install", str(_manifest(tmp_path))]) == 1
    assert "transfer_failed" in capsys.readouterr().err


def test_install_missing_manifest(tmp_path):
    assert cli.main(["--data-dir", str(tmp_path), "install", str(tmp_path / "nope.yaml")]) == 2


def test_remove_invalid_identifier(tmp_path, capsys):
    assert cli.main(["--data-dir", str(tmp_path), "remove", "not-an-id"]) == 2
    assert "Not a package identifier" in capsys.readouterr().err


def test_remove_rejects_relative_version(tmp_path):
    other = tmp_path / "games" / "FULL" / "NIGHTLY" / "9"
    other.mkdir(parents=True)

    assert cli.main(["--data-dir", str(tmp_path), "remove", "FULL@..+STABLE"]) == 2
    assert other.is_dir()


def test_runtime(tmp_path, capsys):
    assert cli.main(["--data-dir", str(tmp_path), "runtime", "--version", "11"]) == 0
    assert "runtime 11" in capsys.readouterr().out


def test_runtime_unknown_version(tmp_path):
    assert cli.main(["--data-dir", str(tmp_path), "runtime", "--version", "21"]) == 1
