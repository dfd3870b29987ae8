"""
Command-line entry point for the package launcher core.

    python -m launcher.main list
    python -m launcher.main install release.yaml
    python -m launcher.main remove FULL@5.1.1+STABLE
    python -m launcher.main runtime --version 17
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from launcher.core.dependencies import LauncherContext, build_context
from launcher.data.release_manifest import load_release_manifest
from launcher.domain.errors import OperationResult, UnsupportedRuntimeError
from launcher.domain.models import PackageIdentifier
from launcher.services.platform import is_supported
from launcher.services.progress import CancellableProgress
from launcher.services.worker import PackageWorker

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="launcher", description="Manage locally installed game packages.")
    parser.add_argument("--data-dir", type=Path, default=None, help="Override the data directory.")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="List installed packages.")

    install = commands.add_parser("install", help="Install a release described by a YAML manifest.")
    install.add_argument("manifest", type=Path)

    remove = commands.add_parser("remove", help="Remove an installed package.")
    remove.add_argument("identifier", help="e.g. FULL@5.1.1+STABLE")

    runtime = commands.add_parser("runtime", help="Show the managed runtime for this host.")
    runtime.add_argument("--version", type=int, default=None, dest="major_version")
    return parser


def _report(result: OperationResult, what: str) -> int:
    if result.ok:
        print(f"{what}: done")
        return 0
    if result.cancelled:
        print(f"{what}: cancelled")
        return 1
    print(f"{what}: failed ({result.error_kind.value}): {result.error}", file=sys.stderr)
    return 1


def _list(context: LauncherContext) -> int:
    installed = sorted(context.package_manager.get_installed_packages(), key=str)
    if not installed:
        print("No packages installed.")
    for identifier in installed:
        print(f"{identifier}\t{context.package_manager.get_install_path(identifier)}")
    return 0


def _install(context: LauncherContext, worker: PackageWorker, manifest: Path) -> int:
    try:
        release = load_release_manifest(manifest)
    except (OSError, ValueError) as e:
        print(f"Cannot read release manifest {manifest}: {e}", file=sys.stderr)
        return 2

    sink = CancellableProgress(on_percent=lambda p: logger.info(f"{release.id}: {p}%"))
    future = worker.submit_install(release, sink)
    try:
        result = future.result()
    except KeyboardInterrupt:
        sink.cancel()
        result = future.result()
    return _report(result, f"install {release.id}")


def _remove(worker: PackageWorker, text: str) -> int:
    identifier = PackageIdentifier.parse(text)
    if identifier is None:
        print(f"Not a package identifier: {text}", file=sys.stderr)
        return 2
    return _report(worker.submit_remove(identifier).result(), f"remove {identifier}")


def _runtime(context: LauncherContext, major_version: Optional[int]) -> int:
    if not is_supported(context.host_platform):
        logger.warning(f"Host platform {context.host_platform} is not officially supported")
    try:
        artefact = context.host_runtime(major_version)
    except UnsupportedRuntimeError as e:
        print(str(e), file=sys.stderr)
        return 1
    print(f"{artefact.info}\t{artefact.url}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    context = build_context(args.data_dir)
    configure_logging(context.settings.log_level)

    if args.command == "list":
        return _list(context)
    if args.command == "runtime":
        return _runtime(context, args.major_version)

    with PackageWorker(context.package_manager) as worker:
        if args.command == "install":
            return _install(context, worker, args.manifest)
        return _remove(worker, args.identifier)


if __name__ == "__main__":
    sys.exit(main())
