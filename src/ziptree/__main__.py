"""ziptree - command-line entry point.

Usage:
    python -m ziptree pack <source_dir> <archive.zip>
    python -m ziptree unpack <archive.zip> <destination_dir>
    python -m ziptree list <archive.zip>

Errors are printed to stderr and mapped to one exit code per error kind.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from ziptree import __version__
from ziptree.archives import ArchiveService
from ziptree.core.config import ConfigResolver
from ziptree.core.errors import ZipTreeError
from ziptree.core.logging import apply_logging_policy, set_colors, set_console


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ziptree", description="Pack and unpack directory trees.")
    p.add_argument("--version", action="version", version=f"ziptree {__version__}")
    p.add_argument("--config", type=Path, default=None, help="User config YAML path")
    p.add_argument("--no-color", action="store_true", help="Disable colored output")
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Warnings and errors only")
    verbosity.add_argument("-v", "--verbose", action="count", default=0, help="More output")

    sub = p.add_subparsers(dest="command", required=True)

    pack = sub.add_parser("pack", help="Pack a directory into an archive")
    pack.add_argument("source")
    pack.add_argument("destination")
    pack.add_argument(
        "--compression", choices=["stored", "deflated"], default=None, help="Entry compression"
    )

    unpack = sub.add_parser("unpack", help="Extract an archive into a directory")
    unpack.add_argument("archive")
    unpack.add_argument("destination")

    lst = sub.add_parser("list", help="List archive entries")
    lst.add_argument("archive")
    return p


def _cli_overrides(ns: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if ns.quiet:
        overrides["logging.level"] = "quiet"
    elif ns.verbose >= 2:
        overrides["logging.level"] = "debug"
    elif ns.verbose == 1:
        overrides["logging.level"] = "verbose"
    if getattr(ns, "compression", None):
        overrides["archives.compression"] = ns.compression
    return overrides


def cmd_pack(service: ArchiveService, ns: argparse.Namespace) -> int:
    result = asyncio.run(service.create_from_directory(ns.source, ns.destination))
    print(f"Packed: {result.source_path}")
    print(f"    To: {result.destination_path}")
    print(f" Files: {result.files_packed}")
    print(f" Bytes: {result.total_bytes:,}")
    if result.skipped_links:
        print(f" Links: {len(result.skipped_links)} skipped")
    return 0


def cmd_unpack(service: ArchiveService, ns: argparse.Namespace) -> int:
    with service.open_for_read(ns.archive) as handle:
        result = service.extract(handle, ns.destination)
    print(f"Unpacked: {ns.archive}")
    print(f"      To: {result.destination_dir}")
    print(f"   Files: {result.files_unpacked}")
    print(f"   Bytes: {result.total_bytes:,}")
    return 0


def cmd_list(service: ArchiveService, ns: argparse.Namespace) -> int:
    for name in service.list_entries(ns.archive):
        print(name)
    return 0


COMMANDS = {
    "pack": cmd_pack,
    "unpack": cmd_unpack,
    "list": cmd_list,
}


def main(argv: list[str] | None = None) -> int:
    ns = build_parser().parse_args(argv)

    try:
        resolver = ConfigResolver(cli_args=_cli_overrides(ns), user_config_path=ns.config)
        apply_logging_policy(resolver.resolve_logging_policy())
        set_colors(not ns.no_color and resolver.resolve_bool("logging.color", True))
        set_console(True)
        return COMMANDS[ns.command](ArchiveService(resolver=resolver), ns)
    except ZipTreeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        return 130


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
