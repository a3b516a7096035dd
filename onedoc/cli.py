"""Command line entry point.

Part of the `onedoc` framework.

Usage:
    onedoc [--package NAME] [--check] [--manifest-path PATH] [--keep-going]
    cargo onedoc [...]

Generates every document configured in `onedoc.toml` (by default the crate's
README.md from the `//!` docs of its crate root). With `--check` nothing is
written and the exit status tells whether every document is up to date.
"""

from __future__ import annotations

import argparse
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import List, Optional, Sequence

from onedoc import config as config_module
from onedoc.diagnostics import Diagnostics
from onedoc.errors import OnedocError
from onedoc.generate import Context, generate_all
from onedoc.metadata import load_metadata

CARGO_SUBCOMMAND = "onedoc"


def package_version() -> str:
    try:
        return version("onedoc")
    except PackageNotFoundError:
        return "unknown"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cargo onedoc",
        description="Generate README.md and other Markdown files from Rust doc comments",
    )
    parser.add_argument("-p", "--package", help="Workspace package to document (default: the root package)")
    parser.add_argument("--check", action="store_true", help="Report out of date files without writing them")
    parser.add_argument("--manifest-path", type=Path, help="Path to the Cargo.toml of the workspace")
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Continue with the remaining documents after one fails",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {package_version()}")
    return parser.parse_args(argv)


def strip_cargo_subcommand(argv: List[str]) -> List[str]:
    # `cargo onedoc ...` runs `cargo-onedoc onedoc ...`
    if argv and argv[0] == CARGO_SUBCOMMAND:
        return argv[1:]
    return argv


def run(args: argparse.Namespace, diagnostics: Diagnostics) -> int:
    metadata = load_metadata(args.manifest_path)
    package = metadata.select_package(args.package)
    config = config_module.load(metadata.workspace_root, package)
    ctx = Context(config=config, manifest=package.raw, check=args.check, keep_going=args.keep_going)
    report = generate_all(ctx, diagnostics)
    return 0 if report.ok else 1


def main(argv: Optional[Sequence[str]] = None, diagnostics: Optional[Diagnostics] = None) -> int:
    raw = list(sys.argv[1:] if argv is None else argv)
    args = parse_args(strip_cargo_subcommand(raw))
    diagnostics = diagnostics or Diagnostics()
    try:
        return run(args, diagnostics)
    except OnedocError as exc:
        diagnostics.error(str(exc))
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
