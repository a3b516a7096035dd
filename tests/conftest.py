"""Shared fixtures: in-memory consoles and a small fake crate."""

import io
from pathlib import Path

import pytest
from rich.console import Console

from onedoc.diagnostics import Diagnostics
from onedoc.metadata import Metadata, parse_metadata

PACKAGE_ID = "demo 0.1.0 (path+file:///demo)"


def memory_console() -> Console:
    return Console(file=io.StringIO(), highlight=False, soft_wrap=True, color_system=None)


def output_of(console: Console) -> str:
    return console.file.getvalue()


@pytest.fixture
def diagnostics() -> Diagnostics:
    return Diagnostics(out=memory_console(), err=memory_console())


def cargo_metadata_json(root: Path, readme=None) -> dict:
    return {
        "packages": [
            {
                "id": PACKAGE_ID,
                "name": "demo",
                "version": "0.1.0",
                "description": "A demo crate",
                "repository": "https://github.com/example/demo",
                "manifest_path": str(root / "Cargo.toml"),
                "readme": readme,
                "targets": [
                    {"name": "demo", "kind": ["bin"], "src_path": str(root / "src" / "main.rs")},
                    {"name": "demo", "kind": ["lib"], "src_path": str(root / "src" / "lib.rs")},
                ],
            }
        ],
        "workspace_members": [PACKAGE_ID],
        "workspace_root": str(root),
    }


@pytest.fixture
def crate(tmp_path: Path) -> Path:
    (tmp_path / "src").mkdir()
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "demo"\nversion = "0.1.0"\n', encoding="utf-8")
    (tmp_path / "src" / "lib.rs").write_text(
        "//! A demo crate.\n//!\n//! More text.\n\npub fn demo() {}\n",
        encoding="utf-8",
    )
    return tmp_path


@pytest.fixture
def crate_metadata(crate: Path) -> Metadata:
    return parse_metadata(cargo_metadata_json(crate))
