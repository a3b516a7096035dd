"""Crate metadata, as reported by `cargo metadata`.

Part of the `onedoc` framework.
"""

from __future__ import annotations

import json
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from onedoc.errors import MetadataError

# Target kinds whose source file holds the crate documentation, by preference.
DOC_TARGET_KINDS = ("lib", "bin", "proc-macro")


@dataclass
class Target:
    name: str
    kind: List[str]
    src_path: Path


@dataclass
class Package:
    id: str
    name: str
    manifest_path: Path
    readme: Optional[str] = None
    targets: List[Target] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def directory(self) -> Path:
        return self.manifest_path.parent

    def doc_source(self) -> Path:
        for kind in DOC_TARGET_KINDS:
            for target in self.targets:
                if kind in target.kind:
                    return target.src_path
        raise MetadataError(f"failed to determine default source file for package `{self.name}`")

    def readme_path(self) -> Path:
        return self.directory / (self.readme or "README.md")


@dataclass
class Metadata:
    workspace_root: Path
    packages: List[Package]
    workspace_members: List[str]

    def workspace_packages(self) -> List[Package]:
        members = set(self.workspace_members)
        return [package for package in self.packages if package.id in members]

    def root_package(self) -> Optional[Package]:
        root_manifest = self.workspace_root / "Cargo.toml"
        for package in self.packages:
            if package.manifest_path == root_manifest:
                return package
        return None

    def select_package(self, name: Optional[str] = None) -> Package:
        """Return the named workspace package, or the root package."""
        if name is None:
            package = self.root_package()
            if package is None:
                raise MetadataError("no root package")
            return package
        for package in self.workspace_packages():
            if package.name == name:
                return package
        raise MetadataError(f"package `{name}` not found in workspace")


def parse_metadata(data: Dict[str, Any]) -> Metadata:
    try:
        packages = [
            Package(
                id=entry["id"],
                name=entry["name"],
                manifest_path=Path(entry["manifest_path"]),
                readme=entry.get("readme"),
                targets=[
                    Target(target["name"], list(target["kind"]), Path(target["src_path"]))
                    for target in entry.get("targets", [])
                ],
                raw=entry,
            )
            for entry in data["packages"]
        ]
        return Metadata(
            workspace_root=Path(data["workspace_root"]),
            packages=packages,
            workspace_members=list(data.get("workspace_members", [])),
        )
    except (KeyError, TypeError) as exc:
        raise MetadataError(f"unexpected `cargo metadata` output: missing {exc}") from exc


def find_cargo() -> str:
    cargo = os.environ.get("CARGO") or shutil.which("cargo")
    if not cargo:
        raise MetadataError("cargo is required but not found on PATH")
    return cargo


def metadata_command(cargo: str, manifest_path: Optional[Path] = None) -> Sequence[str]:
    command = [cargo, "metadata", "--format-version", "1", "--no-deps"]
    if manifest_path is not None:
        command.extend(["--manifest-path", str(manifest_path)])
    return command


def load_metadata(manifest_path: Optional[Path] = None) -> Metadata:
    command = metadata_command(find_cargo(), manifest_path)
    completed = subprocess.run(command, capture_output=True, text=True, check=False)
    if completed.returncode != 0:
        raise MetadataError(f"cargo metadata failed: {completed.stderr.strip() or completed.stdout.strip()}")
    try:
        data = json.loads(completed.stdout)
    except json.JSONDecodeError as exc:
        raise MetadataError(f"cargo metadata printed invalid JSON: {exc}") from exc
    return parse_metadata(data)
