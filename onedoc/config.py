"""Loading `onedoc.toml`.

Part of the `onedoc` framework.

The configuration file lives in the workspace root:

    [[doc]]
    input = ["src/lib.rs", "docs/USAGE.md"]   # or a single string
    output = "README.md"
    template = "docs/README_TEMPLATE.md"      # optional

    [links]
    "Vec" = "https://doc.rust-lang.org/std/vec/struct.Vec.html"
    "docs/USAGE.md" = "https://example.com/usage"

Every path is relative to the workspace root. Without any `[[doc]]` table a
single document is generated from the package's crate root into its README.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from onedoc.errors import ConfigError
from onedoc.metadata import Package

CONFIG_FILENAME = "onedoc.toml"


@dataclass
class Doc:
    inputs: List[Path]
    output: Path
    template: Optional[Path] = None


@dataclass
class Config:
    docs: List[Doc] = field(default_factory=list)
    links: Dict[str, str] = field(default_factory=dict)


def _as_path(value: Any, key: str) -> Path:
    if not isinstance(value, str) or not value:
        raise ConfigError(f"`{key}` must be a non-empty string")
    return Path(value)


def _parse_inputs(value: Any) -> List[Path]:
    if isinstance(value, str):
        return [_as_path(value, "doc.input")]
    if isinstance(value, list) and value:
        return [_as_path(item, "doc.input") for item in value]
    raise ConfigError("`doc.input` must be a string or a non-empty list of strings")


def _parse_doc(table: Any) -> Doc:
    if not isinstance(table, dict):
        raise ConfigError("every `doc` entry must be a table")
    unknown = set(table) - {"input", "output", "template"}
    if unknown:
        raise ConfigError(f"unknown keys in `doc`: {', '.join(sorted(unknown))}")
    if "input" not in table:
        raise ConfigError("missing `doc.input`")
    if "output" not in table:
        raise ConfigError("missing `doc.output`")
    template = table.get("template")
    return Doc(
        inputs=_parse_inputs(table["input"]),
        output=_as_path(table["output"], "doc.output"),
        template=None if template is None else _as_path(template, "doc.template"),
    )


def _parse_links(table: Any) -> Dict[str, str]:
    if not isinstance(table, dict):
        raise ConfigError("`links` must be a table")
    links: Dict[str, str] = {}
    for name, url in table.items():
        if not isinstance(url, str):
            raise ConfigError(f"link `{name}` must map to a string")
        links[name] = url
    return links


def parse_config(data: Mapping[str, Any]) -> Config:
    docs = data.get("doc", [])
    if not isinstance(docs, list):
        raise ConfigError("`doc` must be an array of tables")
    return Config(
        docs=[_parse_doc(table) for table in docs],
        links=_parse_links(data.get("links", {})),
    )


def loads(text: str) -> Config:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"failed to deserialize config: {exc}") from exc
    return parse_config(data)


def load_from_path(path: Path) -> Config:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Config()
    except OSError as exc:
        raise ConfigError(f"failed to read config file: {exc}") from exc
    return loads(text)


def default_doc(package: Package) -> Doc:
    return Doc(inputs=[package.doc_source()], output=package.readme_path())


def normalize_paths(config: Config, root: Path) -> Config:
    """Make every document path absolute against `root`."""
    for doc in config.docs:
        doc.inputs = [root / path for path in doc.inputs]
        doc.output = root / doc.output
        if doc.template is not None:
            doc.template = root / doc.template
    return config


def load(workspace_root: Path, package: Package) -> Config:
    path = workspace_root / CONFIG_FILENAME
    try:
        config = load_from_path(path)
    except ConfigError as exc:
        raise ConfigError(f"failed to load config from `{path}`: {exc}") from exc

    if not config.docs:
        config.docs = [default_doc(package)]
    return normalize_paths(config, workspace_root)
