"""Reading the documents to process.

Part of the `onedoc` framework.

`.rs` files contribute their module documentation: the `//!` lines at the very
top of the file, with the comment marker removed. `.md` files are used as they
are. Other extensions are rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List

from onedoc.errors import IoFailure, UnsupportedFileKind

MODULE_COMMENT_PREFIX = "//!"


class Kind(Enum):
    RUSTDOC = "rustdoc"
    MARKDOWN = "markdown"


EXTENSION_KINDS = {
    ".rs": Kind.RUSTDOC,
    ".md": Kind.MARKDOWN,
}


@dataclass
class Source:
    kind: Kind
    path: Path
    text: str


def kind_of(path: Path) -> Kind:
    try:
        return EXTENSION_KINDS[path.suffix]
    except KeyError:
        raise UnsupportedFileKind(path) from None


def check_kinds(paths: Iterable[Path]) -> None:
    """Fail on the first path with an unsupported extension."""
    for path in paths:
        kind_of(path)


def module_comment(contents: str) -> str:
    """Extract the leading `//!` documentation of a Rust source file."""
    lines: List[str] = []
    for line in contents.splitlines():
        if not line.startswith(MODULE_COMMENT_PREFIX):
            break
        line = line[len(MODULE_COMMENT_PREFIX) :]
        lines.append(line[1:] if line.startswith(" ") else line)
    return "\n".join(lines)


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise IoFailure("read from", path, str(exc)) from exc


def load_source(path: Path) -> Source:
    kind = kind_of(path)
    text = read_text(path)
    if kind is Kind.RUSTDOC:
        text = module_comment(text)
    return Source(kind, path, text)
