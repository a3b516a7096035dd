"""Exceptions raised while generating documents.

Part of the `onedoc` framework.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class OnedocError(Exception):
    """Base class for every fatal onedoc failure."""


class MalformedStream(OnedocError):
    """An event stream broke the Start/End pairing invariant."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        self.path = path
        super().__init__(message if path is None else f"{path}: {message}")

    def with_path(self, path: Path) -> "MalformedStream":
        return MalformedStream(str(self), path)


class HeadingLevelOverflow(OnedocError):
    def __init__(self, level: int, path: Optional[Path] = None) -> None:
        self.level = level
        self.path = path
        message = f"heading level {level} is outside the range 1-6"
        super().__init__(message if path is None else f"{path}: {message}")

    def with_path(self, path: Path) -> "HeadingLevelOverflow":
        return HeadingLevelOverflow(self.level, path)


class UnsupportedFileKind(OnedocError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"unsupported file extension `{path}`")


class TemplateRenderFailure(OnedocError):
    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"failed to render template `{name}`: {reason}")


class IoFailure(OnedocError):
    def __init__(self, action: str, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"failed to {action} `{path}`: {reason}")


class ConfigError(OnedocError):
    pass


class MetadataError(OnedocError):
    pass


class UnresolvedLink(UserWarning):
    """A link target that is not configured; reported, never raised."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"unprocessed link `{target}`")
