"""Console reporting for status lines, warnings and errors.

Part of the `onedoc` framework.
"""

from __future__ import annotations

from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from onedoc.errors import UnresolvedLink


def _make_console(stderr: bool) -> Console:
    return Console(stderr=stderr, highlight=False, soft_wrap=True)


class Diagnostics:
    """Prints messages as they happen and remembers the warnings."""

    def __init__(self, out: Optional[Console] = None, err: Optional[Console] = None) -> None:
        self.out = out or _make_console(stderr=False)
        self.err = err or _make_console(stderr=True)
        self.warnings: List[str] = []
        self.unresolved: List[UnresolvedLink] = []

    def status(self, message: str) -> None:
        self.out.print(escape(message))

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        self.err.print(f"[bold yellow]warn[/]: {escape(message)}")

    def error(self, message: str) -> None:
        self.err.print(f"[bold red]error[/]: {escape(message)}")

    def unresolved_link(self, target: str) -> UnresolvedLink:
        record = UnresolvedLink(target)
        self.unresolved.append(record)
        self.warn(str(record))
        return record
