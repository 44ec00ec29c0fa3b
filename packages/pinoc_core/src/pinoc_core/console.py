from __future__ import annotations

import sys
from typing import TextIO


def configure_console_output() -> None:
    """Escape unencodable characters on stdout/stderr instead of raising."""
    for stream in (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, "reconfigure", None)
        if not callable(reconfigure) or str(getattr(stream, "errors", "")).lower() == "backslashreplace":
            continue
        try:
            reconfigure(errors="backslashreplace")
        except (OSError, ValueError):
            continue


class Console:
    """Status reporter handed to every component that talks to the user.

    Normal output goes to ``out``; warnings, errors and debug traces go to
    ``err``. Streams are looked up lazily so pytest's capsys sees them.
    """

    def __init__(
        self,
        *,
        out: TextIO | None = None,
        err: TextIO | None = None,
        verbose: bool = False,
    ) -> None:
        self._out = out
        self._err = err
        self.verbose = verbose

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err if self._err is not None else sys.stderr

    def info(self, message: str) -> None:
        print(message, file=self.out)

    def success(self, message: str) -> None:
        print(f"OK: {message}", file=self.out)

    def warn(self, message: str) -> None:
        print(f"WARNING: {message}", file=self.err)

    def error(self, message: str) -> None:
        print(f"ERROR: {message}", file=self.err)

    def debug(self, message: str) -> None:
        if self.verbose:
            print(message, file=self.err)


class RecordingConsole(Console):
    """Console that keeps every message in memory, for tests and dry runs."""

    def __init__(self, *, verbose: bool = False) -> None:
        super().__init__(verbose=verbose)
        self.records: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def success(self, message: str) -> None:
        self.records.append(("success", message))

    def warn(self, message: str) -> None:
        self.records.append(("warn", message))

    def error(self, message: str) -> None:
        self.records.append(("error", message))

    def debug(self, message: str) -> None:
        if self.verbose:
            self.records.append(("debug", message))

    def messages(self, level: str | None = None) -> list[str]:
        return [msg for lvl, msg in self.records if level is None or lvl == level]
