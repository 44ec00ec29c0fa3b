from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from pinoc_core.console import Console
from pinoc_core.errors import MissingToolError, ToolInvocationError

_INSTALL_HINTS: dict[str, str] = {
    "cargo": "Install Rust via rustup: https://rustup.rs",
    "solana": "Install the Solana CLI: https://docs.anza.xyz/cli/install",
    "solana-keygen": "Install the Solana CLI (ships solana-keygen): https://docs.anza.xyz/cli/install",
    "git": "Install git: https://git-scm.com/downloads",
}


@dataclass(frozen=True)
class CommandResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


def missing_tool_hint(program: str) -> str | None:
    return _INSTALL_HINTS.get(Path(program).name)


class ToolInvoker:
    """Runs external tools synchronously. No retries, no timeout."""

    def __init__(
        self,
        console: Console | None = None,
        *,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self.console = console if console is not None else Console()
        self._which = which
        self._resolved: dict[str, str] = {}

    def require(self, program: str) -> str:
        cached = self._resolved.get(program)
        if cached is not None:
            return cached
        if any(sep in program for sep in ("/", "\\")):
            resolved: str | None = program
        else:
            resolved = self._which(program)
        if resolved is None:
            hint = missing_tool_hint(program)
            msg = f"Required command not found on PATH: {program}"
            if hint:
                msg = f"{msg}. {hint}"
            raise MissingToolError(msg, argv=[program])
        self._resolved[program] = resolved
        return resolved

    def _argv(self, program: str, args: Sequence[str]) -> list[str]:
        return [program, *[str(a) for a in args]]

    def _spawn(
        self,
        program: str,
        args: Sequence[str],
        *,
        cwd: Path | None,
        capture: bool,
    ) -> tuple[list[str], subprocess.CompletedProcess[str]]:
        argv = self._argv(program, args)
        resolved = self.require(program)
        self.console.debug(f"+ ({cwd if cwd is not None else '.'}) {' '.join(argv)}")
        try:
            proc = subprocess.run(
                [resolved, *argv[1:]],
                cwd=str(cwd) if cwd is not None else None,
                capture_output=capture,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            if cwd is not None and not cwd.is_dir():
                raise ToolInvocationError(f"Working directory not found: {cwd}", argv=argv) from exc
            raise MissingToolError(f"Command not found: {program!r}", argv=argv) from exc
        except OSError as exc:
            raise ToolInvocationError(f"Failed to execute {program!r}: {exc}", argv=argv) from exc
        return argv, proc

    def run(
        self,
        program: str,
        args: Sequence[str] = (),
        *,
        cwd: Path | None = None,
        check: bool = True,
    ) -> CommandResult:
        argv, proc = self._spawn(program, args, cwd=cwd, capture=True)
        result = CommandResult(
            argv=argv,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )
        if check and result.returncode != 0:
            msg = result.stderr.strip() or result.stdout.strip() or "command failed"
            raise ToolInvocationError(
                f"{' '.join(argv)} exited with code {result.returncode}: {msg}",
                argv=argv,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result

    def capture(self, program: str, args: Sequence[str] = (), *, cwd: Path | None = None) -> str:
        return self.run(program, args, cwd=cwd, check=True).stdout.strip()

    def stream(self, program: str, args: Sequence[str] = (), *, cwd: Path | None = None) -> int:
        """Run with inherited stdio and return the exit code."""
        _, proc = self._spawn(program, args, cwd=cwd, capture=False)
        return proc.returncode
