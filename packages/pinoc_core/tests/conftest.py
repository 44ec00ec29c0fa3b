from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from pinoc_core.addresses import AddressResolver
from pinoc_core.console import RecordingConsole
from pinoc_core.errors import ToolInvocationError
from pinoc_core.tool_invoker import CommandResult, ToolInvoker

Handler = Callable[[list[str], Path | None], "CommandResult | str"]


class FakeInvoker(ToolInvoker):
    """ToolInvoker that records calls and answers from canned handlers.

    Handlers are keyed by argv prefix ("solana address", "git"); the longest
    matching prefix wins. Unmatched calls succeed with empty output.
    """

    def __init__(self) -> None:
        super().__init__(RecordingConsole(), which=lambda name: f"/fake/bin/{name}")
        self.calls: list[tuple[list[str], Path | None]] = []
        self.handlers: dict[str, Handler] = {}

    def _handler(self, argv: list[str]) -> Handler | None:
        for n in range(len(argv), 0, -1):
            handler = self.handlers.get(" ".join(argv[:n]))
            if handler is not None:
                return handler
        return None

    def run(
        self,
        program: str,
        args: Sequence[str] = (),
        *,
        cwd: Path | None = None,
        check: bool = True,
    ) -> CommandResult:
        argv = [program, *[str(a) for a in args]]
        self.calls.append((argv, cwd))
        handler = self._handler(argv)
        out = handler(argv, cwd) if handler is not None else ""
        result = out if isinstance(out, CommandResult) else CommandResult(argv, 0, out, "")
        if check and result.returncode != 0:
            raise ToolInvocationError(
                f"{' '.join(argv)} exited with code {result.returncode}",
                argv=argv,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result

    def stream(self, program: str, args: Sequence[str] = (), *, cwd: Path | None = None) -> int:
        return self.run(program, args, cwd=cwd, check=False).returncode

    def argvs(self) -> list[list[str]]:
        return [argv for argv, _ in self.calls]


def fail(returncode: int = 1, stderr: str = "boom") -> Handler:
    def _handler(argv: list[str], cwd: Path | None) -> CommandResult:
        return CommandResult(argv, returncode, "", stderr)

    return _handler


def keygen_writes_file(content: str = "[1,2,3]") -> Handler:
    def _handler(argv: list[str], cwd: Path | None) -> str:
        out = Path(argv[argv.index("--outfile") + 1])
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(content, encoding="utf-8")
        return ""

    return _handler


def address_by_file(mapping: dict[str, str]) -> Handler:
    def _handler(argv: list[str], cwd: Path | None) -> str:
        return mapping[Path(argv[argv.index("-k") + 1]).name] + "\n"

    return _handler


@pytest.fixture
def fake_invoker() -> FakeInvoker:
    return FakeInvoker()


@pytest.fixture
def console(fake_invoker: FakeInvoker) -> RecordingConsole:
    assert isinstance(fake_invoker.console, RecordingConsole)
    return fake_invoker.console


@pytest.fixture
def resolver(fake_invoker: FakeInvoker, console: RecordingConsole) -> AddressResolver:
    return AddressResolver(fake_invoker, console)
