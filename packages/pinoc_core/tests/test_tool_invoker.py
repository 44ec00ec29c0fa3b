from __future__ import annotations

import sys
from pathlib import Path

import pytest

from pinoc_core.console import RecordingConsole
from pinoc_core.errors import MissingToolError, ToolInvocationError
from pinoc_core.tool_invoker import ToolInvoker


def test_capture_returns_trimmed_stdout(tmp_path: Path) -> None:
    invoker = ToolInvoker(RecordingConsole())
    out = invoker.capture(sys.executable, ["-c", "import os; print('  ' + os.getcwd() + '  ')"], cwd=tmp_path)
    assert Path(out).resolve() == tmp_path.resolve()


def test_nonzero_exit_carries_stderr_and_code() -> None:
    invoker = ToolInvoker(RecordingConsole())
    with pytest.raises(ToolInvocationError) as excinfo:
        invoker.run(sys.executable, ["-c", "import sys; sys.stderr.write('bad keypair'); sys.exit(3)"])
    assert excinfo.value.returncode == 3
    assert "bad keypair" in excinfo.value.stderr
    assert "bad keypair" in str(excinfo.value)


def test_run_without_check_returns_result() -> None:
    invoker = ToolInvoker(RecordingConsole())
    result = invoker.run(sys.executable, ["-c", "import sys; print('x'); sys.exit(2)"], check=False)
    assert result.returncode == 2
    assert result.stdout.strip() == "x"


def test_missing_tool_fails_fast_with_hint() -> None:
    invoker = ToolInvoker(RecordingConsole(), which=lambda name: None)
    with pytest.raises(MissingToolError, match="solana-keygen") as excinfo:
        invoker.run("solana-keygen", ["new"])
    assert "docs.anza.xyz" in str(excinfo.value)
    assert excinfo.value.returncode is None


def test_require_resolves_once() -> None:
    seen: list[str] = []

    def which(name: str) -> str | None:
        seen.append(name)
        return sys.executable

    invoker = ToolInvoker(RecordingConsole(), which=which)
    assert invoker.require("python") == sys.executable
    assert invoker.require("python") == sys.executable
    assert seen == ["python"]


def test_stream_returns_exit_code() -> None:
    invoker = ToolInvoker(RecordingConsole())
    assert invoker.stream(sys.executable, ["-c", "raise SystemExit(4)"]) == 4


def test_verbose_console_traces_commands(tmp_path: Path) -> None:
    console = RecordingConsole(verbose=True)
    invoker = ToolInvoker(console)
    invoker.run(sys.executable, ["-c", "pass"], cwd=tmp_path)
    traces = console.messages("debug")
    assert len(traces) == 1
    assert traces[0].startswith(f"+ ({tmp_path})")


def test_missing_working_directory_is_not_a_missing_tool(tmp_path: Path) -> None:
    invoker = ToolInvoker(RecordingConsole())
    missing = tmp_path / "gone"
    with pytest.raises(ToolInvocationError, match="Working directory not found") as excinfo:
        invoker.run(sys.executable, ["-c", "pass"], cwd=missing)
    assert not isinstance(excinfo.value, MissingToolError)
