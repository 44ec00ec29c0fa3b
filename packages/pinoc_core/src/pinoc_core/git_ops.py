from __future__ import annotations

from pathlib import Path

from pinoc_core.tool_invoker import CommandResult, ToolInvoker

GIT_TOOL = "git"
INITIAL_COMMIT_MESSAGE = "Initial commit"


def init_repository(invoker: ToolInvoker, workspace_dir: Path) -> CommandResult:
    return invoker.run(GIT_TOOL, ["init"], cwd=workspace_dir)


def head_sha(invoker: ToolInvoker, workspace_dir: Path) -> str:
    return invoker.capture(GIT_TOOL, ["rev-parse", "HEAD"], cwd=workspace_dir)


def commit_all(invoker: ToolInvoker, workspace_dir: Path, *, message: str = INITIAL_COMMIT_MESSAGE) -> str:
    invoker.run(GIT_TOOL, ["add", "-A"], cwd=workspace_dir)
    invoker.run(GIT_TOOL, ["commit", "--no-gpg-sign", "-m", message], cwd=workspace_dir)
    return head_sha(invoker, workspace_dir)
