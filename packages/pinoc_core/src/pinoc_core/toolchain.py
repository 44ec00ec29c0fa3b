from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from pinoc_core.config import DEPLOY_DIR, expand_user_path, load_pinoc_config
from pinoc_core.console import Console
from pinoc_core.errors import MissingArtifactError, ToolInvocationError
from pinoc_core.tool_invoker import ToolInvoker

CARGO_TOOL = "cargo"
SOLANA_TOOL = "solana"
PROGRAM_ARTIFACT_SUFFIX = ".so"


@dataclass(frozen=True)
class DeployPlan:
    cluster: str
    wallet: Path
    artifact: Path

    def argv(self) -> list[str]:
        return [
            "program",
            "deploy",
            "--url",
            self.cluster,
            "--keypair",
            str(self.wallet),
            str(self.artifact),
        ]


def _stream_checked(
    invoker: ToolInvoker,
    program: str,
    args: Sequence[str],
    *,
    cwd: Path,
    what: str,
) -> None:
    returncode = invoker.stream(program, args, cwd=cwd)
    if returncode != 0:
        raise ToolInvocationError(
            f"{what} failed with exit code {returncode}",
            argv=[program, *args],
            returncode=returncode,
        )


def build_program(project_root: Path, *, invoker: ToolInvoker, console: Console) -> None:
    console.info("Building program")
    _stream_checked(invoker, CARGO_TOOL, ["build-sbf"], cwd=project_root, what="Build")
    console.success("Build completed successfully!")


def run_tests(project_root: Path, *, invoker: ToolInvoker, console: Console) -> None:
    console.info("Testing program")
    _stream_checked(invoker, CARGO_TOOL, ["test"], cwd=project_root, what="Test")
    console.success("Tests passed!")


def add_package(project_root: Path, package: str, *, invoker: ToolInvoker, console: Console) -> None:
    console.info(f"Adding {package}")
    _stream_checked(invoker, CARGO_TOOL, ["add", package], cwd=project_root, what=f"cargo add {package}")
    console.success(f"Added {package}")


def find_program_artifact(project_root: Path) -> Path:
    deploy_dir = project_root / DEPLOY_DIR
    if not deploy_dir.is_dir():
        raise MissingArtifactError(f"{DEPLOY_DIR} directory not found. Run `pinoc build` first.")
    artifacts = sorted(
        p for p in deploy_dir.iterdir() if p.is_file() and p.suffix == PROGRAM_ARTIFACT_SUFFIX
    )
    if not artifacts:
        raise MissingArtifactError(f"No {PROGRAM_ARTIFACT_SUFFIX} file found in {DEPLOY_DIR}. Run `pinoc build` first.")
    return artifacts[0]


def plan_deploy(project_root: Path, *, cluster: str | None = None, wallet: str | None = None) -> DeployPlan:
    provider = load_pinoc_config(project_root).provider
    cluster_url = cluster or provider.cluster
    wallet_path = expand_user_path(wallet or provider.wallet)
    artifact = find_program_artifact(project_root)
    if not wallet_path.is_file():
        raise MissingArtifactError(
            f"Wallet keypair not found: {wallet_path}. Create one with `solana-keygen new` or pass --wallet."
        )
    return DeployPlan(cluster=cluster_url, wallet=wallet_path, artifact=artifact)


def deploy_program(
    project_root: Path,
    *,
    invoker: ToolInvoker,
    console: Console,
    cluster: str | None = None,
    wallet: str | None = None,
) -> DeployPlan:
    plan = plan_deploy(project_root, cluster=cluster, wallet=wallet)
    console.info("Deploying program")
    console.info(f"  Cluster: {plan.cluster}")
    console.info(f"  Wallet:  {plan.wallet}")
    console.info(f"  Program: {plan.artifact}")
    _stream_checked(invoker, SOLANA_TOOL, plan.argv(), cwd=project_root, what="Deploy")
    console.success("Program deployed successfully!")
    return plan
