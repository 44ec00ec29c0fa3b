from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from pinoc_core import git_ops
from pinoc_core.addresses import AddressResolver, KeyPair
from pinoc_core.config import DEPLOY_DIR, keypair_path
from pinoc_core.console import Console
from pinoc_core.errors import ConfigurationError, FileSystemError, ToolInvocationError, ValidationError
from pinoc_core.templates import Layout, load_layout, missing_params, render, substitute
from pinoc_core.tool_invoker import ToolInvoker

CARGO_TOOL = "cargo"
FULL_LAYOUT = "full"
MINIMAL_LAYOUT = "minimal"

_PROJECT_NAME_RE = re.compile(r"[A-Za-z0-9_]+")


@dataclass(frozen=True)
class ProjectSpec:
    name: str
    target_dir: Path
    init_git: bool = True
    boilerplate: bool = True

    @property
    def layout_name(self) -> str:
        return FULL_LAYOUT if self.boilerplate else MINIMAL_LAYOUT


@dataclass(frozen=True)
class CreatedProject:
    spec: ProjectSpec
    keypair: KeyPair
    user_address: str
    written: list[Path] = field(default_factory=list)
    git_initialized: bool = False


def validate_project_name(name: str) -> None:
    if not name:
        raise ValidationError("Project name must not be empty.")
    if not _PROJECT_NAME_RE.fullmatch(name):
        raise ValidationError(
            f"Invalid project name {name!r}: use only letters, digits and underscores (no hyphens or symbols)."
        )


def project_params(name: str, *, program_address: str, user_address: str) -> dict[str, str]:
    return {
        "name": name,
        "program_address": program_address,
        "user_address": user_address,
    }


def _mkdir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileSystemError(f"Failed to create directory {path}: {e}", path=path) from e


def scaffold_project(project_dir: Path, layout: Layout, params: dict[str, str]) -> list[Path]:
    """Create the layout's directories, then write every rendered template.

    Existing files are overwritten. A failure leaves whatever was already
    written in place. A layout whose templates need parameters that
    ``params`` lacks is rejected before anything is created.
    """
    missing = missing_params(layout, params)
    if missing:
        detail = "; ".join(f"{tid}: {', '.join(sorted(keys))}" for tid, keys in sorted(missing.items()))
        raise ConfigurationError(f"Layout {layout.name!r} needs parameters that were not supplied ({detail})")

    for rel in layout.directories:
        _mkdir(project_dir / rel)

    written: list[Path] = []
    for entry in layout.files:
        dest = project_dir / substitute(str(entry.path), params)
        _mkdir(dest.parent)
        text = render(entry.template_id, params)
        try:
            dest.write_text(text, encoding="utf-8")
        except OSError as e:
            raise FileSystemError(f"Failed to write {dest}: {e}", path=dest) from e
        written.append(dest)
    return written


def _resolve_program_keypair(
    project_dir: Path,
    name: str,
    *,
    resolver: AddressResolver,
    console: Console,
) -> KeyPair:
    path = keypair_path(project_dir, name)
    if path.is_file():
        console.warn(f"Reusing existing program keypair: {path}")
        return KeyPair(file_path=path, address=resolver.address_of(path))
    return resolver.new_keypair(path)


def _init_git(project_dir: Path, *, invoker: ToolInvoker, console: Console) -> bool:
    try:
        git_ops.init_repository(invoker, project_dir)
        git_ops.commit_all(invoker, project_dir)
    except ToolInvocationError as e:
        console.warn(f"git setup failed; the project was still created: {e}")
        return False
    return True


def create_project(
    spec: ProjectSpec,
    *,
    invoker: ToolInvoker,
    resolver: AddressResolver,
    console: Console,
) -> CreatedProject:
    validate_project_name(spec.name)
    layout = load_layout(spec.layout_name)
    project_dir = spec.target_dir

    console.info(f"Initializing Pinocchio project: {spec.name}")
    _mkdir(project_dir)
    invoker.run(CARGO_TOOL, ["init", "--lib", "--vcs", "none", "--name", spec.name], cwd=project_dir)

    _mkdir(project_dir / DEPLOY_DIR)
    keypair = _resolve_program_keypair(project_dir, spec.name, resolver=resolver, console=console)
    console.info(f"Program id: {keypair.address}")

    user_address = resolver.default_address()
    params = project_params(spec.name, program_address=keypair.address, user_address=user_address)
    written = scaffold_project(project_dir, layout, params)

    git_initialized = False
    if spec.init_git:
        git_initialized = _init_git(project_dir, invoker=invoker, console=console)

    return CreatedProject(
        spec=spec,
        keypair=keypair,
        user_address=user_address,
        written=written,
        git_initialized=git_initialized,
    )
