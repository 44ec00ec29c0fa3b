"""
Program id reconciliation.

``src/lib.rs`` carries the program id as the string argument of a
``declare_id!`` call. The id must match the address of the program keypair
that ``cargo build-sbf`` deploys with, ``target/deploy/<crate>-keypair.json``.
``sync_program_id`` compares the two and patches the one declaration line when
they differ. Every other byte of the source file is left untouched.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path

from pinoc_core.addresses import AddressResolver, KeyPair
from pinoc_core.config import DEPLOY_DIR, KEYPAIR_SUFFIX, keypair_path, read_package_name
from pinoc_core.console import Console
from pinoc_core.errors import FileSystemError, MissingArtifactError

DECLARATION_TOKEN = "declare_id!"
CANONICAL_DECLARATION = 'pinocchio_pubkey::declare_id!("{address}");'
LIB_SOURCE = Path("src") / "lib.rs"


class IdentityState(str, enum.Enum):
    MACRO_MISSING = "macro_missing"
    CONSISTENT = "consistent"
    DIVERGED = "diverged"


@dataclass(frozen=True)
class Declaration:
    line_index: int
    address: str | None
    # Offsets of the address inside the line, between the quotes.
    start: int
    end: int


@dataclass(frozen=True)
class SyncReport:
    state: IdentityState
    source_path: Path
    keypair_path: Path
    keypair_address: str
    embedded_address: str | None
    line_number: int | None
    written: bool


def find_declaration(text: str) -> Declaration | None:
    for idx, line in enumerate(text.split("\n")):
        token_at = line.find(DECLARATION_TOKEN)
        if token_at < 0:
            continue
        open_quote = line.find('"', token_at + len(DECLARATION_TOKEN))
        close_quote = line.find('"', open_quote + 1) if open_quote >= 0 else -1
        if open_quote < 0 or close_quote < 0:
            return Declaration(line_index=idx, address=None, start=-1, end=-1)
        return Declaration(
            line_index=idx,
            address=line[open_quote + 1 : close_quote],
            start=open_quote + 1,
            end=close_quote,
        )
    return None


def classify(declaration: Declaration | None, keypair_address: str) -> IdentityState:
    if declaration is None:
        return IdentityState.MACRO_MISSING
    if declaration.address == keypair_address:
        return IdentityState.CONSISTENT
    return IdentityState.DIVERGED


def patch_declaration(text: str, declaration: Declaration, address: str) -> str:
    lines = text.split("\n")
    line = lines[declaration.line_index]
    if declaration.address is not None:
        lines[declaration.line_index] = line[: declaration.start] + address + line[declaration.end :]
    else:
        # No quoted argument to swap; replace the line with the canonical call.
        body = line.rstrip("\r")
        indent = body[: len(body) - len(body.lstrip())]
        line_ending = line[len(body) :]
        lines[declaration.line_index] = indent + CANONICAL_DECLARATION.format(address=address) + line_ending
    return "\n".join(lines)


def _read_source(path: Path) -> str:
    if not path.is_file():
        raise MissingArtifactError(f"Program source not found: {path}")
    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileSystemError(f"Failed to read {path}: {e}", path=path) from e


def _write_source(path: Path, text: str) -> None:
    try:
        path.write_bytes(text.encode("utf-8"))
    except OSError as e:
        raise FileSystemError(f"Failed to write {path}: {e}", path=path) from e


def sync_program_id(project_root: Path, *, resolver: AddressResolver, console: Console) -> SyncReport:
    package_name = read_package_name(project_root)
    kp_path = keypair_path(project_root, package_name)
    if not kp_path.is_file():
        raise MissingArtifactError(
            f"Program keypair not found: {kp_path}. Run `pinoc build` first to generate it."
        )
    address = resolver.address_of(kp_path)

    source_path = project_root / LIB_SOURCE
    text = _read_source(source_path)
    declaration = find_declaration(text)
    state = classify(declaration, address)

    if declaration is None:
        console.warn(f"No {DECLARATION_TOKEN} declaration found in {source_path}.")
        console.info("Add this line to declare the program id:")
        console.info(f"  {CANONICAL_DECLARATION.format(address=address)}")
        return SyncReport(
            state=state,
            source_path=source_path,
            keypair_path=kp_path,
            keypair_address=address,
            embedded_address=None,
            line_number=None,
            written=False,
        )

    line_number = declaration.line_index + 1
    if state is IdentityState.CONSISTENT:
        console.success(f"Program id is in sync: {address}")
        return SyncReport(
            state=state,
            source_path=source_path,
            keypair_path=kp_path,
            keypair_address=address,
            embedded_address=declaration.address,
            line_number=line_number,
            written=False,
        )

    console.warn(f"Program id mismatch in {source_path}:{line_number}")
    console.info(f"  declared: {declaration.address if declaration.address is not None else '<none>'}")
    console.info(f"  keypair:  {address}")
    _write_source(source_path, patch_declaration(text, declaration, address))
    console.success(f"Updated program id to {address}")
    return SyncReport(
        state=state,
        source_path=source_path,
        keypair_path=kp_path,
        keypair_address=address,
        embedded_address=declaration.address,
        line_number=line_number,
        written=True,
    )


def list_keypairs(project_root: Path, *, resolver: AddressResolver) -> list[KeyPair]:
    deploy_dir = project_root / DEPLOY_DIR
    if not deploy_dir.is_dir():
        raise MissingArtifactError(f"{deploy_dir} not found. Run `pinoc build` first.")
    paths = sorted(p for p in deploy_dir.iterdir() if p.is_file() and p.name.endswith(KEYPAIR_SUFFIX))
    return [KeyPair(file_path=p, address=resolver.address_of(p)) for p in paths]
