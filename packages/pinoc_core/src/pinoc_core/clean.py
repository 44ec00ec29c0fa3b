from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path

from pinoc_core.config import DEPLOY_DIR, KEYPAIR_SUFFIX, TARGET_DIR
from pinoc_core.errors import FileSystemError


@dataclass(frozen=True)
class PreservedArtifact:
    file_name: str
    data: bytes


@dataclass(frozen=True)
class CleanResult:
    removed: bool
    preserved: list[str] = field(default_factory=list)


def _capture_keypairs(deploy_dir: Path) -> list[PreservedArtifact]:
    if not deploy_dir.is_dir():
        return []
    captured: list[PreservedArtifact] = []
    for path in sorted(deploy_dir.iterdir()):
        if not path.is_file() or not path.name.endswith(KEYPAIR_SUFFIX):
            continue
        try:
            captured.append(PreservedArtifact(file_name=path.name, data=path.read_bytes()))
        except OSError as e:
            raise FileSystemError(f"Failed to read keypair {path}: {e}", path=path) from e
    return captured


def clean(project_root: Path, *, preserve_keypairs: bool = True) -> CleanResult:
    """Remove ``target/``, optionally restoring program keypairs afterwards."""
    target_dir = project_root / TARGET_DIR
    if not target_dir.exists():
        return CleanResult(removed=False)

    deploy_dir = project_root / DEPLOY_DIR
    preserved = _capture_keypairs(deploy_dir) if preserve_keypairs else []

    try:
        shutil.rmtree(target_dir)
    except OSError as e:
        failed = getattr(e, "filename", None) or target_dir
        raise FileSystemError(f"Failed to remove {failed}: {e}", path=failed) from e

    if not preserve_keypairs:
        return CleanResult(removed=True)

    try:
        deploy_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileSystemError(f"Failed to recreate {deploy_dir}: {e}", path=deploy_dir) from e
    for artifact in preserved:
        dest = deploy_dir / artifact.file_name
        try:
            dest.write_bytes(artifact.data)
        except OSError as e:
            raise FileSystemError(f"Failed to restore keypair {dest}: {e}", path=dest) from e
    return CleanResult(removed=True, preserved=[a.file_name for a in preserved])
