from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pinoc_core.errors import ConfigurationError

PINOC_CONFIG_FILE = "Pinoc.toml"
CARGO_MANIFEST_FILE = "Cargo.toml"
TARGET_DIR = "target"
DEPLOY_DIR = Path(TARGET_DIR) / "deploy"
KEYPAIR_SUFFIX = "-keypair.json"

DEFAULT_CLUSTER = "localhost"
DEFAULT_WALLET = "~/.config/solana/id.json"


@dataclass(frozen=True)
class ProviderConfig:
    cluster: str = DEFAULT_CLUSTER
    wallet: str = DEFAULT_WALLET


@dataclass(frozen=True)
class PinocConfig:
    provider: ProviderConfig
    source_path: Path | None


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Failed to read {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e
    return data


def _optional_str(table: dict[str, Any], key: str, *, where: str, default: str) -> str:
    value = table.get(key)
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"{where}.{key} must be a non-empty string")
    return value.strip()


def load_pinoc_config(project_root: Path) -> PinocConfig:
    """Read ``Pinoc.toml``; a missing file means the built-in defaults."""
    path = project_root / PINOC_CONFIG_FILE
    if not path.is_file():
        return PinocConfig(provider=ProviderConfig(), source_path=None)

    data = _load_toml(path)
    provider_raw = data.get("provider", {})
    if not isinstance(provider_raw, dict):
        raise ConfigurationError(f"{path}: [provider] must be a table")
    where = f"{path.name}:provider"
    provider = ProviderConfig(
        cluster=_optional_str(provider_raw, "cluster", where=where, default=DEFAULT_CLUSTER),
        wallet=_optional_str(provider_raw, "wallet", where=where, default=DEFAULT_WALLET),
    )
    return PinocConfig(provider=provider, source_path=path)


def read_package_name(project_root: Path) -> str:
    path = project_root / CARGO_MANIFEST_FILE
    if not path.is_file():
        raise ConfigurationError(
            f"{CARGO_MANIFEST_FILE} not found in {project_root}; run this command from the project root."
        )
    data = _load_toml(path)
    package = data.get("package")
    name = package.get("name") if isinstance(package, dict) else None
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError(f"{path}: missing [package].name")
    return name.strip()


def crate_file_stem(package_name: str) -> str:
    # cargo build-sbf names artifacts after the crate name with '-' mapped to '_'.
    return package_name.replace("-", "_")


def keypair_path(project_root: Path, package_name: str) -> Path:
    return project_root / DEPLOY_DIR / f"{crate_file_stem(package_name)}{KEYPAIR_SUFFIX}"


def expand_user_path(raw: str) -> Path:
    return Path(os.path.expanduser(raw))
