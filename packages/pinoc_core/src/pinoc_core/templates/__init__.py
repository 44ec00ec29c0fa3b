"""
Template set for generated Pinocchio projects.

Template bodies live next to this module under ``files/<template_id>.tmpl``.
Placeholders are ``{{name}}`` tokens replaced literally in one pass; tokens with
no matching parameter are left as-is. ``layouts.yaml`` describes which templates
each project layout writes and where.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import PurePosixPath
from typing import Any

import yaml

from pinoc_core.errors import ConfigurationError

TEMPLATE_IDS: tuple[str, ...] = (
    "readme",
    "gitignore",
    "pinoc-toml",
    "cargo-toml",
    "lib",
    "entrypoint",
    "errors",
    "instructions-mod",
    "instructions-initialize",
    "states-mod",
    "states-utils",
    "states-state",
    "tests",
    "minimal-readme",
    "minimal-cargo-toml",
    "minimal-lib",
)

_TOKEN_RE = re.compile(r"\{\{([A-Za-z_][A-Za-z0-9_]*)\}\}")


class TemplateNotFoundError(KeyError):
    pass


@dataclass(frozen=True)
class LayoutFile:
    template_id: str
    path: PurePosixPath


@dataclass(frozen=True)
class Layout:
    name: str
    directories: tuple[PurePosixPath, ...]
    files: tuple[LayoutFile, ...]


@lru_cache(maxsize=None)
def template_body(template_id: str) -> str:
    if template_id not in TEMPLATE_IDS:
        raise TemplateNotFoundError(template_id)
    ref = resources.files(__name__).joinpath("files").joinpath(f"{template_id}.tmpl")
    return ref.read_text(encoding="utf-8")


def substitute(text: str, params: Mapping[str, str]) -> str:
    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in params:
            return match.group(0)
        return str(params[key])

    return _TOKEN_RE.sub(_replace, text)


def render(template_id: str, params: Mapping[str, str]) -> str:
    return substitute(template_body(template_id), params)


def placeholders(template_id: str) -> set[str]:
    return set(_TOKEN_RE.findall(template_body(template_id)))


def missing_params(layout: Layout, params: Mapping[str, str]) -> dict[str, set[str]]:
    """Template ids of ``layout`` mapped to the tokens ``params`` does not supply."""
    missing: dict[str, set[str]] = {}
    for entry in layout.files:
        needed = placeholders(entry.template_id) | set(_TOKEN_RE.findall(str(entry.path)))
        unresolved = needed - set(params)
        if unresolved:
            missing[entry.template_id] = unresolved
    return missing


def _relative_path(raw: Any, *, where: str) -> PurePosixPath:
    if not isinstance(raw, str) or not raw.strip():
        raise ConfigurationError(f"{where}: expected a non-empty relative path")
    path = PurePosixPath(raw.strip())
    if path.is_absolute() or ".." in path.parts:
        raise ConfigurationError(f"{where}: path must stay inside the project: {raw}")
    return path


def _parse_layout(name: str, raw: Any) -> Layout:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"layouts.{name}: expected a mapping")
    dirs_raw = raw.get("directories", [])
    files_raw = raw.get("files", {})
    if not isinstance(dirs_raw, list):
        raise ConfigurationError(f"layouts.{name}.directories: expected a list")
    if not isinstance(files_raw, dict):
        raise ConfigurationError(f"layouts.{name}.files: expected a mapping of template id -> path")

    directories = tuple(
        _relative_path(d, where=f"layouts.{name}.directories[{idx}]") for idx, d in enumerate(dirs_raw)
    )
    files: list[LayoutFile] = []
    for template_id, dest in files_raw.items():
        if template_id not in TEMPLATE_IDS:
            raise ConfigurationError(f"layouts.{name}.files: unknown template id {template_id!r}")
        files.append(
            LayoutFile(
                template_id=template_id,
                path=_relative_path(dest, where=f"layouts.{name}.files.{template_id}"),
            )
        )
    return Layout(name=name, directories=directories, files=tuple(files))


def parse_layouts(text: str) -> dict[str, Layout]:
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse layouts YAML: {e}") from e
    if not isinstance(raw, dict) or not isinstance(raw.get("layouts"), dict):
        raise ConfigurationError("layouts YAML must contain a top-level 'layouts' mapping")
    return {str(name): _parse_layout(str(name), body) for name, body in raw["layouts"].items()}


@lru_cache(maxsize=None)
def _bundled_layouts() -> dict[str, Layout]:
    text = resources.files(__name__).joinpath("layouts.yaml").read_text(encoding="utf-8")
    return parse_layouts(text)


def load_layout(name: str) -> Layout:
    layouts = _bundled_layouts()
    if name not in layouts:
        known = ", ".join(sorted(layouts))
        raise ConfigurationError(f"Unknown project layout: {name!r} (known: {known})")
    return layouts[name]
