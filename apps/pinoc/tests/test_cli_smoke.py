from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

from pinoc.cli import build_parser, main

_REPO_ROOT = Path(__file__).resolve().parents[3]


def test_parser_init_flags() -> None:
    parser = build_parser()
    args = parser.parse_args(["init", "counter", "--no-git", "--no-boilerplate"])
    assert args.project_name == "counter"
    assert args.no_git is True
    assert args.no_boilerplate is True


def test_parser_init_defaults() -> None:
    args = build_parser().parse_args(["init", "counter"])
    assert args.no_git is False
    assert args.no_boilerplate is False


def test_parser_deploy_overrides() -> None:
    args = build_parser().parse_args(["deploy", "--cluster", "devnet", "--wallet", "~/w.json"])
    assert args.cluster == "devnet"
    assert args.wallet == "~/w.json"


def test_parser_search_query_is_optional() -> None:
    assert build_parser().parse_args(["search"]).query is None
    assert build_parser().parse_args(["search", "mollusk"]).query == "mollusk"


def test_parser_keys_subcommands() -> None:
    assert build_parser().parse_args(["keys", "list", "--json"]).json is True
    args = build_parser().parse_args(["keys", "sync"])
    assert args.keys_cmd == "sync"


def test_parser_keys_requires_subcommand() -> None:
    with pytest.raises(SystemExit) as excinfo:
        build_parser().parse_args(["keys"])
    assert excinfo.value.code == 2


def test_help_command(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["help"]) == 0
    out = capsys.readouterr().out
    assert "pinoc" in out
    assert "keys" in out


def test_help_smoke() -> None:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        [
            str(_REPO_ROOT / "packages" / "pinoc_core" / "src"),
            str(_REPO_ROOT / "apps" / "pinoc" / "src"),
            env.get("PYTHONPATH", ""),
        ]
    )
    proc = subprocess.run(
        [sys.executable, "-m", "pinoc.cli", "--help"],
        capture_output=True,
        text=True,
        check=False,
        env=env,
    )
    assert proc.returncode == 0
    assert "usage: pinoc" in proc.stdout
