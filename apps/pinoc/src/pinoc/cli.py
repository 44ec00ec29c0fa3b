#!/usr/bin/env python
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pinoc_core.addresses import AddressResolver
from pinoc_core.clean import clean
from pinoc_core.console import Console, configure_console_output
from pinoc_core.errors import PinocError
from pinoc_core.keys import list_keypairs, sync_program_id
from pinoc_core.scaffold import ProjectSpec, create_project, validate_project_name
from pinoc_core.search import DEFAULT_QUERY, search_packages
from pinoc_core.tool_invoker import ToolInvoker
from pinoc_core.toolchain import add_package, build_program, deploy_program, run_tests

PROG = "pinoc"


def _console(args: argparse.Namespace) -> Console:
    return Console(verbose=bool(getattr(args, "verbose", False)))


def _project_root(args: argparse.Namespace) -> Path:
    raw = getattr(args, "project_dir", None)
    return (raw if raw is not None else Path.cwd()).resolve()


def _tools(console: Console) -> tuple[ToolInvoker, AddressResolver]:
    invoker = ToolInvoker(console)
    return invoker, AddressResolver(invoker, console)


def _cmd_init(args: argparse.Namespace) -> int:
    console = _console(args)
    # Reject bad names before anything touches the filesystem.
    validate_project_name(args.project_name)
    invoker, resolver = _tools(console)
    spec = ProjectSpec(
        name=args.project_name,
        target_dir=_project_root(args) / args.project_name,
        init_git=not args.no_git,
        boilerplate=not args.no_boilerplate,
    )
    created = create_project(spec, invoker=invoker, resolver=resolver, console=console)

    console.success(f"Pinocchio project '{spec.name}' initialized at {spec.target_dir}")
    console.info("Next steps:")
    console.info(f"  cd {spec.name}")
    console.info(f"  {PROG} build")
    if spec.boilerplate:
        console.info(f"  {PROG} test")
    console.info(f"  {PROG} deploy")
    if not created.user_address:
        console.warn("No default wallet address found; tests/tests.rs needs a PAYER address filled in.")
    return 0


def _cmd_build(args: argparse.Namespace) -> int:
    console = _console(args)
    invoker, _ = _tools(console)
    build_program(_project_root(args), invoker=invoker, console=console)
    return 0


def _cmd_test(args: argparse.Namespace) -> int:
    console = _console(args)
    invoker, _ = _tools(console)
    run_tests(_project_root(args), invoker=invoker, console=console)
    return 0


def _cmd_deploy(args: argparse.Namespace) -> int:
    console = _console(args)
    invoker, _ = _tools(console)
    deploy_program(
        _project_root(args),
        invoker=invoker,
        console=console,
        cluster=args.cluster,
        wallet=args.wallet,
    )
    return 0


def _cmd_clean(args: argparse.Namespace) -> int:
    console = _console(args)
    result = clean(_project_root(args), preserve_keypairs=not args.no_preserve)
    if not result.removed:
        console.info("Nothing to clean.")
        return 0
    if result.preserved:
        console.info("Preserved keypairs:")
        for name in result.preserved:
            console.info(f"- {name}")
    console.success("Cleaned build output.")
    return 0


def _cmd_add(args: argparse.Namespace) -> int:
    console = _console(args)
    invoker, _ = _tools(console)
    add_package(_project_root(args), args.package_name, invoker=invoker, console=console)
    return 0


def _cmd_search(args: argparse.Namespace) -> int:
    console = _console(args)
    invoker, _ = _tools(console)
    results = search_packages(invoker, args.query)
    if not results:
        console.info(f"No packages found for {args.query or DEFAULT_QUERY!r}.")
        return 0
    width = max(len(r.name) for r in results)
    for r in results:
        console.info(f"{r.name.ljust(width)}  {r.version:<10}  {r.description}")
    console.info("")
    console.info(f"Add one with: {PROG} add <package>")
    return 0


def _cmd_keys_list(args: argparse.Namespace) -> int:
    console = _console(args)
    _, resolver = _tools(console)
    keypairs = list_keypairs(_project_root(args), resolver=resolver)
    if args.json:
        payload = [{"file": kp.file_path.name, "address": kp.address} for kp in keypairs]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0
    if not keypairs:
        console.info("No program keypairs found.")
        return 0
    for kp in keypairs:
        console.info(f"{kp.file_path.name}: {kp.address}")
    return 0


def _cmd_keys_sync(args: argparse.Namespace) -> int:
    console = _console(args)
    _, resolver = _tools(console)
    sync_program_id(_project_root(args), resolver=resolver, console=console)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Set up and manage Pinocchio Solana program projects.",
    )
    parser.add_argument(
        "--project-dir",
        dest="project_dir",
        type=Path,
        help="Project directory (default: current directory; for init, the parent of the new project).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Echo every external command.")

    sub = parser.add_subparsers(dest="cmd", required=True)

    init_p = sub.add_parser("init", help="Initialize a new Pinocchio project.")
    init_p.add_argument("project_name")
    init_p.add_argument("--no-git", action="store_true", help="Don't initialize git.")
    init_p.add_argument(
        "--no-boilerplate",
        action="store_true",
        help="Create a minimal project without tests and boilerplate.",
    )
    init_p.set_defaults(func=_cmd_init)

    build_p = sub.add_parser("build", help="Build the program (cargo build-sbf).")
    build_p.set_defaults(func=_cmd_build)

    test_p = sub.add_parser("test", help="Run the project tests (cargo test).")
    test_p.set_defaults(func=_cmd_test)

    deploy_p = sub.add_parser("deploy", help="Deploy the built program.")
    deploy_p.add_argument("--cluster", help="Cluster URL or moniker (default: Pinoc.toml provider.cluster).")
    deploy_p.add_argument("--wallet", help="Wallet keypair path (default: Pinoc.toml provider.wallet).")
    deploy_p.set_defaults(func=_cmd_deploy)

    clean_p = sub.add_parser("clean", help="Remove build output, keeping program keypairs.")
    clean_p.add_argument(
        "--no-preserve",
        action="store_true",
        help="Remove everything including keypair files.",
    )
    clean_p.set_defaults(func=_cmd_clean)

    add_p = sub.add_parser("add", help="Add a crate dependency (cargo add).")
    add_p.add_argument("package_name")
    add_p.set_defaults(func=_cmd_add)

    search_p = sub.add_parser("search", help="Search crates.io (default query: pinocchio).")
    search_p.add_argument("query", nargs="?")
    search_p.set_defaults(func=_cmd_search)

    keys_p = sub.add_parser("keys", help="Program keypair helpers.")
    keys_sub = keys_p.add_subparsers(dest="keys_cmd", required=True)
    keys_list_p = keys_sub.add_parser("list", help="List program keypairs in target/deploy.")
    keys_list_p.add_argument("--json", action="store_true", help="Print JSON.")
    keys_list_p.set_defaults(func=_cmd_keys_list)
    keys_sync_p = keys_sub.add_parser("sync", help="Make declare_id! in src/lib.rs match the program keypair.")
    keys_sync_p.set_defaults(func=_cmd_keys_sync)

    help_p = sub.add_parser("help", help="Show this help.")
    help_p.set_defaults(func=None)

    return parser


def main(argv: list[str] | None = None) -> int:
    configure_console_output()
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.func is None:
        parser.print_help()
        return 0
    try:
        return int(args.func(args))
    except PinocError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
