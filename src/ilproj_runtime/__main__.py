"""CLI entrypoints for ILProj Runtime (status, deploy, compile, references)."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from ilproj_runtime import __version__
from ilproj_runtime.core.config import load_settings
from ilproj_runtime.core.exceptions import ILProjRuntimeError
from ilproj_runtime.deploy.installer import DeploymentCoordinator
from ilproj_runtime.tasks.compiler import CompilerTask
from ilproj_runtime.tasks.references import write_reference_stubs
from ilproj_runtime.utils.logging import bind_deployment_context, setup_logging

EXIT_OK = 0
EXIT_NO = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ilproj-runtime", description="ILProj custom project system runtime")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--install-root", help="Folder holding local custom project systems")
    parser.add_argument("--package", help="Path to the packed project system (.zip)")
    parser.add_argument("--log-level", help="Log level (default from ILPROJ_LOG_LEVEL or INFO)")
    parser.add_argument("--log-format", choices=["json", "console"], help="Log output format")
    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("status", help="Show local deployment state")
    sub.add_parser("needs-deployment", help="Exit 0 if deployment is needed, 1 if up to date")
    sub.add_parser("deploy", help="Replace the local project system with the package")
    sub.add_parser("ensure", help="Deploy only if the local project system needs it")

    cmd_compile = sub.add_parser("compile", help="Run a compiler and report its diagnostics")
    cmd_compile.add_argument("executable", help="Compiler executable")
    cmd_compile.add_argument("arguments", nargs=argparse.REMAINDER, help="Arguments passed to the compiler")

    cmd_refs = sub.add_parser("references", help="Write assembly reference stubs")
    cmd_refs.add_argument("target", help="File to write")
    cmd_refs.add_argument("names", nargs="+", help="Referenced assembly names")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.cmd:
        parser.print_help()
        return EXIT_ERROR

    overrides = {}
    if args.install_root:
        overrides["install_root"] = Path(args.install_root)
    if args.package:
        overrides["package_archive"] = Path(args.package)
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.log_format:
        overrides["log_format"] = args.log_format

    try:
        settings = load_settings(**overrides)
        setup_logging(settings.log_level, settings.log_format)
        return _run(args, settings)
    except ILProjRuntimeError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_ERROR


def _run(args: argparse.Namespace, settings) -> int:
    if args.cmd == "compile":
        result = CompilerTask(args.executable, args.arguments).execute()
        return EXIT_OK if result.success else EXIT_NO

    if args.cmd == "references":
        write_reference_stubs(args.names, Path(args.target))
        return EXIT_OK

    bind_deployment_context(settings.project_system_name, str(settings.local_install_path))
    coordinator = DeploymentCoordinator.from_settings(settings)

    if args.cmd == "status":
        state = coordinator.get_state()
        print(json.dumps({
            "projectSystem": settings.project_system_name,
            "localPath": str(settings.local_install_path),
            "package": str(settings.package_archive),
            "state": state.value,
            "needsDeployment": state.needs_deployment,
        }))
        return EXIT_OK

    if args.cmd == "needs-deployment":
        return EXIT_OK if coordinator.needs_deployment() else EXIT_NO

    if args.cmd == "deploy":
        version = coordinator.deploy()
        print(f"Deployed {settings.project_system_name} {version}")
        return EXIT_OK

    if args.cmd == "ensure":
        result = coordinator.ensure_deployed()
        if result.deployed:
            print(f"Deployed {settings.project_system_name} {result.version} (was {result.previous_state.value})")
        else:
            print(f"{settings.project_system_name} is up to date")
        return EXIT_OK

    return EXIT_ERROR


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
