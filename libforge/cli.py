"""Command-line entry point: ``libforge NAME [options]``.

Plans and renders one library (or, with ``--stack``, the contract, data-access
and feature libraries of one domain), prints a summary and writes the files
under the output directory (unless ``--dry-run``).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.logging import RichHandler

from .config import GeneratorSettings
from .engine.errors import GenerationError
from .engine.orchestrator import GeneratedFile, GenerationRun, check_package_references
from .engine.planner import DomainSpec, GenerationPlan, LibraryType, Platform, stack_specs
from .utils import (
    console,
    print_error,
    print_files_table,
    print_phase_header,
    print_success,
    print_summary_table,
    print_warning,
)
from .workspace import WorkspaceDetectionError, detect_scope
from .writer import FileWriter, WriterError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="libforge",
        description="libforge -- generate Effect libraries for one domain",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  libforge product\n"
            "  libforge product --cqrs --rpc --scope @acme\n"
            "  libforge order --submodules cart,checkout,management --dry-run\n"
            "  libforge cache --type infra\n"
            "  libforge product --stack --rpc\n"
        ),
    )
    parser.add_argument("name", help="Domain name, e.g. 'product' or 'order-management'")
    parser.add_argument(
        "--type",
        dest="library_type",
        choices=[t.value for t in LibraryType],
        default=LibraryType.CONTRACT.value,
        help="Library layer to generate (default: contract)",
    )
    parser.add_argument(
        "--stack",
        action="store_true",
        help="Generate the contract, data-access and feature libraries together",
    )
    parser.add_argument("--cqrs", action="store_true", help="Emit commands, queries and projections")
    parser.add_argument("--rpc", action="store_true", help="Emit RPC errors, definitions and group")
    parser.add_argument(
        "--platform",
        choices=[p.value for p in Platform],
        default=Platform.NODE.value,
        help="Target runtime (default: node)",
    )
    parser.add_argument(
        "--submodules",
        default="",
        help="Comma-separated submodule names (e.g. cart,checkout)",
    )
    parser.add_argument("--plural", default=None, help="Explicit plural of the domain name")
    parser.add_argument("--description", default="", help="Package description")
    parser.add_argument("--scope", default=None, help="npm scope (detected from package.json if omitted)")
    parser.add_argument("--output", "-o", default=None, help="Workspace root (default: .)")
    parser.add_argument("--libs-dir", default=None, help="Libraries directory (default: libs)")
    parser.add_argument("--since", default=None, help="Version stamped into headers as @since")
    parser.add_argument("--dry-run", action="store_true", help="Render without writing files")
    parser.add_argument("--overwrite", action="store_true", help="Replace files that already exist")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def _settings(args: argparse.Namespace) -> GeneratorSettings:
    """Environment settings, overridden by explicit command-line flags."""
    settings = GeneratorSettings.from_env()
    updates = {
        "output_dir": Path(args.output) if args.output else None,
        "scope": args.scope,
        "libs_dir": args.libs_dir,
        "since": args.since,
    }
    updates = {key: value for key, value in updates.items() if value is not None}
    if args.dry_run:
        updates["dry_run"] = True
    if args.overwrite:
        updates["overwrite"] = True
    return settings.model_copy(update=updates)


def _print_plan(plan: GenerationPlan, files: list[GeneratedFile]) -> None:
    spec = plan.spec
    print_phase_header(spec.library_type.value, plan.package_name)
    print_summary_table(
        {
            "Package": plan.package_name,
            "Project root": plan.project_root,
            "Platform": spec.platform.value,
            "CQRS": "yes" if spec.include_cqrs else "no",
            "RPC": "yes" if plan.task(f"{plan.source_root}/index.ts").options.include_rpc else "no",
            "Submodules": ", ".join(s.name for s in spec.submodules) or "-",
            "Files": str(len(files)),
        },
        title="Generation plan",
    )
    print_files_table(
        (plan.task(f.relative_path).phase.value, f.relative_path, len(f.content.encode("utf-8")))
        for f in files
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``python -m libforge``."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    settings = _settings(args)
    try:
        detected = None if settings.scope else detect_scope(settings.output_dir)
        workspace = settings.workspace(detected)
    except (WorkspaceDetectionError, ValueError) as exc:
        print_error(f"Error: {exc}")
        return 1

    spec = DomainSpec(
        name=args.name,
        library_type=LibraryType(args.library_type),
        include_cqrs=args.cqrs,
        include_rpc=args.rpc,
        platform=Platform(args.platform),
        submodules=[s.strip() for s in args.submodules.split(",") if s.strip()],
        plural=args.plural,
        description=args.description,
        since=settings.since,
    )

    files: list[GeneratedFile] = []
    for layer_spec in stack_specs(spec) if args.stack else [spec]:
        run = GenerationRun(layer_spec, workspace)
        try:
            generated = run.run()
        except GenerationError as exc:
            print_error(f"Error ({run.state.value}): {exc}")
            return 1
        _print_plan(run.plan, generated)
        files.extend(generated)

    if args.stack:
        try:
            check_package_references(files)
        except GenerationError as exc:
            print_error(f"Error: {exc}")
            return 1

    if settings.dry_run:
        print_warning("Dry run: no files written.")
        return 0

    writer = FileWriter(settings.output_dir, overwrite=settings.overwrite)
    try:
        result = asyncio.run(writer.write_all(files))
    except (WriterError, OSError) as exc:
        print_error(f"Error: {exc}")
        return 1

    if result.skipped:
        print_warning(
            f"Skipped {len(result.skipped)} existing file(s); use --overwrite to replace them."
        )
    print_success(f"Wrote {len(result.written)} file(s) under {settings.output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
