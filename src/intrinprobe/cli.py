"""
Command-line interface for intrinprobe.

This module provides the `intrinprobe` CLI tool for probing instruction-set
capabilities of a toolchain.
"""

import argparse
import shlex
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from . import __version__
from .catalog.registry import FEATURE_CATALOG, features_for_arch
from .cli_utils import ErrorFormatter, ProbeProgress, configure_logging
from .config.loader import ConfigOverrides, load_probe_config
from .config.probe_config import ProbeConfigError, classify_arch
from .matrix.builder import MatrixBuilder, default_jobs
from .matrix.emitters import EMITTERS, render, write_output
from .probe.compiler import ProbeCompiler, ToolchainError
from .probe.executor import ProbeExecutor
from .probe.resolver import FlagResolver


@dataclass
class ProbeArgs:
    """Arguments for the probe command."""

    config: Optional[Path] = None
    environment: Optional[str] = None
    compiler: Optional[str] = None
    compiler_id: Optional[str] = None
    arch: Optional[str] = None
    native: Optional[bool] = None
    cross: Optional[bool] = None
    cflags: List[str] = field(default_factory=list)
    jobs: int = 1
    format: str = "table"
    output: Optional[Path] = None
    verbose: bool = False


@dataclass
class ListArgs:
    """Arguments for the list command."""

    arch: Optional[str] = None


def probe_command(args: ProbeArgs) -> None:
    """Probe the toolchain and print or write the capability matrix.

    Examples:
        intrinprobe probe                            # Probe the default compiler
        intrinprobe probe --compiler clang --native  # Native mode with clang
        intrinprobe probe -c intrinprobe.ini -e arm  # Use an INI environment
        intrinprobe probe -f cmake -o features.cmake
    """
    configure_logging(args.verbose)

    try:
        config = load_probe_config(
            ini_path=args.config,
            env_name=args.environment,
            overrides=ConfigOverrides(
                compiler=args.compiler,
                compiler_id=args.compiler_id,
                arch=args.arch,
                native_instructions=args.native,
                cross_compiling=args.cross,
                cflags=list(args.cflags),
            ),
        )

        if args.verbose:
            print(
                f"Compiler: {config.compiler} ({config.compiler_id}, {config.family.value})",
                file=sys.stderr,
            )
            print(f"Target: {config.arch} on {config.host_os} host", file=sys.stderr)
            print(
                f"Native instructions: {config.native_instructions}, "
                + f"cross-compiling: {config.cross_compiling}",
                file=sys.stderr,
            )

        compiler = ProbeCompiler(config.compiler, frontend=config.frontend)
        progress = ProbeProgress(total=len(FEATURE_CATALOG), enabled=sys.stderr.isatty())
        try:
            builder = MatrixBuilder(
                ProbeExecutor(compiler),
                FlagResolver(compiler.accepts_flag),
                jobs=args.jobs,
                on_result=progress,
            )
            matrix = builder.build(config)
        finally:
            progress.close()

        if args.output is not None:
            write_output(matrix, args.format, args.output)
            ErrorFormatter.print_success(
                f"{len(matrix.supported_features())} of {len(matrix)} features supported; "
                + f"wrote {args.output}"
            )
        else:
            sys.stdout.write(render(matrix, args.format))

    except ToolchainError as e:
        ErrorFormatter.handle_toolchain_error(e)
    except ProbeConfigError as e:
        ErrorFormatter.handle_config_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def list_command(args: ListArgs) -> None:
    """List the features in the catalog.

    Examples:
        intrinprobe list               # Every feature
        intrinprobe list --arch arm64  # Features that exist on ARM
    """
    if args.arch:
        features = features_for_arch(classify_arch(args.arch))
    else:
        features = list(FEATURE_CATALOG)

    if not features:
        print("No features for this architecture.")
        return

    width = max(len(feature.name) for feature in features)
    for feature in features:
        arches = ",".join(sorted(a.value for a in feature.arch_classes))
        line = f"{feature.name:<{width}}  {arches:<6}  {feature.description}"
        if feature.requires:
            line += f" (requires {', '.join(feature.requires)})"
        print(line)


def main() -> None:
    """intrinprobe - instruction-set capability detection for builds."""
    parser = argparse.ArgumentParser(
        prog="intrinprobe",
        description="Detect which instruction-set extensions a toolchain can use",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"intrinprobe {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Probe command
    probe_parser = subparsers.add_parser(
        "probe",
        help="Probe the toolchain and emit the capability matrix",
    )
    probe_parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to intrinprobe.ini",
    )
    probe_parser.add_argument(
        "-e",
        "--environment",
        default=None,
        help="Environment in the configuration file (default: first or default_envs)",
    )
    probe_parser.add_argument(
        "--compiler",
        default=None,
        help="Compiler executable (default: cc)",
    )
    probe_parser.add_argument(
        "--compiler-id",
        default=None,
        help="Compiler id, e.g. GNU, Clang, MSVC, Intel (default: auto-detect)",
    )
    probe_parser.add_argument(
        "--arch",
        default=None,
        help="Target architecture (default: ask the compiler)",
    )
    probe_parser.add_argument(
        "--native",
        dest="native",
        action="store_true",
        default=None,
        help="Use host-native instructions and allow execution-based probes",
    )
    probe_parser.add_argument(
        "--no-native",
        dest="native",
        action="store_false",
        help="Disable native-instructions mode",
    )
    probe_parser.add_argument(
        "--cross",
        dest="cross",
        action="store_true",
        default=None,
        help="Treat the target as cross-compiled (compile-only probes)",
    )
    probe_parser.add_argument(
        "--cflags",
        default="",
        help="Extra flags applied to every probe",
    )
    probe_parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=1,
        help=f"Features probed concurrently (0 = one per CPU, here {default_jobs()})",
    )
    probe_parser.add_argument(
        "-f",
        "--format",
        choices=sorted(EMITTERS),
        default="table",
        help="Output format (default: table)",
    )
    probe_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write output to a file instead of stdout",
    )
    probe_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show per-attempt probe details",
    )

    # List command
    list_parser = subparsers.add_parser(
        "list",
        help="List the feature catalog",
    )
    list_parser.add_argument(
        "--arch",
        default=None,
        help="Only features that exist on this architecture",
    )

    parsed_args = parser.parse_args()

    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    if parsed_args.command == "probe":
        try:
            cflags = shlex.split(parsed_args.cflags)
        except ValueError as e:
            probe_parser.error(f"--cflags: {e}")
        probe_command(
            ProbeArgs(
                config=parsed_args.config,
                environment=parsed_args.environment,
                compiler=parsed_args.compiler,
                compiler_id=parsed_args.compiler_id,
                arch=parsed_args.arch,
                native=parsed_args.native,
                cross=parsed_args.cross,
                cflags=cflags,
                jobs=parsed_args.jobs if parsed_args.jobs > 0 else default_jobs(),
                format=parsed_args.format,
                output=parsed_args.output,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command == "list":
        list_command(ListArgs(arch=parsed_args.arch))


if __name__ == "__main__":
    main()
