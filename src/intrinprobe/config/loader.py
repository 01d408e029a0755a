"""Probe configuration loading.

Merges, in increasing priority: auto-detected toolchain properties, the
selected intrinprobe.ini environment, and explicit command-line values.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..probe.toolchain_detector import ToolchainDetector
from .ini_parser import ProbeIniConfig
from .probe_config import Frontend, ProbeConfig, ProbeConfigError


@dataclass
class ConfigOverrides:
    """Explicit values that take precedence over the INI file and detection."""

    compiler: Optional[str] = None
    compiler_id: Optional[str] = None
    arch: Optional[str] = None
    host_os: Optional[str] = None
    native_instructions: Optional[bool] = None
    cross_compiling: Optional[bool] = None
    cflags: List[str] = field(default_factory=list)


def load_probe_config(
    ini_path: Optional[Path] = None,
    env_name: Optional[str] = None,
    overrides: Optional[ConfigOverrides] = None,
    detector: Optional[ToolchainDetector] = None,
) -> ProbeConfig:
    """Build the ProbeConfig for a run.

    Args:
        ini_path: Optional intrinprobe.ini path
        env_name: Environment in the INI file (default environment if None)
        overrides: Explicit values from the command line
        detector: Toolchain detector (injectable for tests)

    Returns:
        Frozen ProbeConfig

    Raises:
        ProbeConfigError: If the INI file or environment is invalid
        ToolchainError: If the compiler must be inspected and cannot be run
    """
    overrides = overrides or ConfigOverrides()
    detector = detector or ToolchainDetector()
    settings = {}
    cflags: List[str] = []
    native: Optional[bool] = None
    cross: Optional[bool] = None

    if ini_path is not None:
        ini = ProbeIniConfig(ini_path)
        env_name = env_name or ini.get_default_environment()
        if env_name is None:
            raise ProbeConfigError(f"No environments found in {ini_path}")
        settings = ini.get_env_config(env_name)
        cflags = ini.get_cflags(env_name)
        native = ini.get_bool(env_name, "native_instructions")
        cross = ini.get_bool(env_name, "cross_compiling")
        logging.info(f"Using environment '{env_name}' from {ini_path}")
    elif env_name is not None:
        raise ProbeConfigError(f"Environment '{env_name}' given without a configuration file")

    host_os, host_arch = detector.detect_host()
    host_os = overrides.host_os or settings.get("host_os") or host_os

    compiler = overrides.compiler or settings.get("compiler") or "cc"
    compiler_id = overrides.compiler_id or settings.get("compiler_id")
    if not compiler_id:
        compiler_id = detector.detect_compiler_id(compiler)

    # Frontend style is needed before asking the compiler for its target
    probe_frontend = ProbeConfig.create(compiler_id, host_arch, host_os, compiler=compiler).frontend

    arch = overrides.arch or settings.get("arch")
    if not arch:
        arch = detector.detect_target_arch(compiler, probe_frontend == Frontend.MSVC) or host_arch

    if overrides.cross_compiling is not None:
        cross = overrides.cross_compiling
    if cross is None:
        cross = detector.is_cross_compiling(arch, host_arch)

    if overrides.native_instructions is not None:
        native = overrides.native_instructions

    return ProbeConfig.create(
        compiler_id=compiler_id,
        arch=arch,
        host_os=host_os,
        compiler=compiler,
        native_instructions=bool(native),
        cross_compiling=cross,
        base_flags=tuple(cflags + list(overrides.cflags)),
    )
