"""Configuration modules for intrinprobe."""

from .ini_parser import ProbeIniConfig
from .probe_config import (
    ArchClass,
    CompilerFamily,
    Frontend,
    ProbeConfig,
    ProbeConfigError,
    classify_arch,
    classify_compiler,
    normalize_host_os,
)

__all__ = [
    "ProbeConfig",
    "ProbeConfigError",
    "ProbeIniConfig",
    "CompilerFamily",
    "ArchClass",
    "Frontend",
    "classify_compiler",
    "classify_arch",
    "normalize_host_os",
]
