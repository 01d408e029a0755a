"""
Probing engine for intrinprobe.

This module provides:
- Flag resolution per compiler family and architecture
- Probe compilation and execution
- Toolchain detection
"""

from .compiler import CompileOutcome, ProbeCompiler, ToolchainError
from .executor import ProbeExecutor, ProbeResult, probe_feature, should_execute
from .resolver import FlagResolver, join_flags
from .toolchain_detector import ToolchainDetector

__all__ = [
    "CompileOutcome",
    "ProbeCompiler",
    "ToolchainError",
    "ProbeExecutor",
    "ProbeResult",
    "probe_feature",
    "should_execute",
    "FlagResolver",
    "join_flags",
    "ToolchainDetector",
]
