"""
intrinprobe - build-time instruction-set capability detection.

Determines which SIMD, crypto and vector extensions the active toolchain and
target can use, and the compiler flags needed for each one.
"""

from typing import Optional

from .catalog import FEATURE_CATALOG, Feature, get_feature
from .config import ProbeConfig, ProbeConfigError
from .matrix import CapabilityMatrix, MatrixBuilder
from .probe import FlagResolver, ProbeCompiler, ProbeExecutor, ProbeResult, ToolchainError

__version__ = "0.1.0"


def detect_capabilities(
    config: ProbeConfig,
    compiler: Optional[ProbeCompiler] = None,
    jobs: int = 1,
) -> CapabilityMatrix:
    """Probe every catalog feature under a configuration.

    Args:
        config: Probe configuration
        compiler: Compiler driver, created from config.compiler if omitted
        jobs: Number of features probed concurrently

    Returns:
        Frozen, complete CapabilityMatrix

    Raises:
        ToolchainError: If the compiler cannot be run
    """
    if compiler is None:
        compiler = ProbeCompiler(config.compiler, frontend=config.frontend)
    builder = MatrixBuilder(
        ProbeExecutor(compiler),
        FlagResolver(compiler.accepts_flag),
        jobs=jobs,
    )
    return builder.build(config)


__all__ = [
    "__version__",
    "detect_capabilities",
    "FEATURE_CATALOG",
    "Feature",
    "get_feature",
    "ProbeConfig",
    "ProbeConfigError",
    "CapabilityMatrix",
    "MatrixBuilder",
    "FlagResolver",
    "ProbeCompiler",
    "ProbeExecutor",
    "ProbeResult",
    "ToolchainError",
]
