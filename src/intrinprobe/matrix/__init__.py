"""Capability matrix assembly, overrides and consumers."""

from .builder import MatrixBuilder, default_jobs, dependency_waves
from .capability_matrix import CapabilityMatrix, CapabilityMatrixError
from .consumer import SourcePlan, SourcePlanError, SourceVariant, compile_definitions, plan_sources
from .emitters import EMITTERS, EmitterError, render, write_output
from .overrides import PLATFORM_OVERRIDES, PlatformOverride, apply_overrides, find_override

__all__ = [
    "MatrixBuilder",
    "default_jobs",
    "dependency_waves",
    "CapabilityMatrix",
    "CapabilityMatrixError",
    "SourcePlan",
    "SourcePlanError",
    "SourceVariant",
    "compile_definitions",
    "plan_sources",
    "EMITTERS",
    "EmitterError",
    "render",
    "write_output",
    "PLATFORM_OVERRIDES",
    "PlatformOverride",
    "apply_overrides",
    "find_override",
]
