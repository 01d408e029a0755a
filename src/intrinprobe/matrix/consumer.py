"""Source variant selection.

This module is the consumer side of the capability matrix: it decides which
optimized source files to compile, which per-file flags they get, and which
symbols are defined for runtime dispatch code.

Design:
    - A SourceVariant gates optimized sources behind one feature
    - With runtime_dispatch the portable fallback is always compiled and the
      feature's define tells dispatch code whether the optimized path exists
    - Without runtime_dispatch exactly one of optimized or fallback sources
      is compiled
    - Feature flags are attached only to the sources that need them
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from ..catalog.feature import Feature
from ..catalog.registry import get_feature
from .capability_matrix import CapabilityMatrix


class SourcePlanError(Exception):
    """Raised when a source variant references an unknown feature."""

    pass


@dataclass(frozen=True)
class SourceVariant:
    """Optimized sources gated behind one feature."""

    feature: str
    sources: Tuple[Path, ...]
    fallback_sources: Tuple[Path, ...] = ()
    runtime_dispatch: bool = False


@dataclass
class SourcePlan:
    """Sources to compile with their per-file flags and global defines."""

    sources: List[Path] = field(default_factory=list)
    per_file_flags: Dict[Path, List[str]] = field(default_factory=dict)
    defines: List[str] = field(default_factory=list)

    def add_source(self, source: Path, flags: Optional[List[str]] = None) -> None:
        if source not in self.sources:
            self.sources.append(source)
        if flags:
            existing = self.per_file_flags.setdefault(source, [])
            existing.extend(flag for flag in flags if flag not in existing)

    def add_define(self, define: str) -> None:
        if define and define not in self.defines:
            self.defines.append(define)

    def flags_for(self, source: Path) -> List[str]:
        return list(self.per_file_flags.get(source, []))


def plan_sources(matrix: CapabilityMatrix, variants: Iterable[SourceVariant]) -> SourcePlan:
    """Select sources and per-file flags from a capability matrix.

    Args:
        matrix: Complete capability matrix
        variants: Source variants of the consuming project

    Returns:
        SourcePlan with selected sources, flags and defines

    Raises:
        SourcePlanError: If a variant names a feature not in the catalog
    """
    plan = SourcePlan()

    for variant in variants:
        feature = _lookup(variant.feature)
        result = matrix[feature.name]

        if variant.runtime_dispatch:
            for source in variant.fallback_sources:
                plan.add_source(source)

        if result.supported:
            flags = result.flag_used.split()
            for source in variant.sources:
                plan.add_source(source, flags)
            plan.add_define(feature.define)
        elif not variant.runtime_dispatch:
            for source in variant.fallback_sources:
                plan.add_source(source)

    return plan


def compile_definitions(matrix: CapabilityMatrix) -> List[str]:
    """Defines for every supported feature, as -D flags."""
    definitions = []
    for name in matrix:
        feature = get_feature(name)
        if feature is not None and feature.define and matrix.is_supported(name):
            definitions.append(f"-D{feature.define}")
    return definitions


def _lookup(name: str) -> Feature:
    feature = get_feature(name)
    if feature is None:
        raise SourcePlanError(f"Unknown feature in source variant: {name}")
    return feature
