"""
Capability matrix assembly for intrinprobe.

This module runs every catalog feature's probe under a single ProbeConfig,
short-circuits features whose prerequisites are unsupported, applies platform
overrides, and records exactly one result per feature.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

import psutil

from ..catalog.feature import Feature
from ..catalog.registry import FEATURE_CATALOG, validate_catalog
from ..config.probe_config import ProbeConfig
from ..probe.executor import ProbeExecutor, ProbeResult, probe_feature
from ..probe.resolver import FlagResolver
from .capability_matrix import CapabilityMatrix
from .overrides import PLATFORM_OVERRIDES, PlatformOverride, apply_overrides

ResultCallback = Callable[[Feature, ProbeResult], None]


def default_jobs() -> int:
    """Worker count for parallel probing: one per logical CPU."""
    return psutil.cpu_count(logical=True) or 1


def dependency_waves(features: Sequence[Feature]) -> List[List[Feature]]:
    """Group features so that every prerequisite sits in an earlier wave.

    Args:
        features: Validated features in catalog order

    Returns:
        Waves of features that can be probed concurrently
    """
    level: Dict[str, int] = {}
    waves: List[List[Feature]] = []
    for feature in features:
        depth = max((level[name] + 1 for name in feature.requires), default=0)
        level[feature.name] = depth
        while len(waves) <= depth:
            waves.append([])
        waves[depth].append(feature)
    return waves


class MatrixBuilder:
    """
    Builds a CapabilityMatrix by probing each feature.

    Example usage:
        compiler = ProbeCompiler("gcc")
        builder = MatrixBuilder(ProbeExecutor(compiler), FlagResolver(compiler.accepts_flag))
        matrix = builder.build(config)
        if matrix.is_supported("avx2"):
            print(matrix.flag("avx2"))
    """

    def __init__(
        self,
        executor: ProbeExecutor,
        resolver: FlagResolver,
        features: Iterable[Feature] = FEATURE_CATALOG,
        overrides: Iterable[PlatformOverride] = PLATFORM_OVERRIDES,
        jobs: int = 1,
        on_result: Optional[ResultCallback] = None,
    ):
        """
        Initialize matrix builder.

        Args:
            executor: Probe executor bound to a compiler
            resolver: Flag resolver for the same compiler
            features: Features to probe, prerequisites first
            overrides: Platform override rules
            jobs: Number of features probed concurrently (1 = sequential)
            on_result: Called once per feature with its final result

        Raises:
            CatalogError: If the feature list is inconsistent
        """
        self.executor = executor
        self.resolver = resolver
        self.features = validate_catalog(features)
        self.overrides = tuple(overrides)
        self.jobs = max(1, jobs)
        self.on_result = on_result

    def build(self, config: ProbeConfig) -> CapabilityMatrix:
        """
        Probe every feature and assemble the matrix.

        Args:
            config: Ambient probe configuration

        Returns:
            Frozen, complete CapabilityMatrix

        Raises:
            ToolchainError: If the compiler cannot be run
        """
        matrix = CapabilityMatrix(config.describe())
        logging.info(
            f"Probing {len(self.features)} features for {config.family.value}/{config.arch}"
            + f" (native={config.native_instructions}, cross={config.cross_compiling})"
        )

        results: Dict[str, ProbeResult] = {}
        if self.jobs == 1:
            for feature in self.features:
                results[feature.name] = self._finish(feature, self.evaluate(feature, config, results))
        else:
            with ThreadPoolExecutor(max_workers=self.jobs) as pool:
                for wave in dependency_waves(self.features):
                    futures = [
                        (feature, pool.submit(self.evaluate, feature, config, results))
                        for feature in wave
                    ]
                    for feature, future in futures:
                        results[feature.name] = self._finish(feature, future.result())

        # Catalog order regardless of completion order
        for feature in self.features:
            matrix.record(feature.name, results[feature.name])

        matrix.ensure_complete(self.features)
        return matrix.freeze()

    def evaluate(
        self, feature: Feature, config: ProbeConfig, results: Mapping[str, ProbeResult]
    ) -> ProbeResult:
        """
        Compute the final result for one feature.

        Prerequisites must already be present in results.
        """
        unmet = [name for name in feature.requires if not results[name].supported]
        if unmet:
            logging.debug(f"{feature.name}: skipped, requires {', '.join(unmet)}")
            return ProbeResult.unsupported(diagnostic=f"requires {', '.join(unmet)}")

        raw = probe_feature(feature, config, self.executor, self.resolver)
        return apply_overrides(feature.name, raw, config, self.overrides)

    def _finish(self, feature: Feature, result: ProbeResult) -> ProbeResult:
        logging.info(
            f"{feature.name}: {'yes' if result.supported else 'no'}"
            + (f" ({result.flag_used})" if result.flag_used else "")
        )
        if self.on_result is not None:
            self.on_result(feature, result)
        return result
