"""Probe Executor.

This module decides whether a feature is usable by compiling its test program
under each flag candidate in turn, optionally running the result.

Design:
    - probe() is a pure function of (feature, config, candidates) plus the
      compiler it is handed; the only side effects are compiler invocations
    - Per-probe flags are built locally and passed down as an argument
    - Compile failures, diagnostic rejections and failed runs advance to the
      next candidate; ToolchainError propagates
    - Execution only happens for features that require it, in native mode,
      and never when cross-compiling
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from ..catalog.feature import Feature
from ..config.probe_config import ProbeConfig
from .compiler import CompileOutcome
from .resolver import FlagResolver


class CompilerDriver(Protocol):
    """What the executor needs from a compiler."""

    def compile(self, source_text: str, flags: Sequence[str], run: bool = False) -> CompileOutcome:
        ...


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of probing one feature.

    Attributes:
        supported: Whether the feature is usable
        flag_used: Winning flag candidate (empty when unsupported or when no
            extra flag was needed)
        diagnostic: Captured output or reason explaining the outcome
        attempts: Number of compiler invocations made
    """

    supported: bool
    flag_used: str = ""
    diagnostic: str = ""
    attempts: int = 0

    @classmethod
    def unsupported(cls, diagnostic: str = "", attempts: int = 0) -> "ProbeResult":
        return cls(supported=False, flag_used="", diagnostic=diagnostic, attempts=attempts)

    def downgraded(self, reason: str) -> "ProbeResult":
        """Copy of this result forced to unsupported."""
        return ProbeResult.unsupported(diagnostic=reason, attempts=self.attempts)

    def as_entry(self) -> dict:
        """Public matrix entry: supported flag and flag string."""
        return {"supported": self.supported, "flag": self.flag_used}


def should_execute(feature: Feature, config: ProbeConfig) -> bool:
    """Whether a successful compile must also run to count as supported."""
    return feature.requires_execution and config.allows_execution


class ProbeExecutor:
    """Runs feature probes against a compiler driver."""

    def __init__(self, compiler: CompilerDriver):
        """Initialize probe executor.

        Args:
            compiler: Driver used to compile (and run) probe programs
        """
        self.compiler = compiler

    def probe(self, feature: Feature, config: ProbeConfig, candidates: List[str]) -> ProbeResult:
        """Probe a feature under ordered flag candidates.

        Args:
            feature: Feature to probe
            config: Ambient probe configuration
            candidates: Flag candidates from the resolver

        Returns:
            ProbeResult for the first accepted candidate, or unsupported

        Raises:
            ToolchainError: If the compiler cannot be launched
        """
        if not candidates:
            logging.debug(f"{feature.name}: inapplicable for {config.family.value}/{config.arch}")
            return ProbeResult.unsupported(diagnostic="inapplicable for this compiler/architecture")

        source = feature.program.render()
        run = should_execute(feature, config)
        attempts = 0
        last_diagnostic = ""

        for candidate in candidates:
            flags = list(config.global_flags()) + candidate.split()
            attempts += 1
            outcome = self.compiler.compile(source, flags, run=run)

            failure = self._failure_reason(feature, outcome, run)
            if failure is None:
                logging.debug(f"{feature.name}: accepted with '{candidate}'")
                return ProbeResult(
                    supported=True,
                    flag_used=candidate,
                    diagnostic=outcome.output,
                    attempts=attempts,
                )

            logging.debug(f"{feature.name}: candidate '{candidate}' failed ({failure})")
            last_diagnostic = failure

        return ProbeResult.unsupported(diagnostic=last_diagnostic, attempts=attempts)

    @staticmethod
    def _failure_reason(feature: Feature, outcome: CompileOutcome, run: bool) -> Optional[str]:
        """Explain why an attempt failed, or None when it succeeded."""
        if not outcome.success:
            return f"compile failed: {outcome.output.strip()}"

        marker = feature.rejection.match(outcome.output)
        if marker is not None:
            return f"rejected by diagnostic '{marker}': {outcome.output.strip()}"

        if run and not outcome.run_success:
            return f"probe exited with {outcome.run_returncode}: {outcome.run_output.strip()}"

        return None


def probe_feature(
    feature: Feature,
    config: ProbeConfig,
    executor: ProbeExecutor,
    resolver: FlagResolver,
) -> ProbeResult:
    """Resolve candidates for a feature and probe it."""
    return executor.probe(feature, config, resolver.resolve(feature, config))
