"""Feature definitions.

A Feature describes one probeable instruction-set capability: the minimal
program that exercises it, the flag rules per (compiler family, architecture
class) pairing, and how its probe result is validated.

Flag rules are plain functions of the ProbeConfig returning an ordered list
of candidate flag strings. The helpers below build the common shapes so
catalog entries stay declarative.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from ..config.probe_config import ArchClass, CompilerFamily, Frontend, ProbeConfig
from .diagnostics import NO_REJECTION, RejectionPredicate

FlagRule = Callable[[ProbeConfig], List[str]]
RuleKey = Tuple[Optional[CompilerFamily], Optional[ArchClass]]

# Wildcard for either half of a rule key
ANY = None

GNU_LIKE = (CompilerFamily.GNU, CompilerFamily.CLANG)


class CatalogError(Exception):
    """Raised when the feature catalog is defined inconsistently."""

    pass


@dataclass(frozen=True)
class TestProgram:
    """Minimal C program exercising a feature."""

    __test__ = False  # not a pytest test class

    body: str
    headers: Tuple[str, ...] = ()

    def render(self) -> str:
        """Return the complete source text."""
        lines = [f"#include <{header}>" for header in self.headers]
        lines.append(self.body.strip("\n"))
        return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class TuningRule:
    """Best-effort tuning sub-flags appended to a feature's candidates.

    The first flag the compiler accepts is appended; when none is accepted
    nothing is appended. Only applies outside native mode.
    """

    flags: Tuple[str, ...]
    families: FrozenSet[CompilerFamily] = frozenset(GNU_LIKE)
    frontends: FrozenSet[Frontend] = frozenset({Frontend.GNU})

    def applies_to(self, config: ProbeConfig) -> bool:
        return (
            not config.native_instructions
            and config.family in self.families
            and config.frontend in self.frontends
        )


@dataclass(frozen=True)
class Feature:
    """A probeable hardware feature.

    Attributes:
        name: Unique catalog name (e.g. "avx2")
        description: One-line human description
        program: Test program compiled by the probe
        arch_classes: Architecture classes the feature exists on
        rules: Flag rules keyed by (family, arch class), ANY as wildcard
        requires_execution: Validate by running the probe when allowed
        rejection: Output patterns that fail an otherwise clean compile
        tuning: Optional best-effort tuning sub-flags
        requires: Names of prerequisite features
        define: Symbol defined for consumers when supported
        flag_var: Build-system variable holding the resolved flag
    """

    name: str
    description: str
    program: TestProgram
    arch_classes: FrozenSet[ArchClass]
    rules: Dict[RuleKey, FlagRule] = field(default_factory=dict, hash=False, compare=False)
    requires_execution: bool = False
    rejection: RejectionPredicate = NO_REJECTION
    tuning: Optional[TuningRule] = None
    requires: Tuple[str, ...] = ()
    define: str = ""
    flag_var: str = ""

    def applies_to(self, config: ProbeConfig) -> bool:
        """Whether the feature exists on the config's architecture class."""
        return config.arch_class in self.arch_classes

    def rule_for(self, family: CompilerFamily, arch_class: ArchClass) -> Optional[FlagRule]:
        """Look up the flag rule, most specific key first."""
        for key in ((family, arch_class), (family, ANY), (ANY, arch_class), (ANY, ANY)):
            if key in self.rules:
                return self.rules[key]
        return None


def no_flag() -> FlagRule:
    """The feature needs no extra flag; probe with the global flags only."""
    return lambda config: [""]


def inapplicable() -> FlagRule:
    """The feature cannot be enabled under this pairing."""
    return lambda config: []


def explicit(*candidates: str) -> FlagRule:
    """Fixed candidates, used in native mode as well."""
    return lambda config: list(candidates)


def unless_native(*candidates: str) -> FlagRule:
    """Candidates outside native mode; no flag in native mode."""

    def rule(config: ProbeConfig) -> List[str]:
        if config.native_instructions:
            return [""]
        return list(candidates)

    return rule


def by_host(unix: FlagRule, windows: FlagRule) -> FlagRule:
    """Pick a rule by host OS (Intel spells its flags per host)."""

    def rule(config: ProbeConfig) -> List[str]:
        return unix(config) if config.host_is_unix else windows(config)

    return rule


def by_frontend(gnu: FlagRule, msvc: FlagRule) -> FlagRule:
    """Pick a rule by driver style."""

    def rule(config: ProbeConfig) -> List[str]:
        return msvc(config) if config.frontend == Frontend.MSVC else gnu(config)

    return rule


def by_arch(patterns: Tuple[Tuple[str, FlagRule], ...], default: FlagRule) -> FlagRule:
    """Pick the first rule whose regex matches the raw architecture string."""

    def rule(config: ProbeConfig) -> List[str]:
        for pattern, arch_rule in patterns:
            if re.match(pattern, config.arch):
                return arch_rule(config)
        return default(config)

    return rule


def for_families(families: Tuple[CompilerFamily, ...], rule: FlagRule) -> Dict[RuleKey, FlagRule]:
    """Register one rule for several families on any architecture."""
    return {(family, ANY): rule for family in families}
