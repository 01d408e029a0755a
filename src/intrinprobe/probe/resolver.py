"""Flag Resolver.

This module turns a feature's flag rules into the ordered list of flag
candidates to try under a given ProbeConfig.

Design:
    - Rules are looked up in the feature's (family, arch class) table, most
      specific key first
    - An empty candidate list means the feature is inapplicable
    - The empty string is a valid candidate meaning "no extra flag"
    - Tuning sub-flags are checked once per resolver and appended to every
      candidate when accepted
"""

import logging
import threading
from typing import Callable, Dict, List, Optional

from ..catalog.feature import Feature, TuningRule
from ..config.probe_config import ProbeConfig

FlagChecker = Callable[[str], bool]


def join_flags(*parts: str) -> str:
    """Join flag strings, normalizing whitespace and dropping empty parts."""
    return " ".join(" ".join(parts).split())


class FlagResolver:
    """Resolves feature flag candidates for one compiler.

    Args:
        flag_checker: Callable returning True when the compiler accepts a
            flag; used only for tuning sub-flags. Without a checker no
            tuning flag is ever appended.
    """

    def __init__(self, flag_checker: Optional[FlagChecker] = None):
        self.flag_checker = flag_checker
        self._accepted: Dict[str, bool] = {}
        self._lock = threading.Lock()

    def resolve(self, feature: Feature, config: ProbeConfig) -> List[str]:
        """Produce ordered flag candidates for a feature.

        Args:
            feature: Feature to resolve
            config: Ambient probe configuration

        Returns:
            Candidate flag strings, narrowest first; empty when inapplicable
        """
        if not feature.applies_to(config):
            return []

        rule = feature.rule_for(config.family, config.arch_class)
        if rule is None:
            return []

        candidates: List[str] = []
        for candidate in rule(config):
            normalized = join_flags(candidate)
            if normalized not in candidates:
                candidates.append(normalized)

        if candidates and feature.tuning is not None and feature.tuning.applies_to(config):
            tuning_flag = self.select_tuning(feature.tuning)
            if tuning_flag:
                candidates = [join_flags(candidate, tuning_flag) for candidate in candidates]

        return candidates

    def select_tuning(self, tuning: TuningRule) -> str:
        """Return the first accepted tuning flag, or an empty string."""
        for flag in tuning.flags:
            if self.accepts(flag):
                return flag
        return ""

    def accepts(self, flag: str) -> bool:
        """Check (and memoize) whether the compiler accepts a flag."""
        if self.flag_checker is None:
            return False
        with self._lock:
            if flag in self._accepted:
                return self._accepted[flag]
        accepted = bool(self.flag_checker(flag))
        logging.debug(f"Tuning flag {flag}: {'accepted' if accepted else 'rejected'}")
        with self._lock:
            self._accepted.setdefault(flag, accepted)
            return self._accepted[flag]
