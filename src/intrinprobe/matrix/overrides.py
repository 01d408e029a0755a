"""Platform override rules.

Fixed (host OS, architecture) combinations on which a feature is known to be
broken regardless of what the probe says. Overrides can only downgrade a
result to unsupported, never upgrade it.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from ..config.probe_config import ProbeConfig
from ..probe.executor import ProbeResult


@dataclass(frozen=True)
class PlatformOverride:
    """Force a feature off on a (host OS, architecture pattern) combination."""

    feature: str
    host_os: str
    arch_pattern: str
    reason: str

    def matches(self, feature_name: str, config: ProbeConfig) -> bool:
        return (
            feature_name == self.feature
            and config.host_os == self.host_os
            and re.match(self.arch_pattern, config.arch) is not None
        )


PLATFORM_OVERRIDES: Tuple[PlatformOverride, ...] = (
    PlatformOverride(
        feature="pclmulqdq",
        host_os="darwin",
        arch_pattern=r"^i[3-6]86$",
        reason="carry-less multiply code crashes on macOS in 32-bit mode",
    ),
    PlatformOverride(
        feature="vpclmulqdq",
        host_os="darwin",
        arch_pattern=r"^i[3-6]86$",
        reason="carry-less multiply code crashes on macOS in 32-bit mode",
    ),
)


def find_override(
    feature_name: str,
    config: ProbeConfig,
    overrides: Iterable[PlatformOverride] = PLATFORM_OVERRIDES,
) -> Optional[PlatformOverride]:
    """Return the first override forcing this feature off, if any."""
    for override in overrides:
        if override.matches(feature_name, config):
            return override
    return None


def apply_overrides(
    feature_name: str,
    result: ProbeResult,
    config: ProbeConfig,
    overrides: Iterable[PlatformOverride] = PLATFORM_OVERRIDES,
) -> ProbeResult:
    """Apply platform overrides to a raw probe result.

    Returns:
        The raw result when no override matches or it is already unsupported,
        otherwise an unsupported copy naming the override reason
    """
    override = find_override(feature_name, config, overrides)
    if override is None or not result.supported:
        return result
    return result.downgraded(f"disabled on {override.host_os}/{config.arch}: {override.reason}")
