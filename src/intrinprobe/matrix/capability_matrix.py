"""Capability Matrix.

The mapping from feature name to its final probe result. Each entry is set
exactly once; after freeze() the matrix is read-only.
"""

import threading
from typing import Dict, Iterable, Iterator, List, Optional

from ..catalog.feature import Feature
from ..probe.executor import ProbeResult


class CapabilityMatrixError(Exception):
    """Raised when the matrix is written twice, read for a missing entry, or incomplete."""

    pass


class CapabilityMatrix:
    """Write-once mapping of feature name to ProbeResult."""

    def __init__(self, config_summary: Optional[dict] = None):
        """Initialize an empty matrix.

        Args:
            config_summary: JSON-friendly description of the ProbeConfig the
                matrix was built under, carried along for emitters
        """
        self.config_summary = dict(config_summary or {})
        self._entries: Dict[str, ProbeResult] = {}
        self._frozen = False
        self._lock = threading.Lock()

    def record(self, name: str, result: ProbeResult) -> None:
        """Set the entry for a feature.

        Raises:
            CapabilityMatrixError: If frozen or the entry is already set
        """
        with self._lock:
            if self._frozen:
                raise CapabilityMatrixError(f"Matrix is frozen; cannot record '{name}'")
            if name in self._entries:
                raise CapabilityMatrixError(f"Feature '{name}' was already recorded")
            self._entries[name] = result

    def freeze(self) -> "CapabilityMatrix":
        """Make the matrix read-only."""
        with self._lock:
            self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __getitem__(self, name: str) -> ProbeResult:
        try:
            return self._entries[name]
        except KeyError:
            raise CapabilityMatrixError(f"No entry for feature '{name}'") from None

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, name: str) -> Optional[ProbeResult]:
        return self._entries.get(name)

    def is_supported(self, name: str) -> bool:
        """Whether a feature is supported; missing entries are an error."""
        return self[name].supported

    def flag(self, name: str) -> str:
        """Winning flag string for a feature (empty if unsupported)."""
        return self[name].flag_used

    def supported_features(self) -> List[str]:
        return [name for name, result in self._entries.items() if result.supported]

    def ensure_complete(self, features: Iterable[Feature]) -> None:
        """Check that every feature has exactly one entry.

        Raises:
            CapabilityMatrixError: Listing missing features
        """
        missing = [feature.name for feature in features if feature.name not in self._entries]
        if missing:
            raise CapabilityMatrixError(f"Missing matrix entries: {', '.join(missing)}")

    def as_dict(self) -> Dict[str, dict]:
        """Public view: {name: {"supported": bool, "flag": str}}."""
        return {name: result.as_entry() for name, result in self._entries.items()}
