"""
Feature catalog registry.

This module assembles the per-architecture feature definitions into a single
ordered, read-only catalog and validates it once at import time.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from ..config.probe_config import ArchClass
from . import arm, power, riscv, s390, x86
from .feature import CatalogError, Feature


def validate_catalog(features: Iterable[Feature]) -> Tuple[Feature, ...]:
    """
    Check catalog consistency.

    Every name must be unique and every prerequisite must be defined earlier
    in the catalog, so catalog order is a valid probing order.

    Args:
        features: Features in probing order

    Returns:
        The features as a tuple

    Raises:
        CatalogError: On duplicate names, unknown or forward prerequisites,
            or features without any flag rule
    """
    seen: Dict[str, Feature] = {}
    for feature in features:
        if feature.name in seen:
            raise CatalogError(f"Duplicate feature name: {feature.name}")
        if not feature.rules:
            raise CatalogError(f"Feature '{feature.name}' has no flag rules")
        for prerequisite in feature.requires:
            if prerequisite not in seen:
                raise CatalogError(
                    f"Feature '{feature.name}' requires '{prerequisite}', "
                    + "which is not defined before it"
                )
        seen[feature.name] = feature
    return tuple(seen.values())


FEATURE_CATALOG: Tuple[Feature, ...] = validate_catalog(
    x86.FEATURES + arm.FEATURES + power.FEATURES + riscv.FEATURES + s390.FEATURES
)

_BY_NAME: Dict[str, Feature] = {feature.name: feature for feature in FEATURE_CATALOG}


def get_feature(name: str) -> Optional[Feature]:
    """
    Get a feature by name.

    Args:
        name: Feature name (e.g., 'avx2')

    Returns:
        Feature if found, None otherwise
    """
    return _BY_NAME.get(name.lower())


def feature_names() -> List[str]:
    """Get all feature names in probing order."""
    return [feature.name for feature in FEATURE_CATALOG]


def features_for_arch(arch_class: ArchClass) -> List[Feature]:
    """Get the features that exist on an architecture class."""
    return [feature for feature in FEATURE_CATALOG if arch_class in feature.arch_classes]

