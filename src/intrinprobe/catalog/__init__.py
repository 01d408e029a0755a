"""Feature catalog for intrinprobe."""

from .diagnostics import NO_REJECTION, NOT_SUPPORTED, UNKNOWN_OPTION, RejectionPredicate
from .feature import ANY, CatalogError, Feature, TestProgram, TuningRule
from .registry import (
    FEATURE_CATALOG,
    feature_names,
    features_for_arch,
    get_feature,
    validate_catalog,
)

__all__ = [
    "ANY",
    "CatalogError",
    "Feature",
    "TestProgram",
    "TuningRule",
    "RejectionPredicate",
    "NO_REJECTION",
    "NOT_SUPPORTED",
    "UNKNOWN_OPTION",
    "FEATURE_CATALOG",
    "get_feature",
    "feature_names",
    "features_for_arch",
    "validate_catalog",
]
