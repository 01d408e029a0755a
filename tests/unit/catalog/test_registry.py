"""
Unit tests for the feature catalog.
"""

import pytest

from intrinprobe.catalog.diagnostics import NOT_SUPPORTED, UNKNOWN_OPTION
from intrinprobe.catalog.feature import ANY, CatalogError, Feature, TestProgram, no_flag
from intrinprobe.catalog.registry import (
    FEATURE_CATALOG,
    feature_names,
    features_for_arch,
    get_feature,
    validate_catalog,
)
from intrinprobe.config.probe_config import ArchClass

EXPECTED_FEATURES = [
    "sse2",
    "ssse3",
    "sse42",
    "pclmulqdq",
    "avx2",
    "avx512",
    "avx512_mask",
    "avx512vnni",
    "vpclmulqdq",
    "xsave",
    "acle",
    "neon",
    "neon_ld4",
    "altivec",
    "altivec_novsx",
    "vmx",
    "power8",
    "power9",
    "rvv",
    "s390_vx",
    "vgfma",
]


def make(name, requires=()):
    return Feature(
        name=name,
        description=name,
        program=TestProgram(body="int main(void) { return 0; }"),
        arch_classes=frozenset({ArchClass.X86}),
        rules={(ANY, ANY): no_flag()},
        requires=tuple(requires),
    )


class TestFeatureCatalog:
    """Test suite for the assembled catalog."""

    def test_feature_names(self):
        assert feature_names() == EXPECTED_FEATURES

    def test_names_are_unique(self):
        names = [feature.name for feature in FEATURE_CATALOG]
        assert len(names) == len(set(names))

    def test_prerequisites_come_first(self):
        seen = set()
        for feature in FEATURE_CATALOG:
            assert set(feature.requires) <= seen
            seen.add(feature.name)

    def test_every_feature_has_define(self):
        for feature in FEATURE_CATALOG:
            assert feature.define, feature.name
            assert feature.flag_var, feature.name

    def test_get_feature(self):
        assert get_feature("avx2").name == "avx2"
        assert get_feature("AVX2").name == "avx2"
        assert get_feature("mmx") is None

    def test_features_for_arch(self):
        arm = [feature.name for feature in features_for_arch(ArchClass.ARM)]
        assert arm == ["acle", "neon", "neon_ld4"]
        assert features_for_arch(ArchClass.OTHER) == []

    def test_marker_features(self):
        """Features whose toolchains warn instead of failing carry the marker."""
        for name in ("xsave", "acle", "neon", "vgfma"):
            assert get_feature(name).rejection == NOT_SUPPORTED
        assert get_feature("avx2").rejection != NOT_SUPPORTED

    def test_execution_features(self):
        runnable = [feature.name for feature in FEATURE_CATALOG if feature.requires_execution]
        assert runnable == [
            "sse2",
            "ssse3",
            "sse42",
            "pclmulqdq",
            "avx2",
            "avx512",
            "avx512_mask",
            "avx512vnni",
            "vpclmulqdq",
        ]

    def test_programs_render(self):
        source = get_feature("pclmulqdq").program.render()
        assert source.startswith("#include <immintrin.h>\n#include <wmmintrin.h>\n")
        assert source.endswith("\n")


class TestValidateCatalog:
    """Tests for validate_catalog."""

    def test_valid(self):
        features = validate_catalog([make("a"), make("b", requires=["a"])])
        assert [feature.name for feature in features] == ["a", "b"]

    def test_duplicate(self):
        with pytest.raises(CatalogError, match="Duplicate feature name: a"):
            validate_catalog([make("a"), make("a")])

    def test_forward_reference(self):
        with pytest.raises(CatalogError, match="requires 'b'"):
            validate_catalog([make("a", requires=["b"]), make("b")])

    def test_unknown_prerequisite(self):
        with pytest.raises(CatalogError, match="requires 'zzz'"):
            validate_catalog([make("a", requires=["zzz"])])

    def test_no_rules(self):
        feature = Feature(
            name="bare",
            description="",
            program=TestProgram(body=""),
            arch_classes=frozenset({ArchClass.X86}),
        )
        with pytest.raises(CatalogError, match="no flag rules"):
            validate_catalog([feature])


class TestRejectionPredicates:
    """Tests for diagnostic rejection predicates."""

    def test_not_supported_case_insensitive(self):
        assert NOT_SUPPORTED.rejects("warning: Feature NOT SUPPORTED on this target")
        assert not NOT_SUPPORTED.rejects("")

    @pytest.mark.parametrize(
        "output",
        [
            "gcc: error: unrecognized command-line option '-mtune=cascadelake'",
            "clang: warning: argument unused during compilation: '-mtune=foo'",
            "cl : Command line warning D9002 : ignoring unknown option '/arch:AVX9'",
        ],
    )
    def test_unknown_option(self, output):
        assert UNKNOWN_OPTION.rejects(output)

    def test_match_returns_pattern(self):
        assert NOT_SUPPORTED.match("xyz not supported") == "not supported"
