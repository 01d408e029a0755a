"""
Unit tests for CapabilityMatrix.
"""

import pytest

from intrinprobe.catalog.registry import get_feature
from intrinprobe.matrix.capability_matrix import CapabilityMatrix, CapabilityMatrixError
from intrinprobe.probe.executor import ProbeResult


class TestCapabilityMatrix:
    """Test suite for CapabilityMatrix."""

    @pytest.fixture
    def matrix(self):
        matrix = CapabilityMatrix({"arch": "x86_64"})
        matrix.record("sse2", ProbeResult(supported=True, flag_used="-msse2"))
        matrix.record("avx512", ProbeResult.unsupported("compile failed"))
        return matrix

    def test_lookup(self, matrix):
        assert matrix.is_supported("sse2") is True
        assert matrix.flag("sse2") == "-msse2"
        assert matrix.is_supported("avx512") is False
        assert matrix.flag("avx512") == ""
        assert matrix["sse2"].flag_used == "-msse2"

    def test_container_protocol(self, matrix):
        assert "sse2" in matrix
        assert "neon" not in matrix
        assert list(matrix) == ["sse2", "avx512"]
        assert len(matrix) == 2
        assert matrix.get("neon") is None

    def test_missing_entry_is_error(self, matrix):
        """Reading an unprobed feature never defaults to False."""
        with pytest.raises(CapabilityMatrixError, match="No entry for feature 'neon'"):
            matrix.is_supported("neon")

    def test_write_once(self, matrix):
        with pytest.raises(CapabilityMatrixError, match="already recorded"):
            matrix.record("sse2", ProbeResult.unsupported())

    def test_frozen(self, matrix):
        matrix.freeze()
        assert matrix.frozen is True
        with pytest.raises(CapabilityMatrixError, match="frozen"):
            matrix.record("neon", ProbeResult.unsupported())

    def test_supported_features(self, matrix):
        assert matrix.supported_features() == ["sse2"]

    def test_ensure_complete(self, matrix):
        matrix.ensure_complete([get_feature("sse2"), get_feature("avx512")])
        with pytest.raises(CapabilityMatrixError, match="Missing matrix entries: avx2"):
            matrix.ensure_complete([get_feature("sse2"), get_feature("avx2")])

    def test_as_dict(self, matrix):
        assert matrix.as_dict() == {
            "sse2": {"supported": True, "flag": "-msse2"},
            "avx512": {"supported": False, "flag": ""},
        }

    def test_config_summary_is_copied(self):
        summary = {"arch": "x86_64"}
        matrix = CapabilityMatrix(summary)
        summary["arch"] = "aarch64"
        assert matrix.config_summary == {"arch": "x86_64"}
