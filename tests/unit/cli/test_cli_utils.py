"""Unit tests for CLI utilities including ErrorFormatter and ProbeProgress."""

from unittest.mock import patch

import pytest

from intrinprobe.catalog.registry import get_feature
from intrinprobe.cli_utils import ErrorFormatter, ProbeProgress
from intrinprobe.probe.executor import ProbeResult


class TestErrorFormatter:
    """Tests for ErrorFormatter class."""

    def test_print_error(self, capsys):
        """Test the error block goes to stderr with title and message."""
        ErrorFormatter.print_error("Toolchain error", "Compiler not found: cc")
        err = capsys.readouterr().err

        assert "✗ Toolchain error" in err
        assert "Compiler not found: cc" in err

    def test_print_success(self, capsys):
        ErrorFormatter.print_success("done")
        assert "✓ done" in capsys.readouterr().err

    def test_handle_unexpected_error_verbose(self, capsys):
        """Test the traceback is only printed in verbose mode."""
        try:
            raise ValueError("boom")
        except ValueError as e:
            with pytest.raises(SystemExit) as exc_info:
                ErrorFormatter.handle_unexpected_error(e, verbose=True)

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "ValueError: boom" in err
        assert "Traceback" in err

    def test_handle_unexpected_error_quiet(self, capsys):
        with pytest.raises(SystemExit):
            ErrorFormatter.handle_unexpected_error(RuntimeError("boom"))
        assert "Traceback" not in capsys.readouterr().err


class TestProbeProgress:
    """Tests for ProbeProgress class."""

    def test_disabled_is_noop(self):
        progress = ProbeProgress(total=3, enabled=False)
        assert progress.bar is None
        progress(get_feature("avx2"), ProbeResult(supported=True, flag_used="-mavx2"))
        progress.close()

    def test_enabled_updates_bar(self):
        with patch("intrinprobe.cli_utils.tqdm") as mock_tqdm:
            progress = ProbeProgress(total=2)
            progress(get_feature("avx2"), ProbeResult(supported=True, flag_used="-mavx2"))
            progress.close()

        bar = mock_tqdm.return_value
        bar.set_postfix_str.assert_called_once_with("avx2=yes")
        bar.update.assert_called_once_with(1)
        bar.close.assert_called_once()
