"""
Unit tests for intrinprobe.ini parser.
"""

import pytest

from intrinprobe.config.ini_parser import ProbeIniConfig
from intrinprobe.config.probe_config import ProbeConfigError


class TestProbeIniConfig:
    """Test suite for ProbeIniConfig parser."""

    @pytest.fixture
    def tmp_ini_path(self, tmp_path):
        """Fixture to provide a temporary INI file path."""
        return tmp_path / "intrinprobe.ini"

    @pytest.fixture
    def minimal_config(self, tmp_ini_path):
        """Create minimal valid intrinprobe.ini."""
        content = """
[env:host]
compiler = gcc
"""
        tmp_ini_path.write_text(content)
        return tmp_ini_path

    @pytest.fixture
    def multi_env_config(self, tmp_ini_path):
        """Create config with multiple environments."""
        content = """
[env:host]
compiler = gcc
native_instructions = yes

[env:aarch64]
compiler = aarch64-linux-gnu-gcc
arch = aarch64
cross_compiling = true
"""
        tmp_ini_path.write_text(content)
        return tmp_ini_path

    @pytest.fixture
    def config_with_inheritance(self, tmp_ini_path):
        """Create config with base [env] inheritance."""
        content = """
[env]
cflags = -O2 -fPIC
compiler = clang

[env:host]
native_instructions = on

[env:gcc]
compiler = gcc
cflags = -O3
"""
        tmp_ini_path.write_text(content)
        return tmp_ini_path

    def test_file_not_found(self, tmp_path):
        """Test error when config file doesn't exist."""
        with pytest.raises(ProbeConfigError, match="not found"):
            ProbeIniConfig(tmp_path / "missing.ini")

    def test_malformed_file(self, tmp_ini_path):
        tmp_ini_path.write_text("compiler = gcc\n")
        with pytest.raises(ProbeConfigError, match="Failed to parse"):
            ProbeIniConfig(tmp_ini_path)

    def test_get_environments(self, multi_env_config):
        config = ProbeIniConfig(multi_env_config)
        assert config.get_environments() == ["host", "aarch64"]

    def test_get_env_config(self, multi_env_config):
        config = ProbeIniConfig(multi_env_config)
        env = config.get_env_config("aarch64")
        assert env["compiler"] == "aarch64-linux-gnu-gcc"
        assert env["arch"] == "aarch64"
        assert env["cross_compiling"] == "true"

    def test_missing_environment(self, minimal_config):
        config = ProbeIniConfig(minimal_config)
        with pytest.raises(ProbeConfigError, match="Environment 'arm' not found.*host"):
            config.get_env_config("arm")

    def test_inheritance(self, config_with_inheritance):
        """Values from [env] are inherited and overridden per environment."""
        config = ProbeIniConfig(config_with_inheritance)

        host = config.get_env_config("host")
        assert host["compiler"] == "clang"
        assert config.get_cflags("host") == ["-O2", "-fPIC"]

        gcc = config.get_env_config("gcc")
        assert gcc["compiler"] == "gcc"
        assert config.get_cflags("gcc") == ["-O3"]

    def test_unknown_setting(self, tmp_ini_path):
        tmp_ini_path.write_text("[env:host]\ncompiler = gcc\nboard = uno\n")
        config = ProbeIniConfig(tmp_ini_path)
        with pytest.raises(ProbeConfigError, match="unknown settings: board"):
            config.get_env_config("host")

    def test_invalid_boolean(self, tmp_ini_path):
        tmp_ini_path.write_text("[env:host]\nnative_instructions = maybe\n")
        config = ProbeIniConfig(tmp_ini_path)
        with pytest.raises(ProbeConfigError, match="must be a boolean"):
            config.get_env_config("host")

    def test_get_bool(self, multi_env_config):
        config = ProbeIniConfig(multi_env_config)
        assert config.get_bool("host", "native_instructions") is True
        assert config.get_bool("aarch64", "cross_compiling") is True
        assert config.get_bool("host", "cross_compiling") is None

    def test_get_cflags_empty(self, minimal_config):
        config = ProbeIniConfig(minimal_config)
        assert config.get_cflags("host") == []

    def test_get_cflags_quoted(self, tmp_ini_path):
        """Quoted values stay one flag, as a shell would split them."""
        tmp_ini_path.write_text("[env:host]\ncflags = -DTAG=\"a b\" -O2 '-DDIR=/opt/x y'\n")
        config = ProbeIniConfig(tmp_ini_path)
        assert config.get_cflags("host") == ["-DTAG=a b", "-O2", "-DDIR=/opt/x y"]

    def test_get_cflags_unbalanced_quote(self, tmp_ini_path):
        tmp_ini_path.write_text('[env:host]\ncflags = -DTAG="a b\n')
        config = ProbeIniConfig(tmp_ini_path)
        with pytest.raises(ProbeConfigError, match="invalid cflags"):
            config.get_cflags("host")

    def test_default_environment_first(self, multi_env_config):
        config = ProbeIniConfig(multi_env_config)
        assert config.get_default_environment() == "host"

    def test_default_envs_setting(self, tmp_ini_path):
        tmp_ini_path.write_text(
            """
[intrinprobe]
default_envs = aarch64, host

[env:host]
compiler = gcc

[env:aarch64]
arch = aarch64
"""
        )
        config = ProbeIniConfig(tmp_ini_path)
        assert config.get_default_environment() == "aarch64"

    def test_no_environments(self, tmp_ini_path):
        tmp_ini_path.write_text("[intrinprobe]\n")
        config = ProbeIniConfig(tmp_ini_path)
        assert config.get_environments() == []
        assert config.get_default_environment() is None
