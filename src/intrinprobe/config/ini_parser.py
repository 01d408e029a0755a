"""
intrinprobe.ini configuration parser.

This module provides functionality to parse intrinprobe.ini files and extract
probe environment settings (compiler, target architecture, native mode).
"""

import configparser
import shlex
from pathlib import Path
from typing import Dict, List, Optional

from .probe_config import ProbeConfigError


class ProbeIniConfig:
    """
    Parser for intrinprobe.ini configuration files.

    Environments are declared as [env:NAME] sections. Values from a bare [env]
    section are inherited by every environment.

    Example intrinprobe.ini:
        [intrinprobe]
        default_envs = host

        [env]
        cflags = -O2

        [env:host]
        compiler = gcc
        native_instructions = yes

        [env:aarch64]
        compiler = aarch64-linux-gnu-gcc
        arch = aarch64
        cross_compiling = yes

    Usage:
        config = ProbeIniConfig(Path("intrinprobe.ini"))
        envs = config.get_environments()
        host = config.get_env_config("host")
    """

    KNOWN_FIELDS = {
        "compiler",
        "compiler_id",
        "arch",
        "host_os",
        "native_instructions",
        "cross_compiling",
        "cflags",
    }

    BOOLEAN_FIELDS = {"native_instructions", "cross_compiling"}

    def __init__(self, ini_path: Path):
        """
        Initialize the parser with an intrinprobe.ini file.

        Args:
            ini_path: Path to the intrinprobe.ini file

        Raises:
            ProbeConfigError: If the file doesn't exist or cannot be parsed
        """
        self.ini_path = ini_path

        if not ini_path.exists():
            raise ProbeConfigError(f"Configuration file not found: {ini_path}")

        self.config = configparser.ConfigParser(
            allow_no_value=True, interpolation=configparser.ExtendedInterpolation()
        )

        try:
            self.config.read(ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise ProbeConfigError(f"Failed to parse {ini_path}: {e}") from e

    def get_environments(self) -> List[str]:
        """
        Get list of all environment names defined in the config.

        Returns:
            List of environment names (e.g., ['host', 'aarch64'])
        """
        envs = []
        for section in self.config.sections():
            if section.startswith("env:"):
                envs.append(section.split(":", 1)[1])
        return envs

    def get_env_config(self, env_name: str) -> Dict[str, str]:
        """
        Get raw settings for a specific environment.

        Args:
            env_name: Name of the environment (e.g., 'host')

        Returns:
            Dictionary of setting name to stripped string value

        Raises:
            ProbeConfigError: If the environment is missing or has unknown keys
        """
        section = f"env:{env_name}"

        if section not in self.config:
            available = ", ".join(self.get_environments())
            raise ProbeConfigError(
                f"Environment '{env_name}' not found. "
                + f"Available environments: {available or 'none'}"
            )

        env_config: Dict[str, str] = {}
        if "env" in self.config:
            env_config.update(
                {key: (value or "").strip() for key, value in self.config["env"].items()}
            )
        for key in self.config[section]:
            env_config[key] = (self.config[section][key] or "").strip()

        unknown = set(env_config) - self.KNOWN_FIELDS
        if unknown:
            raise ProbeConfigError(
                f"Environment '{env_name}' has unknown settings: "
                + f"{', '.join(sorted(unknown))}"
            )

        for key in self.BOOLEAN_FIELDS & set(env_config):
            if env_config[key].lower() not in configparser.ConfigParser.BOOLEAN_STATES:
                raise ProbeConfigError(
                    f"Environment '{env_name}': '{key}' must be a boolean, "
                    + f"got '{env_config[key]}'"
                )

        return env_config

    def get_bool(self, env_name: str, key: str) -> Optional[bool]:
        """
        Read a boolean setting.

        Returns:
            The parsed value, or None when the setting is absent
        """
        value = self.get_env_config(env_name).get(key)
        if value is None or value == "":
            return None
        return configparser.ConfigParser.BOOLEAN_STATES[value.lower()]

    def get_cflags(self, env_name: str) -> List[str]:
        """
        Parse extra compiler flags applied to every probe.

        Example:
            For cflags = -O2 -DNAME="a b"
            Returns: ['-O2', '-DNAME=a b']

        Raises:
            ProbeConfigError: If the value has unbalanced quotes
        """
        cflags = self.get_env_config(env_name).get("cflags", "")
        try:
            return shlex.split(cflags)
        except ValueError as e:
            raise ProbeConfigError(f"Environment '{env_name}': invalid cflags: {e}") from e

    def get_default_environment(self) -> Optional[str]:
        """
        Get the default environment.

        Returns:
            First entry of default_envs in [intrinprobe], otherwise the first
            declared environment, or None when there are none
        """
        if "intrinprobe" in self.config:
            default_envs = (self.config["intrinprobe"].get("default_envs") or "").strip()
            if default_envs:
                return default_envs.split(",")[0].strip()

        envs = self.get_environments()
        return envs[0] if envs else None
