"""Toolchain Detection Utilities.

This module infers the compiler id, target architecture and host platform
when they are not given explicitly.

Detection sources:
    - Host OS and architecture: platform.system() / platform.machine()
    - Compiler id: the compiler's --version banner, or its name for cl
    - Target architecture: the first component of `cc -dumpmachine`
"""

import logging
import platform
import re
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

from ..config.probe_config import ArchClass, classify_arch, normalize_host_os
from .compiler import ToolchainError

# (banner pattern, compiler id); first match wins
_VERSION_BANNERS: Tuple[Tuple[str, str], ...] = (
    (r"Intel\(R\) oneAPI DPC\+\+/C\+\+ Compiler", "IntelLLVM"),
    (r"Intel\(R\)", "Intel"),
    (r"icx|icpx", "IntelLLVM"),
    (r"Apple (LLVM|clang)", "AppleClang"),
    (r"clang version", "Clang"),
    (r"Free Software Foundation|\bgcc\b|GCC", "GNU"),
    (r"Microsoft \(R\) C/C\+\+", "MSVC"),
)


class ToolchainDetector:
    """Detects host platform and compiler properties."""

    @staticmethod
    def detect_host() -> Tuple[str, str]:
        """Detect the host OS family and architecture.

        Returns:
            Tuple of (host_os, arch), e.g. ('linux', 'x86_64')
        """
        host_os = normalize_host_os(platform.system())
        machine = platform.machine().lower()

        if machine in ("amd64", "x64"):
            arch = "x86_64"
        elif machine == "arm64":
            arch = "aarch64"
        else:
            arch = machine or "unknown"

        return host_os, arch

    @staticmethod
    def _run(cmd: List[str]) -> str:
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=30)
        except (FileNotFoundError, PermissionError) as e:
            raise ToolchainError(f"Failed to run {cmd[0]}: {e}") from e
        except subprocess.TimeoutExpired:
            logging.warning(f"Timed out running {' '.join(cmd)}")
            return ""
        return (result.stdout or "") + (result.stderr or "")

    @staticmethod
    def detect_compiler_id(compiler: str) -> str:
        """Identify the compiler family from its banner.

        Args:
            compiler: Compiler executable

        Returns:
            Compiler id such as 'GNU', 'Clang', 'AppleClang', 'MSVC',
            'Intel', 'IntelLLVM', or 'Unknown'

        Raises:
            ToolchainError: If the compiler cannot be found or run
        """
        if shutil.which(compiler) is None:
            raise ToolchainError(f"Compiler not found: {compiler}")

        name = Path(compiler).name.lower()
        if name in ("cl", "cl.exe"):
            return "MSVC"

        # cl prints its banner without arguments; everything else takes --version
        banner = ToolchainDetector._run([compiler, "--version"])
        for pattern, compiler_id in _VERSION_BANNERS:
            if re.search(pattern, banner):
                return compiler_id

        if "gcc" in name:
            return "GNU"
        if "clang" in name:
            return "Clang"
        return "Unknown"

    @staticmethod
    def detect_target_arch(compiler: str, msvc_style: bool = False) -> Optional[str]:
        """Ask a gnu-style compiler for its target triple.

        Args:
            compiler: Compiler executable
            msvc_style: The driver is cl-style and has no -dumpmachine

        Returns:
            Architecture component of the target triple, or None
        """
        if msvc_style:
            return None
        triple = ToolchainDetector._run([compiler, "-dumpmachine"]).strip()
        if not triple or " " in triple:
            return None
        return triple.split("-", 1)[0].lower()

    @staticmethod
    def is_cross_compiling(target_arch: str, host_arch: str) -> bool:
        """Decide whether target binaries cannot run on the host.

        Any difference in architecture class counts as cross-compiling. Within
        x86, a 32-bit target still runs on a 64-bit host.
        """
        target_class = classify_arch(target_arch)
        host_class = classify_arch(host_arch)
        if target_class != host_class:
            return True
        if target_class == ArchClass.X86:
            return False
        return _bitness(target_arch) > _bitness(host_arch)


def _bitness(arch: str) -> int:
    return 64 if re.search(r"64", arch) else 32
