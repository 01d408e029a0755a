"""Probe configuration.

This module defines the ambient configuration under which every feature probe
runs: which compiler is in use, which architecture is targeted, and whether
host-native instructions and execution-based validation are allowed.

Design:
    - ProbeConfig is a frozen dataclass built once per run
    - Raw compiler ids (e.g. "GNU", "AppleClang", "IntelLLVM") are classified
      into a small closed set of compiler families
    - Raw architecture strings (e.g. "x86_64", "aarch64", "ppc64le") are
      classified into architecture classes used for flag dispatch
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class ProbeConfigError(Exception):
    """Raised when a probe configuration is invalid or cannot be loaded."""

    pass


class CompilerFamily(Enum):
    """Compiler families with distinct flag vocabularies."""

    GNU = "gnu"
    CLANG = "clang"
    MSVC = "msvc"
    INTEL = "intel"
    OTHER = "other"


class ArchClass(Enum):
    """Architecture classes used to gate and dispatch feature flags."""

    X86 = "x86"
    ARM = "arm"
    POWER = "power"
    RISCV = "riscv"
    S390 = "s390"
    OTHER = "other"


class Frontend(Enum):
    """Command-line style of the compiler driver."""

    GNU = "gnu"  # cc src.c -o exe -mflag
    MSVC = "msvc"  # cl /nologo src.c /Fe:exe /arch:FLAG


# Order matters: the first matching pattern wins.
_ARCH_PATTERNS: Tuple[Tuple[str, ArchClass], ...] = (
    (r"^(x86_64|amd64|x64|i[3-6]86|x86|em64t)$", ArchClass.X86),
    (r"^(aarch64|arm64|arm64ec|arm.*)$", ArchClass.ARM),
    (r"^(powerpc|ppc).*$", ArchClass.POWER),
    (r"^riscv.*$", ArchClass.RISCV),
    (r"^s390.*$", ArchClass.S390),
)

_HOST_OS_ALIASES = {
    "darwin": "darwin",
    "macos": "darwin",
    "mac": "darwin",
    "apple": "darwin",
    "linux": "linux",
    "windows": "windows",
    "win32": "windows",
    "win": "windows",
    "freebsd": "freebsd",
}


def classify_compiler(compiler_id: str) -> CompilerFamily:
    """Classify a raw compiler id into a compiler family.

    Args:
        compiler_id: Compiler identifier as reported by the build system
            (e.g. "GNU", "Clang", "AppleClang", "MSVC", "Intel", "IntelLLVM")

    Returns:
        The matching CompilerFamily, OTHER when nothing matches
    """
    lowered = compiler_id.strip().lower()
    if not lowered:
        return CompilerFamily.OTHER
    # IntelLLVM must be checked before Clang-style ids
    if "intel" in lowered or lowered in ("icc", "icx", "icl"):
        return CompilerFamily.INTEL
    if lowered in ("msvc", "cl", "cl.exe"):
        return CompilerFamily.MSVC
    if "clang" in lowered:
        return CompilerFamily.CLANG
    if lowered in ("gnu", "gcc", "g++", "cc") or lowered.endswith("-gcc"):
        return CompilerFamily.GNU
    return CompilerFamily.OTHER


def classify_arch(arch: str) -> ArchClass:
    """Classify a raw target architecture string.

    Args:
        arch: Architecture string (e.g. "x86_64", "aarch64", "i386")

    Returns:
        The matching ArchClass, OTHER when nothing matches
    """
    lowered = arch.strip().lower()
    for pattern, arch_class in _ARCH_PATTERNS:
        if re.match(pattern, lowered):
            return arch_class
    return ArchClass.OTHER


def normalize_host_os(host_os: str) -> str:
    """Normalize a host OS name to darwin/linux/windows/freebsd or lowercase."""
    lowered = host_os.strip().lower()
    return _HOST_OS_ALIASES.get(lowered, lowered)


def native_flag_for(family: CompilerFamily, frontend: Frontend, arch_class: ArchClass) -> str:
    """Return the toolchain's host auto-detect flag, or an empty string.

    MSVC has no such flag; Intel spells it differently per driver style;
    GCC and Clang use -mcpu=native on POWER and -march=native elsewhere.
    """
    if family == CompilerFamily.MSVC:
        return ""
    if family == CompilerFamily.INTEL:
        return "/QxHost" if frontend == Frontend.MSVC else "-xHost"
    if family in (CompilerFamily.GNU, CompilerFamily.CLANG):
        if frontend == Frontend.MSVC:
            return ""
        if arch_class == ArchClass.POWER:
            return "-mcpu=native"
        return "-march=native"
    return ""


@dataclass(frozen=True)
class ProbeConfig:
    """Ambient configuration for a probing run.

    Construct through ProbeConfig.create() so derived fields stay consistent.

    Attributes:
        compiler_id: Raw compiler identifier
        compiler: Compiler executable (name on PATH or full path)
        arch: Raw target architecture string
        host_os: Normalized host OS family
        native_instructions: Prefer host auto-detected flags and allow
            execution-based validation
        cross_compiling: Force compile-only validation
        family: Classified compiler family
        arch_class: Classified architecture class
        frontend: Driver command-line style
        native_flag: Flag applied to every probe when native_instructions is on
        base_flags: User flags applied to every probe
    """

    compiler_id: str
    compiler: str
    arch: str
    host_os: str
    native_instructions: bool = False
    cross_compiling: bool = False
    family: CompilerFamily = CompilerFamily.OTHER
    arch_class: ArchClass = ArchClass.OTHER
    frontend: Frontend = Frontend.GNU
    native_flag: str = ""
    base_flags: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def create(
        cls,
        compiler_id: str,
        arch: str,
        host_os: str,
        compiler: Optional[str] = None,
        native_instructions: bool = False,
        cross_compiling: bool = False,
        frontend: Optional[Frontend] = None,
        base_flags: Tuple[str, ...] = (),
    ) -> "ProbeConfig":
        """Build a ProbeConfig, classifying compiler and architecture.

        Args:
            compiler_id: Raw compiler identifier (e.g. "GNU", "MSVC")
            arch: Target architecture string
            host_os: Host OS name (any common spelling)
            compiler: Compiler executable, defaults to a family-typical name
            native_instructions: Enable native-instructions mode
            cross_compiling: Target differs from host
            frontend: Driver style, derived from the family when omitted
            base_flags: Extra flags applied to every probe

        Returns:
            Frozen ProbeConfig

        Raises:
            ProbeConfigError: If the architecture string is empty
        """
        if not arch or not arch.strip():
            raise ProbeConfigError("Target architecture must not be empty")

        family = classify_compiler(compiler_id)
        arch_class = classify_arch(arch)
        normalized_os = normalize_host_os(host_os)

        if frontend is None:
            frontend = _default_frontend(family, normalized_os, compiler)

        if compiler is None:
            compiler = "cl" if frontend == Frontend.MSVC else "cc"

        return cls(
            compiler_id=compiler_id,
            compiler=compiler,
            arch=arch.strip().lower(),
            host_os=normalized_os,
            native_instructions=native_instructions,
            cross_compiling=cross_compiling,
            family=family,
            arch_class=arch_class,
            frontend=frontend,
            native_flag=native_flag_for(family, frontend, arch_class),
            base_flags=tuple(base_flags),
        )

    @property
    def host_is_unix(self) -> bool:
        """True for every host OS except Windows."""
        return self.host_os != "windows"

    @property
    def allows_execution(self) -> bool:
        """Whether execution-based validation may run under this config."""
        return self.native_instructions and not self.cross_compiling

    def global_flags(self) -> Tuple[str, ...]:
        """Flags applied to every probe: base flags plus the native flag."""
        flags = list(self.base_flags)
        if self.native_instructions and self.native_flag:
            flags.extend(self.native_flag.split())
        return tuple(flags)

    def describe(self) -> dict:
        """Return a JSON-friendly summary of this configuration."""
        return {
            "compiler_id": self.compiler_id,
            "compiler": self.compiler,
            "family": self.family.value,
            "frontend": self.frontend.value,
            "arch": self.arch,
            "arch_class": self.arch_class.value,
            "host_os": self.host_os,
            "native_instructions": self.native_instructions,
            "cross_compiling": self.cross_compiling,
            "native_flag": self.native_flag,
            "base_flags": list(self.base_flags),
        }


def _default_frontend(
    family: CompilerFamily, host_os: str, compiler: Optional[str]
) -> Frontend:
    if family == CompilerFamily.MSVC:
        return Frontend.MSVC
    if compiler:
        name = compiler.replace("\\", "/").rsplit("/", 1)[-1].lower()
        if name in ("clang-cl", "clang-cl.exe", "icl", "icl.exe", "icx-cl", "icx-cl.exe"):
            return Frontend.MSVC
    if family == CompilerFamily.INTEL and host_os == "windows":
        return Frontend.MSVC
    return Frontend.GNU
