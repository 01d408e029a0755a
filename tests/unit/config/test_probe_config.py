"""
Unit tests for ProbeConfig and the compiler/architecture classifiers.
"""

import pytest

from intrinprobe.config.probe_config import (
    ArchClass,
    CompilerFamily,
    Frontend,
    ProbeConfig,
    ProbeConfigError,
    classify_arch,
    classify_compiler,
    native_flag_for,
    normalize_host_os,
)


class TestClassifiers:
    """Tests for classify_compiler, classify_arch and normalize_host_os."""

    @pytest.mark.parametrize(
        "compiler_id,expected",
        [
            ("GNU", CompilerFamily.GNU),
            ("gcc", CompilerFamily.GNU),
            ("aarch64-linux-gnu-gcc", CompilerFamily.GNU),
            ("Clang", CompilerFamily.CLANG),
            ("AppleClang", CompilerFamily.CLANG),
            ("MSVC", CompilerFamily.MSVC),
            ("Intel", CompilerFamily.INTEL),
            ("IntelLLVM", CompilerFamily.INTEL),
            ("XL", CompilerFamily.OTHER),
            ("", CompilerFamily.OTHER),
        ],
    )
    def test_classify_compiler(self, compiler_id, expected):
        assert classify_compiler(compiler_id) == expected

    @pytest.mark.parametrize(
        "arch,expected",
        [
            ("x86_64", ArchClass.X86),
            ("AMD64", ArchClass.X86),
            ("i686", ArchClass.X86),
            ("aarch64", ArchClass.ARM),
            ("arm64", ArchClass.ARM),
            ("armv7l", ArchClass.ARM),
            ("ppc64le", ArchClass.POWER),
            ("powerpc64", ArchClass.POWER),
            ("riscv64", ArchClass.RISCV),
            ("s390x", ArchClass.S390),
            ("mips64", ArchClass.OTHER),
        ],
    )
    def test_classify_arch(self, arch, expected):
        assert classify_arch(arch) == expected

    def test_normalize_host_os(self):
        assert normalize_host_os("Darwin") == "darwin"
        assert normalize_host_os("macOS") == "darwin"
        assert normalize_host_os("Win32") == "windows"
        assert normalize_host_os("SunOS") == "sunos"

    def test_native_flag_for(self):
        assert native_flag_for(CompilerFamily.GNU, Frontend.GNU, ArchClass.X86) == "-march=native"
        assert native_flag_for(CompilerFamily.CLANG, Frontend.GNU, ArchClass.POWER) == "-mcpu=native"
        assert native_flag_for(CompilerFamily.INTEL, Frontend.GNU, ArchClass.X86) == "-xHost"
        assert native_flag_for(CompilerFamily.INTEL, Frontend.MSVC, ArchClass.X86) == "/QxHost"
        assert native_flag_for(CompilerFamily.MSVC, Frontend.MSVC, ArchClass.X86) == ""
        assert native_flag_for(CompilerFamily.OTHER, Frontend.GNU, ArchClass.X86) == ""


class TestProbeConfig:
    """Test suite for ProbeConfig.create and derived properties."""

    def test_create_gnu(self):
        config = ProbeConfig.create("GNU", "x86_64", "Linux")
        assert config.family == CompilerFamily.GNU
        assert config.arch_class == ArchClass.X86
        assert config.frontend == Frontend.GNU
        assert config.host_os == "linux"
        assert config.compiler == "cc"
        assert config.native_flag == "-march=native"

    def test_create_msvc_defaults(self):
        config = ProbeConfig.create("MSVC", "x64", "Windows")
        assert config.frontend == Frontend.MSVC
        assert config.compiler == "cl"
        assert config.native_flag == ""

    def test_clang_cl_uses_msvc_frontend(self):
        config = ProbeConfig.create("Clang", "x86_64", "windows", compiler="C:\\LLVM\\bin\\clang-cl.exe")
        assert config.family == CompilerFamily.CLANG
        assert config.frontend == Frontend.MSVC

    def test_intel_on_windows_uses_msvc_frontend(self):
        config = ProbeConfig.create("Intel", "x86_64", "windows")
        assert config.frontend == Frontend.MSVC
        assert config.native_flag == "/QxHost"
        assert config.host_is_unix is False

    def test_arch_is_normalized(self):
        config = ProbeConfig.create("GNU", "  AArch64 ", "linux")
        assert config.arch == "aarch64"
        assert config.arch_class == ArchClass.ARM

    def test_empty_arch(self):
        with pytest.raises(ProbeConfigError, match="must not be empty"):
            ProbeConfig.create("GNU", " ", "linux")

    def test_frozen(self):
        config = ProbeConfig.create("GNU", "x86_64", "linux")
        with pytest.raises(AttributeError):
            config.arch = "aarch64"

    def test_allows_execution(self):
        assert ProbeConfig.create("GNU", "x86_64", "linux").allows_execution is False
        assert (
            ProbeConfig.create("GNU", "x86_64", "linux", native_instructions=True).allows_execution
            is True
        )
        assert (
            ProbeConfig.create(
                "GNU", "x86_64", "linux", native_instructions=True, cross_compiling=True
            ).allows_execution
            is False
        )

    def test_global_flags(self):
        plain = ProbeConfig.create("GNU", "x86_64", "linux", base_flags=("-O2",))
        native = ProbeConfig.create(
            "GNU", "x86_64", "linux", native_instructions=True, base_flags=("-O2",)
        )
        assert plain.global_flags() == ("-O2",)
        assert native.global_flags() == ("-O2", "-march=native")

    def test_describe(self):
        summary = ProbeConfig.create("Clang", "ppc64le", "linux", compiler="clang").describe()
        assert summary["family"] == "clang"
        assert summary["arch_class"] == "power"
        assert summary["native_flag"] == "-mcpu=native"
        assert summary["base_flags"] == []
