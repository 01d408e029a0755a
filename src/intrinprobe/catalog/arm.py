"""ARM / AArch64 feature definitions."""

from ..config.probe_config import ArchClass, CompilerFamily
from .diagnostics import NOT_SUPPORTED
from .feature import (
    ANY,
    GNU_LIKE,
    Feature,
    TestProgram,
    by_arch,
    for_families,
    inapplicable,
    no_flag,
    unless_native,
)

ARM = frozenset({ArchClass.ARM})

AARCH64 = r"^(aarch64|arm64)"

NEON_HEADER = """
#if defined(_M_ARM64) || defined(_M_ARM64EC)
#  include <arm64_neon.h>
#else
#  include <arm_neon.h>
#endif
"""

_NEON_RULES = {
    **for_families(
        GNU_LIKE,
        by_arch(((AARCH64, unless_native("-march=armv8-a+simd")),), unless_native("-mfpu=neon")),
    ),
    (ANY, ANY): no_flag(),
}

ACLE = Feature(
    name="acle",
    description="ARM C Language Extensions (CRC32)",
    program=TestProgram(body="int main() { return 0; }"),
    arch_classes=ARM,
    rules={
        # 32-bit ARM msvc lacks the ARMv8 intrinsics such as crc32
        (CompilerFamily.MSVC, ANY): by_arch(((AARCH64, no_flag()),), inapplicable()),
        # Older toolchains only accept the crc extension together with simd
        **for_families(GNU_LIKE, unless_native("-march=armv8-a+crc", "-march=armv8-a+crc+simd")),
        (ANY, ANY): no_flag(),
    },
    rejection=NOT_SUPPORTED,
    define="HAVE_ACLE_FLAG",
    flag_var="ACLEFLAG",
)

NEON = Feature(
    name="neon",
    description="Advanced SIMD (NEON)",
    program=TestProgram(body=NEON_HEADER + "int main() { return 0; }"),
    arch_classes=ARM,
    rules=_NEON_RULES,
    rejection=NOT_SUPPORTED,
    define="NEON_AVAILABLE",
    flag_var="NEONFLAG",
)

NEON_LD4 = Feature(
    name="neon_ld4",
    description="NEON four-register structured loads",
    program=TestProgram(
        body=NEON_HEADER
        + """
int32x4x4_t f(int var[16]) { return vld1q_s32_x4(var); }
int main(void) { return 0; }
"""
    ),
    arch_classes=ARM,
    rules=_NEON_RULES,
    requires=("neon",),
    define="NEON_HAS_LD4",
    flag_var="NEONFLAG",
)

FEATURES = (ACLE, NEON, NEON_LD4)
