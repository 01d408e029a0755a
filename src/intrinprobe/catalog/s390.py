"""IBM Z (s390x) feature definitions."""

from typing import List

from ..config.probe_config import ArchClass, CompilerFamily, ProbeConfig
from .diagnostics import NOT_SUPPORTED
from .feature import ANY, Feature, TestProgram, no_flag

S390 = frozenset({ArchClass.S390})


def _vgfma_flags(config: ProbeConfig) -> List[str]:
    if config.native_instructions:
        return [""]
    flag = "-march=z13"
    if config.family == CompilerFamily.GNU:
        flag += " -mzarch"
    elif config.family == CompilerFamily.CLANG:
        flag += " -fzvector"
    return [flag]


S390_VX = Feature(
    name="s390_vx",
    description="z/Architecture vector facility",
    program=TestProgram(
        headers=("sys/auxv.h",),
        body="""
#ifndef HWCAP_S390_VXRS
#define HWCAP_S390_VXRS HWCAP_S390_VX
#endif
int main() {
    return (getauxval(AT_HWCAP) & HWCAP_S390_VXRS);
}
""",
    ),
    arch_classes=S390,
    rules={(ANY, ANY): no_flag()},
    define="HAVE_S390_INTRIN",
    flag_var="S390FLAG",
)

VGFMA = Feature(
    name="vgfma",
    description="Vector Galois field multiply sum and accumulate",
    program=TestProgram(
        headers=("vecintrin.h",),
        body="""
int main(void) {
    unsigned long long a __attribute__((vector_size(16))) = { 0 };
    unsigned long long b __attribute__((vector_size(16))) = { 0 };
    unsigned char c __attribute__((vector_size(16))) = { 0 };
    c = vec_gfmsum_accum_128(a, b, c);
    return c[0];
}
""",
    ),
    arch_classes=S390,
    rules={(ANY, ANY): _vgfma_flags},
    rejection=NOT_SUPPORTED,
    define="HAVE_VGFMA_INTRIN",
    flag_var="VGFMAFLAG",
)

FEATURES = (S390_VX, VGFMA)
