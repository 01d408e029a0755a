"""POWER / PowerPC feature definitions."""

from ..config.probe_config import ArchClass
from .feature import (
    ANY,
    GNU_LIKE,
    Feature,
    TestProgram,
    explicit,
    for_families,
    no_flag,
    unless_native,
)

POWER = frozenset({ArchClass.POWER})

ALTIVEC_BODY = """
int main(void)
{
    vector int a = vec_splats(0);
    vector int b = vec_splats(0);
    a = vec_add(a, b);
    return 0;
}
"""


def _hwcap_program(aux_key: str, bit: str) -> TestProgram:
    """Program reading a hardware capability bit from the auxiliary vector."""
    return TestProgram(
        headers=("sys/auxv.h",),
        body=f"""
#ifdef __FreeBSD__
#include <machine/cpu.h>
#endif
int main() {{
#ifdef __FreeBSD__
    unsigned long hwcap;
    elf_aux_info({aux_key}, &hwcap, sizeof(hwcap));
    return (hwcap & {bit});
#else
    return (getauxval({aux_key}) & {bit});
#endif
}}
""",
    )


ALTIVEC = Feature(
    name="altivec",
    description="AltiVec vector unit",
    program=TestProgram(headers=("altivec.h",), body=ALTIVEC_BODY),
    arch_classes=POWER,
    # Only exists as an explicit flag, native mode included
    rules={(ANY, ANY): explicit("-maltivec")},
    define="HAVE_ALTIVEC",
    flag_var="PPCFLAGS",
)

ALTIVEC_NOVSX = Feature(
    name="altivec_novsx",
    description="AltiVec with VSX disabled",
    program=TestProgram(headers=("altivec.h",), body=ALTIVEC_BODY),
    arch_classes=POWER,
    rules={(ANY, ANY): explicit("-maltivec -mno-vsx")},
    requires=("altivec",),
    define="HAVE_NOVSX",
    flag_var="PPCFLAGS",
)

VMX = Feature(
    name="vmx",
    description="AltiVec runtime capability query",
    program=_hwcap_program("AT_HWCAP", "PPC_FEATURE_HAS_ALTIVEC"),
    arch_classes=POWER,
    rules={(ANY, ANY): explicit("-maltivec -mno-vsx", "-maltivec")},
    requires=("altivec",),
    define="HAVE_VMX",
    flag_var="PPCFLAGS",
)

POWER8 = Feature(
    name="power8",
    description="POWER8 (ISA 2.07) optimizations",
    program=_hwcap_program("AT_HWCAP2", "PPC_FEATURE2_ARCH_2_07"),
    arch_classes=POWER,
    rules={
        **for_families(GNU_LIKE, unless_native("-mcpu=power8")),
        (ANY, ANY): no_flag(),
    },
    define="HAVE_POWER8_INTRIN",
    flag_var="POWER8FLAG",
)

POWER9 = Feature(
    name="power9",
    description="POWER9 (ISA 3.00) optimizations",
    program=_hwcap_program("AT_HWCAP2", "PPC_FEATURE2_ARCH_3_00"),
    arch_classes=POWER,
    rules={
        **for_families(GNU_LIKE, unless_native("-mcpu=power9")),
        (ANY, ANY): no_flag(),
    },
    requires=("power8",),
    define="HAVE_POWER9_INTRIN",
    flag_var="POWER9FLAG",
)

FEATURES = (ALTIVEC, ALTIVEC_NOVSX, VMX, POWER8, POWER9)
