"""RISC-V feature definitions."""

from ..config.probe_config import ArchClass
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

RVV = Feature(
    name="rvv",
    description="RISC-V vector extension",
    program=TestProgram(
        headers=("riscv_vector.h",),
        body="""
int main() {
    return 0;
}
""",
    ),
    arch_classes=frozenset({ArchClass.RISCV}),
    rules={
        # rv64gcv names a 64-bit base ISA
        **for_families(
            GNU_LIKE, by_arch(((r"^riscv64", unless_native("-march=rv64gcv")),), inapplicable())
        ),
        (ANY, ANY): no_flag(),
    },
    define="HAVE_RVV_INTRIN",
    flag_var="RISCVFLAG",
)

FEATURES = (RVV,)
