"""x86 / x86-64 feature definitions."""

from ..config.probe_config import ArchClass, CompilerFamily
from .diagnostics import NOT_SUPPORTED
from .feature import (
    ANY,
    GNU_LIKE,
    Feature,
    TestProgram,
    TuningRule,
    by_arch,
    by_frontend,
    by_host,
    explicit,
    for_families,
    no_flag,
    unless_native,
)

X86 = frozenset({ArchClass.X86})

# GCC schedules AVX-512 code poorly without a reasonable -mtune target
AVX512_TUNING = TuningRule(flags=("-mtune=cascadelake", "-mtune=skylake-avx512"))

AVX512_GNU = "-mavx512f -mavx512dq -mavx512bw -mavx512vl"
AVX512VNNI_GNU = "-mavx512f -mavx512dq -mavx512bw -mavx512vl -mavx512vnni"


def _intel(unix_flag: str, windows_flag: str):
    return {(CompilerFamily.INTEL, ANY): by_host(explicit(unix_flag), explicit(windows_flag))}


SSE2 = Feature(
    name="sse2",
    description="SSE2 128-bit integer SIMD",
    program=TestProgram(
        headers=("immintrin.h",),
        body="""
__m128i f(__m128i x, __m128i y) { return _mm_sad_epu8(x, y); }
int main(void) { return 0; }
""",
    ),
    arch_classes=X86,
    rules={
        **_intel("-msse2", "/arch:SSE2"),
        # SSE2 is baseline on x64; /arch:SSE2 only exists for 32-bit targets
        (CompilerFamily.MSVC, ANY): by_arch(
            ((r"^(x86_64|amd64|x64)$", no_flag()),), explicit("/arch:SSE2")
        ),
        **for_families(GNU_LIKE, unless_native("-msse2")),
        (ANY, ANY): no_flag(),
    },
    requires_execution=True,
    define="HAVE_SSE2_INTRIN",
    flag_var="SSE2FLAG",
)

SSSE3 = Feature(
    name="ssse3",
    description="Supplemental SSE3 horizontal operations",
    program=TestProgram(
        headers=("immintrin.h",),
        body="""
__m128i f(__m128i u) {
  __m128i v = _mm_set1_epi32(1);
  return _mm_hadd_epi32(u, v);
}
int main(void) { return 0; }
""",
    ),
    arch_classes=X86,
    rules={
        **_intel("-mssse3", "/arch:SSSE3"),
        **for_families(GNU_LIKE, unless_native("-mssse3")),
        (ANY, ANY): no_flag(),
    },
    requires_execution=True,
    define="HAVE_SSSE3_INTRIN",
    flag_var="SSSE3FLAG",
)

SSE42 = Feature(
    name="sse42",
    description="SSE4.2 CRC32 instructions",
    program=TestProgram(
        headers=("nmmintrin.h",),
        body="""
unsigned int f(unsigned int a, unsigned int b) { return _mm_crc32_u32(a, b); }
int main(void) { return 0; }
""",
    ),
    arch_classes=X86,
    rules={
        **_intel("-msse4.2", "/arch:SSE4.2"),
        **for_families(GNU_LIKE, unless_native("-msse4.2")),
        (ANY, ANY): no_flag(),
    },
    requires_execution=True,
    define="HAVE_SSE42_INTRIN",
    flag_var="SSE42FLAG",
)

PCLMULQDQ = Feature(
    name="pclmulqdq",
    description="Carry-less multiplication",
    program=TestProgram(
        headers=("immintrin.h", "wmmintrin.h"),
        body="""
__m128i f(__m128i a, __m128i b) { return _mm_clmulepi64_si128(a, b, 0x10); }
int main(void) { return 0; }
""",
    ),
    arch_classes=X86,
    rules={
        **for_families(GNU_LIKE, unless_native("-mpclmul")),
        (ANY, ANY): no_flag(),
    },
    requires_execution=True,
    define="HAVE_PCLMULQDQ_INTRIN",
    flag_var="PCLMULFLAG",
)

AVX2 = Feature(
    name="avx2",
    description="AVX2 256-bit integer SIMD",
    program=TestProgram(
        headers=("immintrin.h",),
        body="""
__m256i f(__m256i x) {
    const __m256i y = _mm256_set1_epi16(1);
    return _mm256_subs_epu16(x, y);
}
int main(void) { return 0; }
""",
    ),
    arch_classes=X86,
    rules={
        **_intel("-mavx2", "/arch:AVX2"),
        **for_families(GNU_LIKE, unless_native("-mavx2")),
        (CompilerFamily.MSVC, ANY): explicit("/arch:AVX2"),
        (ANY, ANY): no_flag(),
    },
    requires_execution=True,
    define="HAVE_AVX2_INTRIN",
    flag_var="AVX2FLAG",
)

_AVX512_RULES = {
    **_intel(AVX512_GNU, "/arch:AVX512"),
    **for_families(GNU_LIKE, unless_native(AVX512_GNU)),
    (CompilerFamily.MSVC, ANY): explicit("/arch:AVX512"),
    (ANY, ANY): no_flag(),
}

AVX512 = Feature(
    name="avx512",
    description="AVX-512 F/DQ/BW/VL",
    program=TestProgram(
        headers=("immintrin.h",),
        body="""
__m512i f(__m512i y) {
  __m512i x = _mm512_set1_epi8(2);
  return _mm512_sub_epi8(x, y);
}
int main(void) { return 0; }
""",
    ),
    arch_classes=X86,
    rules=_AVX512_RULES,
    requires_execution=True,
    tuning=AVX512_TUNING,
    define="HAVE_AVX512_INTRIN",
    flag_var="AVX512FLAG",
)

# GCC and Clang were both late to implement the mask intrinsics
AVX512_MASK = Feature(
    name="avx512_mask",
    description="AVX-512 mask register intrinsics",
    program=TestProgram(
        headers=("immintrin.h",),
        body="""
__mmask16 f(__mmask16 x) { return _knot_mask16(x); }
int main(void) { return 0; }
""",
    ),
    arch_classes=X86,
    rules=_AVX512_RULES,
    requires_execution=True,
    tuning=AVX512_TUNING,
    requires=("avx512",),
    define="HAVE_MASK_INTRIN",
    flag_var="AVX512FLAG",
)

AVX512VNNI = Feature(
    name="avx512vnni",
    description="AVX-512 vector neural network instructions",
    program=TestProgram(
        headers=("immintrin.h",),
        body="""
__m512i f(__m512i x, __m512i y) {
    __m512i z = _mm512_setzero_epi32();
    return _mm512_dpbusd_epi32(z, x, y);
}
int main(void) { return 0; }
""",
    ),
    arch_classes=X86,
    rules={
        **_intel(
            "-mavx512f -mavx512bw -mavx512dq -mavx512vl -mavx512vnni", "/arch:AVX512"
        ),
        **for_families(GNU_LIKE, unless_native(AVX512VNNI_GNU)),
        (CompilerFamily.MSVC, ANY): explicit("/arch:AVX512"),
        (ANY, ANY): no_flag(),
    },
    requires_execution=True,
    tuning=AVX512_TUNING,
    requires=("avx512",),
    define="HAVE_AVX512VNNI_INTRIN",
    flag_var="AVX512VNNIFLAG",
)

VPCLMULQDQ = Feature(
    name="vpclmulqdq",
    description="512-bit carry-less multiplication",
    program=TestProgram(
        headers=("immintrin.h", "wmmintrin.h"),
        body="""
__m512i f(__m512i a) {
    __m512i b = _mm512_setzero_si512();
    return _mm512_clmulepi64_epi128(a, b, 0x10);
}
int main(void) { return 0; }
""",
    ),
    arch_classes=X86,
    rules={
        **for_families(GNU_LIKE, unless_native("-mvpclmulqdq -mavx512f")),
        (ANY, ANY): no_flag(),
    },
    requires_execution=True,
    requires=("pclmulqdq", "avx512"),
    define="HAVE_VPCLMULQDQ_INTRIN",
    flag_var="VPCLMULFLAG",
)

XSAVE = Feature(
    name="xsave",
    description="XGETBV for OS-enabled register state",
    program=TestProgram(
        body="""
#ifdef _MSC_VER
#  include <intrin.h>
#else
#  include <x86gprintrin.h>
#endif
unsigned int f(unsigned int a) { return (int) _xgetbv(a); }
int main(void) { return 0; }
""",
    ),
    arch_classes=X86,
    rules={
        (CompilerFamily.MSVC, ANY): no_flag(),
        (ANY, ANY): by_frontend(gnu=unless_native("-mxsave"), msvc=no_flag()),
    },
    rejection=NOT_SUPPORTED,
    define="HAVE_XSAVE_INTRIN",
    flag_var="XSAVEFLAG",
)

FEATURES = (
    SSE2,
    SSSE3,
    SSE42,
    PCLMULQDQ,
    AVX2,
    AVX512,
    AVX512_MASK,
    AVX512VNNI,
    VPCLMULQDQ,
    XSAVE,
)
