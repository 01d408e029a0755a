"""
Setup file.
"""

from setuptools import setup

URL = "https://github.com/zackees/intrinprobe"
KEYWORDS = "simd intrinsics compiler flags toolchain cmake build configuration cpu features"


if __name__ == "__main__":
    setup(
        maintainer="Zachary Vorhies",
        keywords=KEYWORDS,
        url=URL,
        include_package_data=True)
