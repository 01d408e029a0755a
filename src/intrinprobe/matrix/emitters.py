"""Capability matrix output formats.

Formats:
    - json: config summary plus {name: {supported, flag}}
    - header: C header defining one symbol per supported feature
    - cmake: script setting HAVE_* and *FLAG variables
    - table: aligned text for terminals
"""

import json
from pathlib import Path
from typing import Callable, Dict

from ..catalog.registry import get_feature
from .capability_matrix import CapabilityMatrix


class EmitterError(Exception):
    """Raised for an unknown output format."""

    pass


def to_json(matrix: CapabilityMatrix) -> str:
    document = {
        "config": matrix.config_summary,
        "features": matrix.as_dict(),
    }
    return json.dumps(document, indent=2) + "\n"


def to_c_header(matrix: CapabilityMatrix) -> str:
    lines = [
        "/* Generated by intrinprobe. Do not edit. */",
        "#ifndef INTRINPROBE_FEATURES_H",
        "#define INTRINPROBE_FEATURES_H",
        "",
    ]
    for name in matrix:
        feature = get_feature(name)
        if feature is None or not feature.define:
            continue
        if matrix.is_supported(name):
            lines.append(f"#define {feature.define} 1")
        else:
            lines.append(f"/* #undef {feature.define} */")
    lines.extend(["", "#endif /* INTRINPROBE_FEATURES_H */", ""])
    return "\n".join(lines)


def cmake_quote(value: str) -> str:
    """Escape a value for use inside a CMake quoted argument."""
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")


def to_cmake(matrix: CapabilityMatrix) -> str:
    lines = ["# Generated by intrinprobe. Do not edit."]
    flag_vars: Dict[str, str] = {}
    for name in matrix:
        feature = get_feature(name)
        if feature is None:
            continue
        result = matrix[name]
        if feature.define:
            lines.append(f"set({feature.define} {'ON' if result.supported else 'OFF'})")
        # Shared flag variables take the last supported feature in catalog
        # order, which is the most specific one (altivec < altivec_novsx < vmx)
        if feature.flag_var and result.supported:
            flag_vars[feature.flag_var] = result.flag_used
    for var, flag in flag_vars.items():
        lines.append(f'set({var} "{cmake_quote(flag)}")')
    lines.append("")
    return "\n".join(lines)


def to_table(matrix: CapabilityMatrix) -> str:
    if not len(matrix):
        return "(no features)\n"
    width = max(len(name) for name in matrix)
    lines = []
    for name in matrix:
        result = matrix[name]
        status = "yes" if result.supported else "no"
        line = f"{name:<{width}}  {status:<3}"
        if result.flag_used:
            line += f"  {result.flag_used}"
        lines.append(line.rstrip())
    return "\n".join(lines) + "\n"


EMITTERS: Dict[str, Callable[[CapabilityMatrix], str]] = {
    "json": to_json,
    "header": to_c_header,
    "cmake": to_cmake,
    "table": to_table,
}


def render(matrix: CapabilityMatrix, fmt: str) -> str:
    """Render a matrix in a named format.

    Raises:
        EmitterError: If the format is unknown
    """
    try:
        emitter = EMITTERS[fmt]
    except KeyError:
        raise EmitterError(
            f"Unknown output format '{fmt}'. Available: {', '.join(sorted(EMITTERS))}"
        ) from None
    return emitter(matrix)


def write_output(matrix: CapabilityMatrix, fmt: str, path: Path) -> Path:
    """Render a matrix and write it to a file, creating parent directories."""
    content = render(matrix, fmt)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    return path
