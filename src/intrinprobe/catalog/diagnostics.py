"""Diagnostic rejection predicates.

Some toolchains accept a flag syntactically and still reject the target
feature, reporting it only as a warning. A RejectionPredicate names the output
patterns that turn an otherwise successful compile into a negative result.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class RejectionPredicate:
    """Named list of case-insensitive output patterns meaning "rejected"."""

    name: str
    patterns: Tuple[str, ...]

    def match(self, output: str) -> Optional[str]:
        """Return the first pattern found in output, or None."""
        for pattern in self.patterns:
            if re.search(pattern, output, re.IGNORECASE):
                return pattern
        return None

    def rejects(self, output: str) -> bool:
        return self.match(output) is not None


NO_REJECTION = RejectionPredicate("none", ())

NOT_SUPPORTED = RejectionPredicate("not-supported", ("not supported",))

# Output of compilers that ignore an unknown option instead of failing
UNKNOWN_OPTION = RejectionPredicate(
    "unknown-option",
    (
        r"unrecognized .*option",
        r"unknown .*option",
        r"ignoring unknown option",
        r"unknown switch",
        r"optimization flag .* not supported",
        r"argument unused during compilation",
        r"ignoring option",
        r"not supported",
        r"D9002",
    ),
)
