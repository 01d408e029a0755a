"""CLI utility functions for intrinprobe.

This module provides common utilities used across CLI commands including:
- Error handling and formatting
- Logging setup
- Progress reporting over feature probes
"""

import logging
import sys
from typing import Optional

from tqdm import tqdm

from .catalog.feature import Feature
from .probe.executor import ProbeResult


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print formatted error message to stderr.

        Args:
            title: Error title (e.g., "Toolchain error")
            message: Error message details
        """
        print(file=sys.stderr)
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}", file=sys.stderr)
        print(file=sys.stderr)
        print(message, file=sys.stderr)
        print(file=sys.stderr)

    @staticmethod
    def print_success(message: str) -> None:
        """Print formatted success message to stderr."""
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}", file=sys.stderr)

    @staticmethod
    def print_warning(message: str) -> None:
        """Print formatted warning message to stderr."""
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}", file=sys.stderr)

    @staticmethod
    def handle_toolchain_error(error: Exception) -> None:
        """Handle a ToolchainError: no probe can be trusted without a compiler."""
        ErrorFormatter.print_error("Toolchain error", str(error))
        print("Check that the compiler is installed and on PATH, or pass --compiler.", file=sys.stderr)
        sys.exit(1)

    @staticmethod
    def handle_config_error(error: Exception) -> None:
        """Handle a ProbeConfigError with standard formatting."""
        ErrorFormatter.print_error("Configuration error", str(error))
        sys.exit(1)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Handle KeyboardInterrupt with standard formatting."""
        ErrorFormatter.print_warning("Probing interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        message = f"{type(error).__name__}: {error}"
        ErrorFormatter.print_error("Unexpected error", message)

        if verbose:
            import traceback

            print("Traceback:", file=sys.stderr)
            print(traceback.format_exc(), file=sys.stderr)

        sys.exit(1)


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr; debug detail only when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


class ProbeProgress:
    """tqdm progress bar advanced once per recorded feature."""

    def __init__(self, total: int, enabled: bool = True):
        self.bar: Optional[tqdm] = (
            tqdm(total=total, unit="feature", desc="Probing", file=sys.stderr, leave=False)
            if enabled
            else None
        )

    def __call__(self, feature: Feature, result: ProbeResult) -> None:
        if self.bar is None:
            return
        self.bar.set_postfix_str(f"{feature.name}={'yes' if result.supported else 'no'}")
        self.bar.update(1)

    def close(self) -> None:
        if self.bar is not None:
            self.bar.close()
