"""Probe Compiler.

This module handles compiling (and optionally running) the minimal test
programs used to probe instruction-set features.

Design:
    - Wraps subprocess.run for compiler and probe-binary invocations
    - Every call receives its own flag list; nothing is stored between calls
    - Each compile happens in a private temporary directory
    - A missing, unlaunchable or hung compiler is a ToolchainError, never
      a negative probe result
"""

import logging
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from ..config.probe_config import Frontend
from ..catalog.diagnostics import UNKNOWN_OPTION, RejectionPredicate


class ToolchainError(Exception):
    """Raised when the compiler itself cannot be run."""

    pass


@dataclass
class CompileOutcome:
    """Result of compiling one probe program."""

    success: bool
    returncode: int
    output: str
    ran: bool = False
    run_returncode: Optional[int] = None
    run_output: str = ""

    @property
    def run_success(self) -> bool:
        return self.ran and self.run_returncode == 0


class ProbeCompiler:
    """Compiles probe programs with a specific compiler executable.

    This class handles:
    - Writing the probe source to a temporary directory
    - Building the gnu-style or msvc-style command line
    - Capturing combined stdout/stderr for diagnostic matching
    - Running the produced executable when requested
    """

    def __init__(
        self,
        compiler: str,
        frontend: Frontend = Frontend.GNU,
        timeout: Optional[float] = 120,
        work_dir: Optional[Path] = None,
    ):
        """Initialize probe compiler.

        Args:
            compiler: Compiler executable name or path
            frontend: Driver command-line style
            timeout: Seconds before a compiler or probe invocation is abandoned
            work_dir: Parent directory for temporary probe directories

        Raises:
            ToolchainError: If the compiler executable cannot be found
        """
        resolved = shutil.which(compiler)
        if resolved is None:
            raise ToolchainError(
                f"Compiler not found: {compiler}. Ensure the toolchain is installed and on PATH."
            )
        self.compiler = compiler
        self.compiler_path = Path(resolved)
        self.frontend = frontend
        self.timeout = timeout
        self.work_dir = work_dir

    def build_command(self, source: Path, executable: Path, flags: Sequence[str]) -> List[str]:
        """Build the compile-and-link command for one probe.

        Args:
            source: Probe source file
            executable: Output executable path
            flags: Flags for this probe only

        Returns:
            Command as an argument list
        """
        cmd = [str(self.compiler_path)]
        if self.frontend == Frontend.MSVC:
            cmd.append("/nologo")
            cmd.extend(flags)
            cmd.append(str(source))
            cmd.append(f"/Fe:{executable}")
            cmd.append(f"/Fo:{executable.parent}\\")
        else:
            cmd.extend(flags)
            cmd.append(str(source))
            cmd.extend(["-o", str(executable)])
        return cmd

    def compile(self, source_text: str, flags: Sequence[str], run: bool = False) -> CompileOutcome:
        """Compile a probe program and optionally run it.

        Args:
            source_text: Complete C source of the probe
            flags: Flags for this probe only
            run: Execute the produced binary after a successful compile

        Returns:
            CompileOutcome with captured output

        Raises:
            ToolchainError: If the compiler cannot be launched or times out
        """
        with tempfile.TemporaryDirectory(prefix="intrinprobe-", dir=self.work_dir) as tmp:
            tmp_dir = Path(tmp)
            source = tmp_dir / "probe.c"
            source.write_text(source_text, encoding="utf-8")
            executable = tmp_dir / ("probe.exe" if self.frontend == Frontend.MSVC else "probe")

            cmd = self.build_command(source, executable, list(flags))
            logging.debug(f"Probe compile: {' '.join(cmd)}")

            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    cwd=tmp_dir,
                )
            except (FileNotFoundError, PermissionError) as e:
                raise ToolchainError(f"Failed to launch compiler {self.compiler}: {e}") from e
            except subprocess.TimeoutExpired as e:
                raise ToolchainError(
                    f"Compiler {self.compiler} timed out after {self.timeout}s: {' '.join(cmd)}"
                ) from e

            output = (result.stdout or "") + (result.stderr or "")
            outcome = CompileOutcome(
                success=result.returncode == 0,
                returncode=result.returncode,
                output=output,
            )

            if run and outcome.success:
                self._run_probe(executable, outcome)

            return outcome

    def _run_probe(self, executable: Path, outcome: CompileOutcome) -> None:
        """Run a compiled probe binary and record its exit status.

        Failing to launch the binary (e.g. wrong architecture) counts as a
        failed run, not a toolchain error.
        """
        outcome.ran = True
        try:
            result = subprocess.run(
                [str(executable)],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            outcome.run_returncode = -1
            outcome.run_output = f"probe execution failed: {e}"
            return

        outcome.run_returncode = result.returncode
        outcome.run_output = (result.stdout or "") + (result.stderr or "")

    def accepts_flag(
        self, flag: str, rejection: RejectionPredicate = UNKNOWN_OPTION
    ) -> bool:
        """Check whether the compiler accepts a flag on an empty program.

        Args:
            flag: Flag string to test (may contain several flags)
            rejection: Output patterns meaning the flag was ignored

        Returns:
            True if the compile succeeded without a rejection pattern
        """
        outcome = self.compile("int main(void) { return 0; }\n", flag.split())
        return outcome.success and not rejection.rejects(outcome.output)
