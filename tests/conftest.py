"""Shared fixtures: a scripted stand-in for ProbeCompiler."""

from typing import Callable, List, Optional, Sequence

import pytest

from intrinprobe.config.probe_config import ProbeConfig
from intrinprobe.probe.compiler import CompileOutcome


class FakeCompiler:
    """Records every compile and answers from simple rules.

    Args:
        accept: Decides from the flag list whether a compile succeeds
        output: Compiler output for successful compiles (str or callable)
        run_returncode: Exit status reported when a probe is executed
        accepted_flags: Flags accepted by accepts_flag()
    """

    def __init__(
        self,
        accept: Optional[Callable[[List[str]], bool]] = None,
        output: object = "",
        run_returncode: int = 0,
        accepted_flags: Sequence[str] = (),
    ):
        self.accept = accept or (lambda flags: True)
        self.output = output
        self.run_returncode = run_returncode
        self.accepted_flags = set(accepted_flags)
        self.calls = []
        self.flag_checks = []

    def compile(self, source_text: str, flags: Sequence[str], run: bool = False) -> CompileOutcome:
        flags = list(flags)
        self.calls.append({"source": source_text, "flags": flags, "run": run})
        if not self.accept(flags):
            return CompileOutcome(success=False, returncode=1, output="error: unrecognized option")
        output = self.output(flags) if callable(self.output) else self.output
        outcome = CompileOutcome(success=True, returncode=0, output=output)
        if run:
            outcome.ran = True
            outcome.run_returncode = self.run_returncode
        return outcome

    def accepts_flag(self, flag: str) -> bool:
        self.flag_checks.append(flag)
        return flag in self.accepted_flags

    @property
    def runs(self) -> int:
        return sum(1 for call in self.calls if call["run"])


@pytest.fixture
def fake_compiler():
    """Factory for FakeCompiler instances."""
    return FakeCompiler


@pytest.fixture
def make_config():
    """Factory for ProbeConfig with x86_64 GCC defaults."""

    def factory(**kwargs) -> ProbeConfig:
        params = {"compiler_id": "GNU", "arch": "x86_64", "host_os": "linux"}
        params.update(kwargs)
        return ProbeConfig.create(**params)

    return factory
