"""Fixtures for running the CLI as a separate process."""

import os
import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

SUITE_MODULE = '''
from hypothesis import strategies as st

from scopecheck.assertions import assume, crash, expect, footnote
from scopecheck.tree import property_test, scope, tests, unit_test


def _small_sum(numbers):
    footnote(f"numbers: {numbers}")
    expect(sum(numbers) < 300, "sum too large")


suite = tests(
    scope("math.add", unit_test(lambda: expect(1 + 1 == 2))),
    scope("math.sum", property_test(st.lists(st.integers(0, 100)), _small_sum)),
    scope("never", property_test(st.integers(min_value=0), lambda n: assume(n < 0))),
    scope("mathematics", unit_test(lambda: crash("should be filtered out"))),
)

unnamed = tests(unit_test(lambda: None), unit_test(lambda: crash("anonymous")))
'''

type RunCli = Callable[..., subprocess.CompletedProcess[str]]


@pytest.fixture
def suite_dir(tmp_path: Path) -> Path:
    """Directory holding an importable suite module."""
    (tmp_path / "cli_suite.py").write_text(SUITE_MODULE)
    return tmp_path


@pytest.fixture
def run_cli(suite_dir: Path) -> RunCli:
    """Run ``python -m scopecheck.cli`` with the suite module importable."""

    def _run(*args: str) -> subprocess.CompletedProcess[str]:
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(
            filter(None, [str(suite_dir), env.get("PYTHONPATH")])
        )
        env["PYTHONIOENCODING"] = "utf-8"
        return subprocess.run(
            [sys.executable, "-m", "scopecheck.cli", *args],
            capture_output=True,
            text=True,
            encoding="utf-8",
            env=env,
            check=False,
        )

    return _run
