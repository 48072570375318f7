"""Process-level tests of the exit status contract."""

import json
import re
import subprocess
from collections.abc import Callable

type RunCli = Callable[..., subprocess.CompletedProcess[str]]


def test_failing_suite_exits_nonzero(run_cli: RunCli) -> None:
    """A suite with a failing check exits with status 1."""
    result = run_cli("cli_suite:suite")

    assert result.returncode == 1
    assert "✗ math.sum failed after" in result.stdout
    assert "✗ mathematics failed after 1 test." in result.stdout
    assert "⚐ never gave up after 100 discards, passed 0 tests." in result.stdout


def test_prefix_selects_whole_segments(run_cli: RunCli) -> None:
    """--only math does not pick up 'mathematics'."""
    result = run_cli("cli_suite:suite", "--only", "math.add")

    assert result.returncode == 0
    assert "✓ math.add passed 1 test." in result.stdout
    assert "mathematics" not in result.stdout
    assert result.stdout.rstrip().endswith("✓ 1 succeeded.")


def test_give_up_alone_succeeds(run_cli: RunCli) -> None:
    """A suite whose only problem is a give-up still exits 0."""
    result = run_cli("cli_suite:suite", "--only", "never")

    assert result.returncode == 0
    assert "⚐ 1 gave up, 0 succeeded." in result.stdout


def test_give_up_policy_fail(run_cli: RunCli) -> None:
    """The fail policy turns a give-up into a non-zero exit."""
    result = run_cli(
        "cli_suite:suite", "--only", "never", "--config", '{"give_up_policy": "fail"}'
    )

    assert result.returncode == 1


def test_replay_command_reproduces_failure(run_cli: RunCli) -> None:
    """The seed printed for a failure replays the same counterexample."""
    first = run_cli("cli_suite:suite", "--only", "math")
    match = re.search(
        r'rerun_only\(suite, "math.sum", Seed.parse\("(\d+:\d+)"\)\)', first.stdout
    )
    assert match is not None

    replay = run_cli(
        "cli_suite:suite", "--only", "math.sum", "--seed", match.group(1), "--json"
    )

    assert replay.returncode == 1
    output = json.loads(replay.stdout)
    [entry] = output["results"]
    assert entry["status"] == "failed"
    assert entry["counterexample"] in first.stdout
    assert entry["message"] == "sum too large"


def test_rerun_is_reproducible(run_cli: RunCli) -> None:
    """The same seed gives the same JSON summary."""
    first = run_cli("cli_suite:suite", "--seed", "77", "--json")
    second = run_cli("cli_suite:suite", "--seed", "77", "--json")

    assert json.loads(first.stdout) == json.loads(second.stdout)


def test_demo_suite_entry_point(run_cli: RunCli) -> None:
    """The registered demo suite runs by name."""
    result = run_cli("demo", "--only", "addition")

    assert result.returncode == 0
    assert "✓ addition.ex3 passed 1 test." in result.stdout
    assert "✓ 3 succeeded." in result.stdout


def test_unknown_suite_is_usage_error(run_cli: RunCli) -> None:
    """Unresolvable suites exit with status 2."""
    result = run_cli("no-such-suite")

    assert result.returncode == 2
    assert "Available suites" in result.stderr


def test_unnamed_failure_replays_whole_run(run_cli: RunCli) -> None:
    """An unnamed failure prints a rerun of the whole suite that reproduces it."""
    first = run_cli("cli_suite:unnamed")
    match = re.search(r'> rerun\(suite, Seed.parse\("(\d+:\d+)"\)\)', first.stdout)
    assert match is not None
    assert f"seed: {match.group(1)}" in first.stdout

    replay = run_cli("cli_suite:unnamed", "--seed", match.group(1))

    assert replay.returncode == 1
    assert "✗ (unnamed) failed after 1 test." in replay.stdout
    assert "anonymous" in replay.stdout
