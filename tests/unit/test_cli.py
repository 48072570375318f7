"""Tests for CLI module."""

import json
import sys
from collections.abc import Iterator
from unittest.mock import patch

import pytest

from scopecheck import runner
from scopecheck.assertions import crash
from scopecheck.cli import main, parse_config, run
from scopecheck.models.config import RunConfig
from scopecheck.tree import scope, tests, unit_test

SUITE = tests(
    scope("a", unit_test(lambda: None)),
    scope("b", unit_test(lambda: crash("x"))),
)


def test_parse_config_empty() -> None:
    """An empty string gives the defaults."""
    assert parse_config("  ") == RunConfig()


def test_parse_config_json() -> None:
    """JSON fields override defaults."""
    assert parse_config('{"trials": 7}') == RunConfig(trials=7)


class TestRun:
    """Tests for run function."""

    @pytest.fixture(autouse=True)
    def _patch_loader(self) -> Iterator[None]:
        """Resolve every suite reference to SUITE."""
        with patch("scopecheck.cli.load_suite", return_value=SUITE) as mock_load:
            self.mock_load = mock_load
            yield

    def test_returns_one_when_a_check_fails(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Returns 1 and streams every leaf when a check fails."""
        exit_code = run("pkg.mod:suite")

        assert exit_code == 1
        self.mock_load.assert_called_once_with("pkg.mod:suite")
        out = capsys.readouterr().out
        assert "━━━ run ━━━" in out
        assert "✓ a passed 1 test." in out
        assert "✗ b failed after 1 test." in out
        assert out.rstrip().endswith("✗ 1 failed, 1 succeeded.")

    def test_returns_zero_for_passing_prefix(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Returns 0 when only passing checks are selected."""
        exit_code = run("pkg.mod:suite", prefix="a")

        assert exit_code == 0
        out = capsys.readouterr().out
        assert '━━━ run_only "a" ━━━' in out
        assert " b " not in out

    def test_rerun_only_with_seed(self, capsys: pytest.CaptureFixture[str]) -> None:
        """A seed and prefix select rerun_only and replay the seed."""
        exit_code = run("pkg.mod:suite", prefix="b", seed="21:23")

        assert exit_code == 1
        out = capsys.readouterr().out
        assert '━━━ rerun_only "b" ━━━' in out
        assert "seed: 21:23" in out
        assert 'Seed.parse("21:23")' in out

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        """--json prints a single JSON document."""
        exit_code = run("pkg.mod:suite", seed="1:1", json_output=True)

        assert exit_code == 1
        output = json.loads(capsys.readouterr().out)
        assert output["label"] == "rerun"
        assert output["total"] == 2
        assert output["passed"] == 1
        assert output["failed"] == 1
        assert [r["name"] for r in output["results"]] == ["a", "b"]

    def test_config_is_applied(self, capsys: pytest.CaptureFixture[str]) -> None:
        """The JSON config reaches the run."""
        with patch("scopecheck.runner.run_suite", wraps=runner.run_suite) as spy:
            run("pkg.mod:suite", config_json='{"give_up_policy": "fail"}')

        assert spy.call_args.kwargs["config"] == RunConfig(give_up_policy="fail")



class TestMain:
    """Tests for the argument parser wiring."""

    def test_exits_with_run_status(self) -> None:
        """main exits with the code returned by run."""
        argv = ["scopecheck", "demo", "--only", "addition", "--seed", "3:5"]
        with (
            patch.object(sys, "argv", argv),
            patch("scopecheck.cli.run", return_value=0) as mock_run,
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 0
        mock_run.assert_called_once_with(
            suite_ref="demo",
            prefix="addition",
            seed="3:5",
            config_json="",
            json_output=False,
        )

    def test_reports_bad_seed_as_usage_error(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """An unparsable seed is a usage error with exit status 2."""
        with (
            patch.object(sys, "argv", ["scopecheck", "demo", "--seed", "nope"]),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 2
        assert "Invalid seed" in capsys.readouterr().err
