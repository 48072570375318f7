"""Entry points that run a suite and exit the process with its status.

``run``, ``run_only``, ``rerun`` and ``rerun_only`` differ only in where the
seed comes from and whether the suite is filtered. Each prints the report and
raises ``SystemExit`` with a non-zero code when the run failed, so a suite
script can be used directly as a CI step. ``run_suite`` does the same work
and hands back the ``Summary`` instead.
"""

import logging
from typing import NoReturn

from scopecheck.executor import ResultCallback, execute
from scopecheck.models.config import RunConfig
from scopecheck.seed import Seed, SeedLike, coerce_seed
from scopecheck.summary import Summary, render, summarize
from scopecheck.tree import Test, filter_tree

log = logging.getLogger(__name__)


def entry_label(prefix: str = "", seed: SeedLike | None = None) -> str:
    """Heading naming the entry point a run corresponds to."""
    name = "run" if seed is None else "rerun"
    return f'{name}_only "{prefix}"' if prefix else name


def run_suite(
    suite: Test,
    *,
    prefix: str = "",
    seed: SeedLike | None = None,
    config: RunConfig | None = None,
    on_result: ResultCallback | None = None,
    label: str | None = None,
) -> Summary:
    """Filter, execute and summarize a suite.

    Args:
        suite: Tree of checks to run
        prefix: Only run leaves under this dotted scope name
        seed: Seed to replay; a fresh one is drawn when omitted
        config: Trial limits and policies
        on_result: Called with each leaf result as it is produced
        label: Heading for the report (derived from the arguments by default)

    Returns:
        Summary of the run

    """
    config = config or RunConfig()
    run_seed = Seed.random() if seed is None else coerce_seed(seed)
    label = label or entry_label(prefix, seed)

    if prefix:
        log.info("Filtering suite by prefix %r", prefix)
        suite = filter_tree(suite, prefix)

    results = execute(suite, run_seed, config, on_result, prefix=prefix)

    summary = summarize(
        results,
        seed=run_seed,
        label=label,
        give_up_policy=config.give_up_policy,
    )
    log.info(
        "Run %s: %d passed, %d failed, %d gave up, %d skipped",
        summary.status,
        summary.passed,
        summary.failed,
        summary.gave_up,
        summary.skipped,
    )
    return summary


def _report_and_exit(summary: Summary) -> NoReturn:
    print("\n".join(render(summary)))
    raise SystemExit(summary.exit_code)


def run(suite: Test, *, config: RunConfig | None = None) -> NoReturn:
    """Run every check with a fresh seed."""
    _report_and_exit(run_suite(suite, config=config))


def run_only(suite: Test, prefix: str, *, config: RunConfig | None = None) -> NoReturn:
    """Run the checks under ``prefix`` with a fresh seed."""
    _report_and_exit(run_suite(suite, prefix=prefix, config=config))


def rerun(suite: Test, seed: SeedLike, *, config: RunConfig | None = None) -> NoReturn:
    """Run every check, replaying ``seed``."""
    _report_and_exit(run_suite(suite, seed=seed, config=config))


def rerun_only(
    suite: Test, prefix: str, seed: SeedLike, *, config: RunConfig | None = None
) -> NoReturn:
    """Run the checks under ``prefix``, replaying ``seed``."""
    _report_and_exit(run_suite(suite, prefix=prefix, seed=seed, config=config))
