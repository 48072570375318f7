"""Execution of scope trees.

Every leaf gets its own seed, derived from the run seed by splitting along
the traversal: a ``Tests`` node splits a seed off for each child but the
last, which inherits what remains, and ``Scoped`` passes its seed through.
Seeds are assigned for the whole tree before the first check runs, so a
leaf's seed depends only on the run seed and the shape of the tree.

Property checks hand generation and shrinking to Hypothesis, seeded from the
leaf seed, so a replayed leaf draws the same values and shrinks them to the
same counterexample.
"""

import logging
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from hypothesis import HealthCheck, Phase, Verbosity, given, reject, settings
from hypothesis import seed as seeded
from hypothesis.errors import Flaky, Unsatisfiable

from scopecheck.assertions import CheckFailure, Discard, SkipCheck, collecting_footnotes
from scopecheck.models.config import RunConfig
from scopecheck.models.result import (
    Failed,
    FailureKind,
    FailureReport,
    GaveUp,
    LeafResult,
    Outcome,
    Passed,
    Replay,
    Skipped,
)
from scopecheck.seed import Seed
from scopecheck.tree import (
    Check,
    Leaf,
    PropertyCheck,
    ScopePath,
    Scoped,
    Test,
    Tests,
    UnitCheck,
    qualified_name,
)

log = logging.getLogger(__name__)

type ResultCallback = Callable[[LeafResult], None]


@dataclass(frozen=True, kw_only=True)
class PlannedLeaf:
    """A leaf paired with the seed it will run under."""

    path: ScopePath
    check: Check
    seed: Seed
    replay: Replay


@dataclass(frozen=True, kw_only=True)
class Evaluation:
    """What happened during one call into a check."""

    status: Literal["passed", "failed", "discarded", "skipped"]
    kind: FailureKind | None = None
    message: str = ""
    footnotes: tuple[str, ...] = ()
    skip: SkipCheck | None = None


def plan(tree: Test, seed: Seed, prefix: str = "") -> Sequence[PlannedLeaf]:
    """Assign a derived seed to every leaf, in execution order.

    A leaf whose name selects it alone is replayed by that name with its own
    seed. Any other leaf, unnamed or sharing its name with leaves beside or
    below it, is replayed by running ``prefix`` again with the run seed.
    """
    walked: list[tuple[ScopePath, Check, Seed]] = []
    _plan(tree, (), seed, walked)

    selected = Counter(
        path[:depth] for path, _, _ in walked for depth in range(1, len(path) + 1)
    )
    planned: list[PlannedLeaf] = []
    for path, check, leaf_seed in walked:
        if path and selected[path] == 1:
            replay = Replay(prefix=qualified_name(path), seed=leaf_seed)
        else:
            replay = Replay(prefix=prefix, seed=seed)
        planned.append(PlannedLeaf(path=path, check=check, seed=leaf_seed, replay=replay))
    return planned


def _plan(
    tree: Test,
    path: ScopePath,
    seed: Seed,
    walked: list[tuple[ScopePath, Check, Seed]],
) -> None:
    match tree:
        case Leaf(check=check):
            walked.append((path, check, seed))
        case Scoped(path=segments, child=child):
            _plan(child, path + segments, seed, walked)
        case Tests(children=children):
            rest = seed
            for child in children[:-1]:
                rest, child_seed = rest.split()
                _plan(child, path, child_seed, walked)
            if children:
                _plan(children[-1], path, rest, walked)


def evaluate(fn: Callable[..., object], *args: Any) -> Evaluation:
    """Call a check body, turning whatever it raises into an ``Evaluation``.

    Only ``KeyboardInterrupt`` gets through.
    """
    with collecting_footnotes() as notes:
        try:
            returned = fn(*args)
        except CheckFailure as e:
            return Evaluation(
                status="failed",
                kind=e.kind,  # type: ignore[arg-type]
                message=e.message,
                footnotes=tuple(notes),
            )
        except Discard:
            return Evaluation(status="discarded")
        except SkipCheck as e:
            return Evaluation(status="skipped", skip=e)
        except (Exception, SystemExit) as e:
            return Evaluation(
                status="failed",
                kind="unexpected-fault",
                message=f"{type(e).__name__}: {e}",
                footnotes=tuple(notes),
            )
    if returned is False:
        return Evaluation(
            status="failed",
            kind="assertion-mismatch",
            message="check returned False",
            footnotes=tuple(notes),
        )
    return Evaluation(status="passed")


def _skipped(skip: SkipCheck) -> Skipped:
    return Skipped(reason=skip.reason, pending=skip.pending)


def run_unit(check: UnitCheck, seed: Seed) -> Outcome:
    """Run a unit check once."""
    evaluation = evaluate(check.fn)
    match evaluation.status:
        case "failed":
            return Failed(
                report=FailureReport(
                    kind=evaluation.kind or "unexpected-fault",
                    message=evaluation.message,
                    footnotes=evaluation.footnotes,
                    seed=seed,
                )
            )
        case "skipped":
            assert evaluation.skip is not None
            return _skipped(evaluation.skip)
        case "discarded":
            return GaveUp(discards=1)
    return Passed(trials=1)


@dataclass(frozen=True, kw_only=True)
class Counterexample:
    """A failing value and the evaluation that failed on it."""

    value: Any
    evaluation: Evaluation


class _TrialFailed(Exception):
    """Tells Hypothesis that a trial failed, so that it shrinks the value."""

    def __init__(self, counterexample: Counterexample) -> None:
        super().__init__(counterexample.evaluation.message)
        self.counterexample = counterexample


@dataclass(kw_only=True)
class _PropertyProgress:
    """Counters shared by the calls Hypothesis makes into one property."""

    discard_limit: int
    shrink_limit: int
    passed: int = 0
    discards: int = 0
    skip: SkipCheck | None = None
    failure: Counterexample | None = None
    shrink_attempts: int = 0
    shrinks: int = 0

    @property
    def stopped(self) -> bool:
        return self.skip is not None or self.discards >= self.discard_limit

    def _evaluate(self, action: Callable[[Any], object], value: Any) -> Evaluation:
        if self.failure is None:
            if self.stopped:
                reject()
            return evaluate(action, value)
        # Hypothesis replays the smallest failing value before reporting it.
        if value == self.failure.value:
            return self.failure.evaluation
        if self.shrink_attempts >= self.shrink_limit:
            reject()
        self.shrink_attempts += 1
        return evaluate(action, value)

    def trial(self, action: Callable[[Any], object], value: Any) -> None:
        previous = self.failure
        evaluation = self._evaluate(action, value)
        if previous is None:
            log.debug("Trial %d: %s", self.passed + self.discards + 1, evaluation.status)

        match evaluation.status:
            case "passed":
                if previous is None:
                    self.passed += 1
                return
            case "discarded":
                if previous is None:
                    self.discards += 1
                reject()
            case "skipped":
                if previous is None:
                    self.skip = evaluation.skip
                reject()

        if previous is not None and value != previous.value:
            self.shrinks += 1
        self.failure = Counterexample(value=value, evaluation=evaluation)
        raise _TrialFailed(self.failure)


def _engine_settings(trials: int, config: RunConfig) -> settings:
    phases = [Phase.generate]
    if config.shrink_limit:
        phases.append(Phase.shrink)
    return settings(
        max_examples=trials,
        phases=phases,
        database=None,
        deadline=None,
        derandomize=False,
        report_multiple_bugs=False,
        suppress_health_check=list(HealthCheck),
        verbosity=Verbosity.quiet,
    )


def run_property(check: PropertyCheck, seed: Seed, config: RunConfig) -> Outcome:
    """Run a property check until it passes enough trials, gives up, or fails.

    Hypothesis draws the values and shrinks the first failing one. Discarded
    values are rejected; once the discard limit is reached every further
    value is rejected too, which ends the run as a give-up.
    """
    trials = check.trials if check.trials is not None else config.trials
    discard_limit = (
        check.discard_limit if check.discard_limit is not None else config.discard_limit
    )
    progress = _PropertyProgress(
        discard_limit=discard_limit, shrink_limit=config.shrink_limit
    )
    engine_seed, _ = seed.next_word64()

    @seeded(engine_seed)
    @_engine_settings(trials, config)
    @given(check.strategy)
    def property_trial(value: Any) -> None:
        progress.trial(check.action, value)

    unsatisfiable = False
    try:
        property_trial()
    except _TrialFailed as e:
        progress.failure = e.counterexample
    except Unsatisfiable:
        unsatisfiable = True
    except Flaky as e:
        # The shrink budget ran out before the smallest value was replayed.
        log.debug("Keeping the last failing value: %s", e)

    if progress.failure is not None:
        return _property_failure(progress, seed)
    if progress.skip is not None:
        return _skipped(progress.skip)
    gave_up = unsatisfiable or progress.discards >= discard_limit
    if gave_up or (progress.discards and not progress.passed):
        return GaveUp(discards=progress.discards, trials=progress.passed)
    return Passed(trials=progress.passed)


def _property_failure(progress: _PropertyProgress, seed: Seed) -> Failed:
    assert progress.failure is not None
    evaluation = progress.failure.evaluation
    log.debug(
        "Shrunk to %r in %d step(s) and %d attempt(s)",
        progress.failure.value,
        progress.shrinks,
        progress.shrink_attempts,
    )
    return Failed(
        report=FailureReport(
            kind=evaluation.kind or "unexpected-fault",
            message=evaluation.message,
            footnotes=evaluation.footnotes,
            seed=seed,
            trials=progress.passed + 1,
            shrinks=progress.shrinks,
            property_check=True,
            counterexample=progress.failure.value,
        )
    )


def run_leaf(leaf: PlannedLeaf, config: RunConfig) -> LeafResult:
    """Run one planned leaf; faults in the check never escape."""
    try:
        match leaf.check:
            case UnitCheck():
                outcome = run_unit(leaf.check, leaf.seed)
            case PropertyCheck():
                outcome = run_property(leaf.check, leaf.seed, config)
            case _:
                raise TypeError(f"Unknown check type: {type(leaf.check).__name__}")
    except Exception as e:
        log.error(
            "Check %s failed outside its body: %s",
            qualified_name(leaf.path),
            e,
            exc_info=e,
        )
        outcome = Failed(
            report=FailureReport(
                kind="unexpected-fault",
                message=f"{type(e).__name__}: {e}",
                seed=leaf.seed,
            )
        )
    return LeafResult(path=leaf.path, seed=leaf.seed, outcome=outcome, replay=leaf.replay)


def execute(
    tree: Test,
    seed: Seed,
    config: RunConfig | None = None,
    on_result: ResultCallback | None = None,
    *,
    prefix: str = "",
) -> Sequence[LeafResult]:
    """Run every leaf of ``tree`` in order and collect their results.

    Args:
        tree: Tree to run, already filtered
        seed: Run seed; leaf seeds are derived from it
        config: Trial limits and policies (defaults when omitted)
        on_result: Called with each result as soon as it is produced
        prefix: Prefix ``tree`` was filtered by, for replay instructions

    Returns:
        One result per leaf, in traversal order

    """
    config = config or RunConfig()
    planned = plan(tree, seed, prefix)
    log.info("Executing %d check(s) with seed %s", len(planned), seed)

    results: list[LeafResult] = []
    for leaf in planned:
        result = run_leaf(leaf, config)
        if isinstance(result.outcome, GaveUp):
            log.warning(
                "Check %s gave up after %d discard(s)",
                result.name,
                result.outcome.discards,
            )
        log.info(
            "Check completed: name=%s outcome=%s",
            result.name,
            type(result.outcome).__name__,
        )
        if on_result is not None:
            on_result(result)
        results.append(result)

    return results
