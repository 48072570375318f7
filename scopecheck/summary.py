"""Aggregation and rendering of run results."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

from scopecheck.models.config import GiveUpPolicy
from scopecheck.models.result import (
    Failed,
    FailureReport,
    GaveUp,
    LeafResult,
    Passed,
    Replay,
    Skipped,
)
from scopecheck.seed import Seed

PASSED_GLYPH = "✓"
FAILED_GLYPH = "✗"
WARNING_GLYPH = "⚐"
HEADING_RULE = "━━━"


@dataclass(frozen=True, kw_only=True)
class Summary:
    """Aggregate outcome of one run."""

    seed: Seed
    results: Sequence[LeafResult]
    label: str = "run"
    give_up_policy: GiveUpPolicy = "warn"

    def _count(self, outcome_type: type) -> int:
        return sum(1 for r in self.results if isinstance(r.outcome, outcome_type))

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return self._count(Passed)

    @property
    def failed(self) -> int:
        return self._count(Failed)

    @property
    def skipped(self) -> int:
        return self._count(Skipped)

    @property
    def gave_up(self) -> int:
        return self._count(GaveUp)

    @property
    def status(self) -> Literal["succeeded", "failed"]:
        if self.failed:
            return "failed"
        match self.give_up_policy:
            case "fail" if self.gave_up:
                return "failed"
            case "fail-if-all" if self.total and self.gave_up == self.total:
                return "failed"
        return "succeeded"

    @property
    def exit_code(self) -> int:
        return 0 if self.status == "succeeded" else 1

    @property
    def failures(self) -> Sequence[LeafResult]:
        return [r for r in self.results if isinstance(r.outcome, Failed)]


def summarize(
    results: Sequence[LeafResult],
    *,
    seed: Seed,
    label: str = "run",
    give_up_policy: GiveUpPolicy = "warn",
) -> Summary:
    """Roll leaf results up into a summary."""
    return Summary(
        seed=seed,
        results=tuple(results),
        label=label,
        give_up_policy=give_up_policy,
    )


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def render_heading(label: str, seed: Seed) -> Sequence[str]:
    """Heading printed before the first result."""
    return [f"{HEADING_RULE} {label} {HEADING_RULE}", f"  seed: {seed}"]


def render_replay(replay: Replay) -> str:
    """The call that runs a result again under the same seed."""
    if replay.prefix:
        return f'rerun_only(suite, "{replay.prefix}", Seed.parse("{replay.seed}"))'
    return f'rerun(suite, Seed.parse("{replay.seed}"))'


def _render_failure(report: FailureReport, replay: Replay) -> list[str]:
    lines = [""]
    lines.extend(f"    {line}" for line in report.message.splitlines() or [""])
    for note in report.footnotes:
        lines.append(f"    {note}")
    if report.property_check:
        lines.append("")
        lines.append(f"    Counterexample: {report.counterexample!r}")
        lines.append(f"    ({_plural(report.shrinks, 'shrink')})")
    lines.append("")
    lines.append("    This failure can be reproduced by running:")
    lines.append(f"    > {render_replay(replay)}")
    lines.append("")
    return lines


def render_result(result: LeafResult) -> Sequence[str]:
    """Lines describing one leaf result."""
    name = result.name
    match result.outcome:
        case Passed(trials=trials):
            return [f"  {PASSED_GLYPH} {name} passed {_plural(trials, 'test')}."]
        case Failed(report=report):
            return [
                f"  {FAILED_GLYPH} {name} failed after {_plural(report.trials, 'test')}.",
                *_render_failure(report, result.replay),
            ]
        case GaveUp(discards=discards, trials=trials):
            return [
                f"  {WARNING_GLYPH} {name} gave up after "
                f"{_plural(discards, 'discard')}, passed {_plural(trials, 'test')}."
            ]
        case Skipped(reason=reason, pending=pending):
            word = "pending" if pending else "skipped"
            detail = f": {reason}" if reason else ""
            return [f"  {WARNING_GLYPH} {name} {word}{detail}."]
    raise TypeError(f"Unknown outcome: {result.outcome!r}")


def render_footer(summary: Summary) -> str:
    """The aggregate line closing a report."""
    counts = [
        f"{summary.failed} failed" if summary.failed else "",
        f"{summary.gave_up} gave up" if summary.gave_up else "",
        f"{summary.skipped} skipped" if summary.skipped else "",
        f"{summary.passed} succeeded",
    ]
    if summary.status == "failed":
        glyph = FAILED_GLYPH
    elif summary.gave_up or summary.skipped:
        glyph = WARNING_GLYPH
    else:
        glyph = PASSED_GLYPH
    return f"  {glyph} {', '.join(c for c in counts if c)}."


def render(summary: Summary) -> Sequence[str]:
    """Render a whole report: heading, one entry per leaf and the footer."""
    lines = list(render_heading(summary.label, summary.seed))
    for result in summary.results:
        lines.extend(render_result(result))
    lines.append(render_footer(summary))
    return lines


def format_output(summary: Summary) -> dict[str, Any]:
    """Format a summary for JSON output."""
    all_results: list[dict[str, Any]] = []
    for result in summary.results:
        entry: dict[str, Any] = {
            "name": result.name,
            "seed": str(result.seed),
        }
        match result.outcome:
            case Passed(trials=trials):
                entry["status"] = "passed"
                entry["trials"] = trials
            case Failed(report=report):
                entry["status"] = "failed"
                entry["trials"] = report.trials
                entry["kind"] = report.kind
                entry["message"] = report.message
                entry["footnotes"] = list(report.footnotes)
                if report.property_check:
                    entry["counterexample"] = repr(report.counterexample)
                entry["replay"] = render_replay(result.replay)
            case GaveUp(discards=discards, trials=trials):
                entry["status"] = "gave-up"
                entry["trials"] = trials
                entry["discards"] = discards
            case Skipped(reason=reason, pending=pending):
                entry["status"] = "pending" if pending else "skipped"
                entry["reason"] = reason
                entry["pending"] = pending
        all_results.append(entry)

    return {
        "label": summary.label,
        "seed": str(summary.seed),
        "status": summary.status,
        "total": summary.total,
        "passed": summary.passed,
        "failed": summary.failed,
        "skipped": summary.skipped,
        "gave_up": summary.gave_up,
        "results": all_results,
    }
