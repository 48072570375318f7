"""Models for check execution results."""

from dataclasses import dataclass
from typing import Any, Literal

from scopecheck.seed import Seed
from scopecheck.tree import qualified_name

type FailureKind = Literal["assertion-mismatch", "explicit-crash", "unexpected-fault"]


@dataclass(frozen=True, kw_only=True)
class FailureReport:
    """Why a check failed.

    ``seed`` is the seed the leaf ran with. ``counterexample`` is only
    meaningful when ``property_check`` is true.
    """

    kind: FailureKind
    message: str
    seed: Seed
    footnotes: tuple[str, ...] = ()
    trials: int = 1
    shrinks: int = 0
    property_check: bool = False
    counterexample: Any = None


@dataclass(frozen=True, kw_only=True)
class Passed:
    trials: int


@dataclass(frozen=True, kw_only=True)
class Failed:
    report: FailureReport


@dataclass(frozen=True, kw_only=True)
class Skipped:
    reason: str | None = None
    pending: bool = False


@dataclass(frozen=True, kw_only=True)
class GaveUp:
    discards: int
    trials: int = 0


type Outcome = Passed | Failed | Skipped | GaveUp


@dataclass(frozen=True, kw_only=True)
class Replay:
    """Arguments to ``rerun_only`` that run a leaf again under the same seed.

    An empty ``prefix`` means the whole suite, i.e. ``rerun``.
    """

    prefix: str
    seed: Seed


@dataclass(frozen=True, kw_only=True)
class LeafResult:
    """Outcome of one leaf, with the scope path and seed it ran under."""

    path: tuple[str, ...]
    seed: Seed
    outcome: Passed | Failed | Skipped | GaveUp
    replay: Replay

    @property
    def name(self) -> str:
        return qualified_name(self.path)
