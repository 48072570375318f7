"""Scope trees: composing checks into named, nestable suites.

Trees are plain immutable values. Building one runs nothing; the executor
walks it later. A ``.`` inside a scope name is a nesting separator, so
``scope("a", scope("b", t))`` and ``scope("a.b", t)`` name their leaves
identically. There is no way to put a literal dot into a single segment.
"""

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from hypothesis.strategies import SearchStrategy

UNNAMED = "(unnamed)"

type ScopePath = tuple[str, ...]


@dataclass(frozen=True, kw_only=True)
class UnitCheck:
    """A check run exactly once."""

    fn: Callable[[], object]


@dataclass(frozen=True, kw_only=True)
class PropertyCheck:
    """A check run against values drawn from a Hypothesis strategy.

    ``trials`` and ``discard_limit`` override the run configuration for this
    check only.
    """

    strategy: SearchStrategy[Any]
    action: Callable[[Any], object]
    trials: int | None = None
    discard_limit: int | None = None

    def __post_init__(self) -> None:
        for field in ("trials", "discard_limit"):
            limit = getattr(self, field)
            if limit is not None and limit < 1:
                raise ValueError(f"{field} must be at least 1, got {limit}")


type Check = UnitCheck | PropertyCheck


@dataclass(frozen=True, kw_only=True)
class Leaf:
    """A single executable check."""

    check: Check


@dataclass(frozen=True, kw_only=True)
class Tests:
    """Children run in order."""

    __test__ = False

    children: tuple["Test", ...] = ()


@dataclass(frozen=True, kw_only=True)
class Scoped:
    """A child whose leaves are named under ``path``."""

    path: ScopePath
    child: "Test"


type Test = Leaf | Tests | Scoped


def split_name(name: str) -> ScopePath:
    """Split a dotted name into segments, dropping empty ones."""
    return tuple(segment for segment in name.split(".") if segment)


def qualified_name(path: ScopePath) -> str:
    """Render a scope path for display."""
    return ".".join(path) if path else UNNAMED


def scope(name: str, node: Test) -> Test:
    """Name every leaf under ``node`` with ``name`` as a prefix."""
    path = split_name(name)
    if not path:
        return node
    if isinstance(node, Scoped):
        return Scoped(path=path + node.path, child=node.child)
    return Scoped(path=path, child=node)


def tests(*children: Test | Iterable[Test]) -> Test:
    """Sequence tests.

    Accepts the children as arguments or as a single iterable.
    """
    if len(children) == 1 and not isinstance(children[0], Leaf | Tests | Scoped):
        return Tests(children=tuple(children[0]))
    return Tests(children=tuple(children))  # type: ignore[arg-type]


def unit_test(fn: Callable[[], object]) -> Test:
    """A check that runs ``fn`` once.

    ``fn`` fails by raising, or by returning ``False``.
    """
    return Leaf(check=UnitCheck(fn=fn))


def property_test[T](
    strategy: SearchStrategy[T],
    action: Callable[[T], object],
    *,
    trials: int | None = None,
    discard_limit: int | None = None,
) -> Test:
    """A check that runs ``action`` on values drawn from ``strategy``.

    Raises:
        ValueError: If ``trials`` or ``discard_limit`` is below 1

    """
    return Leaf(
        check=PropertyCheck(
            strategy=strategy,
            action=action,
            trials=trials,
            discard_limit=discard_limit,
        )
    )


def leaves(tree: Test, path: ScopePath = ()) -> Iterator[tuple[ScopePath, Check]]:
    """Yield ``(path, check)`` for every leaf, depth first in child order."""
    match tree:
        case Leaf(check=check):
            yield path, check
        case Scoped(path=segments, child=child):
            yield from leaves(child, path + segments)
        case Tests(children=children):
            for child in children:
                yield from leaves(child, path)


def matches_prefix(path: ScopePath, prefix: ScopePath) -> bool:
    """Whether ``prefix`` is a leading run of whole segments of ``path``."""
    return path[: len(prefix)] == prefix


def filter_tree(tree: Test, prefix: str) -> Test:
    """Keep only the leaves whose qualified name starts with ``prefix``.

    Matching is by whole segments: ``"add"`` selects ``add.ex1`` but not
    ``addendum``. Branches left without leaves are removed. The empty prefix
    returns ``tree`` unchanged.
    """
    segments = split_name(prefix)
    if not segments:
        return tree
    pruned = _prune(tree, (), segments)
    return pruned if pruned is not None else Tests()


def _prune(tree: Test, path: ScopePath, prefix: ScopePath) -> Test | None:
    depth = min(len(path), len(prefix))
    if path[:depth] != prefix[:depth]:
        return None
    if len(path) >= len(prefix):
        return tree
    match tree:
        case Leaf():
            return None
        case Scoped(path=segments, child=child):
            pruned = _prune(child, path + segments, prefix)
            if pruned is None:
                return None
            return Scoped(path=segments, child=pruned)
        case Tests(children=children):
            kept = tuple(
                pruned
                for child in children
                if (pruned := _prune(child, path, prefix)) is not None
            )
            return Tests(children=kept) if kept else None
