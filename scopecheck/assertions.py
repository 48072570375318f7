"""Assertions and control-flow signals raised from inside checks.

Every function here is meant to be called while a check is running: from a
unit check body or from a property action. Failures are exceptions, so the
first failing assertion ends the check.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, NoReturn

_footnotes: ContextVar[list[str] | None] = ContextVar("footnotes", default=None)


class CheckFailure(Exception):
    """Base class for failures raised by assertions."""

    kind = "explicit-crash"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AssertionMismatch(CheckFailure):
    """An expected value did not match the actual one."""

    kind = "assertion-mismatch"


class ExplicitCrash(CheckFailure):
    """Failure requested explicitly by the check."""

    kind = "explicit-crash"


class CheckSignal(Exception):
    """Control flow out of a check that is not a failure."""


class SkipCheck(CheckSignal):
    """The check asked to be skipped, or is not written yet."""

    def __init__(self, reason: str | None = None, *, pending: bool = False) -> None:
        super().__init__(reason or ("pending" if pending else "skipped"))
        self.reason = reason
        self.pending = pending


class Discard(CheckSignal):
    """The generated input does not satisfy the property's precondition."""


@contextmanager
def collecting_footnotes() -> Iterator[list[str]]:
    """Collect footnotes attached while the body runs."""
    notes: list[str] = []
    token = _footnotes.set(notes)
    try:
        yield notes
    finally:
        _footnotes.reset(token)


def footnote(text: str) -> None:
    """Attach a note to the running check, shown if it fails."""
    notes = _footnotes.get()
    if notes is None:
        raise RuntimeError("footnote() called outside of a running check")
    notes.append(text)


def ok() -> None:
    """Record a success. Does nothing; a check that returns passes."""


def crash(message: str) -> NoReturn:
    """Fail the running check with a message."""
    raise ExplicitCrash(message)


def skip(reason: str | None = None) -> NoReturn:
    """Skip the running check."""
    raise SkipCheck(reason)


def pending(reason: str | None = None) -> NoReturn:
    """Mark the running check as not yet implemented."""
    raise SkipCheck(reason, pending=True)


def expect(condition: bool, message: str | None = None) -> None:
    """Fail unless ``condition`` is true."""
    if not condition:
        raise AssertionMismatch(message or "expected condition to be true")


def expect_eq(actual: Any, expected: Any) -> None:
    """Fail unless ``actual == expected``."""
    if not actual == expected:
        raise AssertionMismatch(f"expected {expected!r}, got {actual!r}")


def expect_neq(actual: Any, unexpected: Any) -> None:
    """Fail if ``actual == unexpected``."""
    if actual == unexpected:
        raise AssertionMismatch(f"expected a value other than {unexpected!r}")


def expect_some[T](value: T | None) -> T:
    """Return ``value``, failing if it is ``None``."""
    if value is None:
        raise AssertionMismatch("expected a value, got None")
    return value


def expect_raises[E: BaseException](
    exc_type: type[E], fn: Callable[..., Any], *args: Any, **kwargs: Any
) -> E:
    """Call ``fn`` and return the ``exc_type`` exception it raises."""
    try:
        result = fn(*args, **kwargs)
    except exc_type as e:
        return e
    raise AssertionMismatch(
        f"expected {exc_type.__name__} to be raised, got return value {result!r}"
    )


def assume(condition: bool) -> None:
    """Discard the current property input unless ``condition`` holds."""
    if not condition:
        raise Discard()


def discard() -> NoReturn:
    """Discard the current property input."""
    raise Discard()
