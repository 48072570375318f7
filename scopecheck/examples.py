"""Demo suite, registered as the ``demo`` entry point.

Run it with ``scopecheck demo`` or ``scopecheck demo --only addition``.
"""

from hypothesis import strategies as st

from scopecheck.assertions import crash, expect_eq, footnote, ok
from scopecheck.tree import Test, property_test, scope, tests, unit_test


def _reverse_twice(numbers: list[int]) -> None:
    footnote(f"numbers: {numbers}")
    expect_eq(list(reversed(list(reversed(numbers)))), numbers)


suite: Test = tests(
    scope("addition.ex1", unit_test(lambda: expect_eq(1 + 1, 2))),
    scope("addition.ex2", unit_test(lambda: expect_eq(2 + 3, 5))),
    scope(
        "list.reversal",
        property_test(
            st.lists(st.integers(0, 99), min_size=10, max_size=10),
            _reverse_twice,
        ),
    ),
    scope("addition", scope("ex3", unit_test(lambda: expect_eq(3 + 3, 6)))),
    scope("always passes", unit_test(ok)),
    scope("failing test", unit_test(lambda: crash("oh noes!!"))),
)
