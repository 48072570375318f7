"""Scoped, seeded test suites with reproducible runs."""

from scopecheck.assertions import (
    AssertionMismatch,
    CheckFailure,
    ExplicitCrash,
    assume,
    crash,
    discard,
    expect,
    expect_eq,
    expect_neq,
    expect_raises,
    expect_some,
    footnote,
    ok,
    pending,
    skip,
)
from scopecheck.models.config import RunConfig
from scopecheck.runner import rerun, rerun_only, run, run_only, run_suite
from scopecheck.seed import Seed
from scopecheck.summary import Summary
from scopecheck.tree import Test, filter_tree, property_test, scope, tests, unit_test

__all__ = [
    "AssertionMismatch",
    "CheckFailure",
    "ExplicitCrash",
    "RunConfig",
    "Seed",
    "Summary",
    "Test",
    "assume",
    "crash",
    "discard",
    "expect",
    "expect_eq",
    "expect_neq",
    "expect_raises",
    "expect_some",
    "filter_tree",
    "footnote",
    "ok",
    "pending",
    "property_test",
    "rerun",
    "rerun_only",
    "run",
    "run_only",
    "run_suite",
    "scope",
    "skip",
    "tests",
    "unit_test",
]
