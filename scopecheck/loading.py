"""Loading of suites from module paths or entry points."""

import importlib
from importlib.metadata import entry_points

from scopecheck.tree import Leaf, Scoped, Test, Tests

ENTRY_POINT_GROUP = "scopecheck.suites"


class SuiteNotFoundError(Exception):
    """Raised when a suite reference cannot be resolved."""


def load_suite(ref: str) -> Test:
    """Load a suite by reference.

    Args:
        ref: Either ``"package.module:attribute"`` or the name of an entry
             point in the ``scopecheck.suites`` group (e.g., "demo")

    Returns:
        The suite. A zero-argument callable found at the reference is called
        to build it.

    Raises:
        SuiteNotFoundError: If the reference does not resolve to a suite

    """
    target = _resolve_module_ref(ref) if ":" in ref else _resolve_entry_point(ref)

    if callable(target):
        target = target()

    if not isinstance(target, Leaf | Tests | Scoped):
        raise SuiteNotFoundError(
            f"Suite '{ref}' is a {type(target).__name__}, not a test tree"
        )
    return target


def _resolve_module_ref(ref: str) -> object:
    module_name, _, attribute = ref.partition(":")
    try:
        target: object = importlib.import_module(module_name)
    except ModuleNotFoundError as e:
        if e.name is None or not module_name.startswith(e.name):
            raise
        raise SuiteNotFoundError(f"Suite module '{module_name}' not found") from e

    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise SuiteNotFoundError(
                f"Suite '{ref}' not found: no attribute '{part}'"
            ) from e
    return target


def _resolve_entry_point(name: str) -> object:
    entries = entry_points(group=ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == name:
            return entry.load()

    available = [e.name for e in entries]
    raise SuiteNotFoundError(
        f"Suite '{name}' not found. Available suites: {available}"
    )
