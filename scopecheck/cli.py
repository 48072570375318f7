"""CLI entry point for running a suite."""

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from scopecheck import runner
from scopecheck.loading import SuiteNotFoundError, load_suite
from scopecheck.models.config import RunConfig
from scopecheck.models.result import LeafResult
from scopecheck.seed import InvalidSeedError, Seed
from scopecheck.summary import format_output, render_footer, render_heading, render_result


def parse_config(config_json: str) -> RunConfig:
    """Parse a JSON object of ``RunConfig`` fields (empty means defaults)."""
    if not config_json.strip():
        return RunConfig()
    return RunConfig.model_validate_json(config_json)


def print_result(result: LeafResult) -> None:
    """Print the report lines of one result as soon as it completes."""
    print("\n".join(render_result(result)), flush=True)


def run(
    suite_ref: str,
    prefix: str = "",
    seed: str | None = None,
    config_json: str = "",
    json_output: bool = False,
) -> int:
    """Run a suite and return the exit code."""
    log = logging.getLogger("scopecheck")

    config = parse_config(config_json)
    run_seed = Seed.random() if seed is None else Seed.parse(seed)

    log.info("Loading suite: %s", suite_ref)
    suite = load_suite(suite_ref)

    label = runner.entry_label(prefix, seed)
    if not json_output:
        print("\n".join(render_heading(label, run_seed)), flush=True)

    summary = runner.run_suite(
        suite,
        prefix=prefix,
        seed=run_seed,
        config=config,
        on_result=None if json_output else print_result,
        label=label,
    )

    if json_output:
        print(json.dumps(format_output(summary), indent=2))
    else:
        print(render_footer(summary))

    return summary.exit_code


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Run a scoped test suite")
    parser.add_argument(
        "suite",
        help="Suite to run: 'package.module:attribute' or an entry point name",
    )
    parser.add_argument(
        "--only",
        default="",
        metavar="PREFIX",
        help="Only run checks whose dotted scope name starts with PREFIX",
    )
    parser.add_argument(
        "--seed",
        default=None,
        help="Replay a previous run ('<value>:<gamma>' or an integer)",
    )
    parser.add_argument(
        "--config",
        default="",
        help='JSON run configuration, e.g. \'{"trials": 500}\'',
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print a JSON summary instead of the text report",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log execution details to stderr",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        exit_code = run(
            suite_ref=args.suite,
            prefix=args.only,
            seed=args.seed,
            config_json=args.config,
            json_output=args.json,
        )
    except (SuiteNotFoundError, InvalidSeedError, ValidationError) as e:
        parser.error(str(e))
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
