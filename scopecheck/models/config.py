"""Configuration for a run."""

from typing import Literal

from pydantic import Field

from scopecheck.models.base import Model

GiveUpPolicy = Literal["warn", "fail", "fail-if-all"]


class RunConfig(Model):
    """Limits for property checks and the policy for give-ups."""

    trials: int = Field(
        default=100, ge=1, description="Passing trials a property check needs"
    )
    discard_limit: int = Field(
        default=100, ge=1, description="Discards after which a property gives up"
    )
    shrink_limit: int = Field(
        default=1000, ge=0, description="Maximum evaluations spent shrinking"
    )
    give_up_policy: GiveUpPolicy = Field(
        default="warn",
        description=(
            "'warn' never fails the run on give-ups, 'fail' fails on any, "
            "'fail-if-all' fails when every leaf gave up"
        ),
    )
