from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TypeVar

from pintmerge.core.result import Err, Ok, Result
from pintmerge.services.distribution.errors import DistributionError

S = TypeVar("S")


@dataclass(frozen=True, slots=True)
class StepAdvance[S]:
    session: S


@dataclass(frozen=True, slots=True)
class StepFinish:
    pass


StepOutcome = StepAdvance[S] | StepFinish
StepHandler = Callable[[S], StepOutcome[S]]
GetStep = Callable[[S], str]


FINISH = StepFinish()


def advance[S](session: S) -> StepAdvance[S]:
    return StepAdvance(session=session)


def run_state_machine(
    *,
    initial_state: S,
    get_step: GetStep[S],
    handlers: Mapping[str, StepHandler[S]],
) -> Result[S, DistributionError]:
    """Dispatch on ``get_step(state)`` until a handler returns FINISH.

    Returns the state the machine finished in.
    """
    current = initial_state

    while True:
        step = get_step(current)
        handler = handlers.get(step)
        if handler is None:
            return Err(
                DistributionError(
                    kind="invalid_state",
                    message=f"no handler for branch attempt state: {step}",
                )
            )

        outcome = handler(current)
        if isinstance(outcome, StepFinish):
            return Ok(current)

        current = outcome.session
