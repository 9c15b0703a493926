"""Spoken responses - single source of truth.

Every invocation ends in exactly one of these four sentences. The two
failure sentences do not name the step that failed.
"""

from .enums import Outcome
from .errors import NoOpenStoresError

DRY_RUN_SPEECH = "This is a dry run. Your pizza order would have been placed."
PLACED_SPEECH = "Your pizza order has been placed and is on its way!"
NO_OPEN_STORES_SPEECH = (
    "Sorry, there are no open stores near you at the moment. Please try again later."
)
ORDER_FAILED_SPEECH = (
    "Sorry, there was an issue placing your order. Please try again later."
)

_SPEECH = {
    Outcome.DRY_RUN: DRY_RUN_SPEECH,
    Outcome.PLACED: PLACED_SPEECH,
    Outcome.NO_OPEN_STORES: NO_OPEN_STORES_SPEECH,
    Outcome.FAILED: ORDER_FAILED_SPEECH,
}


def outcome_for_error(error: BaseException) -> Outcome:
    if isinstance(error, NoOpenStoresError):
        return Outcome.NO_OPEN_STORES
    return Outcome.FAILED


def speech_for(outcome: Outcome) -> str:
    return _SPEECH[outcome]
