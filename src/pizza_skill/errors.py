"""Error taxonomy for one ordering run.

Every error carries the pipeline stage that raised it, so the top-level
handler can tell "nothing was charged" apart from "the order went through
but a later step failed".
"""

from collections.abc import Iterable

from .enums import Stage

_CHARGE_STAGES = frozenset({Stage.PLACE, Stage.TRACKING})


class PizzaSkillError(Exception):
    """Base class for failures raised while ordering."""

    def __init__(self, message: str, stage: Stage):
        super().__init__(message)
        self.stage = stage

    @property
    def charge_attempted(self) -> bool:
        """True once the order has been submitted for placement."""
        return self.stage in _CHARGE_STAGES

    @property
    def order_placed(self) -> bool:
        """True when placement succeeded and only a later step failed."""
        return self.stage == Stage.TRACKING


class SecretLoadError(PizzaSkillError):
    def __init__(self, message: str):
        super().__init__(message, Stage.SECRETS)


class NoOpenStoresError(PizzaSkillError):
    def __init__(self, message: str = "No Open Stores"):
        super().__init__(message, Stage.STORE_LOOKUP)


class OrderingApiError(PizzaSkillError):
    """A Domino's API call failed or rejected the request."""

    def __init__(
        self,
        message: str,
        stage: Stage,
        status_code: int | None = None,
        codes: Iterable[str] = (),
    ):
        super().__init__(message, stage)
        self.status_code = status_code
        self.codes = tuple(codes)

    def __str__(self) -> str:
        text = super().__str__()
        if self.codes:
            text = f"{text} ({', '.join(self.codes)})"
        return text


class TrackingError(OrderingApiError):
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        codes: Iterable[str] = (),
    ):
        super().__init__(message, Stage.TRACKING, status_code, codes)
