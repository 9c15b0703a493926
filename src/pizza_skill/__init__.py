"""Alexa skill that orders a cheese pizza from the nearest open Domino's."""

from .enums import Outcome, Stage
from .errors import (
    NoOpenStoresError,
    OrderingApiError,
    PizzaSkillError,
    SecretLoadError,
    TrackingError,
)
from .graph import build_graph, run_order
from .models import Order, OrderResult, SecretBundle, StoreCandidate

__all__ = [
    "NoOpenStoresError",
    "Order",
    "OrderResult",
    "OrderingApiError",
    "Outcome",
    "PizzaSkillError",
    "SecretBundle",
    "SecretLoadError",
    "Stage",
    "StoreCandidate",
    "TrackingError",
    "build_graph",
    "run_order",
]
