"""Store Locator: pick the nearest store that can deliver right now."""

from collections.abc import Iterable
from typing import Protocol

from loguru import logger

from .errors import NoOpenStoresError
from .models import Address, StoreCandidate

DEFAULT_MAX_DISTANCE = 100.0


class StoreFinder(Protocol):
    def find_stores(self, address: Address) -> list[StoreCandidate]: ...


def select_nearest_store(
    stores: Iterable[StoreCandidate],
    max_distance: float = DEFAULT_MAX_DISTANCE,
) -> StoreCandidate | None:
    """Return the closest eligible store, or None.

    A store only replaces the current best when it is strictly closer, so on
    a tie the store listed first wins. Stores at or beyond `max_distance`
    are never chosen.
    """
    best: StoreCandidate | None = None
    best_distance = max_distance
    for store in stores:
        if store.is_eligible and store.min_distance < best_distance:
            best, best_distance = store, store.min_distance
    return best


def find_nearest_store(
    client: StoreFinder,
    address: Address,
    max_distance: float = DEFAULT_MAX_DISTANCE,
) -> str:
    """Look up stores near `address` and return the chosen store id.

    Raises:
        NoOpenStoresError: No store is eligible within `max_distance`.
    """
    stores = client.find_stores(address)
    store = select_nearest_store(stores, max_distance)
    if store is None:
        logger.warning(
            "No eligible store within {} of {} ({} candidates)",
            max_distance,
            address.line1,
            len(stores),
        )
        raise NoOpenStoresError()

    logger.info(
        "Selected store {} at distance {} ({})",
        store.store_id,
        store.min_distance,
        store.address_description.replace("\n", " ") or "no description",
    )
    return store.store_id
