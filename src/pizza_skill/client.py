"""Domino's ordering API client (httpx).

Covers the handful of endpoints one delivery order needs: store locator,
menu, validate/price/place, and tracking by phone number. Order calls
mutate the `Order` in place with whatever the API computed.
"""

from collections.abc import Iterable
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from .config import Settings
from .enums import Stage
from .errors import OrderingApiError, TrackingError
from .models import Address, Menu, Order, StoreCandidate, TrackingResult

HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
    "Referer": "https://order.dominos.com/en/pages/order/",
}

TRACKING_HEADERS = {
    "Accept": "application/json",
    "dpz-language": "en",
    "dpz-market": "UNITED_STATES",
}

# Status value the power API uses for a rejected request
_FAILURE_STATUS = -1


def _status_codes(data: dict[str, Any]) -> list[str]:
    items = list(data.get("StatusItems") or [])
    order = data.get("Order")
    if isinstance(order, dict):
        items += order.get("StatusItems") or []
    return [str(item.get("Code", "")) for item in items if item.get("Code")]


def _api_error(
    stage: Stage,
    message: str,
    error_cls: type[OrderingApiError] | None = None,
    status_code: int | None = None,
    codes: Iterable[str] = (),
) -> OrderingApiError:
    if error_cls is not None:
        return error_cls(message, status_code=status_code, codes=codes)
    return OrderingApiError(message, stage, status_code=status_code, codes=codes)


class DominosClient:
    """Synchronous client for order.dominos.com.

    Use as a context manager so the underlying connection pool is closed.
    """

    def __init__(
        self,
        base_url: str = "https://order.dominos.com",
        tracking_url: str = "https://tracker.dominos.com/tracker-presentation-service/v2/orders",
        timeout: float = 15.0,
        http_client: httpx.Client | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.tracking_url = tracking_url
        self._http = http_client or httpx.Client(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "DominosClient":
        return cls(
            base_url=settings.dominos_base_url,
            tracking_url=settings.dominos_tracking_url,
            timeout=settings.http_timeout_seconds,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "DominosClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -----------------------------------------------------------------------
    # Transport
    # -----------------------------------------------------------------------

    def _request(
        self,
        stage: Stage,
        method: str,
        url: str,
        *,
        headers: dict[str, str] = HEADERS,
        error_cls: type[OrderingApiError] | None = None,
        **kwargs: Any,
    ) -> Any:
        logger.debug("{} {} ({})", method, url, stage.value)
        try:
            response = self._http.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise _api_error(
                stage,
                f"{stage.value} request failed with HTTP {exc.response.status_code}",
                error_cls,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise _api_error(stage, f"{stage.value} request failed: {exc}", error_cls) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise _api_error(
                stage,
                f"{stage.value} response was not JSON",
                error_cls,
                status_code=response.status_code,
            ) from exc

        if isinstance(data, dict) and data.get("Status") == _FAILURE_STATUS:
            raise _api_error(
                stage,
                f"{stage.value} rejected by Domino's",
                error_cls,
                status_code=response.status_code,
                codes=_status_codes(data),
            )
        return data

    def _request_object(self, stage: Stage, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        data = self._request(stage, method, url, **kwargs)
        if not isinstance(data, dict):
            raise _api_error(
                stage,
                f"{stage.value} response was {type(data).__name__}, expected an object",
            )
        return data

    def _order_call(self, stage: Stage, path: str, order: Order) -> dict[str, Any]:
        data = self._request_object(
            stage, "POST", f"{self.base_url}{path}", json=order.to_payload()
        )
        try:
            order.apply_response(data)
        except ValueError as exc:
            # pydantic's ValidationError is a ValueError
            raise _api_error(stage, f"{stage.value} response could not be read: {exc}") from exc
        return data

    # -----------------------------------------------------------------------
    # Stores and menu
    # -----------------------------------------------------------------------

    def find_stores(self, address: Address) -> list[StoreCandidate]:
        """Return the stores the locator lists for a delivery address.

        Entries that do not parse (no distance, malformed service flags) are
        skipped; they could never be chosen anyway.
        """
        data = self._request_object(
            Stage.STORE_LOOKUP,
            "GET",
            f"{self.base_url}/power/store-locator",
            params={"s": address.line1, "c": address.line2, "type": "Delivery"},
        )
        entries = data.get("Stores") or []
        if not isinstance(entries, list):
            raise _api_error(Stage.STORE_LOOKUP, "store_lookup response has no store list")

        stores = []
        for entry in entries:
            try:
                stores.append(StoreCandidate.model_validate(entry))
            except ValidationError as exc:
                store_id = entry.get("StoreID") if isinstance(entry, dict) else None
                logger.warning(
                    "Skipping store {}: {} invalid field(s)", store_id, exc.error_count()
                )
        logger.info("Store locator returned {} stores", len(stores))
        return stores

    def get_menu(self, store_id: str) -> Menu:
        data = self._request_object(
            Stage.MENU,
            "GET",
            f"{self.base_url}/power/store/{store_id}/menu",
            params={"lang": "en", "structured": "true"},
        )
        try:
            return Menu.from_payload(store_id, data)
        except ValidationError as exc:
            raise _api_error(Stage.MENU, f"menu for store {store_id} could not be read") from exc

    # -----------------------------------------------------------------------
    # Order lifecycle
    # -----------------------------------------------------------------------

    def validate_order(self, order: Order) -> dict[str, Any]:
        return self._order_call(Stage.VALIDATE, "/power/validate-order", order)

    def price_order(self, order: Order) -> dict[str, Any]:
        return self._order_call(Stage.PRICE, "/power/price-order", order)

    def place_order(self, order: Order) -> dict[str, Any]:
        """Submit the order. This charges the attached payment."""
        return self._order_call(Stage.PLACE, "/power/place-order", order)

    def track_by_phone(self, phone: str) -> TrackingResult:
        data = self._request(
            Stage.TRACKING,
            "GET",
            self.tracking_url,
            headers=TRACKING_HEADERS,
            error_cls=TrackingError,
            params={"phonenumber": phone},
        )
        orders = data if isinstance(data, list) else [data]
        try:
            return TrackingResult(phone=phone, orders=orders)
        except ValidationError as exc:
            raise TrackingError(f"tracking response could not be read: {exc}") from exc
