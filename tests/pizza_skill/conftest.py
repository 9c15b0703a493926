"""Shared pytest fixtures for pizza_skill tests."""

import pytest
from loguru import logger

from pizza_skill.config import Settings
from pizza_skill.enums import Stage
from pizza_skill.errors import OrderingApiError, SecretLoadError, TrackingError
from pizza_skill.models import (
    Address,
    AmountsBreakdown,
    Customer,
    Menu,
    Order,
    SecretBundle,
    StoreCandidate,
    TrackingResult,
)

SECRET_PAYLOAD = {
    "ADDRESS": "1 Main St, Springfield, IL 62701",
    "FIRST_NAME": "Pat",
    "LAST_NAME": "Doe",
    "PHONE": "5551234567",
    "EMAIL": "pat@example.com",
    "CARD_NUMBER": "4111111111111111",
    "CARD_EXPIRATION": "01/29",
    "CARD_SECURITY_CODE": "123",
    "CARD_POSTAL_CODE": "62701",
}


class FakeVault:
    """In-memory stand-in for SecretVault."""

    def __init__(self, bundle: SecretBundle | None = None, error: Exception | None = None):
        self.bundle = bundle
        self.error = error
        self.requested: list[str] = []

    def get_secret(self, name: str) -> SecretBundle:
        self.requested.append(name)
        if self.error is not None:
            raise self.error
        return self.bundle


class FakeDominosClient:
    """Records every API call; optionally fails at one stage."""

    def __init__(
        self,
        stores: list[StoreCandidate] | None = None,
        amount: float = 18.47,
        fail_at: Stage | None = None,
    ):
        self.stores = stores
        self.amount = amount
        self.fail_at = fail_at
        self.calls: list[str] = []
        self.closed = False

    def __enter__(self) -> "FakeDominosClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.closed = True

    def _record(self, name: str, stage: Stage) -> None:
        self.calls.append(name)
        if self.fail_at == stage:
            if stage == Stage.TRACKING:
                raise TrackingError("tracking request failed with HTTP 503", status_code=503)
            raise OrderingApiError(f"{stage.value} rejected by Domino's", stage, codes=["Failure"])

    def find_stores(self, address: Address) -> list[StoreCandidate]:
        self._record("find_stores", Stage.STORE_LOOKUP)
        return list(self.stores or [])

    def get_menu(self, store_id: str) -> Menu:
        self._record("get_menu", Stage.MENU)
        return Menu(store_id=store_id, variants={"14SCREEN": {"Code": "14SCREEN"}})

    def validate_order(self, order: Order) -> dict:
        self._record("validate_order", Stage.VALIDATE)
        order.order_id = "ORDER-1"
        return {"Status": 0}

    def price_order(self, order: Order) -> dict:
        self._record("price_order", Stage.PRICE)
        order.amounts = AmountsBreakdown(customer=self.amount)
        return {"Status": 0}

    def place_order(self, order: Order) -> dict:
        self._record("place_order", Stage.PLACE)
        return {"Status": 0}

    def track_by_phone(self, phone: str) -> TrackingResult:
        self._record("track_by_phone", Stage.TRACKING)
        return TrackingResult(phone=phone, orders=[{"OrderStatus": "Makeline"}])


def store(store_id: str, distance: float, eligible: bool = True, **flags) -> StoreCandidate:
    """Build a store; `flags` overrides single eligibility flags."""
    values = {
        "is_online_capable": eligible,
        "is_delivery_store": eligible,
        "is_open": eligible,
        "service_is_open": {"Delivery": eligible},
    }
    values.update(flags)
    return StoreCandidate(store_id=store_id, min_distance=distance, **values)


@pytest.fixture
def secret_payload() -> dict:
    return dict(SECRET_PAYLOAD)


@pytest.fixture
def secrets() -> SecretBundle:
    return SecretBundle.model_validate(SECRET_PAYLOAD)


@pytest.fixture
def customer(secrets: SecretBundle) -> Customer:
    return Customer(
        first_name=secrets.first_name,
        last_name=secrets.last_name,
        phone=secrets.phone,
        email=secrets.email,
        address=Address.from_string(secrets.address),
    )


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and .env file."""
    return Settings(
        _env_file=None,
        dry_mode=True,
        langfuse_public_key="",
        langfuse_secret_key="",
        log_file="",
    )


@pytest.fixture
def vault(secrets: SecretBundle) -> FakeVault:
    return FakeVault(bundle=secrets)


@pytest.fixture
def client() -> FakeDominosClient:
    return FakeDominosClient(stores=[store("4321", 2.5)])


@pytest.fixture
def failing_vault() -> FakeVault:
    return FakeVault(error=SecretLoadError("could not read secret 'dominosOrdering'"))


@pytest.fixture
def log_messages():
    """Capture loguru output as a list of formatted lines."""
    messages: list[str] = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{level} | {message}")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def make_store():
    return store


@pytest.fixture
def make_client():
    return FakeDominosClient


@pytest.fixture
def make_vault():
    return FakeVault
