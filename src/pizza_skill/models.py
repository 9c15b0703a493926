import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import CardType, Outcome

# ---------------------------------------------------------------------------
# Secrets
# ---------------------------------------------------------------------------


class SecretBundle(BaseModel):
    """Credentials and delivery address stored in Secrets Manager."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, coerce_numbers_to_str=True
    )

    address: str = Field(alias="ADDRESS")
    first_name: str = Field(alias="FIRST_NAME")
    last_name: str = Field(alias="LAST_NAME")
    phone: str = Field(alias="PHONE")
    email: str = Field(alias="EMAIL")
    card_number: str = Field(alias="CARD_NUMBER")
    card_expiration: str = Field(alias="CARD_EXPIRATION")
    card_security_code: str = Field(alias="CARD_SECURITY_CODE")
    card_postal_code: str = Field(alias="CARD_POSTAL_CODE")

    @classmethod
    def from_secret_string(cls, secret_string: str) -> "SecretBundle":
        """Decode the JSON string Secrets Manager returns."""
        return cls.model_validate_json(secret_string)

    def __repr__(self) -> str:
        # Keep card data out of logs and tracebacks.
        return f"SecretBundle(first_name={self.first_name!r}, address={self.address!r})"

    __str__ = __repr__


# ---------------------------------------------------------------------------
# Customer
# ---------------------------------------------------------------------------


class Address(BaseModel):
    street: str
    unit: str = ""
    city: str = ""
    region: str = ""
    postal_code: str = ""
    line2: str = ""

    @property
    def line1(self) -> str:
        return self.street

    @classmethod
    def from_string(cls, text: str) -> "Address":
        """Parse a one-line address such as "1 Main St, Springfield, IL 62701".

        The street is everything before the first comma. The remaining parts
        are read from the end: "REGION postal" (or separate region and postal
        parts), then the city, and anything left between street and city is
        kept as the unit ("Apt 2"). ``line2`` always holds the raw remainder,
        which is what the store locator wants.
        """
        parts = [part.strip() for part in text.split(",") if part.strip()]
        if not parts:
            raise ValueError("address is empty")

        street, rest = parts[0], parts[1:]
        tail = list(rest)
        city = region = postal_code = ""
        if tail:
            tokens = tail.pop().split()
            if tokens[-1][0].isdigit():
                postal_code = tokens.pop()
            if tokens:
                region = " ".join(tokens)
            elif len(tail) >= 2:
                region = tail.pop()
        if tail:
            city = tail.pop()

        return cls(
            street=street,
            unit=" ".join(tail),
            city=city,
            region=region,
            postal_code=postal_code,
            line2=", ".join(rest),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "Street": f"{self.street} {self.unit}".strip(),
            "City": self.city,
            "Region": self.region,
            "PostalCode": self.postal_code,
            "Type": "House",
        }


class Customer(BaseModel):
    first_name: str
    last_name: str
    phone: str
    email: str
    address: Address


# ---------------------------------------------------------------------------
# Stores and menu
# ---------------------------------------------------------------------------


class ServiceStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    delivery: bool = Field(default=False, alias="Delivery")
    carryout: bool = Field(default=False, alias="Carryout")


class StoreCandidate(BaseModel):
    """One entry of the store-locator response."""

    model_config = ConfigDict(
        populate_by_name=True, coerce_numbers_to_str=True, extra="ignore"
    )

    store_id: str = Field(alias="StoreID")
    is_online_capable: bool = Field(default=False, alias="IsOnlineCapable")
    is_delivery_store: bool = Field(default=False, alias="IsDeliveryStore")
    is_open: bool = Field(default=False, alias="IsOpen")
    service_is_open: ServiceStatus = Field(
        default_factory=ServiceStatus, alias="ServiceIsOpen"
    )
    min_distance: float = Field(alias="MinDistance")
    address_description: str = Field(default="", alias="AddressDescription")

    @property
    def is_eligible(self) -> bool:
        return (
            self.is_online_capable
            and self.is_delivery_store
            and self.is_open
            and self.service_is_open.delivery
        )


class Menu(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    store_id: str
    products: dict[str, dict[str, Any]] = Field(default_factory=dict, alias="Products")
    variants: dict[str, dict[str, Any]] = Field(default_factory=dict, alias="Variants")

    def has_variant(self, code: str) -> bool:
        return code in self.variants

    @classmethod
    def from_payload(cls, store_id: str, data: dict[str, Any]) -> "Menu":
        return cls.model_validate({**data, "store_id": store_id})


# ---------------------------------------------------------------------------
# Order
# ---------------------------------------------------------------------------


class Item(BaseModel):
    code: str
    quantity: int = Field(default=1, ge=1)
    options: dict[str, Any] = Field(default_factory=dict)

    def to_payload(self, line_id: int) -> dict[str, Any]:
        return {
            "Code": self.code,
            "Qty": self.quantity,
            "ID": line_id,
            "isNew": True,
            "Options": self.options,
        }


class AmountsBreakdown(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    customer: float = Field(default=0.0, alias="Customer")
    food_and_beverage: float = Field(default=0.0, alias="FoodAndBeverage")
    delivery_fee: float = Field(default=0.0, alias="DeliveryFee")
    tax: float = Field(default=0.0, alias="Tax")
    savings: float = Field(default=0.0, alias="Savings")


_CARD_PATTERNS: list[tuple[CardType, re.Pattern[str]]] = [
    (CardType.VISA, re.compile(r"^4\d{12}(?:\d{3})?$")),
    (CardType.MASTERCARD, re.compile(r"^(?:5[1-5]\d{2}|222[1-9]|22[3-9]\d|2[3-6]\d{2}|27[01]\d|2720)\d{12}$")),
    (CardType.AMEX, re.compile(r"^3[47]\d{13}$")),
    (CardType.DINERS, re.compile(r"^3(?:0[0-5]|[68]\d)\d{11}$")),
    (CardType.DISCOVER, re.compile(r"^6(?:011|5\d{2})\d{12}$")),
    (CardType.JCB, re.compile(r"^(?:2131|1800|35\d{3})\d{11}$")),
]


def detect_card_type(number: str) -> CardType:
    """Return the card network for a card number, ignoring spaces and dashes."""
    digits = re.sub(r"\D", "", number)
    for card_type, pattern in _CARD_PATTERNS:
        if pattern.match(digits):
            return card_type
    return CardType.UNKNOWN


class Payment(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: float
    tip_amount: float = 0.0
    number: str
    expiration: str
    security_code: str
    postal_code: str

    @field_validator("expiration")
    @classmethod
    def _digits_only(cls, value: str) -> str:
        return re.sub(r"\D", "", value)

    @property
    def card_type(self) -> CardType:
        return detect_card_type(self.number)

    def to_payload(self) -> dict[str, Any]:
        return {
            "Type": "CreditCard",
            "Amount": self.amount,
            "TipAmount": self.tip_amount,
            "Number": self.number,
            "CardType": self.card_type.value,
            "Expiration": self.expiration,
            "SecurityCode": self.security_code,
            "PostalCode": self.postal_code,
        }

    def __repr__(self) -> str:
        return f"Payment(amount={self.amount!r}, tip_amount={self.tip_amount!r}, card_type={self.card_type.value!r})"

    __str__ = __repr__


class Order(BaseModel):
    """A delivery order, mutated in place by validate -> price -> pay -> place."""

    store_id: str
    customer: Customer
    service_method: str = "Delivery"
    items: list[Item] = Field(default_factory=list)
    payments: list[Payment] = Field(default_factory=list)
    amounts: AmountsBreakdown | None = None
    order_id: str = ""
    estimated_wait_minutes: str = ""

    @property
    def is_priced(self) -> bool:
        return self.amounts is not None

    def add_item(self, item: Item) -> None:
        self.items.append(item)

    def add_payment(self, payment: Payment) -> None:
        if not self.is_priced:
            raise ValueError("order must be priced before a payment is attached")
        if self.payments:
            raise ValueError("order already has a payment")
        self.payments.append(payment)

    def apply_response(self, data: dict[str, Any]) -> None:
        """Copy what the API computed (id, amounts, wait time) onto the order."""
        result = data.get("Order") or {}
        if not isinstance(result, dict):
            raise ValueError("Order in response is not an object")
        if result.get("OrderID"):
            self.order_id = str(result["OrderID"])
        if result.get("AmountsBreakdown"):
            self.amounts = AmountsBreakdown.model_validate(result["AmountsBreakdown"])
        if result.get("EstimatedWaitMinutes"):
            self.estimated_wait_minutes = str(result["EstimatedWaitMinutes"])

    def to_payload(self) -> dict[str, Any]:
        customer = self.customer
        return {
            "Order": {
                "Address": customer.address.to_payload(),
                "Coupons": [],
                "CustomerID": "",
                "Email": customer.email,
                "Extension": "",
                "FirstName": customer.first_name,
                "LastName": customer.last_name,
                "LanguageCode": "en",
                "OrderChannel": "OLO",
                "OrderID": self.order_id,
                "OrderMethod": "Web",
                "OrderTaker": None,
                "Payments": [payment.to_payload() for payment in self.payments],
                "Phone": customer.phone,
                "Products": [
                    item.to_payload(line_id)
                    for line_id, item in enumerate(self.items, start=1)
                ],
                "ServiceMethod": self.service_method,
                "SourceOrganizationURI": "order.dominos.com",
                "StoreID": self.store_id,
                "Tags": {},
                "Version": "1.0",
                "NoCombine": True,
                "Partners": {},
                "NewUser": True,
                "metaData": {},
            }
        }


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class TrackingResult(BaseModel):
    phone: str
    orders: list[dict[str, Any]] = Field(default_factory=list)


class OrderResult(BaseModel):
    """What one invocation ended with."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    outcome: Outcome
    order: Order | None = None
    tracking: TrackingResult | None = None
    error: Exception | None = None
