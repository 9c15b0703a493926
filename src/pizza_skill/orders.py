"""Order Builder, Payment Attacher and Order Submitter."""

from typing import Any, Protocol

from loguru import logger

from .models import (
    Address,
    Customer,
    Item,
    Order,
    Payment,
    SecretBundle,
    TrackingResult,
)


class OrderingClient(Protocol):
    def validate_order(self, order: Order) -> dict[str, Any]: ...

    def price_order(self, order: Order) -> dict[str, Any]: ...

    def place_order(self, order: Order) -> dict[str, Any]: ...

    def track_by_phone(self, phone: str) -> TrackingResult: ...


def build_customer(secrets: SecretBundle) -> Customer:
    return Customer(
        first_name=secrets.first_name,
        last_name=secrets.last_name,
        phone=secrets.phone,
        email=secrets.email,
        address=Address.from_string(secrets.address),
    )


def create_order(
    client: OrderingClient, customer: Customer, item: Item, store_id: str
) -> Order:
    """Build a one-item delivery order, then validate and price it remotely.

    Errors from either call propagate unchanged.
    """
    order = Order(store_id=store_id, customer=customer)
    order.add_item(item)

    client.validate_order(order)
    logger.info("Order validated for store {} (order_id={})", store_id, order.order_id)

    client.price_order(order)
    logger.info(
        "Order priced: customer owes {}",
        order.amounts.customer if order.amounts else "unknown",
    )
    return order


def attach_payment(
    order: Order, secrets: SecretBundle, tip_amount: float = 1.0
) -> Payment:
    """Pay the priced customer amount with the stored card.

    The card is not checked here; Domino's validates it at placement.
    """
    if order.amounts is None:
        raise ValueError("order must be priced before a payment is attached")

    payment = Payment(
        amount=order.amounts.customer,
        tip_amount=tip_amount,
        number=secrets.card_number,
        expiration=secrets.card_expiration,
        security_code=secrets.card_security_code,
        postal_code=secrets.card_postal_code,
    )
    order.add_payment(payment)
    logger.info(
        "Attached {} payment of {} (+{} tip)",
        payment.card_type.value or "card",
        payment.amount,
        tip_amount,
    )
    return payment


def submit_order(
    client: OrderingClient, order: Order, dry_run: bool
) -> TrackingResult | None:
    """Place the order and look it up by phone, unless this is a dry run.

    Returns:
        The tracking lookup for a live order, None for a dry run.
    """
    if dry_run:
        logger.info("DRY MODE: The order would have been placed now.")
        return None

    client.place_order(order)
    logger.info(
        "Order {} placed with store {}", order.order_id or "(no id)", order.store_id
    )

    tracking = client.track_by_phone(order.customer.phone)
    logger.info("Order placed successfully. Tracking result: {}", tracking.orders)
    return tracking
