"""LangGraph ordering pipeline.

Linear graph, one pass per launch:
load_secrets -> find_store -> fetch_menu -> create_order -> attach_payment
-> submit_order. Each node calls out to Secrets Manager or Domino's and
returns a partial state update. Nothing is retried; the first exception
ends the run and is handled once in `run_order`.
"""

from typing import Any, Protocol, TypedDict

from langgraph.graph import END, START, StateGraph
from langgraph.graph.state import CompiledStateGraph
from loguru import logger

from .config import Settings
from .enums import Outcome
from .errors import PizzaSkillError
from .models import (
    Customer,
    Item,
    Menu,
    Order,
    OrderResult,
    SecretBundle,
    TrackingResult,
)
from .orders import (
    OrderingClient,
    attach_payment,
    build_customer,
    create_order,
    submit_order,
)
from .responses import outcome_for_error
from .stores import StoreFinder, find_nearest_store

# ---------------------------------------------------------------------------
# State Schema
# ---------------------------------------------------------------------------


class OrderState(TypedDict, total=False):
    """State for one ordering run. Only `dry_run` is supplied by the caller."""

    dry_run: bool
    secrets: SecretBundle
    customer: Customer
    store_id: str
    menu: Menu
    order: Order  # Mutated in place by validate/price/pay/place
    tracking: TrackingResult | None


class SecretSource(Protocol):
    def get_secret(self, name: str) -> SecretBundle: ...


class PizzaClient(StoreFinder, OrderingClient, Protocol):
    def get_menu(self, store_id: str) -> Menu: ...


# ---------------------------------------------------------------------------
# Graph Construction
# ---------------------------------------------------------------------------


def build_graph(
    vault: SecretSource, client: PizzaClient, settings: Settings
) -> CompiledStateGraph:
    """Compile the pipeline with its collaborators closed over."""

    def load_secrets(state: OrderState) -> dict:
        secrets = vault.get_secret(settings.secret_name)
        return {"secrets": secrets, "customer": build_customer(secrets)}

    def find_store(state: OrderState) -> dict:
        store_id = find_nearest_store(
            client, state["customer"].address, settings.max_store_distance
        )
        return {"store_id": store_id}

    def fetch_menu(state: OrderState) -> dict:
        # The fixed item is ordered whatever the menu says; the menu is only
        # checked so a retired product code shows up in the logs.
        menu = client.get_menu(state["store_id"])
        if not menu.has_variant(settings.item_code):
            logger.warning(
                "Store {} menu has no variant {}; ordering it anyway",
                state["store_id"],
                settings.item_code,
            )
        return {"menu": menu}

    def create_order_node(state: OrderState) -> dict:
        order = create_order(
            client,
            state["customer"],
            Item(code=settings.item_code),
            state["store_id"],
        )
        return {"order": order}

    def attach_payment_node(state: OrderState) -> dict:
        attach_payment(state["order"], state["secrets"], settings.tip_amount)
        return {"order": state["order"]}

    def submit_order_node(state: OrderState) -> dict:
        tracking = submit_order(client, state["order"], dry_run=state["dry_run"])
        return {"tracking": tracking}

    builder = StateGraph(OrderState)
    builder.add_node("load_secrets", load_secrets)
    builder.add_node("find_store", find_store)
    builder.add_node("fetch_menu", fetch_menu)
    builder.add_node("create_order", create_order_node)
    builder.add_node("attach_payment", attach_payment_node)
    builder.add_node("submit_order", submit_order_node)

    builder.add_edge(START, "load_secrets")
    builder.add_edge("load_secrets", "find_store")
    builder.add_edge("find_store", "fetch_menu")
    builder.add_edge("fetch_menu", "create_order")
    builder.add_edge("create_order", "attach_payment")
    builder.add_edge("attach_payment", "submit_order")
    builder.add_edge("submit_order", END)
    return builder.compile()


# ---------------------------------------------------------------------------
# Tracing
# ---------------------------------------------------------------------------


def _create_langfuse_handler(settings: Settings):
    """Create a Langfuse callback handler if credentials are configured.

    Returns None if Langfuse is not configured.
    """
    if not settings.langfuse_public_key or not settings.langfuse_secret_key:
        return None

    from langfuse import Langfuse
    from langfuse.langchain import CallbackHandler

    # Initialize the Langfuse singleton client with credentials
    Langfuse(
        public_key=settings.langfuse_public_key,
        secret_key=settings.langfuse_secret_key,
        host=settings.langfuse_base_url,
    )
    return CallbackHandler()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _log_charge_state(error: BaseException) -> None:
    if not isinstance(error, PizzaSkillError):
        return
    if error.order_placed:
        logger.error(
            "Order was placed and charged, but the {} step failed afterwards. "
            "The customer was told the order failed.",
            error.stage.value,
        )
    elif error.charge_attempted:
        logger.error(
            "Placement failed after submission; the card may have been charged"
        )
    else:
        logger.info("Failed at {} before any charge was attempted", error.stage.value)


def run_order(
    vault: SecretSource,
    client: PizzaClient,
    settings: Settings,
    dry_run: bool | None = None,
) -> OrderResult:
    """Run the pipeline once and classify how it ended.

    Every exception is caught here, logged with its traceback, and turned
    into an `OrderResult`; nothing propagates to the caller.

    Args:
        vault: Source of the secret bundle.
        client: Domino's API client.
        settings: Application settings.
        dry_run: Overrides `settings.dry_mode` when given.
    """
    dry_run = settings.dry_mode if dry_run is None else dry_run
    graph = build_graph(vault, client, settings)

    config: dict[str, Any] = {"run_name": "pizza-order"}
    langfuse_handler = _create_langfuse_handler(settings)
    if langfuse_handler:
        config["callbacks"] = [langfuse_handler]
        logger.info("Langfuse tracing enabled")

    logger.info("Starting order run (dry_run={})", dry_run)
    try:
        final_state = graph.invoke({"dry_run": dry_run}, config=config)
    except Exception as exc:
        logger.exception("Error while placing order: {}", exc)
        _log_charge_state(exc)
        return OrderResult(outcome=outcome_for_error(exc), error=exc)
    finally:
        if langfuse_handler:
            from langfuse import get_client

            get_client().flush()

    outcome = Outcome.DRY_RUN if dry_run else Outcome.PLACED
    logger.info("Order run finished: {}", outcome.value)
    return OrderResult(
        outcome=outcome,
        order=final_state.get("order"),
        tracking=final_state.get("tracking"),
    )
