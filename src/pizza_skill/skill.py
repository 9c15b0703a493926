"""Alexa skill entry point.

`lambda_handler` is what the Lambda function is configured to call. A launch
runs one ordering pass and speaks how it went.
"""

from collections.abc import Callable
from typing import Any

from ask_sdk_core.dispatch_components import (
    AbstractExceptionHandler,
    AbstractRequestHandler,
)
from ask_sdk_core.handler_input import HandlerInput
from ask_sdk_core.skill_builder import SkillBuilder
from ask_sdk_core.utils import is_request_type
from ask_sdk_model import Response
from loguru import logger

from .client import DominosClient
from .config import Settings, get_settings
from .graph import PizzaClient, SecretSource, run_order
from .logging import setup_logging
from .responses import ORDER_FAILED_SPEECH, speech_for
from .vault import SecretVault


class LaunchRequestHandler(AbstractRequestHandler):
    """Order a pizza as soon as the skill is opened."""

    def __init__(
        self,
        settings: Settings,
        vault: SecretSource,
        client_factory: Callable[[], PizzaClient],
    ):
        self.settings = settings
        self.vault = vault
        self.client_factory = client_factory

    def can_handle(self, handler_input: HandlerInput) -> bool:
        return is_request_type("LaunchRequest")(handler_input)

    def handle(self, handler_input: HandlerInput) -> Response:
        request_id = handler_input.request_envelope.request.request_id
        with logger.contextualize(request_id=request_id):
            with self.client_factory() as client:
                result = run_order(self.vault, client, self.settings)

        speech = speech_for(result.outcome)
        logger.info("Responding with {} speech", result.outcome.value)
        return handler_input.response_builder.speak(speech).response


class SessionEndedRequestHandler(AbstractRequestHandler):
    def can_handle(self, handler_input: HandlerInput) -> bool:
        return is_request_type("SessionEndedRequest")(handler_input)

    def handle(self, handler_input: HandlerInput) -> Response:
        request = handler_input.request_envelope.request
        logger.info("Session ended: {}", getattr(request, "reason", None))
        return handler_input.response_builder.response


class CatchAllExceptionHandler(AbstractExceptionHandler):
    """Last resort for anything that escapes a request handler."""

    def can_handle(self, handler_input: HandlerInput, exception: Exception) -> bool:
        return True

    def handle(self, handler_input: HandlerInput, exception: Exception) -> Response:
        logger.opt(exception=exception).error("Unhandled skill error: {}", exception)
        return handler_input.response_builder.speak(ORDER_FAILED_SPEECH).response


def create_skill_builder(
    settings: Settings | None = None,
    vault: SecretSource | None = None,
    client_factory: Callable[[], PizzaClient] | None = None,
) -> SkillBuilder:
    """Wire the handlers. Collaborators default to the real AWS/Domino's ones."""
    settings = settings or get_settings()
    vault = vault or SecretVault(region_name=settings.aws_region)
    if client_factory is None:

        def client_factory() -> DominosClient:
            return DominosClient.from_settings(settings)

    builder = SkillBuilder()
    builder.add_request_handler(LaunchRequestHandler(settings, vault, client_factory))
    builder.add_request_handler(SessionEndedRequestHandler())
    builder.add_exception_handler(CatchAllExceptionHandler())
    return builder


_handler: Callable[[dict, Any], dict] | None = None


def lambda_handler(event: dict, context: Any) -> dict:
    """Lambda entry point. Settings, logging and the skill are set up on the first call."""
    global _handler
    if _handler is None:
        settings = get_settings()
        setup_logging(level=settings.log_level, log_file=settings.log_file or None)
        _handler = create_skill_builder(settings).lambda_handler()
    return _handler(event, context)
