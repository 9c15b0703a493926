"""Secret Loader: read the ordering credentials from AWS Secrets Manager."""

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger
from pydantic import ValidationError

from .errors import SecretLoadError
from .models import SecretBundle


class SecretVault:
    """Thin wrapper over a Secrets Manager client.

    Nothing is cached: every call goes back to Secrets Manager so a rotated
    card or address is picked up on the next launch.
    """

    def __init__(self, client: Any = None, region_name: str | None = None):
        self._client = client
        self._region_name = region_name

    @property
    def client(self) -> Any:
        # Created on first use so importing the skill needs no AWS region.
        if self._client is None:
            self._client = boto3.client("secretsmanager", region_name=self._region_name)
        return self._client

    def get_secret(self, name: str) -> SecretBundle:
        """Fetch and decode the named secret.

        Raises:
            SecretLoadError: The secret is missing, unreadable, or does not
                hold every field the order needs.
        """
        logger.debug("Fetching secret {}", name)
        try:
            response = self.client.get_secret_value(SecretId=name)
        except (ClientError, BotoCoreError) as exc:
            raise SecretLoadError(f"could not read secret {name!r}: {exc}") from exc

        secret_string = response.get("SecretString")
        if not secret_string:
            raise SecretLoadError(f"secret {name!r} has no string value")

        try:
            bundle = SecretBundle.from_secret_string(secret_string)
        except ValidationError as exc:
            fields = ", ".join(
                str(err["loc"][0]) if err["loc"] else err["type"] for err in exc.errors()
            )
            # The message must not echo the secret itself.
            raise SecretLoadError(f"secret {name!r} is malformed: {fields}") from None

        logger.info("Loaded secret {}", name)
        return bundle
