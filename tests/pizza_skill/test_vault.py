"""Tests for SecretVault using botocore's Stubber (no AWS calls)."""

import json

import boto3
import pytest
from botocore.stub import Stubber

from pizza_skill.enums import Stage
from pizza_skill.errors import SecretLoadError
from pizza_skill.vault import SecretVault

SECRET_NAME = "dominosOrdering"


@pytest.fixture
def stubbed():
    client = boto3.client(
        "secretsmanager",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    with Stubber(client) as stubber:
        yield SecretVault(client=client), stubber
        stubber.assert_no_pending_responses()


def test_get_secret(stubbed, secret_payload):
    vault, stubber = stubbed
    stubber.add_response(
        "get_secret_value",
        {"Name": SECRET_NAME, "SecretString": json.dumps(secret_payload)},
        {"SecretId": SECRET_NAME},
    )

    bundle = vault.get_secret(SECRET_NAME)

    assert bundle.first_name == "Pat"
    assert bundle.card_number == "4111111111111111"


def test_every_call_fetches_again(stubbed, secret_payload):
    """Secrets are not cached between invocations."""
    vault, stubber = stubbed
    for phone in ("5550000001", "5550000002"):
        stubber.add_response(
            "get_secret_value",
            {"Name": SECRET_NAME, "SecretString": json.dumps({**secret_payload, "PHONE": phone})},
            {"SecretId": SECRET_NAME},
        )

    assert vault.get_secret(SECRET_NAME).phone == "5550000001"
    assert vault.get_secret(SECRET_NAME).phone == "5550000002"


def test_missing_secret(stubbed):
    vault, stubber = stubbed
    stubber.add_client_error(
        "get_secret_value",
        service_error_code="ResourceNotFoundException",
        service_message="Secrets Manager can't find the specified secret.",
        http_status_code=400,
        expected_params={"SecretId": "missing"},
    )

    with pytest.raises(SecretLoadError) as excinfo:
        vault.get_secret("missing")
    assert excinfo.value.stage == Stage.SECRETS
    assert "ResourceNotFoundException" in str(excinfo.value)


def test_binary_secret_is_rejected(stubbed):
    vault, stubber = stubbed
    stubber.add_response(
        "get_secret_value",
        {"Name": SECRET_NAME, "SecretBinary": b"\x00\x01"},
        {"SecretId": SECRET_NAME},
    )

    with pytest.raises(SecretLoadError):
        vault.get_secret(SECRET_NAME)


def test_malformed_secret_does_not_leak_values(stubbed, secret_payload):
    vault, stubber = stubbed
    del secret_payload["EMAIL"]
    stubber.add_response(
        "get_secret_value",
        {"Name": SECRET_NAME, "SecretString": json.dumps(secret_payload)},
        {"SecretId": SECRET_NAME},
    )

    with pytest.raises(SecretLoadError) as excinfo:
        vault.get_secret(SECRET_NAME)
    assert "EMAIL" in str(excinfo.value)
    assert "4111111111111111" not in str(excinfo.value)


def test_invalid_json(stubbed):
    vault, stubber = stubbed
    stubber.add_response(
        "get_secret_value",
        {"Name": SECRET_NAME, "SecretString": "not json"},
        {"SecretId": SECRET_NAME},
    )

    with pytest.raises(SecretLoadError):
        vault.get_secret(SECRET_NAME)
