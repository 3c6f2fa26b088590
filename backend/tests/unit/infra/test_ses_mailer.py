# tests/unit/infra/test_ses_mailer.py
from __future__ import annotations

import json

import boto3
import pytest
from botocore.stub import ANY, Stubber
from credo.infra.email.ses_mailer import SESVerificationMailer
from credo.services._shared.errors import EmailDeliveryError
from credo.services._shared.ports import VerificationEmail


def _client():
    return boto3.client(
        "sesv2",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


def _mailer(client):
    return SESVerificationMailer(
        client,
        from_address="no-reply@credo.test",
        template_name="credo-verify-email",
        app_url="https://app.credo.test/",
    )


MESSAGE = VerificationEmail(to_address="alice@example.com", name="Alice", token="tok en/1")


def test_sends_templated_email():
    client = _client()
    mailer = _mailer(client)
    stubber = Stubber(client)
    stubber.add_response(
        "send_email",
        {"MessageId": "msg-1"},
        {
            "FromEmailAddress": "no-reply@credo.test",
            "Destination": {"ToAddresses": ["alice@example.com"]},
            "Content": {
                "Template": {
                    "TemplateName": "credo-verify-email",
                    "TemplateData": json.dumps(
                        {
                            "name": "Alice",
                            "verification_url": (
                                "https://app.credo.test/api/v1/auth/verify-email"
                                "?token=tok+en%2F1"
                            ),
                        }
                    ),
                }
            },
        },
    )

    with stubber:
        mailer.send_verification(MESSAGE)

    stubber.assert_no_pending_responses()


def test_client_error_becomes_delivery_error():
    client = _client()
    mailer = _mailer(client)
    stubber = Stubber(client)
    stubber.add_client_error(
        "send_email",
        service_error_code="MessageRejected",
        expected_params={"FromEmailAddress": ANY, "Destination": ANY, "Content": ANY},
    )

    with stubber, pytest.raises(EmailDeliveryError, match="MessageRejected"):
        mailer.send_verification(MESSAGE)


def test_requires_sender():
    with pytest.raises(ValueError):
        SESVerificationMailer(_client(), from_address="", template_name="t", app_url="x")
