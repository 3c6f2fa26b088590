"""Amazon SES (v2) verification mailer using a stored template."""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import urlencode

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from credo.services._shared.errors import EmailDeliveryError
from credo.services._shared.ports import VerificationEmail, VerificationMailer

log = logging.getLogger(__name__)


class SESVerificationMailer(VerificationMailer):
    """
    Sends verification links with ``SendEmail`` and an SES template.

    The template receives ``name`` and ``verification_url``.

    :param client: A ``sesv2`` boto3 client.
    :param from_address: Verified sender identity.
    :param template_name: SES template name.
    :param app_url: Public base URL the verification link points at.
    """

    VERIFY_PATH = "/api/v1/auth/verify-email"

    def __init__(
        self, client: Any, *, from_address: str, template_name: str, app_url: str
    ) -> None:
        if not from_address:
            raise ValueError("from_address is required")
        self.client = client
        self.from_address = from_address
        self.template_name = template_name
        self.app_url = app_url.rstrip("/")

    @classmethod
    def from_config(
        cls,
        *,
        region: str,
        from_address: str,
        template_name: str,
        app_url: str,
        endpoint_url: str | None = None,
    ) -> SESVerificationMailer:
        client = boto3.client("sesv2", region_name=region, endpoint_url=endpoint_url or None)
        return cls(
            client, from_address=from_address, template_name=template_name, app_url=app_url
        )

    def verification_url(self, token: str) -> str:
        return f"{self.app_url}{self.VERIFY_PATH}?{urlencode({'token': token})}"

    def send_verification(self, message: VerificationEmail) -> None:
        template_data = {
            "name": message.name,
            "verification_url": self.verification_url(message.token),
        }
        try:
            res = self.client.send_email(
                FromEmailAddress=self.from_address,
                Destination={"ToAddresses": [message.to_address]},
                Content={
                    "Template": {
                        "TemplateName": self.template_name,
                        "TemplateData": json.dumps(template_data),
                    }
                },
            )
        except ClientError as exc:
            code = (exc.response or {}).get("Error", {}).get("Code", "ClientError")
            log.warning("ses.send_failed to=%s code=%s", message.to_address, code)
            raise EmailDeliveryError(f"SES email failed: {code}") from exc
        except BotoCoreError as exc:
            log.warning("ses.send_failed to=%s error=%s", message.to_address, type(exc).__name__)
            raise EmailDeliveryError("SES email failed") from exc
        log.info("ses.sent to=%s message_id=%s", message.to_address, res.get("MessageId"))
