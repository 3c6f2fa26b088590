"""AWS Secrets Manager credential source."""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Any

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from credo.services._shared.deadline import Deadline, check_deadline
from credo.services._shared.errors import CredentialSourceError, DeadlineExceededError
from credo.services._shared.ports import CredentialSource

log = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"
OPERATION = "secretsmanager.get_secret_value"


class SecretsManagerSource(CredentialSource):
    """
    Reads the database secret with ``GetSecretValue``.

    The botocore client makes a single attempt per call with bounded socket
    timeouts; the credential cache owns the retry policy. No value is cached
    here.

    When a deadline is given the call runs on a small worker pool and the
    caller waits at most ``deadline.remaining()``. A call that outlives the
    deadline is abandoned (it finishes in the background) and the caller
    gets :class:`DeadlineExceededError`.

    :param client: A ``secretsmanager`` boto3 client.
    :param secret_id: Secret name or ARN.
    :param max_workers: Size of the pool running deadline-bound calls.
    """

    def __init__(self, client: Any, secret_id: str, *, max_workers: int = 2) -> None:
        if not secret_id:
            raise ValueError("secret_id is required")
        self.client = client
        self.secret_id = secret_id
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="secretsmanager"
        )

    @classmethod
    def from_config(
        cls,
        *,
        secret_id: str,
        region: str | None = None,
        endpoint_url: str | None = None,
        connect_timeout: float = 3.0,
        read_timeout: float = 5.0,
    ) -> SecretsManagerSource:
        """
        Build a client from settings.

        :param endpoint_url: Override (LocalStack). Empty means the AWS default.
        """
        client = boto3.client(
            "secretsmanager",
            region_name=region or DEFAULT_REGION,
            endpoint_url=endpoint_url or None,
            config=BotoConfig(
                connect_timeout=connect_timeout,
                read_timeout=read_timeout,
                retries={"max_attempts": 1, "mode": "standard"},
            ),
        )
        return cls(client, secret_id)

    def fetch(self, *, deadline: Deadline | None = None) -> str:
        check_deadline(deadline, OPERATION)
        try:
            response = self._call(deadline)
        except ClientError as exc:
            code = (exc.response or {}).get("Error", {}).get("Code", "ClientError")
            log.warning("secrets.fetch_failed secret_id=%s code=%s", self.secret_id, code)
            raise CredentialSourceError(f"GetSecretValue failed: {code}") from exc
        except BotoCoreError as exc:
            log.warning(
                "secrets.fetch_failed secret_id=%s error=%s", self.secret_id, type(exc).__name__
            )
            raise CredentialSourceError(
                f"GetSecretValue failed: {type(exc).__name__}"
            ) from exc

        value = response.get("SecretString")
        if not value:
            raise CredentialSourceError("secret value is empty")
        return value

    def _call(self, deadline: Deadline | None) -> dict[str, Any]:
        if deadline is None:
            return self.client.get_secret_value(SecretId=self.secret_id)
        future = self._executor.submit(self.client.get_secret_value, SecretId=self.secret_id)
        try:
            return future.result(timeout=deadline.remaining())
        except concurrent.futures.TimeoutError:
            future.cancel()
            log.warning("secrets.fetch_abandoned secret_id=%s", self.secret_id)
            raise DeadlineExceededError(OPERATION) from None
