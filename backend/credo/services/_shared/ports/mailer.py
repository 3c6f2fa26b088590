from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VerificationEmail:
    """A verification email handed to a mailer."""

    to_address: str
    name: str
    token: str


class VerificationMailer(Protocol):
    """Port for delivering email-verification links."""

    def send_verification(self, message: VerificationEmail) -> None:
        """:raises EmailDeliveryError: When the message cannot be handed off."""


class NoopVerificationMailer(VerificationMailer):
    """Drops messages. Used when no email backend is configured."""

    def send_verification(self, message: VerificationEmail) -> None:
        log.info("mailer.noop to=%s", message.to_address)


class RecordingVerificationMailer(VerificationMailer):
    """Keeps an outbox in memory for tests."""

    def __init__(self) -> None:
        self.outbox: list[VerificationEmail] = []

    def send_verification(self, message: VerificationEmail) -> None:
        self.outbox.append(message)
