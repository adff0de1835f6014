from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

from tokenauth.services._shared.dto import Principal

NotificationKind = Literal["confirmation", "reset_password"]


class Notifier(Protocol):
    """
    Outbound delivery of token-bearing emails.

    Fire-and-forget: implementations log delivery failures instead of raising,
    so a flaky mail relay never fails an auth flow.
    """

    def send_confirmation_email(self, principal: Principal, token: str) -> None: ...
    def send_reset_password_email(self, principal: Principal, token: str) -> None: ...


@dataclass(frozen=True, slots=True)
class SentNotification:
    """A message captured by :class:`InMemoryNotifier`."""

    kind: NotificationKind
    email: str
    token: str


class InMemoryNotifier(Notifier):
    """Record notifications instead of sending them (tests)."""

    def __init__(self) -> None:
        self.sent: list[SentNotification] = []

    def send_confirmation_email(self, principal: Principal, token: str) -> None:
        self.sent.append(SentNotification("confirmation", principal.email, token))

    def send_reset_password_email(self, principal: Principal, token: str) -> None:
        self.sent.append(SentNotification("reset_password", principal.email, token))

    def last(self, kind: NotificationKind | None = None) -> SentNotification | None:
        for item in reversed(self.sent):
            if kind is None or item.kind == kind:
                return item
        return None
