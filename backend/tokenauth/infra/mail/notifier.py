"""Email notifiers for confirmation and password-reset links."""

from __future__ import annotations

import concurrent.futures
import logging
import smtplib
import ssl
from abc import ABC, abstractmethod
from email.message import EmailMessage

from tokenauth.services._shared.dto import Principal

log = logging.getLogger(__name__)


def redact_email(email: str) -> str:
    """Mask an email address for logs (``jo***@example.com``)."""
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


class _LinkNotifier(ABC):
    """Compose the confirmation / reset messages; subclasses deliver them."""

    def __init__(self, *, domain: str) -> None:
        self.domain = domain

    def confirmation_link(self, token: str) -> str:
        return f"https://{self.domain}/auth/confirm/{token}"

    def reset_password_link(self, token: str) -> str:
        return f"https://{self.domain}/auth/reset-password/{token}"

    def send_confirmation_email(self, principal: Principal, token: str) -> None:
        body = (
            f"Hello {principal.name},\n\n"
            f"Please confirm your email address by opening:\n"
            f"{self.confirmation_link(token)}\n"
        )
        self._deliver(principal.email, "Confirm your email", body)

    def send_reset_password_email(self, principal: Principal, token: str) -> None:
        body = (
            f"Hello {principal.name},\n\n"
            f"A password reset was requested for your account. To choose a new "
            f"password open:\n{self.reset_password_link(token)}\n\n"
            f"If you did not request it you can ignore this email.\n"
        )
        self._deliver(principal.email, "Reset your password", body)

    @abstractmethod
    def _deliver(self, to_email: str, subject: str, body: str) -> None: ...


class LoggingNotifier(_LinkNotifier):
    """Development notifier: logs that a message would have been sent."""

    def _deliver(self, to_email: str, subject: str, body: str) -> None:
        log.info("mail.dev_mode to=%s subject=%s", redact_email(to_email), subject)


class SMTPNotifier(_LinkNotifier):
    """
    Deliver messages through an SMTP relay (STARTTLS or implicit TLS).

    Fire-and-forget: messages are handed to a background thread pool so the
    calling request never waits on the relay, and SMTP or socket errors are
    logged, never raised. Call :meth:`shutdown` on application exit to drain
    pending deliveries.
    """

    def __init__(
        self,
        *,
        domain: str,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        sender: str,
        timeout: float = 30.0,
        max_workers: int = 2,
    ) -> None:
        super().__init__(domain=domain)
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender
        self.timeout = timeout
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="smtp-notifier"
        )

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting messages; with ``wait`` block until queued ones are sent."""
        self._executor.shutdown(wait=wait, cancel_futures=not wait)

    def _build(self, to_email: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to_email
        msg.set_content(body)
        return msg

    def _deliver(self, to_email: str, subject: str, body: str) -> None:
        msg = self._build(to_email, subject, body)
        try:
            future = self._executor.submit(self._send, msg)
        except RuntimeError:
            log.error(
                "mail.executor_closed to=%s subject=%s", redact_email(to_email), subject
            )
            return
        future.add_done_callback(self._log_unexpected)

    def _send(self, msg: EmailMessage) -> None:
        to_email, subject = str(msg["To"]), str(msg["Subject"])
        context = ssl.create_default_context()
        try:
            if self.use_tls:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                    server.starttls(context=context)
                    self._login(server)
                    server.send_message(msg)
            else:
                with smtplib.SMTP_SSL(
                    self.host, self.port, context=context, timeout=self.timeout
                ) as server:
                    self._login(server)
                    server.send_message(msg)
        except (smtplib.SMTPException, OSError):
            log.error(
                "mail.send_failed to=%s subject=%s",
                redact_email(to_email),
                subject,
                exc_info=True,
            )
            return
        log.info("mail.sent to=%s subject=%s", redact_email(to_email), subject)

    @staticmethod
    def _log_unexpected(future: concurrent.futures.Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            log.error("mail.send_crashed", exc_info=(type(exc), exc, exc.__traceback__))

    def _login(self, server: smtplib.SMTP) -> None:
        if self.username and self.password:
            server.login(self.username, self.password)
