"""Operator alerts: a bounded queue drained by one sender thread."""

from __future__ import annotations

import logging
import queue
import smtplib
import threading
from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage
from typing import Optional, Protocol, Tuple

from .config import AppConfig, EmailConfig

LOGGER = logging.getLogger(__name__)


class AlertTransport(Protocol):
    """Deliver one alert. Implementations may block and may raise."""

    def send(self, subject: str, body: str) -> None:
        """Send ``subject``/``body`` to every configured recipient."""


class Notifier(Protocol):
    def notify(self, subject: str, body: str) -> None:
        """Queue an alert without blocking the caller."""


class LogOnlyTransport:
    """Transport used when email is disabled; alerts only reach the log."""

    def send(self, subject: str, body: str) -> None:
        LOGGER.info("Alert (email disabled): %s", subject)
        LOGGER.debug("Alert body: %s", body)


@dataclass(slots=True)
class SMTPTransport:
    """Send plain-text alerts through an SMTP relay."""

    server: str
    port: int
    sender: str
    recipients: Tuple[str, ...]
    subject_prefix: str = ""
    starttls: bool = False
    username: Optional[str] = None
    password: Optional[str] = None
    timeout: float = 30.0

    @classmethod
    def from_config(cls, email: EmailConfig, *, subject_prefix: str = "") -> "SMTPTransport":
        return cls(
            server=email.server,
            port=email.port,
            sender=email.sender,
            recipients=email.recipients,
            subject_prefix=subject_prefix,
            starttls=email.starttls,
            username=email.username,
            password=email.password,
            timeout=email.timeout,
        )

    def build_message(self, subject: str, body: str, recipient: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = recipient
        message["Subject"] = f"{self.subject_prefix}{subject}"
        message.set_content(f"Date: {datetime.now().astimezone().isoformat()}\n{body}\n")
        return message

    def send(self, subject: str, body: str) -> None:
        LOGGER.info("sending email, subject: %s%s", self.subject_prefix, subject)
        with smtplib.SMTP(self.server, self.port, timeout=self.timeout) as smtp:
            if self.starttls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password or "")
            for recipient in self.recipients:
                smtp.send_message(self.build_message(subject, body, recipient))


class AlertDispatcher:
    """Accept alerts from any thread and deliver them one at a time.

    ``notify`` never blocks and never raises: when the queue is full the alert
    is dropped and a warning is logged. Transport failures are logged by the
    sender thread and do not stop it.
    """

    _STOP = object()

    def __init__(self, transport: AlertTransport, *, queue_size: int = 100) -> None:
        self._transport = transport
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=max(1, queue_size))
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self.dropped = 0

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._thread = threading.Thread(
                target=self._drain, name="faxsync-alerts", daemon=True
            )
            self._thread.start()

    def notify(self, subject: str, body: str) -> None:
        try:
            self._queue.put_nowait((subject, body))
        except queue.Full:
            with self._lock:
                self.dropped += 1
            LOGGER.warning("Alert queue full; dropping alert %r", subject)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Deliver what is already queued, then stop the sender thread."""

        with self._lock:
            thread = self._thread
            self._thread = None
        if thread is None:
            return
        self._queue.put(self._STOP)
        thread.join(timeout)

    def _drain(self) -> None:
        while True:
            entry = self._queue.get()
            try:
                if entry is self._STOP:
                    return
                subject, body = entry  # type: ignore[misc]
                self._deliver(subject, body)
            finally:
                self._queue.task_done()

    def _deliver(self, subject: str, body: str) -> None:
        try:
            self._transport.send(subject, body)
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("email error: %s", exc)

    def __enter__(self) -> "AlertDispatcher":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


def build_alert_dispatcher(config: AppConfig) -> AlertDispatcher:
    if config.email.enabled:
        transport: AlertTransport = SMTPTransport.from_config(
            config.email, subject_prefix=config.alerts.subject_prefix
        )
    else:
        LOGGER.debug("email not enabled, alerts will only be logged")
        transport = LogOnlyTransport()
    return AlertDispatcher(transport, queue_size=config.alerts.queue_size)


__all__ = [
    "AlertDispatcher",
    "AlertTransport",
    "LogOnlyTransport",
    "Notifier",
    "SMTPTransport",
    "build_alert_dispatcher",
]
