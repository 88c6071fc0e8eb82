"""
Forward contact-form submissions to the site owner by mail.
"""

from __future__ import annotations

import logging
import re
import smtplib
from dataclasses import dataclass
from email.errors import HeaderParseError
from email.headerregistry import Address
from email.message import EmailMessage
from typing import Mapping, Optional, Protocol

from .errors import InvalidSubmission, MailDeliveryFailed

logger = logging.getLogger(__name__)

SENT_TEXT = "Message has been sent."
NOT_SENT_TEXT = "Message was not sent."

_EMAIL_RE = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)


@dataclass(frozen=True)
class ContactSubmission:
    email: str
    name: str
    message: str

    @classmethod
    def from_form(cls, form: Mapping[str, Optional[str]]) -> "ContactSubmission":
        values = {}
        for field in ("email", "name", "message"):
            value = (form.get(field) or "").strip()
            if not value:
                raise InvalidSubmission(f"Missing form field '{field}'")
            values[field] = value
        if not _EMAIL_RE.match(values["email"]):
            raise InvalidSubmission(f"Invalid email address {values['email']!r}")
        # The name is written into the From header.
        if "\n" in values["name"] or "\r" in values["name"]:
            raise InvalidSubmission("Name must be a single line")
        # The regex admits some local parts that the header model refuses.
        try:
            Address(display_name=values["name"], addr_spec=values["email"])
        except (ValueError, HeaderParseError) as exc:
            raise InvalidSubmission(f"Invalid email address {values['email']!r}: {exc}") from exc
        return cls(**values)


@dataclass(frozen=True)
class ContactResult:
    sent: bool
    error: Optional[str] = None

    @property
    def text(self) -> str:
        if self.sent:
            return SENT_TEXT
        return f"{NOT_SENT_TEXT}\nMailer error: {self.error or 'unknown error'}"


class MailSender(Protocol):
    def send(self, message: EmailMessage) -> None:
        ...


class SmtpMailSender:
    def __init__(
        self,
        host: str = "localhost",
        port: int = 25,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
        starttls: bool = False,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._starttls = starttls
        self._timeout = timeout

    def send(self, message: EmailMessage) -> None:
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
                if self._starttls:
                    smtp.starttls()
                if self._username:
                    smtp.login(self._username, self._password or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise MailDeliveryFailed(str(exc) or exc.__class__.__name__) from exc


def build_message(
    submission: ContactSubmission,
    *,
    recipient: str,
    recipient_name: str,
    subject: str,
) -> EmailMessage:
    message = EmailMessage()
    message["From"] = Address(display_name=submission.name, addr_spec=submission.email)
    message["Reply-To"] = submission.email
    message["To"] = Address(display_name=recipient_name, addr_spec=recipient)
    message["Subject"] = subject
    message.set_content(submission.message)
    return message


def forward_submission(
    submission: ContactSubmission,
    sender: MailSender,
    *,
    recipient: str,
    recipient_name: str = "Website",
    subject: str = "Website contact form",
) -> ContactResult:
    """Send one submission; delivery failures are reported, not raised."""
    message = build_message(
        submission, recipient=recipient, recipient_name=recipient_name, subject=subject
    )
    try:
        sender.send(message)
    except MailDeliveryFailed as exc:
        logger.error("Contact message from %s was not delivered: %s", submission.email, exc)
        return ContactResult(sent=False, error=str(exc))
    logger.info("Contact message from %s forwarded to %s", submission.email, recipient)
    return ContactResult(sent=True)
