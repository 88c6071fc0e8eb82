import smtplib
from email.message import EmailMessage
from typing import List
from unittest.mock import patch

import pytest

from static_site_tools.contact import (
    ContactResult,
    ContactSubmission,
    SmtpMailSender,
    build_message,
    forward_submission,
)
from static_site_tools.errors import InvalidSubmission, MailDeliveryFailed


class _RecordingSender:
    def __init__(self) -> None:
        self.sent: List[EmailMessage] = []

    def send(self, message: EmailMessage) -> None:
        self.sent.append(message)


class _FailingSender:
    def send(self, message: EmailMessage) -> None:
        raise MailDeliveryFailed("SMTP connect() failed.")


SUBMISSION = ContactSubmission(email="jane@example.com", name="Jane Doe", message="Hi there")


def test_from_form_strips_values() -> None:
    submission = ContactSubmission.from_form(
        {"email": " jane@example.com ", "name": "Jane Doe", "message": "Hi there\n"}
    )
    assert submission == SUBMISSION


@pytest.mark.parametrize(
    "form",
    [
        {"name": "Jane", "message": "Hi"},
        {"email": "jane@example.com", "name": "  ", "message": "Hi"},
        {"email": "jane@example.com", "name": "Jane", "message": None},
        {"email": "not-an-address", "name": "Jane", "message": "Hi"},
        {"email": ".jane@example.com", "name": "Jane", "message": "Hi"},
        {"email": "jane@example.com", "name": "Jane\nBcc: x@example.com", "message": "Hi"},
    ],
)
def test_from_form_rejects_bad_input(form) -> None:
    with pytest.raises(InvalidSubmission):
        ContactSubmission.from_form(form)


def test_message_comes_from_the_submitter() -> None:
    print("The message is sent on behalf of the person who filled in the form.")
    message = build_message(
        SUBMISSION, recipient="owner@example.com", recipient_name="AeonLabs website", subject="Contact"
    )

    assert str(message["From"]) == "Jane Doe <jane@example.com>"
    assert str(message["To"]) == "AeonLabs website <owner@example.com>"
    assert str(message["Reply-To"]) == "jane@example.com"
    assert message["Subject"] == "Contact"
    assert message.get_content().strip() == "Hi there"


def test_forward_success_text() -> None:
    sender = _RecordingSender()

    result = forward_submission(SUBMISSION, sender, recipient="owner@example.com")

    assert result == ContactResult(sent=True)
    assert result.text == "Message has been sent."
    assert len(sender.sent) == 1
    assert str(sender.sent[0]["Subject"]) == "Website contact form"


def test_forward_failure_text() -> None:
    print("Delivery failures are reported to the submitter with the mailer error.")
    result = forward_submission(SUBMISSION, _FailingSender(), recipient="owner@example.com")

    assert result.sent is False
    assert result.text == "Message was not sent.\nMailer error: SMTP connect() failed."


def test_smtp_sender_sends_message() -> None:
    sender = SmtpMailSender("mail.example.com", 587, username="user", password="secret", starttls=True)
    message = build_message(SUBMISSION, recipient="owner@example.com", recipient_name="Site", subject="S")

    with patch("smtplib.SMTP") as smtp_cls:
        sender.send(message)

    smtp_cls.assert_called_once_with("mail.example.com", 587, timeout=10.0)
    smtp = smtp_cls.return_value.__enter__.return_value
    smtp.starttls.assert_called_once_with()
    smtp.login.assert_called_once_with("user", "secret")
    smtp.send_message.assert_called_once_with(message)


def test_smtp_sender_wraps_errors() -> None:
    sender = SmtpMailSender()
    message = build_message(SUBMISSION, recipient="owner@example.com", recipient_name="Site", subject="S")

    with patch("smtplib.SMTP", side_effect=ConnectionRefusedError("refused")):
        with pytest.raises(MailDeliveryFailed):
            sender.send(message)

    with patch("smtplib.SMTP") as smtp_cls:
        smtp = smtp_cls.return_value.__enter__.return_value
        smtp.send_message.side_effect = smtplib.SMTPRecipientsRefused({"owner@example.com": (550, b"no")})
        with pytest.raises(MailDeliveryFailed):
            sender.send(message)
