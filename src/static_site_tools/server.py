from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import FastAPI, Form
from fastapi.responses import PlainTextResponse

from .configuration import Settings
from .contact import ContactSubmission, MailSender, SmtpMailSender, forward_submission
from .errors import InvalidSubmission

logger = logging.getLogger(__name__)


def sender_from_settings(settings: Settings) -> SmtpMailSender:
    return SmtpMailSender(
        settings.smtp_host,
        settings.smtp_port,
        username=settings.smtp_username,
        password=settings.smtp_password,
        starttls=settings.smtp_starttls,
        timeout=settings.smtp_timeout,
    )


def create_app(settings: Settings, sender: Optional[MailSender] = None) -> FastAPI:
    """
    Build the contact-form application.

    ``POST /sendmail`` takes ``email``, ``name`` and ``message`` form fields
    and answers in plain text whether the message went out.
    """
    recipient = settings.require_recipient()
    mail_sender = sender if sender is not None else sender_from_settings(settings)
    app = FastAPI(title="static-site-tools contact form")

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "healthy"}

    @app.post("/sendmail", response_class=PlainTextResponse)
    def sendmail(
        email: Optional[str] = Form(None),
        name: Optional[str] = Form(None),
        message: Optional[str] = Form(None),
    ) -> PlainTextResponse:
        try:
            submission = ContactSubmission.from_form(
                {"email": email, "name": name, "message": message}
            )
        except InvalidSubmission as exc:
            logger.info("Rejected contact submission: %s", exc)
            return PlainTextResponse(str(exc), status_code=400)
        result = forward_submission(
            submission,
            mail_sender,
            recipient=recipient,
            recipient_name=settings.contact_recipient_name,
            subject=settings.contact_subject,
        )
        return PlainTextResponse(result.text)

    return app
