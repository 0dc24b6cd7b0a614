"""Transactional email sending with recipient sanitisation."""
from __future__ import annotations

import asyncio
import inspect
import json
import logging
import re
import smtplib
from collections.abc import Sequence
from email.message import EmailMessage
from typing import Awaitable, Callable, Union

from dao_notifications.config import Settings, load_settings
from dao_notifications.models.schemas import EmailSendResult, InvalidEmailReport
from dao_notifications.services.email_sanitizer import sanitize_emails


logger = logging.getLogger(__name__)

SEND_STAGE = "sendEmail"

InvalidEmailReporter = Callable[[InvalidEmailReport], Union[None, Awaitable[None]]]

_SPLIT_RE = re.compile(r"[;,]")


def _iter_tokens(recipients: Sequence[str | None] | str | None) -> list[str | None]:
    if recipients is None:
        return []
    if isinstance(recipients, str):
        return _SPLIT_RE.split(recipients)
    return list(recipients)


def _deliver(settings: Settings, envelope: list[str], subject: str, body: str, html: str | None) -> None:
    """Blocking SMTP delivery; runs in a worker thread."""
    port = settings.smtp_port
    if port == 465:
        server = smtplib.SMTP_SSL(settings.smtp_host, port)
    else:
        server = smtplib.SMTP(settings.smtp_host, port)
    try:
        if port == 587:
            server.starttls()
        if settings.smtp_user and settings.smtp_password:
            server.login(settings.smtp_user, settings.smtp_password)
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["To"] = ", ".join(envelope)
        msg["From"] = (
            f"{settings.smtp_from_name} <{settings.smtp_from}>"
            if settings.smtp_from_name
            else settings.smtp_from
        )
        msg.set_content(body)
        if html:
            msg.add_alternative(html, subtype="html")
        server.send_message(msg, from_addr=settings.smtp_from, to_addrs=envelope)
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            logger.debug("SMTP quit failed for host=%s", settings.smtp_host, exc_info=True)


class TransactionalMailer:
    """Sends transactional email and reports rejected addresses.

    The mailer holds a single reporter slot; registering a new reporter
    replaces the previous one and registering ``None`` clears it.
    """

    def __init__(self, reporter: InvalidEmailReporter | None = None) -> None:
        self._reporter = reporter

    @property
    def reporter(self) -> InvalidEmailReporter | None:
        return self._reporter

    def register_invalid_email_reporter(self, reporter: InvalidEmailReporter | None) -> None:
        self._reporter = reporter

    async def _report_invalid(self, report: InvalidEmailReport) -> None:
        if self._reporter is None:
            return
        try:
            outcome = self._reporter(report)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.warning("[MAIL-INVALID] reporter failed for stage=%s", report.stage, exc_info=True)

    async def send_email(
        self,
        to: Sequence[str | None] | str | None,
        subject: str,
        body: str,
        *,
        html: str | None = None,
    ) -> EmailSendResult:
        """
        Sanitise recipients and send one email to the valid ones.

        Args:
            to: Address list, or a single string separated by ``,`` or ``;``
            subject: Message subject
            body: Plain-text body
            html: Optional HTML alternative

        Returns:
            EmailSendResult describing what happened
        """
        requested = _iter_tokens(to)
        sanitized = sanitize_emails(requested)

        if sanitized.invalid:
            await self._report_invalid(
                InvalidEmailReport(
                    stage=SEND_STAGE,
                    requested_count=len(requested),
                    valid_count=len(sanitized.valid),
                    invalid=sanitized.invalid,
                )
            )

        envelope = sanitized.valid
        if not envelope:
            logger.warning("[MAIL-NO-RECIPIENTS] subject=\"%s\" invalid=%d", subject, len(sanitized.invalid))
            return EmailSendResult(ok=False, detail="no valid recipients", invalid=sanitized.invalid)

        settings = load_settings()
        if settings.smtp_disable:
            mode = "disabled"
        elif not settings.smtp_host or not settings.smtp_from:
            mode = "stub"
        else:
            mode = "real"

        if mode != "real":
            logger.info(
                "[MAIL-OUT] mode=%s envelope=%s subject=\"%s\" result=skipped",
                mode,
                json.dumps(envelope),
                subject,
            )
            return EmailSendResult(
                ok=False,
                detail=mode,
                recipients=envelope,
                invalid=sanitized.invalid,
            )

        try:
            await asyncio.to_thread(_deliver, settings, envelope, subject, body, html)
        except (smtplib.SMTPException, OSError) as err:
            logger.warning(
                "[MAIL-OUT] mode=%s envelope=%s subject=\"%s\" host=%s result=%s",
                mode,
                json.dumps(envelope),
                subject,
                settings.smtp_host,
                err,
            )
            return EmailSendResult(ok=False, detail=str(err), recipients=envelope, invalid=sanitized.invalid)

        logger.info(
            "[MAIL-OUT] mode=%s envelope=%s subject=\"%s\" host=%s result=sent",
            mode,
            json.dumps(envelope),
            subject,
            settings.smtp_host,
        )
        return EmailSendResult(ok=True, detail="sent", recipients=envelope, invalid=sanitized.invalid)


async def send_email(
    to: Sequence[str | None] | str | None,
    subject: str,
    body: str,
    *,
    html: str | None = None,
    reporter: InvalidEmailReporter | None = None,
) -> EmailSendResult:
    """One-shot send using a mailer bound to ``reporter``."""

    return await TransactionalMailer(reporter).send_email(to, subject, body, html=html)
