"""Outgoing email: the Mailer collaborator and the account templates.

Flow:
  1. A service builds the HTML body with one of the render_* helpers
  2. `deliver()` hands it to the request's Mailer in Starlette's threadpool
     (smtplib blocks)
  3. SmtpMailer talks to the configured SMTP server; with no host
     configured it only logs the message (development mode)

Tests override `get_mailer` with a recording fake.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Protocol

from starlette.concurrency import run_in_threadpool

from abasta.config import settings

logger = logging.getLogger("abasta.email")

SUBJECT_PASSWORD_RESET = "Password reset - Abasta"
SUBJECT_VERIFY_EMAIL = "Verify your Abasta account"
SUBJECT_VERIFY_COMPANY = "Welcome to Abasta! - Verify your company"


class Mailer(Protocol):
    def send(self, to: str, subject: str, html: str) -> None:
        ...


class SmtpMailer:
    """Sends HTML mail over SMTP (STARTTLS when enabled)."""

    def __init__(
        self,
        host: str = settings.smtp_host,
        port: int = settings.smtp_port,
        username: str = settings.smtp_username,
        password: str = settings.smtp_password,
        use_tls: bool = settings.smtp_use_tls,
        sender: str = settings.mail_from,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender

    def send(self, to: str, subject: str, html: str) -> None:
        if not self.host:
            logger.info("SMTP not configured; email to %s (%s) not sent", to, subject)
            return

        msg = MIMEMultipart("alternative")
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html", "utf-8"))

        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            if self.use_tls:
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.sendmail(self.sender, [to], msg.as_string())
        logger.info("Email sent to %s: %s", to, subject)


_default_mailer = SmtpMailer()


def get_mailer() -> Mailer:
    """FastAPI dependency returning the process-wide mailer."""
    return _default_mailer


async def deliver(mailer: Mailer, to: str, subject: str, html: str) -> None:
    await run_in_threadpool(mailer.send, to, subject, html)


# ── Templates ───────────────────────────────────────────────

def layout(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="UTF-8"></head>'
        '<body style="font-family: Arial, sans-serif; background-color: #f4f4f4; padding: 20px;">'
        '<table width="600" cellpadding="0" cellspacing="0" '
        'style="background-color: #ffffff; border-radius: 8px; margin: 0 auto;">'
        '<tr><td style="background-color: #667eea; padding: 30px; text-align: center;">'
        '<h1 style="color: #ffffff; margin: 0;">Abasta</h1></td></tr>'
        f'<tr><td style="padding: 30px;"><h2 style="margin-top: 0;">{escape(title)}</h2>'
        f"{body}</td></tr>"
        "</table></body></html>"
    )


def _button(link: str, label: str) -> str:
    return (
        f'<p style="text-align: center; margin: 30px 0;"><a href="{escape(link)}" '
        'style="padding: 14px 32px; background-color: #667eea; color: #ffffff; '
        f'text-decoration: none; border-radius: 5px;">{escape(label)}</a></p>'
        f'<p style="font-size: 12px; color: #999;">{escape(link)}</p>'
    )


def verification_link(token: str) -> str:
    return f"{settings.frontend_url}/verify-email?token={token}"


def reset_link(token: str) -> str:
    return f"{settings.frontend_url}/reset-password?token={token}"


def render_password_reset(name: str, token: str) -> str:
    return layout(
        f"Hello {name},",
        "<p>We received a request to reset your password. "
        f"The link below is valid for {settings.password_reset_expire_hours} hour(s).</p>"
        + _button(reset_link(token), "Reset password")
        + "<p>If you did not ask for this, you can ignore this email.</p>",
    )


def render_email_verification(name: str, token: str) -> str:
    return layout(
        f"Hello {name},",
        "<p>Please confirm your email address to activate your account. "
        f"The link is valid for {settings.email_verification_expire_hours} hours.</p>"
        + _button(verification_link(token), "Verify email"),
    )


def render_company_verification(name: str, company_name: str, token: str) -> str:
    return layout(
        f"Welcome, {name}!",
        f"<p>Your company <strong>{escape(company_name)}</strong> has been registered. "
        "Verify your email to activate it and start placing orders. "
        f"The link is valid for {settings.email_verification_expire_hours} hours.</p>"
        + _button(verification_link(token), "Verify and activate"),
    )
