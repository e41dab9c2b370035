"""
Outbound transactional email.

Delivery goes through the Resend HTTP API. Sends are fire-and-forget from
the caller's point of view: ``deliver`` logs failures and never raises, so a
bounced email never undoes the invitation that triggered it.
"""

from __future__ import annotations

import html
import uuid
from typing import Optional, Protocol

import httpx
import structlog

from tenantdeck.core.config import get_settings

log = structlog.get_logger()
settings = get_settings()


class Mailer(Protocol):
    async def send(self, *, to: str, subject: str, html: str) -> None:
        ...


class LogMailer:
    """Used when no API key is configured (local development)."""

    async def send(self, *, to: str, subject: str, html: str) -> None:
        log.info("email.logged", to=to, subject=subject)


class ResendMailer:
    def __init__(
        self,
        api_key: str,
        from_address: str,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 10.0,
    ):
        self._api_key = api_key
        self._from = from_address
        self._api_url = api_url
        self._timeout = timeout

    async def send(self, *, to: str, subject: str, html: str) -> None:
        async with httpx.AsyncClient(timeout=httpx.Timeout(self._timeout)) as client:
            resp = await client.post(
                self._api_url,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json={"from": self._from, "to": [to], "subject": subject, "html": html},
            )
            resp.raise_for_status()
        log.info("email.sent", to=to, subject=subject)


def get_mailer() -> Mailer:
    """FastAPI dependency: the configured mailer."""
    if settings.resend_api_key:
        return ResendMailer(
            api_key=settings.resend_api_key,
            from_address=settings.email_from,
            api_url=settings.resend_api_url,
            timeout=settings.email_timeout_seconds,
        )
    return LogMailer()


async def deliver(mailer: Mailer, *, to: str, subject: str, html: str) -> bool:
    """Send an email without raising. Returns whether the provider accepted it."""
    try:
        await mailer.send(to=to, subject=subject, html=html)
    except httpx.HTTPStatusError as exc:
        log.warning("email.rejected", to=to, status=exc.response.status_code)
        return False
    except httpx.HTTPError as exc:
        log.warning("email.send_failed", to=to, error=str(exc))
        return False
    return True


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

def invitation_link(invitation_id: uuid.UUID) -> str:
    return f"{settings.app_url.rstrip('/')}/accept-invitation/{invitation_id}"


def render_invitation_email(
    *,
    email: str,
    organization_name: str,
    invite_link: str,
    inviter_name: Optional[str] = None,
    inviter_email: Optional[str] = None,
) -> tuple[str, str]:
    """Return (subject, html) for an invitation email."""
    inviter = html.escape(inviter_name or inviter_email or "A teammate")
    if inviter_name and inviter_email:
        inviter = f"{inviter} ({html.escape(inviter_email)})"
    subject = "You've been invited to join an organization"
    body = (
        f"<p>Hello {html.escape(email)},</p>"
        f"<p>{inviter} has invited you to join "
        f"<strong>{html.escape(organization_name)}</strong>.</p>"
        f'<p><a href="{html.escape(invite_link, quote=True)}">Accept the invitation</a></p>'
        "<p>If you were not expecting this invitation, you can ignore this email.</p>"
    )
    return subject, body
