"""Welcome mail for newly created employees, sent through a JSON mail API."""

from __future__ import annotations

import logging
from html import escape

import httpx

from leavedesk.common.exceptions import UpstreamServiceError
from leavedesk.config import settings

logger = logging.getLogger(__name__)


def _welcome_html(full_name: str, employee_code: str, email: str, temp_password: str) -> str:
    login_url = escape(settings.APP_LOGIN_URL)
    return (
        f"<p>Hi {escape(full_name)},</p>"
        f"<p>Your account has been created (employee ID <b>{escape(employee_code)}</b>).</p>"
        f"<p>Sign in at <a href=\"{login_url}\">{login_url}</a> with:</p>"
        f"<ul><li>Email: {escape(email)}</li>"
        f"<li>Temporary password: <code>{escape(temp_password)}</code></li></ul>"
        f"<p>You will be asked to change the password after your first sign-in.</p>"
    )


async def send_welcome_email(
    *,
    to: str,
    full_name: str,
    employee_code: str,
    temp_password: str,
) -> bool:
    """POST the welcome mail. Returns False when no mail API is configured.

    Raises ``UpstreamServiceError`` when the mail API is unreachable or
    answers with a non-2xx status.
    """
    if not settings.MAIL_API_URL:
        logger.info("MAIL_API_URL not set; welcome mail for %s not sent", employee_code)
        return False

    payload = {
        "from": settings.MAIL_FROM,
        "to": [to],
        "subject": "Welcome aboard: your account details",
        "html": _welcome_html(full_name, employee_code, to, temp_password),
    }
    headers = {"Authorization": f"Bearer {settings.MAIL_API_KEY}"}

    try:
        async with httpx.AsyncClient(timeout=settings.MAIL_TIMEOUT_SECONDS) as client:
            resp = await client.post(settings.MAIL_API_URL, json=payload, headers=headers)
    except httpx.HTTPError as exc:
        raise UpstreamServiceError("Mail API", f"Mail API request failed: {exc}") from exc

    if resp.status_code >= 300:
        raise UpstreamServiceError(
            "Mail API",
            f"Mail API returned {resp.status_code}: {resp.text[:200]}",
        )
    return True
