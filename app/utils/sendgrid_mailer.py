# app/utils/sendgrid_mailer.py
from html import escape
import logging

import aiohttp

from app.core.config import (
    BASE_URL, PROVIDER_TIMEOUT,
    SENDGRID_API_KEY, SENDGRID_API_URL, SENDGRID_FROM_EMAIL,
)
from app.core.exceptions import UpstreamFailure
from app.core.retry import run_once

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "Welcome to New Product App"

ROLE_LABELS = {"driver": "سائق"}


def render_welcome_email(name: str, email: str, temporary_password: str, role: str) -> str:
    role_label = escape(ROLE_LABELS.get(role, role))
    name, email, temporary_password = escape(name), escape(email), escape(temporary_password)
    return f"""
    <div style="direction: rtl; text-align: right;">
      <h2>مرحبًا {name}!</h2>
      <p>لقد تم إنشاء حسابك كـ {role_label} بنجاح.</p>
      <p>إليك بيانات تسجيل الدخول الخاصة بك:</p>
      <p>البريد الإلكتروني: {email}</p>
      <p>كلمة المرور المؤقتة: {temporary_password}</p>
      <p>يرجى تغيير كلمة المرور الخاصة بك بعد تسجيل الدخول الأول.</p>
      <a href="{BASE_URL}/sign-in" style="
        background-color: #4CAF50;
        color: white;
        padding: 15px 32px;
        text-decoration: none;
        display: inline-block;
        border-radius: 4px;">
        فتح تطبيق المنتج الجديد
      </a>
    </div>
    """


async def _send(payload: dict) -> None:
    headers = {
        "Authorization": f"Bearer {SENDGRID_API_KEY}",
        "Content-Type": "application/json",
    }
    async with aiohttp.ClientSession() as session:
        async with session.post(f"{SENDGRID_API_URL}/mail/send", json=payload, headers=headers) as response:
            if response.status >= 300:
                body = await response.text()
                raise UpstreamFailure("Failed to send welcome email", details=body)


async def send_welcome_email(email: str, name: str, temporary_password: str, role: str) -> None:
    if not SENDGRID_API_KEY or not SENDGRID_FROM_EMAIL:
        raise UpstreamFailure("Mail provider is not configured")
    payload = {
        "personalizations": [{"to": [{"email": email}]}],
        "from": {"email": SENDGRID_FROM_EMAIL},
        "subject": WELCOME_SUBJECT,
        "content": [{
            "type": "text/html",
            "value": render_welcome_email(name, email, temporary_password, role),
        }],
    }
    try:
        await run_once(_send(payload), PROVIDER_TIMEOUT)
    except aiohttp.ClientError as e:
        raise UpstreamFailure("Failed to send welcome email", details=str(e))
    logger.info("Welcome email sent to %s", email)
