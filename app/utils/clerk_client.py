# app/utils/clerk_client.py
import json
import logging
from typing import Any, Dict

import aiohttp

from app.core.config import CLERK_API_URL, CLERK_API_VERSION, CLERK_SECRET_KEY, PROVIDER_TIMEOUT
from app.core.exceptions import UpstreamFailure
from app.core.retry import run_once

logger = logging.getLogger(__name__)


async def _post_user(payload: Dict[str, Any]) -> Dict[str, Any]:
    headers = {
        "Authorization": f"Bearer {CLERK_SECRET_KEY}",
        "Content-Type": "application/json",
        "Clerk-Backend-API-Version": CLERK_API_VERSION,
    }
    async with aiohttp.ClientSession() as session:
        async with session.post(f"{CLERK_API_URL}/users", json=payload, headers=headers) as response:
            if response.status >= 300:
                text = await response.text()
                try:
                    body = json.loads(text)
                except ValueError:
                    # Proxies answer with HTML pages
                    body = text
                logger.error("Clerk API error (%s): %s", response.status, body)
                raise UpstreamFailure("Identity provider rejected the account", details=body)
            try:
                return await response.json(content_type=None)
            except ValueError:
                raise UpstreamFailure("Identity provider returned an unreadable response")


async def create_clerk_user(email: str, password: str, name: str, role: str) -> Dict[str, Any]:
    """
    Create an account with the identity provider and return its user object.
    Not retried: a retry after an ambiguous failure could create a duplicate.
    """
    if not CLERK_SECRET_KEY:
        raise UpstreamFailure("Identity provider is not configured")
    payload = {
        "email_address": [email],
        "password": password,
        "first_name": name,
        "public_metadata": {"role": role},
        "skip_password_checks": True,
        "skip_password_requirement": True,
    }
    try:
        return await run_once(_post_user(payload), PROVIDER_TIMEOUT)
    except aiohttp.ClientError as e:
        logger.error("Clerk user creation failed: %s", e)
        raise UpstreamFailure("Identity provider unreachable", details=str(e))
