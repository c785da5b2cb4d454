"""
app/api/dependencies.py

Shared FastAPI dependencies for request authentication.
"""

from __future__ import annotations

import secrets

from fastapi import Depends, Header, HTTPException, status

from app.config import APISecuritySettings, get_api_security_settings


def require_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    settings: APISecuritySettings = Depends(get_api_security_settings),
) -> None:
    """
    Reject requests whose ``X-API-Key`` does not match CONTACT_SYNC_API_KEY.
    Routes stay open when no key is configured.
    """

    if settings.api_key is None:
        return

    if not x_api_key or not secrets.compare_digest(x_api_key, settings.api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid API key.",
        )
