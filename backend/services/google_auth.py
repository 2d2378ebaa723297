"""
Google OAuth credentials shared by the Calendar, People and Docs wrappers.

The token is produced once by ``setup_google_auth.py``; the server only
loads and refreshes it.
"""

from __future__ import annotations

import os

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from backend.config import settings
from backend.utils.logger import get_logger

log = get_logger("services.google_auth")

NOT_AUTHENTICATED = "Not authenticated with Google"


def load_credentials() -> Credentials:
    """Load the stored token, refreshing it when it has expired."""
    if not os.path.exists(settings.GOOGLE_TOKEN_FILE):
        raise RuntimeError(f"{NOT_AUTHENTICATED}: run setup_google_auth.py first")

    creds = Credentials.from_authorized_user_file(
        settings.GOOGLE_TOKEN_FILE, settings.GOOGLE_SCOPES
    )
    if creds.valid:
        return creds

    if creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
        except RefreshError as exc:
            raise RuntimeError(f"{NOT_AUTHENTICATED}: token refresh failed ({exc})") from exc
        save_credentials(creds)
        log.info("Google token refreshed")
        return creds

    raise RuntimeError(f"{NOT_AUTHENTICATED}: stored token is invalid")


def save_credentials(creds: Credentials) -> None:
    with open(settings.GOOGLE_TOKEN_FILE, "w") as f:
        f.write(creds.to_json())


def build_service(api: str, version: str):
    """Build an authenticated googleapiclient resource."""
    creds = load_credentials()
    return build(api, version, credentials=creds, cache_discovery=False)


def auth_status() -> dict:
    if settings.MOCK_GOOGLE:
        return {"signed_in": True, "mode": "mock"}
    try:
        load_credentials()
        return {"signed_in": True, "mode": "live"}
    except RuntimeError as exc:
        log.info("Google auth not ready: %s", exc)
        return {"signed_in": False, "mode": "live"}
