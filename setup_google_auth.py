"""
One-time Google OAuth setup for precap.

Grants Calendar (read), Contacts (read), profile and Docs access and writes
the token the MCP workspace server loads at startup.

Usage:
    python setup_google_auth.py
"""

import os
import sys

from google_auth_oauthlib.flow import InstalledAppFlow

from backend.config import settings
from backend.services.google_auth import load_credentials, save_credentials


def _missing_scopes() -> list[str]:
    """Scopes the stored token lacks; raises RuntimeError when there is no usable token."""
    creds = load_credentials()
    granted = set(creds.granted_scopes or settings.GOOGLE_SCOPES)
    return [s for s in settings.GOOGLE_SCOPES if s not in granted]


def main():
    if not os.path.exists(settings.GOOGLE_CREDENTIALS_FILE):
        print(f"[ERROR] OAuth client file not found: {settings.GOOGLE_CREDENTIALS_FILE}")
        print("        Create a desktop OAuth client at https://console.cloud.google.com/apis/credentials")
        print("        with the Calendar, People and Docs APIs enabled, and save it there.")
        sys.exit(1)

    try:
        missing = _missing_scopes()
    except RuntimeError as exc:
        print(f"[INFO] {exc}")
    else:
        if not missing:
            print(f"[OK] {settings.GOOGLE_TOKEN_FILE} is valid for every precap scope.")
            return
        print(f"[INFO] Stored token lacks: {', '.join(missing)}")

    print("[INFO] Opening browser for Google sign-in...")
    flow = InstalledAppFlow.from_client_secrets_file(
        settings.GOOGLE_CREDENTIALS_FILE, settings.GOOGLE_SCOPES
    )
    save_credentials(flow.run_local_server(port=0))
    print(f"[OK] Token saved to {settings.GOOGLE_TOKEN_FILE}")
    print("     Set MOCK_GOOGLE=false in .env to use your real account.")


if __name__ == "__main__":
    main()
