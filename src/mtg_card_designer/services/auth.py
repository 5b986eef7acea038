"""Login and registration against the backend."""

import base64
import binascii
import json
import logging
from typing import Optional

from mtg_card_designer.errors import InputValidationError, ServiceError
from mtg_card_designer.services.api_client import ApiClient

logger = logging.getLogger(__name__)


def user_id_from_token(token: Optional[str]) -> Optional[int]:
    """Read the ``id`` claim from a JWT payload without verifying it."""
    if not token:
        return None
    try:
        payload = token.split(".")[1]
        payload += "=" * (-len(payload) % 4)
        claims = json.loads(base64.urlsafe_b64decode(payload))
    except (IndexError, ValueError, binascii.Error) as e:
        logger.warning(f"Failed to decode token: {e}")
        return None
    if not isinstance(claims, dict):
        return None
    user_id = claims.get("id")
    return int(user_id) if user_id else None


class AuthService:
    def __init__(self, client: Optional[ApiClient] = None):
        self.client = client or ApiClient(token="")

    @staticmethod
    def _validate(username: str, password: str) -> None:
        if not username or not password:
            raise InputValidationError("Username and password are required")

    def login(self, username: str, password: str) -> str:
        """Return the access token for the given credentials."""
        self._validate(username, password)
        body = self.client.post(
            "auth/login",
            json={"username": username, "password": password},
            default_error="Login failed",
        )
        token = body.get("accessToken") if isinstance(body, dict) else None
        if not token:
            raise ServiceError("Login failed: no access token returned")
        logger.info(f"Logged in as {username}")
        return token

    def register(self, username: str, password: str) -> Optional[int]:
        """Create an account; returns the new user id when the server sends one."""
        self._validate(username, password)
        body = self.client.post(
            "auth/register",
            json={"username": username, "password": password},
            default_error="Registration failed",
        )
        if isinstance(body, dict) and body.get("userId") is not None:
            return int(body["userId"])
        return None

    user_id_from_token = staticmethod(user_id_from_token)
