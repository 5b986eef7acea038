"""Authenticated HTTP client shared by the backend services."""

import logging
from typing import Any, Optional

import requests

from mtg_card_designer.config import Settings, get_settings
from mtg_card_designer.errors import ServiceError, SessionInvalidError

logger = logging.getLogger(__name__)


class ApiClient:
    """Thin wrapper over ``requests`` for the card designer backend.

    Args:
        base_url: API root, e.g. ``http://localhost:3001/api``
        token: Bearer token sent with every request
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.token = token if token is not None else settings.access_token
        self.timeout = timeout or settings.api_timeout
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        files: Optional[dict] = None,
        default_error: str = "Request failed",
    ) -> Any:
        """Send a request and return the decoded JSON body (or None).

        Raises:
            SessionInvalidError: On 401/403
            ServiceError: On any other failure, with the server's message
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(),
                json=json,
                files=files,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ServiceError(f"{default_error}: {e}") from e

        if response.status_code in (401, 403):
            raise SessionInvalidError(
                self._error_message(response, "Session is no longer valid"),
                status_code=response.status_code,
            )
        if not response.ok:
            message = self._error_message(response, default_error)
            logger.warning(f"{method} {url} failed with {response.status_code}: {message}")
            raise ServiceError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    @staticmethod
    def _error_message(response: requests.Response, default: str) -> str:
        try:
            body = response.json()
        except ValueError:
            return default
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return default

    def get(self, path: str, **kwargs: Any) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Any:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Any:
        return self.request("DELETE", path, **kwargs)
