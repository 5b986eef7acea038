"""Common behaviour of the AI content providers."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import requests
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from mtg_card_designer.domain.card import CardData
from mtg_card_designer.errors import (
    InputValidationError,
    ProviderNotConfiguredError,
    ServiceError,
)
from mtg_card_designer.services.ai.prompts import POWER_LEVELS, art_prompt, card_text_prompt

logger = logging.getLogger(__name__)


class CardText(BaseModel):
    """Generated rules and flavor text."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    rules_text: str
    flavor_text: str = ""


def parse_card_text(content: str) -> CardText:
    """Parse a model reply, tolerating a fenced ```json block."""
    cleaned = content.replace("```json", "").replace("```", "").strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ServiceError(f"AI response is not valid JSON: {e}") from e
    if not isinstance(data, dict) or not data.get("rulesText") or "flavorText" not in data:
        raise ServiceError("AI response does not have the expected JSON structure")
    try:
        return CardText.model_validate(data)
    except ValidationError as e:
        raise ServiceError(f"AI response does not have the expected JSON structure: {e}") from e


class ContentProvider(ABC):
    """An AI backend that can paint card art and write card text.

    Args:
        api_key: Provider credential; required for every call
        timeout: Request timeout in seconds
    """

    name = "base"

    def __init__(
        self,
        api_key: Optional[str],
        timeout: int = 120,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _require_key(self) -> str:
        if not self.api_key:
            raise ProviderNotConfiguredError(f"API key for {self.name} is not configured")
        return self.api_key

    def _post(self, url: str, payload: dict[str, Any], headers: dict[str, str]) -> Any:
        try:
            response = self.session.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise ServiceError(f"{self.name} request failed: {e}") from e

        if response.status_code != 200:
            error_msg = f"{self.name} API Error {response.status_code}: {response.text}"
            logger.error(error_msg)
            raise ServiceError(error_msg, status_code=response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise ServiceError(f"{self.name} returned a non-JSON response") from e

    def generate_art(self, prompt: str) -> str:
        """Generate card art and return it as an image data URI."""
        if not prompt or not prompt.strip():
            raise InputValidationError("An art prompt is required")
        self._require_key()
        logger.info(f"Generating art with {self.name}")
        return self._generate_image(art_prompt(prompt.strip()))

    def generate_card_text(self, card: CardData, power_level: str, theme: str) -> CardText:
        """Write rules and flavor text for ``card`` around ``theme``."""
        if not theme or not theme.strip():
            raise InputValidationError("A card theme is required")
        if power_level not in POWER_LEVELS:
            raise InputValidationError(
                f"Unknown power level '{power_level}'; expected one of {', '.join(POWER_LEVELS)}"
            )
        self._require_key()
        logger.info(f"Generating card text with {self.name} ({power_level})")
        content = self._complete(card_text_prompt(card, power_level, theme.strip()))
        if not content:
            raise ServiceError(f"{self.name} returned an empty response")
        return parse_card_text(content)

    @abstractmethod
    def _generate_image(self, prompt: str) -> str:
        """Return a data URI for ``prompt``."""

    @abstractmethod
    def _complete(self, prompt: str) -> str:
        """Return the raw text reply for ``prompt``."""
