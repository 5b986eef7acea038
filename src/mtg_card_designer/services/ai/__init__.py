"""AI content providers for card art and card text."""

from typing import Optional

from mtg_card_designer.config import Settings, get_settings
from mtg_card_designer.errors import InputValidationError

from .base import CardText, ContentProvider, parse_card_text
from .gemini import GeminiProvider
from .openai import OpenAIProvider
from .prompts import POWER_LEVELS

PROVIDERS = {
    "openai": OpenAIProvider,
    "gemini": GeminiProvider,
}


def get_provider(name: str, settings: Optional[Settings] = None) -> ContentProvider:
    """Build the named provider with its key from settings."""
    settings = settings or get_settings()
    if name not in PROVIDERS:
        raise InputValidationError(f"Unknown AI provider: {name}")
    api_key = settings.openai_api_key if name == "openai" else settings.gemini_api_key
    return PROVIDERS[name](api_key=api_key)


__all__ = [
    "CardText",
    "ContentProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "POWER_LEVELS",
    "PROVIDERS",
    "get_provider",
    "parse_card_text",
]
