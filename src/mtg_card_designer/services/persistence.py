"""Templates, decks and saved cards stored by the backend."""

import logging
from typing import Any, Optional

from mtg_card_designer.domain.card import CardData, Deck
from mtg_card_designer.domain.template import Template
from mtg_card_designer.errors import InputValidationError, ServiceError
from mtg_card_designer.services.api_client import ApiClient

logger = logging.getLogger(__name__)


def _template_payload(template: Template, include_id: bool = True) -> dict[str, Any]:
    data = template.to_json_dict()
    data.pop("authorUsername", None)
    if not include_id:
        data.pop("id", None)
    return data


def _card_payload(card: CardData, template: Template) -> dict[str, Any]:
    return {"card_data": card.to_json_dict(), "template_data": template.to_json_dict()}


class PersistenceService:
    """CRUD over templates and decks for the signed-in user."""

    def __init__(self, client: Optional[ApiClient] = None):
        self.client = client or ApiClient()

    # Templates

    def get_templates(self) -> list[Template]:
        rows = self.client.get("templates", default_error="Failed to fetch templates")
        return [Template.from_json_dict(row) for row in rows or []]

    def create_template(self, template: Template) -> Template:
        row = self.client.post(
            "templates",
            json=_template_payload(template, include_id=False),
            default_error="Failed to create template",
        )
        created = Template.from_json_dict(row)
        logger.info(f"Created template '{created.name}' ({created.id})")
        return created

    def update_template(self, template: Template) -> Template:
        row = self.client.put(
            f"templates/{template.id}",
            json=_template_payload(template),
            default_error="Failed to update template",
        )
        return Template.from_json_dict(row) if row else template

    def delete_template(self, template_id: str) -> None:
        self.client.delete(f"templates/{template_id}", default_error="Failed to delete template")
        logger.info(f"Deleted template {template_id}")

    # Decks

    def get_decks(self) -> list[Deck]:
        rows = self.client.get("decks", default_error="Failed to fetch decks")
        return [Deck.model_validate(row) for row in rows or []]

    def get_deck(self, deck_id: int) -> Deck:
        row = self.client.get(f"decks/{deck_id}", default_error="Failed to fetch deck")
        return self._deck(row)

    def create_deck(self, name: str, description: str = "") -> Deck:
        if not name or not name.strip():
            raise InputValidationError("Deck name is required")
        row = self.client.post(
            "decks",
            json={"name": name.strip(), "description": description},
            default_error="Failed to create deck",
        )
        return self._deck(row)

    def delete_deck(self, deck_id: int) -> None:
        self.client.delete(f"decks/{deck_id}", default_error="Failed to delete deck")

    def add_card_to_deck(self, deck_id: int, card: CardData, template: Template) -> None:
        self.client.post(
            f"decks/{deck_id}/cards",
            json=_card_payload(card, template),
            default_error="Failed to add card to deck",
        )

    def update_card_in_deck(
        self, deck_id: int, card_id: int, card: CardData, template: Template
    ) -> None:
        self.client.put(
            f"decks/{deck_id}/cards/{card_id}",
            json=_card_payload(card, template),
            default_error="Failed to update card",
        )

    def remove_card_from_deck(self, deck_id: int, card_id: int) -> None:
        self.client.delete(
            f"decks/{deck_id}/cards/{card_id}", default_error="Failed to remove card"
        )

    # Sharing

    def set_deck_public(self, deck_id: int, is_public: bool) -> None:
        self.client.put(
            f"decks/{deck_id}/toggle-public",
            json={"is_public": is_public},
            default_error="Failed to change deck visibility",
        )

    def get_public_decks(self) -> list[Deck]:
        rows = self.client.get("decks/public", default_error="Failed to fetch public decks")
        return [Deck.model_validate(row) for row in rows or []]

    def get_public_deck(self, deck_id: int) -> Deck:
        row = self.client.get(
            f"decks/public/{deck_id}", default_error="Failed to fetch public deck"
        )
        return self._deck(row)

    @staticmethod
    def _deck(row: Any) -> Deck:
        if not isinstance(row, dict):
            raise ServiceError("Malformed deck response")
        return Deck.model_validate(row)
