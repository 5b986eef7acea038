"""Application state snapshots and the pure actions that evolve them.

Every action takes an ``AppState`` and returns a new one; nothing here
talks to a service. ``EditorSession`` combines these with service calls.
"""

import uuid
from dataclasses import dataclass, replace
from typing import Any, Optional

from mtg_card_designer.domain.card import AssetRef, CardArt, CardData, CustomSetSymbol, SavedCard
from mtg_card_designer.domain.defaults import DEFAULT_CARD_DATA, DEFAULT_TEMPLATES
from mtg_card_designer.domain.template import Template
from mtg_card_designer.errors import InputValidationError, TemplateNotResolvedError


@dataclass(frozen=True)
class EditingCardInfo:
    """The saved card currently loaded into the editor."""

    card_id: int
    deck_id: int


@dataclass(frozen=True)
class AppState:
    card_data: CardData = DEFAULT_CARD_DATA
    templates: tuple[Template, ...] = DEFAULT_TEMPLATES
    art_assets: tuple[AssetRef, ...] = ()
    custom_set_symbols: tuple[CustomSetSymbol, ...] = ()
    editing_card: Optional[EditingCardInfo] = None
    token: Optional[str] = None
    user_id: Optional[int] = None
    error: Optional[str] = None
    warnings: tuple[str, ...] = ()
    notice: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def active_template(self) -> Optional[Template]:
        """Template referenced by the card, or None if it does not exist."""
        for template in self.templates:
            if template.id == self.card_data.template_id:
                return template
        return None


def new_template_id() -> str:
    return f"new-{uuid.uuid4().hex[:12]}"


def set_card_data(state: AppState, **changes: Any) -> AppState:
    return replace(state, card_data=state.card_data.updated(**changes))


def update_art(state: AppState, original: str, cropped: str) -> AppState:
    art = CardArt(original=original, cropped=cropped)
    return replace(state, card_data=state.card_data.model_copy(update={"art": art}))


def add_art_asset(state: AppState, asset: AssetRef) -> AppState:
    return replace(state, art_assets=(asset, *state.art_assets))


def remove_art_asset(state: AppState, asset_id: int) -> AppState:
    return replace(
        state, art_assets=tuple(a for a in state.art_assets if a.id != asset_id)
    )


def art_in_use(state: AppState, asset: AssetRef) -> bool:
    """Whether the active card still references the asset's image."""
    art = state.card_data.art
    return asset.url in (art.original, art.cropped)


def set_library(state: AppState, art_assets, custom_set_symbols) -> AppState:
    return replace(
        state,
        art_assets=tuple(art_assets),
        custom_set_symbols=tuple(custom_set_symbols),
    )


def add_custom_set_symbol(state: AppState, symbol: CustomSetSymbol) -> AppState:
    """Store a new symbol and apply it to the current card."""
    state = replace(state, custom_set_symbols=(*state.custom_set_symbols, symbol))
    return set_card_data(state, set_symbol_url=symbol.url)


def select_template(state: AppState, template_id: str) -> AppState:
    if not any(t.id == template_id for t in state.templates):
        raise TemplateNotResolvedError(template_id)
    return set_card_data(state, template_id=template_id)


def _fallback_template_id(state: AppState) -> AppState:
    """Point the card at the first template if its own one disappeared."""
    if state.active_template is not None:
        return state
    fallback = state.templates[0].id if state.templates else ""
    return set_card_data(state, template_id=fallback)


def set_templates(state: AppState, templates) -> AppState:
    return _fallback_template_id(replace(state, templates=tuple(templates)))


def add_template(state: AppState, template: Template) -> AppState:
    return replace(state, templates=(*state.templates, template))


def replace_template(state: AppState, template: Template) -> AppState:
    """Swap in an edited snapshot of an existing template."""
    templates = tuple(template if t.id == template.id else t for t in state.templates)
    return replace(state, templates=templates)


def remove_template(state: AppState, template_id: str) -> AppState:
    templates = tuple(t for t in state.templates if t.id != template_id)
    return _fallback_template_id(replace(state, templates=templates))


def reset_card(state: AppState) -> AppState:
    return replace(state, card_data=DEFAULT_CARD_DATA, editing_card=None)


def edit_card(state: AppState, saved: SavedCard) -> AppState:
    """Load a saved card for editing.

    The card's template snapshot is added when the template list lacks it.
    """
    if saved.deck_id is None:
        raise InputValidationError("Saved card is not attached to a deck")
    card = saved.card_data
    if not any(t.id == card.template_id for t in state.templates):
        state = add_template(state, saved.template_data)
    return replace(
        state,
        card_data=card,
        editing_card=EditingCardInfo(card_id=saved.id, deck_id=saved.deck_id),
    )


def finish_card_edit(state: AppState) -> AppState:
    return replace(state, editing_card=None)


def sign_in(state: AppState, token: str, user_id: Optional[int]) -> AppState:
    return replace(state, token=token, user_id=user_id, error=None)


def clear_data(state: AppState) -> AppState:
    """Drop everything tied to the signed-in user."""
    return AppState(error=state.error)


def set_error(state: AppState, message: Optional[str]) -> AppState:
    return replace(state, error=message)


def add_warning(state: AppState, message: str) -> AppState:
    return replace(state, warnings=(*state.warnings, message))


def set_notice(state: AppState, message: Optional[str]) -> AppState:
    return replace(state, notice=message)


def clear_messages(state: AppState) -> AppState:
    return replace(state, error=None, warnings=(), notice=None)


def plan_template_saves(
    templates, user_id: Optional[int]
) -> tuple[list[Template], list[Template]]:
    """Split editor templates into ones to create and ones to update.

    New templates are assigned to ``user_id``; templates owned by someone
    else are skipped.

    Raises:
        InputValidationError: If there is no signed-in user
    """
    if user_id is None:
        raise InputValidationError("Cannot verify the signed-in user; nothing saved")

    to_create: list[Template] = []
    to_update: list[Template] = []
    for template in templates:
        if template.is_new:
            to_create.append(template.model_copy(update={"owner_id": user_id}))
        elif template.owner_id == user_id:
            to_update.append(template)
    return to_create, to_update
