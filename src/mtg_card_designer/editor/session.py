"""Editor session: applies state actions, calls services, re-renders."""

import logging
from collections.abc import Callable
from typing import Any, Optional, TypeVar

from mtg_card_designer.domain.card import CardData, Deck, SavedCard
from mtg_card_designer.domain.defaults import DEFAULT_TEMPLATES
from mtg_card_designer.domain.template import Template
from mtg_card_designer.editor import state as actions
from mtg_card_designer.editor.interaction import DragController
from mtg_card_designer.editor.state import AppState
from mtg_card_designer.errors import (
    AssetInUseError,
    InputValidationError,
    RasterizationError,
    ReadOnlyTemplateError,
    ServiceError,
    SessionInvalidError,
    TemplateNotResolvedError,
)
from mtg_card_designer.export.png import ExportedFile, export_card_png
from mtg_card_designer.rendering.images import ImageLoader
from mtg_card_designer.rendering.layout import RenderedCard, render
from mtg_card_designer.services.ai import get_provider
from mtg_card_designer.services.api_client import ApiClient
from mtg_card_designer.services.assets import AssetService, SetSymbolStore
from mtg_card_designer.services.auth import AuthService, user_id_from_token
from mtg_card_designer.services.persistence import PersistenceService

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EditorSession:
    """Owns the current ``AppState`` and the layout computed from it.

    Every state change goes through ``_apply`` which recomputes the
    rendered card. Service failures are recorded in ``state.error``
    instead of propagating; a rejected session logs the user out.
    """

    def __init__(
        self,
        client: Optional[ApiClient] = None,
        persistence: Optional[PersistenceService] = None,
        assets: Optional[AssetService] = None,
        auth: Optional[AuthService] = None,
        symbols: Optional[SetSymbolStore] = None,
        state: Optional[AppState] = None,
    ) -> None:
        self.client = client or ApiClient()
        self.persistence = persistence or PersistenceService(self.client)
        self.assets = assets or AssetService(self.client)
        self.auth = auth or AuthService()
        self.symbols = symbols or SetSymbolStore()
        self.loader = ImageLoader()
        self.state = state or AppState()
        self.rendered: Optional[RenderedCard] = None
        self.refresh()

    # Plumbing

    def refresh(self) -> Optional[RenderedCard]:
        """Recompute the layout of the current card."""
        try:
            self.rendered = render(self.state.active_template, self.state.card_data)
        except TemplateNotResolvedError as e:
            logger.warning(str(e))
            self.rendered = None
        return self.rendered

    def _apply(self, new_state: AppState) -> AppState:
        self.state = new_state
        self.refresh()
        return self.state

    def _call(self, description: str, func: Callable[..., T], *args: Any) -> Optional[T]:
        """Run a service call, turning failures into a message in state."""
        try:
            return func(*args)
        except SessionInvalidError as e:
            logger.warning(f"{description}: session rejected ({e})")
            self.logout()
            self._apply(actions.set_error(self.state, f"{description}: {e}"))
        except ServiceError as e:
            logger.error(f"{description}: {e}")
            self._apply(actions.set_error(self.state, f"{description}: {e}"))
        return None

    # Authentication

    @property
    def user_id(self) -> Optional[int]:
        return self.state.user_id

    def login(self, username: str, password: str) -> bool:
        token = self._call("Login failed", self.auth.login, username, password)
        if token is None:
            return False
        self.client.token = token
        self._apply(actions.sign_in(self.state, token, user_id_from_token(token)))
        self.load_initial_data()
        return self.state.is_authenticated

    def logout(self) -> None:
        self.client.token = None
        self._apply(actions.clear_data(self.state))

    def load_initial_data(self) -> None:
        """Fetch art, set symbols and templates for the signed-in user."""
        try:
            art = self.assets.list_art()
            templates = self.persistence.get_templates()
        except ServiceError as e:
            logger.error(f"Failed to load user data: {e}")
            self.logout()
            message = "Failed to load data; your session may have expired."
            self._apply(actions.set_error(self.state, message))
            return

        state = actions.set_templates(self.state, (*DEFAULT_TEMPLATES, *templates))
        state = actions.set_library(state, art, self.symbols.list())
        self._apply(actions.clear_messages(state))

    # Card editing

    def set_card_data(self, **changes: Any) -> AppState:
        return self._apply(actions.set_card_data(self.state, **changes))

    def select_template(self, template_id: str) -> AppState:
        return self._apply(actions.select_template(self.state, template_id))

    def reset_card(self) -> AppState:
        return self._apply(actions.reset_card(self.state))

    def edit_card(self, saved: SavedCard) -> AppState:
        return self._apply(actions.edit_card(self.state, saved))

    def update_art(self, original: str, cropped: str) -> AppState:
        """Set the card art, then add the cropped image to the library.

        The art stays on the card when the upload fails; a warning is
        recorded instead.
        """
        self._apply(actions.update_art(self.state, original, cropped))
        try:
            asset = self.assets.upload_art(self.loader.read_bytes(cropped))
        except SessionInvalidError as e:
            self.logout()
            return self._apply(actions.set_error(self.state, f"Art upload failed: {e}"))
        except (ServiceError, RasterizationError) as e:
            logger.warning(f"Art upload failed: {e}")
            return self._apply(
                actions.add_warning(self.state, "Art was applied but not saved to your library.")
            )
        return self._apply(actions.add_art_asset(self.state, asset))

    def delete_art(self, asset_id: int, force: bool = False) -> AppState:
        asset = next((a for a in self.state.art_assets if a.id == asset_id), None)
        if asset is not None and not force and actions.art_in_use(self.state, asset):
            raise AssetInUseError(f"Art asset {asset_id} is used by the current card")
        if self._call("Failed to delete art", self._ok(self.assets.delete_art), asset_id):
            self._apply(actions.remove_art_asset(self.state, asset_id))
        return self.state

    def add_custom_set_symbol(self, name: str, url: str) -> AppState:
        symbol = self.symbols.add(name, url)
        return self._apply(actions.add_custom_set_symbol(self.state, symbol))

    # Templates

    def drag_controller(self) -> DragController:
        template = self.state.active_template
        if template is None:
            raise TemplateNotResolvedError(self.state.card_data.template_id)
        return DragController(template, self.user_id)

    def new_template(self, base: Optional[Template] = None) -> Template:
        """Add an editable copy of ``base`` (or the active template)."""
        base = base or self.state.active_template or DEFAULT_TEMPLATES[0]
        template = base.copy_as_new(actions.new_template_id(), self.user_id)
        self._apply(actions.add_template(self.state, template))
        return template

    def update_template(self, template: Template) -> AppState:
        existing = next((t for t in self.state.templates if t.id == template.id), None)
        if existing is None:
            raise TemplateNotResolvedError(template.id)
        if not existing.is_owned_by(self.user_id):
            raise ReadOnlyTemplateError(f"Template '{existing.name}' belongs to another user")
        return self._apply(actions.replace_template(self.state, template))

    def save_templates(self, templates=None) -> AppState:
        """Create new templates, update owned ones, skip the rest."""
        templates = self.state.templates if templates is None else templates
        try:
            to_create, to_update = actions.plan_template_saves(templates, self.user_id)
        except InputValidationError as e:
            return self._apply(actions.set_error(self.state, str(e)))

        for template in to_create:
            if self._call("Failed to save templates", self.persistence.create_template, template) is None:
                return self.state
        for template in to_update:
            if self._call("Failed to save templates", self.persistence.update_template, template) is None:
                return self.state

        saved = self._call("Failed to reload templates", self.persistence.get_templates)
        if saved is None:
            return self.state
        state = actions.set_templates(self.state, (*DEFAULT_TEMPLATES, *saved))
        logger.info(f"Saved {len(to_create)} new and {len(to_update)} updated templates")
        return self._apply(actions.set_notice(state, "Templates saved."))

    def delete_template(self, template_id: str) -> AppState:
        template = next((t for t in self.state.templates if t.id == template_id), None)
        if template is None:
            raise TemplateNotResolvedError(template_id)
        if not template.is_owned_by(self.user_id):
            raise ReadOnlyTemplateError(f"Template '{template.name}' belongs to another user")

        if not template.is_new:
            deleted = self._call(
                "Failed to delete template", self._ok(self.persistence.delete_template), template_id
            )
            if not deleted:
                return self.state
        return self._apply(actions.remove_template(self.state, template_id))

    # Decks

    def create_deck(self, name: str, description: str = "") -> Optional[Deck]:
        if not name or not name.strip():
            raise InputValidationError("Deck name is required")
        return self._call("Failed to create deck", self.persistence.create_deck, name, description)

    def add_current_card_to_deck(self, deck_id: int) -> bool:
        template = self._require_template()
        result = self._call(
            "Failed to add card to deck",
            self._ok(self.persistence.add_card_to_deck),
            deck_id,
            self.state.card_data,
            template,
        )
        return bool(result)

    def update_card_in_deck(self) -> bool:
        """Write the card being edited back to its deck."""
        info = self.state.editing_card
        if info is None:
            return False
        template = self._require_template()
        result = self._call(
            "Failed to update card",
            self._ok(self.persistence.update_card_in_deck),
            info.deck_id,
            info.card_id,
            self.state.card_data,
            template,
        )
        if result:
            self._apply(actions.set_notice(actions.finish_card_edit(self.state), "Card updated."))
        return bool(result)

    @staticmethod
    def _ok(func: Callable[..., Any]) -> Callable[..., bool]:
        def call(*args: Any) -> bool:
            func(*args)
            return True

        return call

    def _require_template(self) -> Template:
        template = self.state.active_template
        if template is None:
            raise TemplateNotResolvedError(self.state.card_data.template_id)
        return template

    # AI and export

    def generate_card_text(self, provider: str, power_level: str, theme: str) -> AppState:
        content = get_provider(provider)
        text = self._call(
            "Failed to generate text",
            content.generate_card_text,
            self.state.card_data,
            power_level,
            theme,
        )
        if text is None:
            return self.state
        return self.set_card_data(rules_text=text.rules_text, flavor_text=text.flavor_text)

    def generate_art(self, provider: str, prompt: str) -> Optional[str]:
        """Return generated art as a data URI, ready for cropping."""
        return self._call("Failed to generate art", get_provider(provider).generate_art, prompt)

    def export_png(self, supersample: int = 2) -> ExportedFile:
        return export_card_png(self.state.active_template, self.state.card_data, supersample)

    @property
    def card(self) -> CardData:
        return self.state.card_data
