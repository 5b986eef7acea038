"""Pointer-driven move/resize of template elements."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from mtg_card_designer.domain.template import ElementBox, Template
from mtg_card_designer.errors import ReadOnlyTemplateError

logger = logging.getLogger(__name__)

MIN_WIDTH = 5.0
MIN_HEIGHT = 2.0
MIN_POSITION = -50.0
MAX_POSITION = 150.0


class InteractionState(str, Enum):
    """Interaction state of a single element."""

    IDLE = "idle"
    SELECTED = "selected"
    DRAGGING_MOVE = "dragging_move"
    DRAGGING_RESIZE = "dragging_resize"

    @property
    def is_dragging(self) -> bool:
        return self in (InteractionState.DRAGGING_MOVE, InteractionState.DRAGGING_RESIZE)


@dataclass(frozen=True)
class _Drag:
    name: str
    state: InteractionState
    start_x: float
    start_y: float
    start_box: ElementBox


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def constrain_box(box: ElementBox) -> ElementBox:
    """Apply the minimum size and the off-card position limits."""
    return box.model_copy(
        update={
            "x": _clamp(box.x, MIN_POSITION, MAX_POSITION),
            "y": _clamp(box.y, MIN_POSITION, MAX_POSITION),
            "width": max(MIN_WIDTH, box.width),
            "height": max(MIN_HEIGHT, box.height),
        }
    )


class DragController:
    """Tracks selection and the single active drag on one template.

    Every handler is a no-op when the current user does not own the
    template. ``pointer_move`` returns the updated template snapshot.
    """

    def __init__(self, template: Template, user_id: Optional[int] = None):
        self.user_id = user_id
        self._template = template
        self._selected: Optional[str] = None
        self._drag: Optional[_Drag] = None

    @property
    def template(self) -> Template:
        return self._template

    @property
    def selected(self) -> Optional[str]:
        return self._selected

    @property
    def read_only(self) -> bool:
        return not self._template.is_owned_by(self.user_id)

    @property
    def is_dragging(self) -> bool:
        return self._drag is not None

    def load(self, template: Template) -> None:
        """Switch to another template, dropping selection and any drag."""
        self._template = template
        self._selected = None
        self._drag = None

    def state_of(self, name: str) -> InteractionState:
        if self._drag is not None and self._drag.name == name:
            return self._drag.state
        if self._selected == name:
            return InteractionState.SELECTED
        return InteractionState.IDLE

    def select(self, name: str) -> None:
        if self.read_only or self._drag is not None:
            return
        self._template.box_for(name)
        self._selected = name

    def clear_selection(self) -> None:
        if self._drag is None:
            self._selected = None

    def pointer_down(self, name: str, handle: str = "body", x: float = 0.0, y: float = 0.0) -> bool:
        """Start dragging ``name`` from its body or its resize handle.

        Returns:
            True if a drag started
        """
        if self.read_only or self._drag is not None:
            return False

        state = (
            InteractionState.DRAGGING_RESIZE
            if handle == "resize"
            else InteractionState.DRAGGING_MOVE
        )
        self._drag = _Drag(
            name=name,
            state=state,
            start_x=x,
            start_y=y,
            start_box=self._template.box_for(name),
        )
        self._selected = name
        logger.debug(f"Start {state.value} on '{name}'")
        return True

    def pointer_move(
        self, x: float, y: float, parent_width: float, parent_height: float
    ) -> Template:
        """Update the dragged box from the pointer delta.

        The delta is converted to percent of the parent (card) size and
        applied to the box captured at pointer-down.
        """
        drag = self._drag
        if drag is None or self.read_only:
            return self._template
        if parent_width <= 0 or parent_height <= 0:
            return self._template

        dx = (x - drag.start_x) / parent_width * 100
        dy = (y - drag.start_y) / parent_height * 100
        start = drag.start_box

        if drag.state is InteractionState.DRAGGING_MOVE:
            box = start.model_copy(update={"x": start.x + dx, "y": start.y + dy})
        else:
            box = start.model_copy(
                update={"width": start.width + dx, "height": start.height + dy}
            )

        self._template = self._template.with_element(drag.name, constrain_box(box))
        return self._template

    def pointer_up(self) -> None:
        if self._drag is None:
            return
        self._selected = self._drag.name
        self._drag = None

    def set_visible(self, name: str, visible: bool) -> Template:
        """Show or hide an element from the editor's layer list."""
        self._ensure_editable()
        box = self._template.box_for(name).model_copy(update={"visible": visible})
        self._template = self._template.with_element(name, box)
        return self._template

    def update_font(self, role: str, **changes: Any) -> Template:
        self._ensure_editable()
        self._template = self._template.with_font(role, **changes)
        return self._template

    def _ensure_editable(self) -> None:
        if self.read_only:
            raise ReadOnlyTemplateError(
                f"Template '{self._template.name}' belongs to another user"
            )
