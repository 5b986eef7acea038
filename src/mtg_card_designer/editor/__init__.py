"""Template editor interaction, application state and the editor session."""

from .interaction import DragController, InteractionState, constrain_box
from .session import EditorSession
from .state import AppState, EditingCardInfo, plan_template_saves

__all__ = [
    "AppState",
    "DragController",
    "EditingCardInfo",
    "EditorSession",
    "InteractionState",
    "constrain_box",
    "plan_template_saves",
]
