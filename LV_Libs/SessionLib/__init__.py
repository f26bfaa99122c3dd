"""
SessionLib - Editing session state and intent routing

This package holds the per-editor Session aggregate and the controller that
implements the adjust/paint/text state machine.
"""

from LV_Libs.SessionLib.session import (
    BrushSettings,
    EditorMode,
    EditorState,
    Session,
    TextToolSettings,
)
from LV_Libs.SessionLib.session_controller import (
    PointerAction,
    PointerCommand,
    SessionController,
)

__all__ = [
    "BrushSettings",
    "EditorMode",
    "EditorState",
    "Session",
    "TextToolSettings",
    "PointerAction",
    "PointerCommand",
    "SessionController",
]
