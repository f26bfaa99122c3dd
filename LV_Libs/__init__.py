"""
LV_Libs - Lumina Vision Library Modules

This package contains the editing core of Lumina Vision, organized into
specialized sub-packages:

- ImageEditingLib: Image models, coordinate mapping, the filter stack and codec helpers
- LayersLib: Paint layer, text layer and the compositor that flattens them
- SessionLib: Session state and the controller that routes user intents
"""

__version__ = "0.1.0"
