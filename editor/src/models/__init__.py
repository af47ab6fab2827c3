"""
Mesmerise Image Editor - Data Models

This module contains the data model classes for the layered composition.
This is the MODEL of the editor.

Public API: Import EditorSession, Layer, CommandResult from models.session
The models/session/_internal/ subdirectory contains internal implementation only.
"""

from .session import EditorSession, Layer, CommandResult
from .effect import EFFECT_CATALOG, EffectDefinition, EffectInstance

__all__ = ['EditorSession', 'Layer', 'CommandResult', 'EFFECT_CATALOG', 'EffectDefinition', 'EffectInstance']
