"""Editor session model package"""

from .layer_mixin import SessionLayerMixin
from .effect_mixin import SessionEffectMixin
from .geometry_mixin import SessionGeometryMixin
from .core import EditorSession
from .command import CommandResult
from .modes import IDLE, Idle, Dragging, Resizing, Cropping, InteractionMode
from ._internal.layer import Layer

__all__ = [
    'EditorSession',
    'CommandResult',
    'Layer',
    'IDLE',
    'Idle',
    'Dragging',
    'Resizing',
    'Cropping',
    'InteractionMode',
    'SessionLayerMixin',
    'SessionEffectMixin',
    'SessionGeometryMixin',
]
