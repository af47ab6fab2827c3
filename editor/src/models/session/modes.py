"""Interaction modes - one explicit state per modal geometry gesture.

Replaces scattered boolean flags with a single tagged union stored on the
session. Entry points check `isinstance(session.mode, Idle)` and refuse
to start anything else while a gesture is in progress. Each non-idle
mode carries the transient state for its gesture; nothing here is ever
persisted on a layer.
"""

from dataclasses import dataclass
from typing import Optional, Union

from models.transform import Rect, Vec2


@dataclass(frozen=True)
class Idle:
    """No gesture in progress"""
    name: str = 'idle'


@dataclass
class Dragging:
    """Moving a non-base layer with the pointer"""
    layer_id: str
    start: Vec2   # Pointer position at press (canvas pixels)
    origin: Vec2  # Layer offset at press
    name: str = 'dragging'


@dataclass
class Resizing:
    """Resizing a non-base layer.

    handle is a corner name ('nw', 'ne', 'sw', 'se') for a corner-handle
    drag, or None for the edge-rectangle resize session.
    """
    layer_id: str
    rect: Rect                       # Current target footprint (canvas pixels)
    start_rect: Rect                 # Footprint when the gesture began
    handle: Optional[str] = None
    start: Optional[Vec2] = None     # Pointer at press (canvas pixels, handle drags)
    aspect: float = 1.0
    active_edge: Optional[str] = None
    edge_start_value: float = 0.0
    name: str = 'resizing'


@dataclass
class Cropping:
    """Crop session.

    target is a non-base layer id, or None for the base/composite.
    left/top are offsets from the canvas origin; right/bottom are
    distances from the canvas right/bottom edges.
    """
    target: Optional[str]
    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0
    active_edge: Optional[str] = None
    edge_start_value: int = 0
    name: str = 'cropping'

    def rect(self, canvas_width: int, canvas_height: int) -> Rect:
        """Crop rectangle in canvas pixels"""
        return Rect(self.left, self.top, canvas_width - self.right, canvas_height - self.bottom)


InteractionMode = Union[Idle, Dragging, Resizing, Cropping]

IDLE = Idle()
