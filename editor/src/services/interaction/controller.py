"""Interaction Controller.

Turns pointer and edge-drag input into session geometry commands.

Four gestures, one at a time (the session's InteractionMode):
- Dragging: pointer down on a non-base layer body, move, release
- Resizing (corner handle): aspect-locked live preview, resampled on release
- Resizing (edge rectangle): begin_resize, drag edges, apply or cancel
- Cropping: begin_crop, drag edges, apply or cancel

Pointer positions arrive in display pixels together with the rectangle
the canvas occupies on screen; they are mapped to canvas pixels before
any geometry is touched.
"""

import logging
from typing import Optional

from models.session import CommandResult, Cropping, Dragging, Idle, Resizing
from models.transform import Rect, Vec2
from utils.coordinate_transforms import (
    canvas_rect_to_display, display_delta_to_canvas, display_to_canvas_point,
)
from utils.geometry import clamp_crop_edges
from .handles import CORNER_HANDLES, EDGE_HANDLES, handle_at

logger = logging.getLogger(__name__)


class InteractionController:
    """Drag, resize and crop state machines on top of an EditorSession"""

    def __init__(self, session):
        self.session = session

    # ========================================
    # Helpers
    # ========================================

    def _canvas_point(self, client_x, client_y, display_rect: Rect) -> Vec2:
        width, height = self.session.canvas_size
        return display_to_canvas_point(client_x, client_y, display_rect, width, height)

    def _canvas_delta(self, dx, dy, display_rect: Rect, rounded: bool) -> Vec2:
        width, height = self.session.canvas_size
        return display_delta_to_canvas(dx, dy, display_rect, width, height, rounded=rounded)

    def display_rect_for(self, rect: Rect, display_rect: Rect) -> Rect:
        """Where a canvas rectangle appears on screen (for overlays)"""
        width, height = self.session.canvas_size
        return canvas_rect_to_display(rect, display_rect, width, height)

    def _movable_layer(self, layer_id: Optional[str]):
        """Layer for layer_id if it exists and is not the base"""
        if layer_id is None or not self.session.has_layer(layer_id):
            return None
        if self.session.is_base(layer_id):
            return None
        return self.session.get_layer(layer_id)

    # ========================================
    # Pointer: drag and corner-handle resize
    # ========================================

    def pointer_down(self, client_x, client_y, display_rect: Rect) -> bool:
        """Start a drag or a corner-handle resize

        Handles on the selected layer win over layer bodies; bodies are
        tested topmost first and the base is never picked.

        Returns:
            True if a gesture started
        """
        session = self.session
        if session.layer_count == 0 or not session.is_idle:
            return False

        session.place_unpositioned_layers()
        point = self._canvas_point(client_x, client_y, display_rect)

        selected = self._movable_layer(session.selected_layer_id)
        if selected is not None:
            footprint = selected.footprint
            handle = handle_at(CORNER_HANDLES, point.x, point.y, footprint)
            if handle is not None:
                aspect = footprint.width / footprint.height
                mode = Resizing(
                    layer_id=selected.id,
                    rect=footprint,
                    start_rect=footprint,
                    handle=handle.name,
                    start=point,
                    aspect=aspect,
                )
                return session.enter_mode(mode)

        for layer in reversed(session.layers[1:]):
            if layer.footprint.contains(point.x, point.y):
                session.select_layer(layer.id)
                mode = Dragging(layer_id=layer.id, start=point, origin=Vec2(layer.x, layer.y))
                return session.enter_mode(mode)
        return False

    def pointer_move(self, client_x, client_y, display_rect: Rect) -> bool:
        """Update the active drag or handle resize; ignored otherwise"""
        session = self.session
        mode = session.mode

        if isinstance(mode, Resizing) and mode.handle is not None:
            point = self._canvas_point(client_x, client_y, display_rect)
            rect = CORNER_HANDLES[mode.handle].drag(
                mode.start_rect,
                point.x - mode.start.x,
                point.y - mode.start.y,
                aspect=mode.aspect,
                canvas_size=session.canvas_size,
            )
            mode.rect = rect
            session.preview_layer_geometry(mode.layer_id, rect.left, rect.top, rect.width, rect.height)
            return True

        if isinstance(mode, Dragging):
            point = self._canvas_point(client_x, client_y, display_rect)
            session.move_layer_to(
                mode.layer_id,
                mode.origin.x + (point.x - mode.start.x),
                mode.origin.y + (point.y - mode.start.y),
            )
            return True

        return False

    def pointer_up(self, client_x=None, client_y=None, display_rect: Optional[Rect] = None) -> CommandResult:
        """Finish the active drag or handle resize

        A handle resize bakes its previewed size into the layer source.
        """
        session = self.session
        mode = session.mode

        if isinstance(mode, Dragging):
            session.exit_mode()
            logger.debug(f"Dropped {mode.layer_id}")
            return CommandResult(value=mode.layer_id)

        if isinstance(mode, Resizing) and mode.handle is not None:
            session.exit_mode()
            return session.resample_to_natural_size(mode.layer_id)

        return CommandResult.rejected("No pointer gesture in progress")

    # ========================================
    # Edge-rectangle resize session
    # ========================================

    def begin_resize(self, layer_id: Optional[str] = None) -> bool:
        """Open a resize session on a non-base layer (default: selection)"""
        session = self.session
        if not session.is_idle:
            return False

        layer = self._movable_layer(layer_id or session.selected_layer_id)
        if layer is None:
            logger.debug("Resize needs a selected non-base layer")
            return False

        session.place_unpositioned_layers()
        footprint = layer.footprint
        return session.enter_mode(Resizing(layer_id=layer.id, rect=footprint, start_rect=footprint))

    def _resize_session(self) -> Optional[Resizing]:
        mode = self.session.mode
        if isinstance(mode, Resizing) and mode.handle is None:
            return mode
        return None

    def drag_resize_edge(self, edge: str, dx, dy, display_rect: Rect) -> Optional[Rect]:
        """Move one edge of the resize rectangle

        Args:
            edge: 'left', 'top', 'right' or 'bottom'
            dx, dy: Display-space delta since this edge was grabbed
            display_rect: Displayed canvas rectangle

        Returns:
            The updated rectangle, or None when no resize session is open
        """
        mode = self._resize_session()
        if mode is None:
            return None

        handle = EDGE_HANDLES[edge]
        if mode.active_edge != edge:
            mode.active_edge = edge
            mode.edge_start_value = getattr(mode.rect, edge)

        delta = self._canvas_delta(dx, dy, display_rect, rounded=False)
        mode.rect = handle.drag(mode.rect, delta.x, delta.y, start_value=mode.edge_start_value)
        self.session.request_render()
        return mode.rect

    def end_edge_drag(self):
        """Release the grabbed edge of the open resize or crop session"""
        mode = self.session.mode
        if isinstance(mode, (Resizing, Cropping)):
            mode.active_edge = None

    def resize_rect(self) -> Optional[Rect]:
        mode = self._resize_session()
        return mode.rect if mode is not None else None

    def apply_resize(self) -> CommandResult:
        """Resample the layer into the resize rectangle and close the session"""
        mode = self._resize_session()
        if mode is None:
            return CommandResult.rejected("No resize session open")
        self.session.exit_mode()
        return self.session.resize_layer_into(mode.layer_id, mode.rect)

    def cancel_resize(self):
        if self._resize_session() is not None:
            self.session.exit_mode()
            self.session.request_render()

    # ========================================
    # Crop session
    # ========================================

    def begin_crop(self, target: Optional[str] = None) -> bool:
        """Open a crop session

        The target defaults to the selected layer, then the base. Cropping
        the base crops the whole composition; a non-base target starts
        with the rectangle on its own footprint.
        """
        session = self.session
        if session.layer_count == 0 or not session.is_idle:
            return False

        target = target or session.selected_layer_id or session.base_layer.id
        session.place_unpositioned_layers()

        if session.is_base(target):
            mode = Cropping(target=None)
        else:
            layer = session.get_layer(target)
            canvas_width, canvas_height = session.canvas_size
            mode = Cropping(
                target=target,
                left=layer.x,
                top=layer.y,
                right=canvas_width - (layer.x + layer.natural_width),
                bottom=canvas_height - (layer.y + layer.natural_height),
            )
        return session.enter_mode(mode)

    def _crop_session(self) -> Optional[Cropping]:
        mode = self.session.mode
        return mode if isinstance(mode, Cropping) else None

    def _crop_bounds(self, mode: Cropping) -> Rect:
        if mode.target is None:
            width, height = self.session.canvas_size
            return Rect(0, 0, width, height)
        return self.session.get_layer(mode.target).footprint

    def crop_rect(self) -> Optional[Rect]:
        mode = self._crop_session()
        if mode is None:
            return None
        return mode.rect(*self.session.canvas_size)

    def drag_crop_edge(self, edge: str, dx, dy, display_rect: Rect) -> Optional[Rect]:
        """Move one crop edge by whole canvas pixels

        The rectangle stays inside its target (the layer, or the canvas for
        the base) and keeps at least 1 px in each dimension.

        Returns:
            The updated crop rectangle, or None when no crop session is open
        """
        mode = self._crop_session()
        if mode is None:
            return None

        canvas_width, canvas_height = self.session.canvas_size
        current = mode.rect(canvas_width, canvas_height)
        if mode.active_edge != edge:
            mode.active_edge = edge
            mode.edge_start_value = getattr(current, edge)

        delta = self._canvas_delta(dx, dy, display_rect, rounded=True)
        moved = EDGE_HANDLES[edge].drag(current, delta.x, delta.y, start_value=mode.edge_start_value)
        rect = clamp_crop_edges(*moved, self._crop_bounds(mode)).rounded()

        mode.left = int(rect.left)
        mode.top = int(rect.top)
        mode.right = int(canvas_width - rect.right)
        mode.bottom = int(canvas_height - rect.bottom)
        self.session.request_render()
        return rect

    def apply_crop(self) -> CommandResult:
        """Crop the target and close the session

        The session closes even when the crop turns out to be a no-op.
        """
        mode = self._crop_session()
        if mode is None:
            return CommandResult.rejected("No crop session open")

        canvas_width, canvas_height = self.session.canvas_size
        rect = mode.rect(canvas_width, canvas_height)
        rect = Rect.from_xywh(rect.left, rect.top, max(1, rect.width), max(1, rect.height))

        self.session.exit_mode()
        if mode.target is None:
            return self.session.crop_base(rect)
        return self.session.crop_layer(mode.target, rect)

    def cancel_crop(self):
        if self._crop_session() is not None:
            self.session.exit_mode()
            self.session.request_render()

    @property
    def is_idle(self) -> bool:
        return isinstance(self.session.mode, Idle)
