"""
EditorSession Geometry Mixin - Layer placement, resize and crop

Provides:
- Lazy centering of new layers on the base
- Clamped moves (never for the base)
- Resize by dimensions, into a rectangle, or to a live-previewed size
- Base/composite crop and per-layer crop

All pixel-changing operations resample the layer source immediately and
report the layer as affected, so effects are reapplied from scratch on
the next cache rebuild.
"""

from typing import Optional

from models.transform import Rect
from utils.geometry import clamp_position, place_unpositioned, resample, source_box
from utils.coordinate_transforms import round_half_up
from .command import CommandResult
from .modes import Dragging, Resizing


class SessionGeometryMixin:
    """Mixin providing geometry operations for EditorSession

    This mixin assumes the parent class has:
        - self._layers: List of Layer in paint order
        - self._mode: Current InteractionMode
        - self._logger: logging.Logger instance
        - self.commit() / self._require_idle() / self.get_layer() / self.canvas_size
    """

    # ========================================
    # Placement
    # ========================================

    def place_unpositioned_layers(self):
        """Give freshly added layers their centered starting offset"""
        return place_unpositioned(self._layers)

    def _clamp_layer(self, layer, x, y):
        canvas_width, canvas_height = self.canvas_size
        layer.x, layer.y = clamp_position(
            x, y, layer.natural_width, layer.natural_height, canvas_width, canvas_height
        )

    def _clamp_all_to_canvas(self):
        for layer in self._layers[1:]:
            if layer.is_positioned:
                self._clamp_layer(layer, layer.x, layer.y)

    def _gesture_blocks(self, layer_id: str, gesture_type, action: str) -> Optional[CommandResult]:
        """Allow action when idle or from inside the gesture owning layer_id"""
        mode = self._mode
        if isinstance(mode, gesture_type) and mode.layer_id == layer_id:
            return None
        return self._require_idle(action)

    # ========================================
    # Move
    # ========================================

    def move_layer_to(self, layer_id: str, x, y) -> CommandResult:
        """Move a non-base layer; the offset is clamped to keep it on the canvas

        A pure move leaves the processed cache valid.
        """
        blocked = self._gesture_blocks(layer_id, Dragging, "move a layer")
        if blocked is not None:
            return blocked

        layer = self.get_layer(layer_id)
        if self.get_layer_index(layer_id) == 0:
            return self.commit(CommandResult.rejected("The base layer cannot be moved"))

        self.place_unpositioned_layers()
        self._clamp_layer(layer, x, y)
        return self.commit(CommandResult(value=(layer.x, layer.y)))

    # ========================================
    # Resize
    # ========================================

    def resize_layer_to(self, layer_id: str, width: Optional[int] = None,
                        height: Optional[int] = None) -> CommandResult:
        """Resample a non-base layer to new dimensions

        A missing dimension follows the current aspect ratio. Both
        dimensions are at least 1 px; the offset is re-clamped afterwards.
        """
        blocked = self._require_idle("resize a layer")
        if blocked is not None:
            return blocked

        layer = self.get_layer(layer_id)
        if self.get_layer_index(layer_id) == 0:
            return self.commit(CommandResult.rejected(
                "The base layer cannot be resized. Use the interactive handles to resize other layers."
            ))
        if width is None and height is None:
            return self.commit(CommandResult.rejected("No size given"))

        aspect = layer.natural_width / layer.natural_height
        if width is None:
            width = round_half_up(height * aspect)
        elif height is None:
            height = round_half_up(width / aspect)
        width, height = max(1, int(width)), max(1, int(height))

        self.place_unpositioned_layers()
        layer.replace_source(resample(layer.source, width, height))
        self._clamp_layer(layer, layer.x, layer.y)

        self._logger.info(f"Resized {layer_id} to {width}x{height}")
        return self.commit(CommandResult(affected=[layer_id], value=(width, height)))

    def resize_layer_into(self, layer_id: str, rect: Rect) -> CommandResult:
        """Resample a non-base layer so its footprint becomes rect"""
        blocked = self._require_idle("resize a layer")
        if blocked is not None:
            return blocked

        layer = self.get_layer(layer_id)
        if self.get_layer_index(layer_id) == 0:
            return self.commit(CommandResult.rejected("The base layer cannot be resized"))

        width = max(1, round_half_up(rect.width))
        height = max(1, round_half_up(rect.height))
        layer.replace_source(resample(layer.source, width, height))
        self._clamp_layer(layer, rect.left, rect.top)

        self._logger.info(f"Resized {layer_id} into {width}x{height} at ({layer.x}, {layer.y})")
        return self.commit(CommandResult(affected=[layer_id], value=(width, height)))

    def preview_layer_geometry(self, layer_id: str, x, y, width: int, height: int) -> CommandResult:
        """Live resize preview: change the drawn size and offset, keep the source

        Only valid from inside a resize gesture on this layer. The cache is
        keyed on natural size, so the frame shows the rescaled raster.
        """
        mode = self._mode
        if not (isinstance(mode, Resizing) and mode.layer_id == layer_id):
            return CommandResult.rejected("No resize gesture on this layer")

        layer = self.get_layer(layer_id)
        layer.set_natural_size(width, height)
        layer.x, layer.y = int(x), int(y)
        return self.commit(CommandResult(value=(layer.x, layer.y, width, height)))

    def resample_to_natural_size(self, layer_id: str) -> CommandResult:
        """Bake a previewed size into the source (end of a handle drag)"""
        blocked = self._require_idle("resample a layer")
        if blocked is not None:
            return blocked

        layer = self.get_layer(layer_id)
        width, height = layer.natural_size
        if layer.source.size != (width, height):
            layer.replace_source(resample(layer.source, width, height))
            self._logger.info(f"Resampled {layer_id} to {width}x{height}")
        return self.commit(CommandResult(affected=[layer_id], value=(width, height)))

    # ========================================
    # Crop
    # ========================================

    def crop_base(self, rect: Rect) -> CommandResult:
        """Crop the composition to rect (canvas pixels)

        The base source is cropped and the canvas shrinks to the rect; every
        other layer keeps its place in the picture by shifting with the new
        origin, then is re-clamped to the new canvas.
        """
        blocked = self._require_idle("crop")
        if blocked is not None:
            return blocked
        if not self._layers:
            return CommandResult.rejected("Nothing to crop")

        self.place_unpositioned_layers()
        base = self._layers[0]
        canvas = Rect(0, 0, base.natural_width, base.natural_height)
        region = rect.rounded().intersection(canvas)
        if region.is_empty():
            self._logger.debug("Crop region is empty, nothing to do")
            return self.commit(CommandResult.rejected("Crop region is empty"))

        width, height = int(region.width), int(region.height)
        box = source_box(canvas, region, base.source.width, base.source.height)
        base.replace_source(resample(base.source, width, height, box=box))
        base.x, base.y = 0, 0

        shift_x, shift_y = int(region.left), int(region.top)
        for layer in self._layers[1:]:
            self._clamp_layer(layer, layer.x - shift_x, layer.y - shift_y)

        self._logger.info(f"Cropped canvas to {width}x{height} at ({shift_x}, {shift_y})")
        return self.commit(CommandResult(affected=[base.id], value=(width, height)))

    def crop_layer(self, layer_id: str, rect: Rect) -> CommandResult:
        """Crop a non-base layer to the part of rect it covers

        A rect that misses the layer entirely is a no-op. The cropped layer is
        re-clamped so part of it stays on the canvas.
        """
        blocked = self._require_idle("crop")
        if blocked is not None:
            return blocked

        layer = self.get_layer(layer_id)
        if self.get_layer_index(layer_id) == 0:
            return self.crop_base(rect)

        self.place_unpositioned_layers()
        footprint = layer.footprint
        region = rect.rounded().intersection(footprint)
        if region.is_empty():
            self._logger.debug(f"Crop region misses {layer_id}, nothing to do")
            return self.commit(CommandResult.rejected("Crop region does not overlap the layer"))

        width, height = int(region.width), int(region.height)
        box = source_box(footprint, region, layer.source.width, layer.source.height)
        layer.replace_source(resample(layer.source, width, height, box=box))
        self._clamp_layer(layer, region.left, region.top)

        self._logger.info(f"Cropped {layer_id} to {width}x{height} at ({layer.x}, {layer.y})")
        return self.commit(CommandResult(affected=[layer_id], value=(width, height)))
