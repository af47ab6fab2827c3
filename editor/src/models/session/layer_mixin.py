"""
EditorSession Layer Mixin - Layer stack operations

Provides:
- Stack queries (base layer, lookup, index, canvas size)
- Layer CRUD (add, remove)
- Reordering and selection
"""

from typing import Optional, Tuple

from PIL import Image

from models.effect import get_definition
from utils.logger import notify_user

from ._internal.layer import Layer
from .command import CommandResult
from constants import GLOBALLY_UNIQUE_EFFECTS


class SessionLayerMixin:
    """Mixin providing layer stack operations for EditorSession

    This mixin assumes the parent class has:
        - self._layers: List of Layer in paint order
        - self._selected_id: Selected layer id or None
        - self._layer_counter: Layer id counter
        - self._logger: logging.Logger instance
        - self.commit() / self._require_idle()
    """

    # ========================================
    # Queries
    # ========================================

    @property
    def layers(self) -> Tuple[Layer, ...]:
        return tuple(self._layers)

    @property
    def layer_count(self) -> int:
        return len(self._layers)

    @property
    def base_layer(self) -> Optional[Layer]:
        return self._layers[0] if self._layers else None

    @property
    def canvas_size(self) -> Tuple[int, int]:
        """Output size, defined by the base layer ((0, 0) when empty)"""
        base = self.base_layer
        return base.natural_size if base is not None else (0, 0)

    @property
    def selected_layer_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected_layer(self) -> Optional[Layer]:
        if self._selected_id is None:
            return None
        return self.get_layer(self._selected_id)

    def has_layer(self, layer_id: str) -> bool:
        return any(layer.id == layer_id for layer in self._layers)

    def get_layer(self, layer_id: str) -> Layer:
        """Look up a layer

        Raises:
            ValueError: If layer_id not found
        """
        for layer in self._layers:
            if layer.id == layer_id:
                return layer
        raise ValueError(f"Layer '{layer_id}' not found")

    def get_layer_index(self, layer_id: str) -> int:
        for index, layer in enumerate(self._layers):
            if layer.id == layer_id:
                return index
        raise ValueError(f"Layer '{layer_id}' not found")

    def is_base(self, layer_id: str) -> bool:
        return self.get_layer_index(layer_id) == 0

    # ========================================
    # Layer CRUD
    # ========================================

    def add_layer(self, source: Image.Image) -> CommandResult:
        """Append a layer built from a decoded bitmap and select it

        The first layer becomes the base. Other layers are centered on the
        base the first time they are placed.

        Returns:
            CommandResult with value set to the new layer id
        """
        blocked = self._require_idle("add a layer")
        if blocked is not None:
            return blocked

        self._layer_counter += 1
        layer = Layer(f"layer{self._layer_counter}", source)
        self._layers.append(layer)
        self._selected_id = layer.id

        self._logger.debug(f"Added layer: {layer.id} ({layer.natural_width}x{layer.natural_height})")
        return self.commit(CommandResult(affected=[layer.id], value=layer.id))

    def remove_layer(self, layer_id: str) -> CommandResult:
        """Remove a layer from the stack

        Removing the base promotes the next layer: it moves to the origin
        and the remaining layers are re-clamped to the new canvas. A resolution
        effect on the promoted layer is dropped, since the base never carries one.

        Raises:
            ValueError: If layer_id not found
        """
        blocked = self._require_idle("remove a layer")
        if blocked is not None:
            return blocked

        index = self.get_layer_index(layer_id)
        del self._layers[index]

        affected = []
        if index == 0 and self._layers:
            new_base = self._layers[0]
            new_base.x, new_base.y = 0, 0
            self._strip_base_only_effects(new_base)
            affected.append(new_base.id)
            self._clamp_all_to_canvas()

        if self._selected_id == layer_id:
            self._selected_id = self._layers[0].id if self._layers else None

        self._logger.debug(f"Removed layer: {layer_id}")
        return self.commit(CommandResult(affected=affected, value=layer_id))

    def _strip_base_only_effects(self, layer: Layer):
        """Drop effects the base may not carry from a newly promoted base"""
        dropped = [i for i in layer.effect_chain if i.kind in GLOBALLY_UNIQUE_EFFECTS]
        if not dropped:
            return
        layer.effect_chain[:] = [i for i in layer.effect_chain if i.kind not in GLOBALLY_UNIQUE_EFFECTS]
        names = ", ".join(get_definition(i.kind).display_name for i in dropped)
        self._logger.info(f"Dropped {names} from new base {layer.id}")
        notify_user(f"{names} cannot be applied to the base layer and was removed from {layer.id}.")

    # ========================================
    # Ordering and selection
    # ========================================

    def reorder_layer(self, layer_id: str, to_index: int) -> CommandResult:
        """Move a non-base layer to a new stack index

        The base cannot be moved and nothing can be dropped onto index 0.
        An index past the end means topmost.
        """
        blocked = self._require_idle("reorder layers")
        if blocked is not None:
            return blocked

        from_index = self.get_layer_index(layer_id)
        if from_index == 0:
            return self.commit(CommandResult.rejected("The base layer cannot be moved"))
        if to_index <= 0:
            return self.commit(CommandResult.rejected("Cannot move a layer below the base"))

        to_index = min(to_index, len(self._layers) - 1)
        if to_index == from_index:
            return CommandResult(value=to_index)

        layer = self._layers.pop(from_index)
        self._layers.insert(to_index, layer)

        self._logger.debug(f"Moved {layer_id} from index {from_index} to {to_index}")
        return self.commit(CommandResult(value=to_index))

    def select_layer(self, layer_id: Optional[str]) -> CommandResult:
        blocked = self._require_idle("change selection")
        if blocked is not None:
            return blocked

        if layer_id is not None:
            self.get_layer(layer_id)
        self._selected_id = layer_id
        self._logger.debug(f"Selected {layer_id}")
        return self.commit(CommandResult(value=layer_id))
