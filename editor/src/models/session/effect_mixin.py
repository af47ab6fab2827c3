"""
EditorSession Effect Mixin - Effect chain operations

Provides:
- Effect instance CRUD on layer chains
- Catalog coercion of new values
- Composition-wide rules (resolution is allowed once, never on the base)
"""

from typing import Any, Optional, Tuple

from models.effect import EffectInstance, get_definition
from utils.logger import notify_user
from ._internal.layer import Layer
from .command import CommandResult
from constants import GLOBALLY_UNIQUE_EFFECTS


class SessionEffectMixin:
    """Mixin providing effect chain operations for EditorSession

    This mixin assumes the parent class has:
        - self._layers: List of Layer in paint order
        - self._effect_counter: Effect id counter
        - self._logger: logging.Logger instance
        - self.debounce_ms / self.color_debounce_ms
        - self.commit() / self._require_idle() / self.get_layer()
    """

    # ========================================
    # Queries
    # ========================================

    def find_effect(self, instance_id: str) -> Tuple[Layer, EffectInstance]:
        """Locate an effect instance and the layer owning it

        Raises:
            ValueError: If instance_id not found
        """
        for layer in self._layers:
            instance = layer.find_effect(instance_id)
            if instance is not None:
                return layer, instance
        raise ValueError(f"Effect instance '{instance_id}' not found")

    def count_effect_kind(self, kind: str) -> int:
        """Number of instances of kind across the whole stack"""
        return sum(
            1 for layer in self._layers for instance in layer.effect_chain if instance.kind == kind
        )

    # ========================================
    # Effect CRUD
    # ========================================

    def add_effect(self, layer_id: Optional[str], kind: str) -> CommandResult:
        """Append an effect instance with its catalog default

        Args:
            layer_id: Target layer (None means nothing selected)
            kind: Catalog kind

        Returns:
            CommandResult with value set to the new instance id

        Raises:
            ValueError: If layer_id or kind is unknown
        """
        blocked = self._require_idle("add an effect")
        if blocked is not None:
            return blocked

        if layer_id is None:
            notify_user("Select a layer first.")
            return CommandResult.rejected("No layer selected")

        definition = get_definition(kind)
        layer = self.get_layer(layer_id)

        if kind in GLOBALLY_UNIQUE_EFFECTS:
            if self.count_effect_kind(kind) > 0:
                notify_user(f"{definition.display_name} can only be applied once.")
                return CommandResult.rejected(f"{kind} already applied")
            if self.get_layer_index(layer_id) == 0:
                notify_user(f"{definition.display_name} cannot be applied to the base layer.")
                return CommandResult.rejected(f"{kind} not allowed on the base layer")

        self._effect_counter += 1
        instance = EffectInstance(f"eff{self._effect_counter}", kind)
        layer.effect_chain.append(instance)

        self._logger.debug(f"Added {kind} ({instance.instance_id}) to {layer_id}")
        return self.commit(CommandResult(affected=[layer_id], value=instance.instance_id))

    def remove_effect(self, instance_id: str) -> CommandResult:
        """Remove an effect instance from whichever layer owns it

        Raises:
            ValueError: If instance_id not found
        """
        layer, instance = self.find_effect(instance_id)
        layer.effect_chain.remove(instance)

        self._logger.debug(f"Removed {instance.kind} ({instance_id}) from {layer.id}")
        return self.commit(CommandResult(affected=[layer.id], value=instance_id))

    def update_effect(self, instance_id: str, value: Any) -> CommandResult:
        """Set a new value (coerced against the catalog) and schedule a reprocess

        Scalar changes use the slider debounce; custom records (colour
        pickers) use the longer colour debounce.

        Raises:
            ValueError: If instance_id not found
        """
        layer, instance = self.find_effect(instance_id)
        definition = get_definition(instance.kind)
        instance.value = definition.coerce(value)

        delay = self.color_debounce_ms if definition.is_custom else self.debounce_ms
        self._logger.debug(f"Updated {instance_id} = {instance.value!r}")
        return self.commit(CommandResult(affected=[layer.id], value=instance.value, debounce_ms=delay))
