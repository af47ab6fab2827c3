"""
Mesmerise Image Editor - Editor Session Model

THE MODEL of the editor. Owns all composition state and operations.

This class handles:
- The layer stack (index 0 is the base layer, defining the canvas size)
- Selection and the layer/effect id counters
- Effect instance management (add, remove, update with catalog coercion)
- Layer geometry (move, resize, crop, resample)
- The current interaction mode (one modal gesture at a time)
- Cache invalidation: invalidate() is the ONLY writer of a layer's dirty flag

The session is INDEPENDENT of UI:
- No Qt imports
- No drawing (that's services.compositor)
- No pointer math (that's services.interaction)

Every mutating operation returns a CommandResult. commit() turns the
result into side effects: the affected layers are dirtied, then the
attached render scheduler is asked for a frame.

Usage:
    session = EditorSession(scheduler=ManualRenderScheduler(render))

    base_id = session.add_layer(load_image('photo.png')).value
    overlay_id = session.add_layer(load_image('sticker.png')).value

    effect_id = session.add_effect(overlay_id, 'sepia').value
    session.update_effect(effect_id, 80)
    session.move_layer_to(overlay_id, 40, 25)
"""

import logging
from typing import List, Optional

from ._internal.layer import Layer
from .command import CommandResult
from .modes import IDLE, Idle, InteractionMode
from .layer_mixin import SessionLayerMixin
from .effect_mixin import SessionEffectMixin
from .geometry_mixin import SessionGeometryMixin
from constants import VALUE_DEBOUNCE_MS, COLOR_DEBOUNCE_MS


class EditorSession(SessionLayerMixin, SessionEffectMixin, SessionGeometryMixin):
    """Layered composition with full command API

    Properties:
        layers: Tuple of layers in paint order (index 0 is the base)
        selected_layer_id: Currently selected layer id or None
        mode: Current InteractionMode
        canvas_size: Size of the base layer, (0, 0) when empty
    """

    def __init__(self, scheduler=None, debounce_ms: int = VALUE_DEBOUNCE_MS,
                 color_debounce_ms: int = COLOR_DEBOUNCE_MS):
        """Create an empty session

        Args:
            scheduler: RenderScheduler asked for frames after each commit (optional)
            debounce_ms: Reprocess delay after scalar effect changes
            color_debounce_ms: Reprocess delay after custom effect (colour) changes
        """
        self._logger = logging.getLogger('EditorSession')

        self._layers: List[Layer] = []
        self._selected_id: Optional[str] = None

        # Monotonic id counters, restarted only by reset()
        self._layer_counter = 0
        self._effect_counter = 0

        self._mode: InteractionMode = IDLE
        self._scheduler = scheduler

        self.debounce_ms = debounce_ms
        self.color_debounce_ms = color_debounce_ms

        self._logger.debug("Created new session")

    @classmethod
    def from_config(cls, config, scheduler=None) -> 'EditorSession':
        """Create a session using the debounce timings of an EditorConfig"""
        return cls(
            scheduler=scheduler,
            debounce_ms=config.debounce_ms,
            color_debounce_ms=config.color_debounce_ms,
        )

    def reset(self) -> CommandResult:
        """Global reset: empty stack, counters restart, mode back to idle"""
        self._layers = []
        self._selected_id = None
        self._layer_counter = 0
        self._effect_counter = 0
        self._mode = IDLE

        self._logger.debug("Reset session")
        return self.commit(CommandResult())

    # ========================================
    # Render scheduling
    # ========================================

    def attach_scheduler(self, scheduler):
        self._scheduler = scheduler

    @property
    def scheduler(self):
        return self._scheduler

    def request_render(self):
        if self._scheduler is not None:
            self._scheduler.request_render()

    # ========================================
    # Invalidation
    # ========================================

    def invalidate(self, layer_id: str):
        """Mark a layer's processed cache stale

        Raises:
            ValueError: If layer_id is unknown
        """
        self.get_layer(layer_id).mark_dirty()
        self._logger.debug(f"Invalidated {layer_id}")

    def commit(self, result: CommandResult) -> CommandResult:
        """Apply the side effects of a command result

        Rejected results change nothing. Accepted ones dirty every
        affected layer that still exists, then request a frame (or a
        debounced reprocess when the result asks for one).
        """
        if not result.accepted:
            self._logger.debug(f"Command rejected: {result.reason}")
            return result

        for layer_id in result.affected:
            if self.has_layer(layer_id):
                self.invalidate(layer_id)

        if self._scheduler is not None:
            if result.debounce_ms is not None:
                self._scheduler.request_reprocess(result.debounce_ms)
            else:
                self._scheduler.request_render()
        return result

    # ========================================
    # Interaction mode
    # ========================================

    @property
    def mode(self) -> InteractionMode:
        return self._mode

    @property
    def is_idle(self) -> bool:
        return isinstance(self._mode, Idle)

    def enter_mode(self, mode: InteractionMode) -> bool:
        """Switch to a modal gesture; refused unless currently idle"""
        if not self.is_idle:
            self._logger.debug(f"Cannot enter {mode.name} while {self._mode.name}")
            return False
        self._mode = mode
        self._logger.debug(f"Entered {mode.name}")
        return True

    def exit_mode(self):
        if not self.is_idle:
            self._logger.debug(f"Left {self._mode.name}")
        self._mode = IDLE

    def _require_idle(self, action: str) -> Optional[CommandResult]:
        """Rejection to return when a modal gesture blocks action, else None"""
        if self.is_idle:
            return None
        return CommandResult.rejected(f"Cannot {action} while {self._mode.name}")
