"""Pointer and edge-drag interaction for layer geometry"""

from .controller import InteractionController
from .handles import CornerHandle, EdgeHandle, CORNER_HANDLES, EDGE_HANDLES, handle_at

__all__ = ['InteractionController', 'CornerHandle', 'EdgeHandle', 'CORNER_HANDLES', 'EDGE_HANDLES', 'handle_at']
