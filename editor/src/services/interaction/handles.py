"""Interaction handle system - ABC-based handle architecture.

Each handle type is a class that knows:
- Where it sits on a rectangle (canvas pixels)
- How to test if a pointer position hits it
- How a drag on it reshapes the rectangle
"""

from abc import ABC, abstractmethod
import math

from models.transform import Rect, Vec2
from utils.coordinate_transforms import round_half_up
from utils.geometry import clamp_position
from constants import HANDLE_ANCHORS, HANDLE_HIT_TOLERANCE, HANDLE_RESIZE_MIN, HANDLE_RESIZE_MAX, RECT_EDGES


class Handle(ABC):
	"""Abstract base class for geometry handles."""

	def __init__(self, name, hit_tolerance=HANDLE_HIT_TOLERANCE):
		self.name = name
		self.hit_tolerance = hit_tolerance

	@abstractmethod
	def position(self, rect) -> Vec2:
		"""Handle position on rect, in canvas pixels."""
		pass

	def hit_test(self, px, py, rect) -> bool:
		"""Test if a canvas-space pointer position hits this handle."""
		pos = self.position(rect)
		return math.hypot(px - pos.x, py - pos.y) <= self.hit_tolerance

	@abstractmethod
	def drag(self, start_rect, dx, dy, **kwargs) -> Rect:
		"""Rectangle produced by dragging this handle by (dx, dy) canvas pixels."""
		pass


class CornerHandle(Handle):
	"""Corner handle for aspect-locked resizing.

	The opposite corner stays anchored; only the horizontal pointer delta
	drives the new width, and the height follows the aspect ratio.
	"""

	def __init__(self, corner, hit_tolerance=HANDLE_HIT_TOLERANCE):
		"""
		Args:
			corner: 'nw', 'ne', 'sw', 'se'
			hit_tolerance: Hit radius in canvas pixels
		"""
		super().__init__(corner, hit_tolerance)
		self.anchor = HANDLE_ANCHORS[corner]
		self.moves_left = corner.endswith('w')
		self.moves_top = corner.startswith('n')

	def position(self, rect):
		return Vec2(
			rect.left if self.moves_left else rect.right,
			rect.top if self.moves_top else rect.bottom,
		)

	def drag(self, start_rect, dx, dy, aspect=1.0, canvas_size=None,
			 min_size=HANDLE_RESIZE_MIN, max_size=HANDLE_RESIZE_MAX):
		"""Aspect-locked resize anchored at the opposite corner.

		Args:
			start_rect: Layer footprint when the drag began
			dx, dy: Pointer delta since press (canvas pixels; dy is unused)
			aspect: Width / height captured at press
			canvas_size: (width, height) to clamp the position against
			min_size, max_size: Size limits for either dimension

		Returns:
			Rect with integer edges
		"""
		start_w, start_h = start_rect.width, start_rect.height
		delta = -dx if self.moves_left else dx

		new_w = max(min_size, start_w + delta)
		new_h = max(min_size, round_half_up(new_w / aspect))
		new_x = start_rect.left + (start_w - new_w) if self.moves_left else start_rect.left
		new_y = start_rect.top + (start_h - new_h) if self.moves_top else start_rect.top

		if canvas_size is not None:
			new_x, new_y = clamp_position(new_x, new_y, new_w, new_h, *canvas_size)
		new_w = max(min_size, min(new_w, max_size))
		new_h = max(min_size, min(new_h, max_size))

		return Rect.from_xywh(
			round_half_up(new_x), round_half_up(new_y), round_half_up(new_w), round_half_up(new_h)
		)


class EdgeHandle(Handle):
	"""Edge handle for single-edge moves of a resize or crop rectangle."""

	def __init__(self, edge, hit_tolerance=HANDLE_HIT_TOLERANCE):
		"""
		Args:
			edge: 'left', 'top', 'right', 'bottom'
			hit_tolerance: Hit distance in canvas pixels
		"""
		if edge not in RECT_EDGES:
			raise ValueError(f"Unknown edge '{edge}'")
		super().__init__(edge, hit_tolerance)
		self.horizontal = edge in ('left', 'right')

	def position(self, rect):
		"""Midpoint of the edge."""
		cx = (rect.left + rect.right) / 2
		cy = (rect.top + rect.bottom) / 2
		return Vec2(getattr(rect, self.name), cy) if self.horizontal else Vec2(cx, getattr(rect, self.name))

	def hit_test(self, px, py, rect):
		"""Anywhere along the edge counts, within tolerance of its line."""
		if self.horizontal:
			return (abs(px - getattr(rect, self.name)) <= self.hit_tolerance
					and rect.top <= py <= rect.bottom)
		return (abs(py - getattr(rect, self.name)) <= self.hit_tolerance
				and rect.left <= px <= rect.right)

	def drag(self, start_rect, dx, dy, start_value=None, min_size=1):
		"""Move this edge by the delta along its axis.

		The edge never passes within min_size of the opposite edge.

		Args:
			start_rect: Current rectangle (the other edges are kept)
			dx, dy: Delta since the edge was grabbed
			start_value: Edge coordinate when grabbed (defaults to start_rect)
			min_size: Smallest allowed width/height
		"""
		if start_value is None:
			start_value = getattr(start_rect, self.name)
		value = start_value + (dx if self.horizontal else dy)

		left, top, right, bottom = start_rect
		if self.name == 'left':
			left = min(value, right - min_size)
		elif self.name == 'right':
			right = max(value, left + min_size)
		elif self.name == 'top':
			top = min(value, bottom - min_size)
		else:
			bottom = max(value, top + min_size)
		return Rect(left, top, right, bottom)


CORNER_HANDLES = {corner: CornerHandle(corner) for corner in HANDLE_ANCHORS}
EDGE_HANDLES = {edge: EdgeHandle(edge) for edge in RECT_EDGES}


def handle_at(handles, px, py, rect):
	"""Find which handle (if any) is at a canvas position.

	Returns:
		Handle object or None
	"""
	for handle in handles.values():
		if handle.hit_test(px, py, rect):
			return handle
	return None
