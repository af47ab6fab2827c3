"""Coordinate transformation utilities for canvas interaction.

Provides conversion between the coordinate systems of the editor:
- Display pixels (the canvas as scaled on screen, client coordinates)
- Canvas pixels (native output surface, origin at the base's top-left)

The displayed canvas may be scaled to fit the viewport, so every pointer
position and drag delta must be rescaled before it touches layer geometry.
"""
import math

from models.transform import Rect, Vec2


def round_half_up(value):
	"""Round to the nearest integer, halves toward +infinity.

	Python's round() rounds halves to even, which makes 0.5 and 1.5 land
	on the same pixel. Pointer mapping needs a monotonic rule.
	"""
	return int(math.floor(value + 0.5))


def _scale(display_rect, canvas_width, canvas_height):
	"""Canvas pixels per display pixel along each axis"""
	if display_rect.width <= 0 or display_rect.height <= 0:
		raise ValueError("Display rectangle must have a positive size")
	return canvas_width / display_rect.width, canvas_height / display_rect.height


def display_to_canvas_point(client_x, client_y, display_rect, canvas_width, canvas_height):
	"""Convert a client-space pointer position to integer canvas pixels.

	Args:
		client_x, client_y: Pointer position in display pixels
		display_rect: Rect of the displayed canvas in display pixels
		canvas_width, canvas_height: Native canvas size

	Returns:
		Vec2 of rounded canvas coordinates
	"""
	sx, sy = _scale(display_rect, canvas_width, canvas_height)
	return Vec2(
		round_half_up((client_x - display_rect.left) * sx),
		round_half_up((client_y - display_rect.top) * sy),
	)


def display_delta_to_canvas(dx, dy, display_rect, canvas_width, canvas_height, rounded=True):
	"""Convert a pointer delta in display pixels to canvas pixels.

	Crop edges move in whole pixels (rounded); the resize rectangle keeps
	fractional edges until it is applied.
	"""
	sx, sy = _scale(display_rect, canvas_width, canvas_height)
	if rounded:
		return Vec2(round_half_up(dx * sx), round_half_up(dy * sy))
	return Vec2(dx * sx, dy * sy)


def canvas_rect_to_display(rect, display_rect, canvas_width, canvas_height):
	"""Map a canvas-space rectangle onto the displayed canvas (for overlays)"""
	if canvas_width <= 0 or canvas_height <= 0:
		raise ValueError("Canvas must have a positive size")
	sx = display_rect.width / canvas_width
	sy = display_rect.height / canvas_height
	return Rect(
		display_rect.left + rect.left * sx,
		display_rect.top + rect.top * sy,
		display_rect.left + rect.right * sx,
		display_rect.top + rect.bottom * sy,
	)
