"""Conversion of rendered surfaces to Qt images for on-screen display"""

import numpy as np
from PyQt5.QtGui import QImage


def pixels_to_qimage(pixels: np.ndarray) -> QImage:
	"""Wrap an (H, W, 4) uint8 RGBA buffer as a QImage (deep copy)

	Raises:
		ValueError: If the buffer is not RGBA
	"""
	pixels = np.ascontiguousarray(pixels, dtype=np.uint8)
	if pixels.ndim != 3 or pixels.shape[2] != 4:
		raise ValueError(f"Expected (H, W, 4) pixels, got {pixels.shape}")

	height, width = pixels.shape[:2]
	image = QImage(pixels.data, width, height, width * 4, QImage.Format_RGBA8888)
	# QImage borrows the numpy memory; copy so the result outlives the buffer
	return image.copy()


def surface_to_qimage(surface) -> QImage:
	"""Snapshot of a compositor Surface for painting in a widget"""
	return pixels_to_qimage(surface.read_pixels())
