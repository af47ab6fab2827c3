"""
Mesmerise Image Editor - File Operations Service

This module handles image file I/O.
Separates decoding and PNG export from UI logic.
"""

import base64
import io
import logging

from PIL import Image

from constants import EXPORT_FORMAT

logger = logging.getLogger(__name__)


def load_image(filename):
    """Decode an image file into an RGBA bitmap handle

    Args:
        filename: Path (or binary file object) of a format Pillow can read

    Returns:
        Fully loaded PIL image in RGBA mode

    Raises:
        OSError: If the file cannot be read or decoded
    """
    with Image.open(filename) as image:
        image.load()
        bitmap = image.convert('RGBA')

    logger.debug(f"Loaded {filename} ({bitmap.width}x{bitmap.height})")
    return bitmap


def export_png(session, surface) -> bytes:
    """Encode the current surface as PNG

    Args:
        session: EditorSession (refuses export when its stack is empty)
        surface: Rendered output surface

    Returns:
        PNG file contents

    Raises:
        ValueError: If there is nothing to export
    """
    if session.layer_count == 0 or surface.width == 0 or surface.height == 0:
        raise ValueError("Please add at least one layer/image first!")

    buffer = io.BytesIO()
    surface.to_image().save(buffer, format=EXPORT_FORMAT)
    return buffer.getvalue()


def export_data_uri(session, surface) -> str:
    """PNG export as a data: URI"""
    encoded = base64.b64encode(export_png(session, surface)).decode('ascii')
    return f"data:image/png;base64,{encoded}"


def save_png(session, surface, filename):
    """Write the PNG export to disk

    Raises:
        ValueError: If there is nothing to export
        OSError: If the file cannot be written
    """
    data = export_png(session, surface)
    with open(filename, 'wb') as f:
        f.write(data)

    logger.info(f"Saved {surface.width}x{surface.height} image to {filename}")
