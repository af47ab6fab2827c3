"""
Tests for image loading and PNG export.
"""
import base64
import io

import numpy as np
import pytest
from PIL import Image

from services.file_operations import export_data_uri, export_png, load_image, save_png
from utils.qt_image import surface_to_qimage
from conftest import gradient_image


@pytest.fixture
def rendered(overlay_session, surface):
    overlay_session.scheduler.flush()
    return overlay_session, surface


class TestLoadImage:

    def test_rgb_file_becomes_rgba(self, tmp_path):
        path = tmp_path / "photo.png"
        Image.new('RGB', (6, 4), (10, 20, 30)).save(path)

        bitmap = load_image(str(path))
        assert bitmap.mode == 'RGBA'
        assert bitmap.size == (6, 4)
        assert bitmap.getpixel((0, 0)) == (10, 20, 30, 255)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_image(str(tmp_path / "nope.png"))

    def test_not_an_image(self, tmp_path):
        path = tmp_path / "notes.png"
        path.write_text("definitely not a png")
        with pytest.raises(OSError):
            load_image(str(path))


class TestExport:

    def test_empty_stack_refused(self, session, surface):
        with pytest.raises(ValueError, match="add at least one layer"):
            export_png(session, surface)

    def test_png_matches_surface(self, rendered):
        session, surface = rendered
        data = export_png(session, surface)

        assert data.startswith(b'\x89PNG')
        decoded = np.array(Image.open(io.BytesIO(data)))
        assert np.array_equal(decoded, surface.read_pixels())

    def test_data_uri(self, rendered):
        session, surface = rendered
        uri = export_data_uri(session, surface)
        prefix = "data:image/png;base64,"
        assert uri.startswith(prefix)
        assert base64.b64decode(uri[len(prefix):]) == export_png(session, surface)

    def test_save_png(self, rendered, tmp_path):
        session, surface = rendered
        path = tmp_path / "out.png"
        save_png(session, surface, str(path))

        with Image.open(path) as image:
            assert image.size == (100, 80)

    def test_round_trip_through_loader(self, session, surface, tmp_path):
        session.add_layer(gradient_image(12, 9))
        session.scheduler.flush()
        path = tmp_path / "flat.png"
        save_png(session, surface, str(path))

        assert np.array_equal(np.array(load_image(str(path))), surface.read_pixels())


def test_surface_to_qimage(rendered):
    _, surface = rendered
    image = surface_to_qimage(surface)
    assert (image.width(), image.height()) == (100, 80)
    # Overlay pixel at (45, 40) is opaque blue
    color = image.pixelColor(45, 40)
    assert (color.red(), color.green(), color.blue(), color.alpha()) == (0, 0, 255, 255)
