"""
Shared fixtures for Mesmerise Image Editor tests.

Provides reusable bitmaps, pixel buffers, sessions and schedulers.
"""
import sys
import os
import pytest

# Qt must never try to open a display during tests
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

# Ensure editor/src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'editor', 'src'))

import numpy as np
from PIL import Image


# ── Bitmap helpers ──────────────────────────────────────────────────────

def solid_image(width, height, color=(200, 100, 50, 255)):
    """RGBA bitmap filled with one colour"""
    return Image.new('RGBA', (width, height), color)


def gradient_image(width, height):
    """RGBA bitmap with a horizontal red ramp and a vertical green ramp"""
    xs = np.linspace(0, 255, width, dtype=np.float64)
    ys = np.linspace(0, 255, height, dtype=np.float64)
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[..., 0] = np.rint(xs)[np.newaxis, :]
    pixels[..., 1] = np.rint(ys)[:, np.newaxis]
    pixels[..., 2] = 128
    pixels[..., 3] = 255
    return Image.fromarray(pixels)


def solid_pixels(width, height, color=(200, 100, 50, 255)):
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[...] = color
    return pixels


# ── Fixtures ────────────────────────────────────────────────────────────

@pytest.fixture
def rng():
    """Seeded generator so grain is reproducible"""
    return np.random.default_rng(1234)


@pytest.fixture
def gradient_pixels():
    """64x48 gradient buffer"""
    return np.array(gradient_image(64, 48), dtype=np.uint8)


@pytest.fixture
def surface():
    from services.compositor import Surface
    return Surface()


@pytest.fixture
def session(surface):
    """Empty session with a manual scheduler that renders into the surface fixture"""
    from models.session import EditorSession
    from services.compositor import render_all
    from services.render_scheduler import ManualRenderScheduler

    sess = EditorSession()
    scheduler = ManualRenderScheduler(lambda: render_all(sess.layers, surface))
    sess.attach_scheduler(scheduler)
    return sess


@pytest.fixture
def base_session(session):
    """Session holding a 100x80 base layer"""
    session.add_layer(gradient_image(100, 80))
    return session


@pytest.fixture
def overlay_session(base_session):
    """100x80 base plus a 20x10 overlay (centered at (40, 35) once placed)"""
    base_session.add_layer(solid_image(20, 10, (0, 0, 255, 255)))
    base_session.place_unpositioned_layers()
    return base_session


@pytest.fixture(autouse=True)
def headless_notifications():
    """Keep refusal popups out of tests"""
    from utils import logger
    logger.set_main_window(None)
    yield
    logger.set_main_window(None)
