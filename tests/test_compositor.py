"""
Tests for the output surface and the compositor.

Verifies:
- Surface sizing, clearing, pixel read/write
- Source-over drawing with clipping and nearest scaling
- Canvas sized by the base layer, stack order painting
- Lazy centering of new layers
- Draw failures fall back or skip without aborting the frame
"""
import numpy as np
import pytest

from models.session import Layer
from services import compositor
from services.compositor import Surface, render_all
from conftest import gradient_image, solid_image, solid_pixels


# ══════════════════════════════════════════════════════════════════════════
# Surface
# ══════════════════════════════════════════════════════════════════════════

class TestSurface:

    def test_resize_and_clear(self):
        surface = Surface()
        surface.resize_to(10, 6)
        assert surface.size == (10, 6)
        assert not surface.read_pixels().any()

    def test_write_then_read(self):
        surface = Surface(4, 3)
        pixels = solid_pixels(4, 3, (1, 2, 3, 4))
        surface.write_pixels(pixels)
        assert np.array_equal(surface.read_pixels(), pixels)

    def test_write_wrong_shape(self):
        surface = Surface(4, 3)
        with pytest.raises(ValueError):
            surface.write_pixels(solid_pixels(3, 4))

    def test_opaque_draw_replaces(self):
        surface = Surface(4, 4)
        surface.draw_bitmap_at(solid_image(2, 2, (10, 20, 30, 255)), 1, 1, 2, 2)
        out = surface.read_pixels()
        assert tuple(out[1, 1]) == (10, 20, 30, 255)
        assert tuple(out[0, 0]) == (0, 0, 0, 0)

    def test_draw_is_clipped(self):
        surface = Surface(4, 4)
        surface.draw_bitmap_at(solid_image(4, 4, (255, 0, 0, 255)), -2, 3, 4, 4)
        out = surface.read_pixels()
        assert tuple(out[3, 0]) == (255, 0, 0, 255)
        assert tuple(out[3, 2]) == (0, 0, 0, 0)
        assert not out[:3].any()

    def test_fully_outside_draws_nothing(self):
        surface = Surface(4, 4)
        surface.draw_bitmap_at(solid_image(2, 2), 10, 10, 2, 2)
        assert not surface.read_pixels().any()

    def test_draw_scales_nearest(self):
        surface = Surface(4, 2)
        surface.draw_bitmap_at(solid_pixels(2, 1, (9, 9, 9, 255)), 0, 0, 4, 2)
        assert (surface.read_pixels()[..., 0] == 9).all()

    def test_half_alpha_blends_over_opaque(self):
        surface = Surface(1, 1)
        surface.write_pixels(solid_pixels(1, 1, (0, 0, 255, 255)))
        surface.draw_bitmap_at(solid_pixels(1, 1, (255, 0, 0, 128)), 0, 0, 1, 1)
        r, g, b, a = surface.read_pixels()[0, 0]
        assert a == 255
        assert 126 <= r <= 129
        assert 126 <= b <= 129

    def test_empty_bitmap_rejected(self):
        surface = Surface(2, 2)
        with pytest.raises(ValueError):
            surface.draw_bitmap_at(np.zeros((0, 0, 4), dtype=np.uint8), 0, 0, 1, 1)


# ══════════════════════════════════════════════════════════════════════════
# render_all
# ══════════════════════════════════════════════════════════════════════════

class TestRenderAll:

    def test_empty_stack_clears(self):
        surface = Surface(3, 3)
        surface.write_pixels(solid_pixels(3, 3))
        render_all([], surface)
        assert not surface.read_pixels().any()

    def test_base_defines_canvas(self):
        surface = Surface()
        base = Layer('layer1', gradient_image(30, 20))
        render_all([base], surface)
        assert surface.size == (30, 20)
        assert (base.x, base.y) == (0, 0)
        assert np.array_equal(surface.read_pixels(), np.array(base.source))

    def test_new_layer_is_centered(self):
        surface = Surface()
        base = Layer('layer1', solid_image(30, 20, (0, 0, 0, 255)))
        overlay = Layer('layer2', solid_image(10, 5, (255, 255, 255, 255)))
        render_all([base, overlay], surface)
        assert (overlay.x, overlay.y) == (10, 8)  # (30-10)/2, (20-5)/2 rounded half up
        out = surface.read_pixels()
        assert tuple(out[8, 10]) == (255, 255, 255, 255)
        assert tuple(out[7, 10]) == (0, 0, 0, 255)

    def test_stack_order_front_wins(self):
        surface = Surface()
        base = Layer('layer1', solid_image(10, 10, (0, 0, 0, 255)))
        red = Layer('layer2', solid_image(4, 4, (255, 0, 0, 255)))
        green = Layer('layer3', solid_image(4, 4, (0, 255, 0, 255)))
        render_all([base, red, green], surface)
        assert tuple(surface.read_pixels()[4, 4]) == (0, 255, 0, 255)

    def test_translucent_base_is_not_painted_over_black(self):
        surface = Surface()
        base = Layer('layer1', solid_image(4, 4, (200, 100, 50, 64)))
        render_all([base], surface)
        assert tuple(surface.read_pixels()[0, 0]) == (200, 100, 50, 64)

    def test_failed_draw_falls_back_to_source(self, monkeypatch, caplog):
        surface = Surface()
        base = Layer('layer1', solid_image(6, 6, (9, 8, 7, 255)))

        def broken(layer, rng=None):
            raise ValueError("cache exploded")

        monkeypatch.setattr(compositor, 'get_processed_raster', broken)
        render_all([base], surface)

        assert tuple(surface.read_pixels()[0, 0]) == (9, 8, 7, 255)
        assert "trying its raw source" in caplog.text

    def test_unrecoverable_layer_is_skipped(self, monkeypatch, caplog):
        surface = Surface()
        base = Layer('layer1', solid_image(6, 6, (9, 8, 7, 255)))
        bad = Layer('layer2', solid_image(2, 2, (255, 255, 255, 255)))
        good = Layer('layer3', solid_image(2, 2, (0, 255, 0, 255)))
        bad.x, bad.y = 0, 0
        good.x, good.y = 4, 4

        real_draw = Surface.draw_bitmap_at

        def draw(self, bitmap, x, y, width, height):
            if (x, y) == (0, 0) and width == 2:
                raise OSError("truncated bitmap")
            return real_draw(self, bitmap, x, y, width, height)

        monkeypatch.setattr(Surface, 'draw_bitmap_at', draw)
        render_all([base, bad, good], surface)

        out = surface.read_pixels()
        assert tuple(out[0, 0]) == (9, 8, 7, 255)
        assert tuple(out[4, 4]) == (0, 255, 0, 255)
        assert "Skipping layer2" in caplog.text

    def test_processed_raster_is_drawn(self):
        from models.effect import EffectInstance

        surface = Surface()
        base = Layer('layer1', solid_image(4, 4, (0, 100, 255, 255)))
        base.effect_chain.append(EffectInstance('eff1', 'invert', 100))
        render_all([base], surface)
        assert tuple(surface.read_pixels()[0, 0]) == (255, 155, 0, 255)
