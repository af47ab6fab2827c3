"""
Tests for the layer cache.

Verifies:
- Rebuild on first fetch and after invalidation
- Hits leave the cached object in place
- Natural-size changes force a rebuild without dirtying
- Read-back/processing failures fall back to the unprocessed bitmap
"""
import numpy as np
from PIL import Image

from models.effect import EffectInstance
from models.session import Layer
from services import layer_cache
from services.effect_pipeline import apply_effects
from services.layer_cache import get_processed_raster
from conftest import gradient_image, solid_image


def _layer(image=None):
    return Layer('layer1', image if image is not None else gradient_image(32, 24))


class TestCacheCoherence:

    def test_first_fetch_builds_and_cleans(self):
        layer = _layer()
        assert layer.dirty
        raster = get_processed_raster(layer)
        assert not layer.dirty
        assert raster.shape == (24, 32, 4)

    def test_clean_fetch_is_a_hit(self):
        layer = _layer()
        first = get_processed_raster(layer)
        assert get_processed_raster(layer) is first

    def test_empty_chain_is_raw_source(self):
        layer = _layer()
        assert np.array_equal(get_processed_raster(layer), np.array(layer.source))

    def test_matches_fresh_pipeline_after_change(self):
        layer = _layer()
        get_processed_raster(layer)

        layer.effect_chain.append(EffectInstance('eff1', 'invert', 100))
        layer.mark_dirty()

        expected = apply_effects(np.array(layer.source), layer.effect_chain)
        assert np.array_equal(get_processed_raster(layer), expected)

    def test_natural_size_change_rebuilds(self):
        layer = _layer()
        get_processed_raster(layer)

        layer.set_natural_size(64, 48)
        assert not layer.dirty
        assert not layer.cache_valid()

        raster = get_processed_raster(layer)
        assert raster.shape == (48, 64, 4)

    def test_scaling_is_nearest_neighbour(self):
        image = Image.new('RGBA', (2, 1))
        image.putpixel((0, 0), (255, 0, 0, 255))
        image.putpixel((1, 0), (0, 0, 255, 255))
        layer = _layer(image)
        layer.set_natural_size(4, 1)

        raster = get_processed_raster(layer)
        assert [tuple(p) for p in raster[0]] == [
            (255, 0, 0, 255), (255, 0, 0, 255), (0, 0, 255, 255), (0, 0, 255, 255)
        ]


class TestCacheFallback:

    def test_read_back_failure_falls_back_to_scaled_source(self, monkeypatch, caplog):
        layer = _layer(solid_image(8, 8))
        layer.effect_chain.append(EffectInstance('eff1', 'invert', 100))

        def refuse(image):
            raise OSError("pixel read-back refused")

        monkeypatch.setattr(layer_cache, 'read_pixels', refuse)
        raster = get_processed_raster(layer)

        assert isinstance(raster, Image.Image)
        assert raster.size == (8, 8)
        assert not layer.dirty
        assert "drawing it unfiltered" in caplog.text

    def test_processing_failure_falls_back(self):
        layer = _layer(solid_image(8, 8))
        instance = EffectInstance('eff1', 'sepia', 50)
        instance.kind = 'emboss'
        layer.effect_chain.append(instance)

        raster = get_processed_raster(layer)
        assert isinstance(raster, Image.Image)
