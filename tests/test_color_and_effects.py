"""
Tests for Color and the effect catalog.

Verifies:
- Color construction, clamping, equality, output formats
- Lenient hex parsing (shorthand, missing '#', garbage)
- Catalog entries and their defaults
- Value coercion for scalar and custom effects
- EffectInstance initial values
"""
import pytest
from models.color import Color
from models.effect import EFFECT_CATALOG, EffectInstance, get_definition


# ══════════════════════════════════════════════════════════════════════════
# Color
# ══════════════════════════════════════════════════════════════════════════

class TestColor:

    def test_from_hex(self):
        c = Color.from_hex("#FF8000")
        assert c.to_rgb255() == (255, 128, 0)

    def test_from_hex_no_hash(self):
        assert Color.from_hex("00ff00").g == 255

    def test_from_hex_shorthand(self):
        assert Color.from_hex("#0f8") == Color(0, 255, 136)

    def test_from_hex_garbage_is_black(self):
        assert Color.from_hex("#zzzzzz") == Color(0, 0, 0)
        assert Color.from_hex(None) == Color(0, 0, 0)

    def test_components_are_clamped(self):
        c = Color(300, -5, 128)
        assert c.to_rgb255() == (255, 0, 128)

    def test_to_hex_lowercase(self):
        assert Color.from_rgb255(11, 61, 145).to_hex() == "#0b3d91"

    def test_equality_and_hash(self):
        a = Color(1, 2, 3)
        b = Color.from_hex("#010203")
        assert a == b
        assert len({a, b}) == 1

    def test_to_array(self):
        arr = Color(10, 20, 30).to_array()
        assert arr.shape == (3,)
        assert list(arr) == [10.0, 20.0, 30.0]


# ══════════════════════════════════════════════════════════════════════════
# Catalog
# ══════════════════════════════════════════════════════════════════════════

class TestCatalog:

    def test_all_kinds_present(self):
        expected = {
            'brightness', 'contrast', 'saturation', 'vignette', 'grain', 'resolution',
            'invert', 'sharpen', 'sepia', 'tint', 'duotone', 'halftone',
        }
        assert set(EFFECT_CATALOG) == expected

    def test_scalar_ranges(self):
        assert (get_definition('brightness').min, get_definition('brightness').max) == (-100, 100)
        assert get_definition('sharpen').max == 200
        resolution = get_definition('resolution')
        assert (resolution.min, resolution.max, resolution.default, resolution.step) == (10, 100, 100, 5)

    def test_custom_defaults(self):
        assert get_definition('tint').defaults == {'color': '#ff0000', 'mix': 30}
        assert get_definition('duotone').defaults['colorB'] == '#ffd166'
        assert get_definition('halftone').defaults['size'] == 'medium'

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            get_definition('emboss')


class TestCoercion:

    def test_scalar_clamped(self):
        definition = get_definition('brightness')
        assert definition.coerce(250) == 100
        assert definition.coerce(-250) == -100

    def test_scalar_from_string(self):
        assert get_definition('sepia').coerce("42") == 42.0

    def test_scalar_garbage_falls_back_to_default(self):
        assert get_definition('resolution').coerce("lots") == 100
        assert get_definition('contrast').coerce(float('nan')) == 0

    def test_custom_merged_over_defaults(self):
        value = get_definition('tint').coerce({'mix': 75})
        assert value == {'color': '#ff0000', 'mix': 75.0}

    def test_custom_unknown_keys_dropped(self):
        value = get_definition('tint').coerce({'color': '#00ff00', 'bogus': 1})
        assert 'bogus' not in value

    def test_custom_mix_clamped(self):
        assert get_definition('duotone').coerce({'mix': 500})['mix'] == 100.0

    def test_custom_enum_reset(self):
        value = get_definition('halftone').coerce({'shape': 'star', 'size': 'large'})
        assert value['shape'] == 'circle'
        assert value['size'] == 'large'

    def test_defaults_are_not_shared(self):
        value = get_definition('halftone').coerce({})
        value['shape'] = 'line'
        assert get_definition('halftone').defaults['shape'] == 'circle'


class TestEffectInstance:

    def test_scalar_initial_value(self):
        assert EffectInstance('eff1', 'resolution').value == 100

    def test_custom_initial_value_is_copy(self):
        a = EffectInstance('eff1', 'tint')
        b = EffectInstance('eff2', 'tint')
        a.value['mix'] = 99
        assert b.value['mix'] == 30

    def test_explicit_value_is_coerced(self):
        assert EffectInstance('eff1', 'invert', 400).value == 100

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            EffectInstance('eff1', 'emboss')
