"""
Mesmerise Image Editor - Effect Catalog and Effect Instances

The catalog is the fixed registry of effect kinds the editor knows about.
Each kind is either a scalar slider (min/max/default/step) or a custom
record with structured defaults (tint, duotone, halftone).

An EffectInstance is one configured application of a kind to one layer.
Its instance_id is stable for its lifetime and is the correlation key
between the layer's effect chain and any UI control bound to it.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from constants import SCALAR_EFFECTS, CUSTOM_EFFECTS, CUSTOM_EFFECT_CHOICES


EffectValue = Union[float, Dict[str, Any]]


@dataclass(frozen=True)
class EffectDefinition:
    """Catalog entry for one effect kind.

    Scalar kinds carry value_range (min, max, default, step).
    Custom kinds carry defaults (a record merged under every new value).
    """
    kind: str
    display_name: str
    value_range: Optional[Tuple[float, float, float, float]] = None
    defaults: Optional[Dict[str, Any]] = None

    @property
    def is_custom(self) -> bool:
        return self.defaults is not None

    @property
    def min(self):
        return self.value_range[0] if self.value_range else None

    @property
    def max(self):
        return self.value_range[1] if self.value_range else None

    @property
    def default(self):
        return self.value_range[2] if self.value_range else None

    @property
    def step(self):
        return self.value_range[3] if self.value_range else None

    def initial_value(self) -> EffectValue:
        """Fresh value for a newly added instance"""
        if self.is_custom:
            return deepcopy(self.defaults)
        return self.default

    def coerce(self, value: Any) -> EffectValue:
        """Validate a new value against this definition.

        Scalars are parsed and clamped to [min, max]; unparseable input
        falls back to the default. Custom records are merged over the
        defaults with unknown keys dropped, mix clamped to [0, 100] and
        enum fields reset to the default when not one of the choices.

        Args:
            value: Raw value (number, numeric string, or dict)

        Returns:
            Coerced value safe to hand to the effect pipeline
        """
        if not self.is_custom:
            try:
                number = float(value)
            except (TypeError, ValueError):
                return self.default
            if number != number:  # NaN
                return self.default
            return max(self.min, min(self.max, number))

        record = deepcopy(self.defaults)
        if isinstance(value, dict):
            for key, item in value.items():
                if key in record:
                    record[key] = item

        if 'mix' in record:
            try:
                record['mix'] = max(0.0, min(100.0, float(record['mix'])))
            except (TypeError, ValueError):
                record['mix'] = self.defaults['mix']

        for key, per_kind in CUSTOM_EFFECT_CHOICES.items():
            choices = per_kind.get(self.kind)
            if choices and record.get(key) not in choices:
                record[key] = self.defaults[key]

        return record


def _build_catalog() -> Dict[str, EffectDefinition]:
    catalog = {}
    for kind, (name, lo, hi, default, step) in SCALAR_EFFECTS.items():
        catalog[kind] = EffectDefinition(kind, name, value_range=(lo, hi, default, step))
    for kind, (name, defaults) in CUSTOM_EFFECTS.items():
        catalog[kind] = EffectDefinition(kind, name, defaults=defaults)
    return catalog


EFFECT_CATALOG: Dict[str, EffectDefinition] = _build_catalog()


def get_definition(kind: str) -> EffectDefinition:
    """Look up a catalog entry

    Raises:
        ValueError: If kind is not in the catalog
    """
    try:
        return EFFECT_CATALOG[kind]
    except KeyError:
        raise ValueError(f"Unknown effect kind '{kind}'") from None


@dataclass
class EffectInstance:
    """One configured effect on one layer"""
    instance_id: str
    kind: str
    value: EffectValue = field(default=None)

    def __post_init__(self):
        definition = get_definition(self.kind)
        if self.value is None:
            self.value = definition.initial_value()
        else:
            self.value = definition.coerce(self.value)
