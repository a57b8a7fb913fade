from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Tuple

import yaml

from eem_app.engine.color_scale import ColorScaleConfig

PRESET_DIR = Path(__file__).resolve().parent.parent / "config" / "presets"

# Applied to dilution columns in file order, cycling past the end.
DEFAULT_FACTOR_SEQUENCE: Tuple[float, ...] = (1.0, 1.4, 2.2, 3.4, 5.0, 1.0)


def default_factors(
    columns: Iterable[str],
    sequence: Iterable[float] = DEFAULT_FACTOR_SEQUENCE,
) -> Dict[str, float]:
    seq = [float(v) for v in sequence]
    if not seq:
        raise ValueError("Factor sequence must not be empty")
    return {column: seq[idx % len(seq)] for idx, column in enumerate(columns)}


@dataclass
class Recipe:
    factors: Dict[str, float] = field(default_factory=dict)
    factor_sequence: Tuple[float, ...] = DEFAULT_FACTOR_SEQUENCE
    color_scale: ColorScaleConfig = field(default_factory=ColorScaleConfig)
    version: str = "0.1.0"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Recipe":
        params = dict(data.get("params") or {})
        sequence = params.get("factor_sequence")
        return cls(
            factors=dict(params.get("factors") or {}),
            factor_sequence=tuple(sequence) if sequence is not None else DEFAULT_FACTOR_SEQUENCE,
            color_scale=ColorScaleConfig.from_dict(params.get("color_scale")),
            version=str(data.get("version", "0.1.0")),
        )

    def with_factor(self, column: str, value: float) -> "Recipe":
        factors = dict(self.factors)
        factors[column] = value
        return replace(self, factors=factors)

    def seeded_for(self, columns: Iterable[str]) -> "Recipe":
        """Recipe whose factors cover ``columns``, keeping explicit entries."""

        factors = default_factors(columns, self.factor_sequence)
        factors.update({k: v for k, v in self.factors.items() if k in factors})
        return replace(self, factors=factors)

    def validate(self) -> list[str]:
        errs = []
        if not self.factor_sequence:
            errs.append("Factor sequence must not be empty")
        for value in self.factor_sequence:
            if not _is_valid_factor(value):
                errs.append(f"Default factor {value!r} must be a non-negative number")
        for column, value in self.factors.items():
            if not _is_valid_factor(value):
                errs.append(f"Correction factor for {column} must be a non-negative number")
        errs.extend(self.color_scale.validate())
        return errs


def _is_valid_factor(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(number) and number >= 0


def load_preset(name_or_path: str | Path) -> Recipe:
    path = Path(name_or_path)
    if not path.suffix:
        path = PRESET_DIR / f"{path.name}.yaml"
    if not path.exists():
        raise FileNotFoundError(f"Preset not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return Recipe.from_dict(data)
