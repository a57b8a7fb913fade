from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from eem_app.engine.grid import auto_max_f
from eem_app.engine.records import HeatmapGrid

AUTO = "AUTO"
MANUAL_MAXF = "MANUAL_MAXF"
MANUAL_MAXF_AND_STEPS = "MANUAL_MAXF_AND_STEPS"
MODES = (AUTO, MANUAL_MAXF, MANUAL_MAXF_AND_STEPS)

DEFAULT_CONTOURS = 50
DEFAULT_STEPS = 9
MIN_STEPS = 3
MAX_STEPS = 20


@dataclass(frozen=True)
class ColorScaleConfig:
    mode: str = AUTO
    manual_max_f: Optional[float] = None
    manual_steps: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict | None) -> "ColorScaleConfig":
        data = dict(data or {})
        return cls(
            mode=str(data.get("mode", AUTO)).upper(),
            manual_max_f=data.get("manual_max_f"),
            manual_steps=data.get("manual_steps"),
        )

    def validate(self) -> List[str]:
        errs: List[str] = []
        if self.mode not in MODES:
            errs.append(f"Unknown color scale mode: {self.mode}")
            return errs
        if self.mode in (MANUAL_MAXF, MANUAL_MAXF_AND_STEPS):
            if self.manual_max_f is None:
                errs.append("MaxF is required")
            else:
                try:
                    value = float(self.manual_max_f)
                except (TypeError, ValueError):
                    errs.append("MaxF must be a valid number")
                else:
                    if not value > 0:
                        errs.append("MaxF must be greater than 0")
        if self.mode == MANUAL_MAXF_AND_STEPS and self.manual_steps is not None:
            try:
                steps = int(self.manual_steps)
            except (TypeError, ValueError):
                errs.append("Colour steps must be an integer")
            else:
                if not MIN_STEPS <= steps <= MAX_STEPS:
                    errs.append(f"Colour steps must be between {MIN_STEPS} and {MAX_STEPS}")
        return errs


@dataclass(frozen=True)
class ColorScale:
    zmin: float
    zmax: float
    contours: int
    step: Optional[float] = None


def resolve_color_scale(config: ColorScaleConfig, grid: HeatmapGrid) -> ColorScale:
    """Contour range for ``grid`` under ``config``.

    Invalid manual settings fall back to the automatic range.
    """

    if config.mode == AUTO or config.validate():
        return ColorScale(zmin=0.0, zmax=auto_max_f(grid), contours=DEFAULT_CONTOURS)

    zmax = float(config.manual_max_f)
    if config.mode == MANUAL_MAXF_AND_STEPS:
        steps = int(config.manual_steps or DEFAULT_STEPS)
        return ColorScale(zmin=0.0, zmax=zmax, contours=steps, step=zmax / steps)
    return ColorScale(zmin=0.0, zmax=zmax, contours=DEFAULT_CONTOURS)
