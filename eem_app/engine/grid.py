"""Sparse (Ex, Em, MaxF) triples to a dense contour grid.

Cells without a measurement hold ``0.0``, which cannot be told apart from
a measured zero intensity.
"""

from __future__ import annotations

import logging
from typing import Dict, Sequence

import numpy as np

from eem_app.engine.records import HeatmapGrid, ReducedRow

logger = logging.getLogger(__name__)

MISSING_CELL = 0.0
DEFAULT_AUTO_MAX_F = 100.0


def empty_grid() -> HeatmapGrid:
    return HeatmapGrid(x=(), y=(), z=np.zeros((0, 0), dtype=float))


def build_grid(reduced: Sequence[ReducedRow]) -> HeatmapGrid:
    if not reduced:
        return empty_grid()

    x = tuple(sorted({row.ex for row in reduced}))
    y = tuple(sorted({row.em for row in reduced}))
    x_index: Dict[float, int] = {value: j for j, value in enumerate(x)}
    y_index: Dict[float, int] = {value: i for i, value in enumerate(y)}

    z = np.full((len(y), len(x)), MISSING_CELL, dtype=float)
    for row in reduced:
        # later rows overwrite earlier ones for the same (Ex, Em)
        z[y_index[row.em], x_index[row.ex]] = row.max_f

    filled = len({(row.ex, row.em) for row in reduced})
    if filled < z.size:
        logger.info("Grid %dx%d has %d unmeasured cell(s)", len(y), len(x), z.size - filled)
    return HeatmapGrid(x=x, y=y, z=z)


def auto_max_f(grid: HeatmapGrid) -> float:
    """Largest value on the grid, or 100 when there is nothing to show."""

    if grid.is_empty:
        return DEFAULT_AUTO_MAX_F
    return float(np.max(grid.z))
