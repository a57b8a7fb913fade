"""Excitation-maxima curve and local-maximum detection.

The curve holds, for every excitation wavelength on the grid, the largest
corrected intensity over all emission wavelengths.  Peaks are found with a
two-state (rising/falling) scan over adjacent points:

* a point is reported only once a strictly smaller successor is seen after
  a rise, so the last point of the curve is never a peak even when it is
  the global maximum (and, since the scan starts out falling unless the
  second point is higher, neither is the first);
* equal neighbours leave the state untouched, so a plateau reached by a
  rise is reported once, at its last point, when the drop arrives.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from eem_app.engine.records import ExMaxPoint, HeatmapGrid, PeakPoint

logger = logging.getLogger(__name__)


def extract_ex_max_curve(grid: HeatmapGrid) -> List[ExMaxPoint]:
    curve: List[ExMaxPoint] = []
    if grid.is_empty:
        return curve

    for j, ex in enumerate(grid.x):
        best_value = None
        best_em = None
        for i, em in enumerate(grid.y):
            value = float(grid.z[i, j])
            # strict comparison keeps the lowest Em on ties
            if best_value is None or value > best_value:
                best_value = value
                best_em = em
        if best_value is not None:
            curve.append(ExMaxPoint(ex=ex, max_f=best_value, em=best_em))
    return curve


def detect_peaks(curve: Sequence[ExMaxPoint]) -> List[PeakPoint]:
    peaks: List[PeakPoint] = []
    if not curve:
        return peaks

    rising = len(curve) > 1 and curve[1].max_f > curve[0].max_f
    for prev, curr in zip(curve, curve[1:]):
        if curr.max_f > prev.max_f:
            rising = True
        elif curr.max_f < prev.max_f:
            if rising:
                peaks.append(PeakPoint(ex=prev.ex, em=prev.em, max_f=prev.max_f))
            rising = False
    return peaks


def detect_ex_max_peaks(grid: HeatmapGrid) -> Tuple[List[PeakPoint], List[ExMaxPoint]]:
    curve = extract_ex_max_curve(grid)
    peaks = detect_peaks(curve)
    logger.info("Detected %d peak(s) on a %d-point excitation curve", len(peaks), len(curve))
    return peaks, curve
