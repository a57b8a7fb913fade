from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Mapping, Sequence, Tuple

from eem_app.engine.number_parser import parse_number
from eem_app.engine.records import RawRecord, ReducedRow, ResolvedSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReductionStats:
    total: int
    kept: int
    dropped: int


def _corrected_maximum(row: RawRecord, factors: Mapping[str, float]) -> float:
    max_f = 0.0
    for column, factor in factors.items():
        if column not in row:
            continue
        value = parse_number(row[column])
        if math.isnan(value):
            continue
        corrected = value * float(factor)
        if corrected > max_f:
            max_f = corrected
    return max_f


def reduce_rows_with_stats(
    rows: Sequence[RawRecord],
    schema: ResolvedSchema,
    factors: Mapping[str, float],
) -> Tuple[List[ReducedRow], ReductionStats]:
    reduced: List[ReducedRow] = []
    for idx, row in enumerate(rows):
        ex = parse_number(row.get(schema.ex_column))
        em = parse_number(row.get(schema.em_column))
        if math.isnan(ex) or math.isnan(em):
            logger.debug("Skipping row %d: Ex=%r Em=%r", idx, row.get(schema.ex_column), row.get(schema.em_column))
            continue
        reduced.append(ReducedRow(ex=ex, em=em, max_f=_corrected_maximum(row, factors)))

    stats = ReductionStats(total=len(rows), kept=len(reduced), dropped=len(rows) - len(reduced))
    if stats.dropped:
        logger.info("Dropped %d of %d rows without numeric Ex/Em", stats.dropped, stats.total)
    return reduced, stats


def reduce_rows(
    rows: Sequence[RawRecord],
    schema: ResolvedSchema,
    factors: Mapping[str, float],
) -> List[ReducedRow]:
    """Collapse each row to ``(Ex, Em, MaxF)`` using the correction factors.

    Only columns named in ``factors`` take part.  Rows whose Ex or Em cannot
    be parsed are left out; cells that cannot be parsed contribute nothing.
    """

    reduced, _ = reduce_rows_with_stats(rows, schema, factors)
    return reduced
