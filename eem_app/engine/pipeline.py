"""End-to-end processing of an excitation/emission table.

rows -> schema -> reduced rows -> grid -> excitation-maxima curve -> peaks

Each call recomputes everything from the parsed rows; nothing is cached
between calls and the rows are never modified, so the same row list can be
processed with several factor sets side by side.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

from eem_app.engine.audit import log_step, start_audit
from eem_app.engine.grid import build_grid
from eem_app.engine.io_common import read_rows
from eem_app.engine.peak_detection import detect_peaks, extract_ex_max_curve
from eem_app.engine.recipe_model import Recipe
from eem_app.engine.records import ProcessingResult, RawRecord, ResolvedSchema
from eem_app.engine.reduction import reduce_rows_with_stats
from eem_app.engine.schema import resolve_schema

__all__ = [
    "run_pipeline",
    "prepare_recipe",
    "process_rows",
    "process_file",
]

logger = logging.getLogger(__name__)


def run_pipeline(
    rows: Sequence[RawRecord],
    factors: Mapping[str, float],
    *,
    schema: Optional[ResolvedSchema] = None,
    audit: Optional[List[str]] = None,
) -> ProcessingResult:
    """Process ``rows`` with the correction ``factors``.

    Raises a ``SchemaError`` subclass before any processing when the table
    cannot be used.  A ``schema`` resolved earlier for the same rows may be
    passed to skip re-resolving it.
    """

    if schema is None:
        schema = resolve_schema(rows)
    audit = list(audit) if audit is not None else start_audit()
    log_step(
        audit,
        f"Columns: Ex={schema.ex_column}, Em={schema.em_column}, "
        f"measurements={', '.join(schema.measurement_columns)}",
    )
    log_step(audit, "Factors: " + ", ".join(f"{k}={v}" for k, v in factors.items()))

    table, stats = reduce_rows_with_stats(rows, schema, factors)
    log_step(audit, f"Reduced {stats.kept} of {stats.total} rows ({stats.dropped} dropped)")

    grid = build_grid(table)
    log_step(audit, f"Grid: {len(grid.x)} Ex x {len(grid.y)} Em")

    curve = extract_ex_max_curve(grid)
    peaks = detect_peaks(curve)
    log_step(audit, f"Excitation maxima: {len(curve)} points, {len(peaks)} peak(s)")
    logger.info(
        "Processed %d rows into a %dx%d grid with %d peak(s)",
        stats.kept,
        len(grid.y),
        len(grid.x),
        len(peaks),
    )
    return ProcessingResult(table=table, grid=grid, curve=curve, peaks=peaks, schema=schema, audit=audit)


def prepare_recipe(rows: Sequence[RawRecord], recipe: Optional[Recipe] = None) -> Tuple[ResolvedSchema, Recipe]:
    """Resolve the schema and give every measurement column a factor."""

    schema = resolve_schema(rows)
    recipe = (recipe or Recipe()).seeded_for(schema.measurement_columns)
    errs = recipe.validate()
    if errs:
        raise ValueError("; ".join(errs))
    return schema, recipe


def process_rows(
    rows: Sequence[RawRecord],
    recipe: Optional[Recipe] = None,
    *,
    source: Optional[str] = None,
) -> Tuple[ProcessingResult, Recipe]:
    schema, recipe = prepare_recipe(rows, recipe)
    result = run_pipeline(rows, recipe.factors, schema=schema, audit=start_audit(source))
    return result, recipe


def process_file(path: Path | str, recipe: Optional[Recipe] = None) -> Tuple[ProcessingResult, Recipe]:
    rows = read_rows(path)
    return process_rows(rows, recipe, source=str(path))
