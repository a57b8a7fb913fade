"""Build a corrected excitation/emission map from a plate-reader CSV export."""
from __future__ import annotations

import argparse
import json
import math
import logging
import sys
from pathlib import Path
from typing import Sequence

from eem_app.engine.color_scale import resolve_color_scale
from eem_app.engine.excel_writer import DEFAULT_CSV_NAME, write_csv, write_grid_json, write_workbook
from eem_app.engine.io_common import read_rows
from eem_app.engine.number_parser import parse_number
from eem_app.engine.pipeline import process_rows
from eem_app.engine.recipe_model import Recipe, load_preset
from eem_app.engine.schema import SchemaError

logger = logging.getLogger(__name__)


def _parse_factor(text: str) -> tuple[str, float]:
    column, sep, value = text.partition("=")
    if not sep or not column.strip():
        raise argparse.ArgumentTypeError(f"Expected COLUMN=VALUE, got {text!r}")
    factor = parse_number(value)
    if math.isnan(factor):
        raise argparse.ArgumentTypeError(f"Factor for {column.strip()!r} is not a number: {value!r}")
    return column.strip(), factor


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("input", help="CSV file with Ex, Em and dilution columns.")
    parser.add_argument(
        "--preset",
        default="default",
        help="Preset name under config/presets or a YAML path (default: default).",
    )
    parser.add_argument(
        "--factor",
        action="append",
        type=_parse_factor,
        default=[],
        metavar="COLUMN=VALUE",
        help="Correction factor for a dilution column; may be repeated.",
    )
    parser.add_argument(
        "--output",
        default=DEFAULT_CSV_NAME,
        help=f"Path of the Ex,Em,MaxF table (default: {DEFAULT_CSV_NAME}).",
    )
    parser.add_argument("--workbook", help="Also write an .xlsx workbook.")
    parser.add_argument("--grid-json", dest="grid_json", help="Also write grid, curve and peaks as JSON.")
    parser.add_argument(
        "--peaks",
        action="store_true",
        help="Print the detected excitation peaks as JSON to stdout.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    path = Path(args.input)
    if not path.exists():
        raise SystemExit(f"Input file not found: {path}")

    try:
        recipe: Recipe = load_preset(args.preset)
    except FileNotFoundError as exc:
        raise SystemExit(str(exc)) from exc
    for column, value in args.factor:
        recipe = recipe.with_factor(column, value)

    rows = read_rows(path)
    try:
        result, recipe = process_rows(rows, recipe, source=str(path))
    except SchemaError as exc:
        sys.stderr.write(f"{exc}\n")
        return 2
    except ValueError as exc:
        sys.stderr.write(f"Invalid recipe: {exc}\n")
        return 2

    out_path = write_csv(args.output, result.table)
    logger.info("Wrote %d rows to %s", len(result.table), out_path)

    scale = resolve_color_scale(recipe.color_scale, result.grid)
    logger.info("Colour scale: 0 .. %g (%d levels)", scale.zmax, scale.contours)

    if args.workbook:
        logger.info("Wrote workbook %s", write_workbook(args.workbook, result))
    if args.grid_json:
        logger.info("Wrote grid JSON %s", write_grid_json(args.grid_json, result))

    if args.peaks:
        try:
            sys.stdout.write(json.dumps([peak.as_dict() for peak in result.peaks]) + "\n")
        except BrokenPipeError:
            return 0
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
