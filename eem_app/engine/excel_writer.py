from __future__ import annotations

import json
import math
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, List, Sequence

import numpy as np
from openpyxl import Workbook

from eem_app.engine.records import ProcessingResult, ReducedRow

CSV_HEADER = "Ex,Em,MaxF"
DEFAULT_CSV_NAME = "final_map.csv"


def _ensure_parent(path: Path) -> None:
    if not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)


def _clean_value(value: Any) -> Any:
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return value
    if isinstance(value, str):
        if value and value[0] in "=+-@":
            if not value.startswith("'"):
                return "'" + value
        return value
    return value


def format_number(value: float) -> str:
    """Shortest round-trip text for ``value`` in the JavaScript number style.

    Integral values carry no ``.0``; exponent notation is used only from
    1e21 upwards and below 1e-6, written as ``1e+21`` and ``1e-7``.
    """

    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = exponent + k  # position of the decimal point relative to the digits

    if k <= n <= 21:
        text = digits + "0" * (n - k)
    elif 0 < n <= 21:
        text = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        text = "0." + "0" * (-n) + digits
    else:
        mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
        exp = n - 1
        text = f"{mantissa}e{'+' if exp >= 0 else '-'}{abs(exp)}"
    return sign + text


def generate_csv(table: Iterable[ReducedRow]) -> str:
    lines = [CSV_HEADER]
    lines.extend(
        f"{format_number(row.ex)},{format_number(row.em)},{format_number(row.max_f)}"
        for row in table
    )
    return "\n".join(lines)


def write_csv(out_path: str | Path, table: Sequence[ReducedRow]) -> Path:
    csv_path = Path(out_path)
    _ensure_parent(csv_path)
    csv_path.write_text(generate_csv(table), encoding="utf-8")
    return csv_path


def write_grid_json(out_path: str | Path, result: ProcessingResult) -> Path:
    json_path = Path(out_path)
    _ensure_parent(json_path)
    payload = {
        "heatmap": result.grid.to_dict(),
        "ex_max_curve": [point.as_dict() for point in result.curve],
        "peaks": [peak.as_dict() for peak in result.peaks],
    }
    json_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return json_path


def _write_rows(ws, header: List[str], rows: Iterable[Iterable[Any]]) -> None:
    ws.append(header)
    for row in rows:
        ws.append([_clean_value(v) for v in row])


def write_workbook(out_path: str | Path, result: ProcessingResult) -> Path:
    """Write the map table, grid, curve, peaks and audit trail to ``out_path``."""

    workbook_path = Path(out_path)
    _ensure_parent(workbook_path)

    wb = Workbook()
    ws_table = wb.active
    ws_table.title = "Final_Map"
    _write_rows(ws_table, ["Ex", "Em", "MaxF"], ((r.ex, r.em, r.max_f) for r in result.table))

    ws_grid = wb.create_sheet("Heatmap")
    grid = result.grid
    _write_rows(
        ws_grid,
        ["Em \\ Ex", *[_clean_value(x) for x in grid.x]],
        ([em, *grid.z[i].tolist()] for i, em in enumerate(grid.y)),
    )

    ws_curve = wb.create_sheet("ExMax_Curve")
    _write_rows(ws_curve, ["Ex", "MaxF", "Em"], ((p.ex, p.max_f, p.em) for p in result.curve))

    ws_peaks = wb.create_sheet("Peaks")
    _write_rows(ws_peaks, ["Ex", "Em", "MaxF"], ((p.ex, p.em, p.max_f) for p in result.peaks))

    ws_audit = wb.create_sheet("Audit_Log")
    ws_audit.append(["Index", "Entry"])
    for idx, entry in enumerate(result.audit or [], start=1):
        ws_audit.append([idx, _clean_value(entry)])

    wb.save(workbook_path)
    return workbook_path
