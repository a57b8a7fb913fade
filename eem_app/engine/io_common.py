from __future__ import annotations

import csv
import io
import logging
import re
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from eem_app.engine.number_parser import coerce_cell

logger = logging.getLogger(__name__)


def sniff_delimiter(sample: str) -> str:
    """Infer the field delimiter of a delimited text sample.

    Exports from European locales write decimal commas and separate fields
    with ``;``.  Commas that sit between digits are discounted before
    counting, so ``1,5;2,5`` resolves to ``;``.
    """

    if not sample:
        return ","

    lines = [ln for ln in sample.splitlines() if ln.strip()]
    trimmed = "\n".join(lines)
    comma_matches = re.findall(r"\d,\d", trimmed)

    delimiter = None
    try:
        dialect = csv.Sniffer().sniff(trimmed, delimiters=",;\t")
        delimiter = dialect.delimiter
    except (csv.Error, ValueError):
        pass

    if delimiter == "," and (";" in trimmed or "\t" in trimmed) and comma_matches:
        delimiter = None

    if not delimiter:
        counts = {sep: trimmed.count(sep) for sep in (";", "\t", ",")}
        counts[","] = max(0, counts[","] - len(comma_matches))
        delimiter = max(counts, key=counts.get)
        if counts[delimiter] == 0:
            delimiter = ","
    return delimiter


def read_rows_from_text(text: str) -> List[Dict[str, Any]]:
    """Parse delimited text with a header row into a list of records.

    Every cell is read as text and then converted with the separator
    heuristics in :mod:`eem_app.engine.number_parser`; cells that are not
    numeric keep their raw text.
    """

    if not text.strip():
        return []

    delimiter = sniff_delimiter(text[:4000])
    df = pd.read_csv(
        io.StringIO(text),
        sep=delimiter,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        skipinitialspace=False,
        engine="python",
    )
    df.columns = [str(col).strip() for col in df.columns]
    records = [
        {column: coerce_cell(value) for column, value in zip(df.columns, row)}
        for row in df.itertuples(index=False, name=None)
    ]
    logger.info("Read %d row(s) with %d column(s) (delimiter %r)", len(records), len(df.columns), delimiter)
    return records


def read_rows(path: Path | str) -> List[Dict[str, Any]]:
    path = Path(path)
    text = path.read_text(encoding="utf-8-sig", errors="ignore")
    return read_rows_from_text(text)
