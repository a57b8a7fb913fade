"""Column resolution for excitation/emission tables."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from eem_app.engine.records import RawRecord, ResolvedSchema

logger = logging.getLogger(__name__)

EX_COLUMN = "ex"
EM_COLUMN = "em"


class SchemaError(ValueError):
    """Base class for tables that cannot be processed at all."""

    message = "Invalid table."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class EmptyInputError(SchemaError):
    message = "File is empty."


class MissingRequiredColumnError(SchemaError):
    message = 'Missing "Ex" or "Em" columns (case-insensitive).'


class NoMeasurementColumnsError(SchemaError):
    message = "No dilution columns found."


@dataclass(frozen=True)
class ValidationReport:
    valid: bool
    message: Optional[str] = None
    schema: Optional[ResolvedSchema] = None


def find_column(columns: Iterable[str], target: str) -> Optional[str]:
    wanted = target.casefold()
    for column in columns:
        if str(column).casefold() == wanted:
            return column
    return None


def resolve_schema(rows: Sequence[RawRecord]) -> ResolvedSchema:
    """Resolve the Ex/Em and measurement columns from the first row.

    Raises a :class:`SchemaError` subclass when the table is empty, lacks an
    ``Ex`` or ``Em`` column, or carries no other column to reduce.
    """

    if not rows:
        raise EmptyInputError()

    columns = list(rows[0].keys())
    ex_column = find_column(columns, EX_COLUMN)
    em_column = find_column(columns, EM_COLUMN)
    if ex_column is None or em_column is None:
        raise MissingRequiredColumnError()

    measurement = tuple(c for c in columns if c != ex_column and c != em_column)
    if not measurement:
        raise NoMeasurementColumnsError()

    logger.debug(
        "Resolved columns Ex=%r Em=%r with %d measurement column(s)",
        ex_column,
        em_column,
        len(measurement),
    )
    return ResolvedSchema(ex_column=ex_column, em_column=em_column, measurement_columns=measurement)


def validate_rows(rows: Sequence[RawRecord]) -> ValidationReport:
    try:
        schema = resolve_schema(rows)
    except SchemaError as exc:
        return ValidationReport(valid=False, message=str(exc))
    return ValidationReport(valid=True, schema=schema)


def extract_measurement_columns(rows: Sequence[RawRecord]) -> List[str]:
    report = validate_rows(rows)
    if report.schema is None:
        return []
    return list(report.schema.measurement_columns)
