import pytest

from eem_app.engine.records import ReducedRow
from eem_app.engine.reduction import reduce_rows, reduce_rows_with_stats
from eem_app.engine.schema import resolve_schema


def _rows():
    return [
        {"Ex": 280, "Em": 340, "a": "10", "b": "3,5", "c": "x"},
        {"Ex": "285", "Em": "345", "a": "n/a", "b": "", "c": "1"},
        {"Ex": "", "Em": 350, "a": 5, "b": 5, "c": 5},
        {"Ex": 290, "Em": "bad", "a": 5, "b": 5, "c": 5},
    ]


def test_reduce_rows_applies_factors_and_takes_maximum():
    rows = _rows()
    schema = resolve_schema(rows)
    reduced = reduce_rows(rows, schema, {"a": 2.0, "b": 10.0})
    assert reduced == [
        ReducedRow(ex=280.0, em=340.0, max_f=35.0),
        ReducedRow(ex=285.0, em=345.0, max_f=0.0),
    ]


def test_rows_without_numeric_axes_are_dropped_silently():
    rows = _rows()
    reduced, stats = reduce_rows_with_stats(rows, resolve_schema(rows), {"a": 1.0})
    assert len(reduced) == 2 <= len(rows)
    assert (stats.total, stats.kept, stats.dropped) == (4, 2, 2)


def test_columns_without_factor_are_ignored():
    rows = [{"Ex": 1, "Em": 2, "a": 1, "b": 1000}]
    reduced = reduce_rows(rows, resolve_schema(rows), {"a": 1.0, "missing": 50.0})
    assert reduced[0].max_f == 1.0


def test_factor_order_does_not_change_result():
    rows = _rows()
    schema = resolve_schema(rows)
    forward = reduce_rows(rows, schema, {"a": 2.0, "b": 10.0, "c": 3.0})
    backward = reduce_rows(rows, schema, {"c": 3.0, "b": 10.0, "a": 2.0})
    assert forward == backward


def test_negative_corrected_values_floor_at_zero():
    rows = [{"Ex": 1, "Em": 2, "a": "-185,789"}]
    reduced = reduce_rows(rows, resolve_schema(rows), {"a": 1.0})
    assert reduced[0].max_f == pytest.approx(0.0)


def test_equal_length_when_every_row_has_axes():
    rows = [{"Ex": i, "Em": 300 + i, "a": i} for i in range(5)]
    assert len(reduce_rows(rows, resolve_schema(rows), {"a": 1.0})) == len(rows)
