import numpy as np
import pytest

from eem_app.engine import pipeline
from eem_app.engine.recipe_model import Recipe
from eem_app.engine.schema import EmptyInputError, MissingRequiredColumnError


def test_end_to_end_single_excitation():
    rows = [{"Ex": 280, "Em": 340, "colA": 10}, {"Ex": 280, "Em": 350, "colA": 20}]
    result = pipeline.run_pipeline(rows, {"colA": 2})

    assert [r.as_dict() for r in result.table] == [
        {"Ex": 280.0, "Em": 340.0, "MaxF": 20.0},
        {"Ex": 280.0, "Em": 350.0, "MaxF": 40.0},
    ]
    assert result.grid.to_dict() == {"x": [280.0], "y": [340.0, 350.0], "z": [[20.0], [40.0]]}
    assert [p.as_dict() for p in result.curve] == [{"Ex": 280.0, "MaxF": 40.0, "Em": 350.0}]
    assert result.peaks == []


def test_validation_fails_before_processing():
    with pytest.raises(EmptyInputError):
        pipeline.run_pipeline([], {"a": 1.0})
    with pytest.raises(MissingRequiredColumnError):
        pipeline.run_pipeline([{"wavelength": 1, "a": 2}], {"a": 1.0})


def _matrix_rows():
    rows = []
    for ex, scale in ((270, 1.0), (280, 4.0), (290, 2.0), (300, 3.0), (310, 1.0)):
        for em in (330, 340, 350):
            rows.append({"ex": str(ex), "EM": str(em), "d1": f"{scale * em:.2f}".replace(".", ","), "d2": "1"})
    rows.append({"ex": "", "EM": "340", "d1": "1", "d2": "1"})
    return rows


def test_rerun_is_identical_and_rows_untouched():
    rows = _matrix_rows()
    snapshot = [dict(r) for r in rows]
    first = pipeline.run_pipeline(rows, {"d1": 1.0, "d2": 2.0})
    second = pipeline.run_pipeline(rows, {"d1": 1.0, "d2": 2.0})

    assert first.table == second.table
    assert first.grid.x == second.grid.x and first.grid.y == second.grid.y
    assert np.array_equal(first.grid.z, second.grid.z)
    assert first.curve == second.curve
    assert first.peaks == second.peaks
    assert rows == snapshot


def test_matrix_peaks_follow_excitation_curve():
    result = pipeline.run_pipeline(_matrix_rows(), {"d1": 1.0})
    assert len(result.table) == 15
    assert [p.ex for p in result.peaks] == [280.0, 300.0]
    assert result.peaks[0].em == 350.0
    assert result.peaks[0].max_f == pytest.approx(1400.0)


def test_process_rows_seeds_default_factors_and_audits():
    rows = [{"Ex": 280, "Em": 340, "u0": 10, "u2": 10, "u8": 10}]
    result, recipe = pipeline.process_rows(rows, source="memory")
    assert recipe.factors == {"u0": 1.0, "u2": 1.4, "u8": 2.2}
    assert result.table[0].max_f == pytest.approx(22.0)
    assert "Source: memory" in result.audit
    assert any(line.startswith("Reduced 1 of 1 rows") for line in result.audit)


def test_process_rows_rejects_negative_factor():
    rows = [{"Ex": 280, "Em": 340, "a": 1}]
    with pytest.raises(ValueError, match="non-negative"):
        pipeline.process_rows(rows, Recipe(factors={"a": -1.0}))


def test_process_file_reads_semicolon_csv(tmp_path):
    path = tmp_path / "map.csv"
    path.write_text("Ex;Em;A;B\n280;340;1,5;2\n280;350;246,67;1\n", encoding="utf-8")
    result, recipe = pipeline.process_file(path, Recipe(factors={"A": 2.0}))
    assert recipe.factors == {"A": 2.0, "B": 1.4}
    assert [r.max_f for r in result.table] == pytest.approx([3.0, 493.34])
