import pytest

from eem_app.engine.color_scale import ColorScaleConfig
from eem_app.engine.recipe_model import Recipe, default_factors


def test_recipe_validation_passes_for_reasonable_recipe():
    assert Recipe(factors={"a": 1.0, "b": 0.0}).validate() == []


def test_recipe_validation_flags_bad_factors():
    errs = Recipe(factors={"a": -1.0, "b": "x", "c": float("nan")}, factor_sequence=()).validate()
    assert "Factor sequence must not be empty" in errs
    assert "Correction factor for a must be a non-negative number" in errs
    assert "Correction factor for b must be a non-negative number" in errs
    assert "Correction factor for c must be a non-negative number" in errs


def test_recipe_validation_includes_color_scale_errors():
    recipe = Recipe(color_scale=ColorScaleConfig(mode="MANUAL_MAXF", manual_max_f=0))
    assert recipe.validate() == ["MaxF must be greater than 0"]


def test_default_factors_cycle_through_sequence():
    columns = [f"c{i}" for i in range(8)]
    factors = default_factors(columns)
    assert list(factors.values()) == [1.0, 1.4, 2.2, 3.4, 5.0, 1.0, 1.0, 1.4]
    with pytest.raises(ValueError):
        default_factors(columns, [])


def test_with_factor_returns_new_recipe():
    recipe = Recipe(factors={"a": 1.0})
    updated = recipe.with_factor("a", 2.5)
    assert updated.factors == {"a": 2.5}
    assert recipe.factors == {"a": 1.0}


def test_seeded_for_keeps_explicit_factors_for_present_columns():
    recipe = Recipe(factors={"b": 9.0, "zzz": 4.0}).seeded_for(["a", "b"])
    assert recipe.factors == {"a": 1.0, "b": 9.0}
