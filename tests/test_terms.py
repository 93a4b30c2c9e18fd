"""Tests for linear-predictor term parsing and design matrices."""

from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pandas as pd
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.regression.terms import Term, Terms


def test_parse_main_quadratic_and_interaction_terms() -> None:
    terms = Terms.parse("ph + nutrient + ph^2 + ph:nutrient")
    assert terms.labels == ["ph", "nutrient", "ph^2", "ph:nutrient"]
    assert terms.variables == ["ph", "nutrient"]
    assert str(terms) == "ph + nutrient + ph^2 + ph:nutrient"


def test_parse_accepts_wrapped_square_and_cross_expansion() -> None:
    terms = Terms.parse("ph * nutrient + I(ph^2)")
    assert terms.labels == ["ph", "nutrient", "ph:nutrient", "ph^2"]


def test_cross_skips_terms_already_present() -> None:
    terms = Terms.parse("ph + ph*nutrient")
    assert terms.labels == ["ph", "nutrient", "ph:nutrient"]


@pytest.mark.parametrize("text", ["", "ph +", "ph + + nutrient", "log(ph)", "ph^3", "ph*ph"])
def test_parse_rejects_malformed_input(text: str) -> None:
    with pytest.raises(ValueError):
        Terms.parse(text)


def test_cross_before_main_effect_is_accepted() -> None:
    terms = Terms.parse("ph*nutrient + ph")
    assert terms.labels == ["ph", "nutrient", "ph:nutrient"]


def test_cross_skips_reversed_interaction() -> None:
    terms = Terms.parse("nutrient:ph + ph*nutrient")
    assert terms.labels == ["nutrient:ph", "ph", "nutrient"]


@pytest.mark.parametrize(
    "text",
    [
        "ph + ph",
        "ph + nutrient + ph:nutrient + nutrient:ph",
        "ph*nutrient + nutrient:ph",
        "ph*nutrient + ph + ph",
        "ph^2 + I(ph^2)",
    ],
)
def test_parse_rejects_duplicates(text: str) -> None:
    with pytest.raises(ValueError, match="Duplicate"):
        Terms.parse(text)


def test_term_key_ignores_factor_order() -> None:
    assert Term(("ph", "nutrient")).key == Term(("nutrient", "ph")).key
    with pytest.raises(ValueError, match="Duplicate"):
        Terms((Term(("ph", "nutrient")), Term(("nutrient", "ph"))))


def test_extend_appends_terms() -> None:
    extended = Terms.parse("ph + nutrient").extend("ph:nutrient")
    assert extended.labels == ["ph", "nutrient", "ph:nutrient"]
    with pytest.raises(ValueError):
        extended.extend("ph")


def test_design_multiplies_factors_and_uses_suffix() -> None:
    frame = pd.DataFrame({"ph_z": [1.0, -2.0], "nutrient_z": [3.0, 0.5]})
    design = Terms.parse("ph + ph^2 + ph:nutrient").design(frame, suffix="_z")
    assert list(design.columns) == ["ph", "ph^2", "ph:nutrient"]
    assert np.allclose(design["ph^2"], [1.0, 4.0])
    assert np.allclose(design["ph:nutrient"], [3.0, -1.0])


def test_design_requires_columns() -> None:
    with pytest.raises(ValueError):
        Terms.parse("ph").design(pd.DataFrame({"nutrient": [1.0]}))


def test_term_label_and_order() -> None:
    assert Term(("ph", "ph")).label == "ph^2"
    assert Term(("ph", "nutrient")).order == 2
