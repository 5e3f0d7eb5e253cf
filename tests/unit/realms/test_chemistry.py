"""Unit tests for formula parsing and equation balancing."""

import pytest

from realmforge.modules.realms.chemistry import (
    FormulaError,
    equations_equivalent,
    is_balanced,
    normalize_formula,
    parse_equation,
    parse_formula,
)
from realmforge.modules.realms.data.equations import EQUATIONS


@pytest.mark.unit
class TestParseFormula:
    @pytest.mark.parametrize(
        "formula,expected",
        [
            ("H2O", {"H": 2, "O": 1}),
            ("H₂O", {"H": 2, "O": 1}),
            ("Ca(OH)₂", {"Ca": 1, "O": 2, "H": 2}),
            ("(NH₄)₂SO₄", {"N": 2, "H": 8, "S": 1, "O": 4}),
            ("K4[Fe(CN)6]", {"K": 4, "Fe": 1, "C": 6, "N": 6}),
        ],
    )
    def test_element_counts(self, formula, expected):
        assert parse_formula(formula) == expected

    @pytest.mark.parametrize("formula", ["", "h2o", "Ca(OH", "NaCl)", "2(H2O", "H2O!"])
    def test_malformed_formulas_raise(self, formula):
        with pytest.raises(FormulaError):
            parse_formula(formula)

    def test_normalize_formula(self):
        assert normalize_formula(" C O₂ ") == "CO2"


@pytest.mark.unit
class TestEquations:
    def test_parse_equation_reads_coefficients(self):
        equation = parse_equation("2H₂ + O₂ → 2H₂O")

        assert equation.coefficients == [2, 1, 2]
        assert [term.formula for term in equation.reactants] == ["H2", "O2"]

    def test_ascii_arrow_supported(self):
        assert is_balanced("CaCO3 -> CaO + CO2")

    def test_missing_arrow_raises(self):
        with pytest.raises(FormulaError):
            parse_equation("H2 + O2")

    def test_balancing_with_explicit_coefficients(self):
        assert is_balanced("Al + O₂ → Al₂O₃", [4, 3, 2])
        assert is_balanced("Al + O₂ → Al₂O₃", [8, 6, 4])
        assert not is_balanced("Al + O₂ → Al₂O₃", [2, 3, 2])
        assert not is_balanced("Al + O₂ → Al₂O₃", [4, 3])
        assert not is_balanced("Al + O₂ → Al₂O₃", [0, 0, 0])

    @pytest.mark.parametrize("entry", EQUATIONS, ids=lambda e: e.unbalanced)
    def test_every_catalogue_equation_balances(self, entry):
        assert is_balanced(entry.unbalanced, entry.coefficients)
        assert is_balanced(entry.balanced)

    def test_equivalence_ignores_term_order(self):
        assert equations_equivalent("CaCO3 + 2HCl -> CaCl2 + H2O + CO2", "2HCl + CaCO₃ → CO₂ + H₂O + CaCl₂")
        assert not equations_equivalent("CaCO3 + HCl -> CaCl2 + H2O + CO2", "CaCO₃ + 2HCl → CaCl₂ + H₂O + CO₂")
