"""Equation-balancing content for the Mathmage Trials."""

from __future__ import annotations

from typing import NamedTuple, Tuple


class EquationEntry(NamedTuple):
    unbalanced: str
    balanced: str
    coefficients: Tuple[int, ...]
    difficulty: int
    topic: str


EQUATIONS: Tuple[EquationEntry, ...] = (
    EquationEntry("H₂ + O₂ → H₂O", "2H₂ + O₂ → 2H₂O", (2, 1, 2), 1, "Simple synthesis"),
    EquationEntry("Na + Cl₂ → NaCl", "2Na + Cl₂ → 2NaCl", (2, 1, 2), 1, "Metal + halogen"),
    EquationEntry("Mg + O₂ → MgO", "2Mg + O₂ → 2MgO", (2, 1, 2), 1, "Metal oxidation"),
    EquationEntry("Al + O₂ → Al₂O₃", "4Al + 3O₂ → 2Al₂O₃", (4, 3, 2), 2, "Metal oxidation"),
    EquationEntry("Ca + H₂O → Ca(OH)₂ + H₂", "Ca + 2H₂O → Ca(OH)₂ + H₂", (1, 2, 1, 1), 2, "Metal + water"),
    EquationEntry("KClO₃ → KCl + O₂", "2KClO₃ → 2KCl + 3O₂", (2, 2, 3), 2, "Thermal decomposition"),
    EquationEntry("CaCO₃ → CaO + CO₂", "CaCO₃ → CaO + CO₂", (1, 1, 1), 1, "Carbonate decomposition"),
    EquationEntry("NH₄NO₃ → N₂O + H₂O", "NH₄NO₃ → N₂O + 2H₂O", (1, 1, 2), 2, "Ammonium nitrate decomposition"),
    EquationEntry("H₂O₂ → H₂O + O₂", "2H₂O₂ → 2H₂O + O₂", (2, 2, 1), 2, "Peroxide decomposition"),
    EquationEntry("Zn + HCl → ZnCl₂ + H₂", "Zn + 2HCl → ZnCl₂ + H₂", (1, 2, 1, 1), 2, "Metal + acid"),
    EquationEntry("Fe + CuSO₄ → FeSO₄ + Cu", "Fe + CuSO₄ → FeSO₄ + Cu", (1, 1, 1, 1), 2, "Metal displacement"),
    EquationEntry("Al + HCl → AlCl₃ + H₂", "2Al + 6HCl → 2AlCl₃ + 3H₂", (2, 6, 2, 3), 3, "Metal + acid"),
    EquationEntry("Mg + AgNO₃ → Mg(NO₃)₂ + Ag", "Mg + 2AgNO₃ → Mg(NO₃)₂ + 2Ag", (1, 2, 1, 2), 3, "Metal displacement"),
    EquationEntry("AgNO₃ + NaCl → AgCl + NaNO₃", "AgNO₃ + NaCl → AgCl + NaNO₃", (1, 1, 1, 1), 2, "Precipitation"),
    EquationEntry("BaCl₂ + Na₂SO₄ → BaSO₄ + NaCl", "BaCl₂ + Na₂SO₄ → BaSO₄ + 2NaCl", (1, 1, 1, 2), 3, "Precipitation"),
    EquationEntry("Pb(NO₃)₂ + KI → PbI₂ + KNO₃", "Pb(NO₃)₂ + 2KI → PbI₂ + 2KNO₃", (1, 2, 1, 2), 3, "Precipitation"),
    EquationEntry("Ca(OH)₂ + HCl → CaCl₂ + H₂O", "Ca(OH)₂ + 2HCl → CaCl₂ + 2H₂O", (1, 2, 1, 2), 3, "Neutralization"),
    EquationEntry("CH₄ + O₂ → CO₂ + H₂O", "CH₄ + 2O₂ → CO₂ + 2H₂O", (1, 2, 1, 2), 3, "Hydrocarbon combustion"),
    EquationEntry("C₂H₆ + O₂ → CO₂ + H₂O", "2C₂H₆ + 7O₂ → 4CO₂ + 6H₂O", (2, 7, 4, 6), 4, "Hydrocarbon combustion"),
    EquationEntry("C₃H₈ + O₂ → CO₂ + H₂O", "C₃H₈ + 5O₂ → 3CO₂ + 4H₂O", (1, 5, 3, 4), 4, "Hydrocarbon combustion"),
    EquationEntry("C₄H₁₀ + O₂ → CO₂ + H₂O", "2C₄H₁₀ + 13O₂ → 8CO₂ + 10H₂O", (2, 13, 8, 10), 5, "Hydrocarbon combustion"),
    EquationEntry("C₂H₅OH + O₂ → CO₂ + H₂O", "C₂H₅OH + 3O₂ → 2CO₂ + 3H₂O", (1, 3, 2, 3), 4, "Alcohol combustion"),
    EquationEntry("Fe₂O₃ + CO → Fe + CO₂", "Fe₂O₃ + 3CO → 2Fe + 3CO₂", (1, 3, 2, 3), 4, "Metal extraction"),
    EquationEntry("NH₃ + O₂ → NO + H₂O", "4NH₃ + 5O₂ → 4NO + 6H₂O", (4, 5, 4, 6), 5, "Ammonia oxidation"),
    EquationEntry("P₄ + O₂ → P₄O₁₀", "P₄ + 5O₂ → P₄O₁₀", (1, 5, 1), 4, "Phosphorus oxidation"),
    EquationEntry(
        "Ca₃(PO₄)₂ + SiO₂ + C → CaSiO₃ + CO + P₄",
        "2Ca₃(PO₄)₂ + 6SiO₂ + 10C → 6CaSiO₃ + 10CO + P₄",
        (2, 6, 10, 6, 10, 1),
        5,
        "Industrial process",
    ),
)
