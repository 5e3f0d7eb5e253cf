"""Qualitative-analysis facts and solubility rules for the Memory Labyrinth."""

from __future__ import annotations

from typing import NamedTuple, Optional, Tuple


class QualitativeTest(NamedTuple):
    ion: str
    test: str
    result: str
    description: str
    category: str  # gas_test | flame_color | ion_identification
    color: Optional[str] = None


class SolubilityRule(NamedTuple):
    rule: str
    examples: Tuple[str, ...]
    exceptions: Tuple[str, ...]
    difficulty: int


QUALITATIVE_TESTS: Tuple[QualitativeTest, ...] = (
    QualitativeTest("Hydrogen (H₂)", "Lighted splint", "Burns with a pop sound",
                    "Hydrogen gas burns rapidly with oxygen producing a distinctive popping sound", "gas_test"),
    QualitativeTest("Oxygen (O₂)", "Glowing splint", "Relights the splint",
                    "Oxygen supports combustion and will relight a glowing wooden splint", "gas_test"),
    QualitativeTest("Carbon dioxide (CO₂)", "Limewater", "Turns milky/cloudy",
                    "CO₂ reacts with calcium hydroxide to form insoluble calcium carbonate", "gas_test"),
    QualitativeTest("Ammonia (NH₃)", "Damp red litmus paper", "Turns blue",
                    "Ammonia is alkaline and turns red litmus paper blue", "gas_test"),
    QualitativeTest("Chlorine (Cl₂)", "Damp blue litmus paper", "Bleaches white",
                    "Chlorine is a strong bleaching agent that removes color from litmus", "gas_test"),
    QualitativeTest("Sulfur dioxide (SO₂)", "Acidified potassium dichromate", "Orange to green color change",
                    "SO₂ reduces dichromate ions, changing from orange to green", "gas_test"),
    QualitativeTest("Lithium (Li⁺)", "Flame test", "Crimson red flame",
                    "Lithium compounds produce a distinctive crimson red flame", "flame_color", "#DC143C"),
    QualitativeTest("Sodium (Na⁺)", "Flame test", "Golden yellow flame",
                    "Sodium compounds produce a bright golden yellow flame", "flame_color", "#FFD700"),
    QualitativeTest("Potassium (K⁺)", "Flame test", "Lilac/violet flame",
                    "Potassium compounds produce a lilac or violet colored flame", "flame_color", "#9370DB"),
    QualitativeTest("Calcium (Ca²⁺)", "Flame test", "Brick red flame",
                    "Calcium compounds produce a brick red colored flame", "flame_color", "#B22222"),
    QualitativeTest("Copper (Cu²⁺)", "Flame test", "Blue-green flame",
                    "Copper compounds produce a distinctive blue-green flame", "flame_color", "#008B8B"),
    QualitativeTest("Barium (Ba²⁺)", "Flame test", "Apple green flame",
                    "Barium compounds produce an apple green colored flame", "flame_color", "#32CD32"),
    QualitativeTest("Strontium (Sr²⁺)", "Flame test", "Crimson red flame",
                    "Strontium compounds produce a crimson red flame similar to lithium", "flame_color", "#DC143C"),
    QualitativeTest("Chloride (Cl⁻)", "Silver nitrate + nitric acid", "White precipitate",
                    "Forms silver chloride precipitate, soluble in ammonia", "ion_identification"),
    QualitativeTest("Bromide (Br⁻)", "Silver nitrate + nitric acid", "Cream precipitate",
                    "Forms silver bromide precipitate, partially soluble in ammonia", "ion_identification"),
    QualitativeTest("Iodide (I⁻)", "Silver nitrate + nitric acid", "Yellow precipitate",
                    "Forms silver iodide precipitate, insoluble in ammonia", "ion_identification"),
    QualitativeTest("Sulfate (SO₄²⁻)", "Barium chloride + hydrochloric acid", "White precipitate",
                    "Forms barium sulfate precipitate, insoluble in acids", "ion_identification"),
    QualitativeTest("Carbonate (CO₃²⁻)", "Dilute hydrochloric acid", "Effervescence (CO₂ gas)",
                    "Produces carbon dioxide gas which turns limewater milky", "ion_identification"),
    QualitativeTest("Iron(II) (Fe²⁺)", "Sodium hydroxide", "Green precipitate",
                    "Forms iron(II) hydroxide, green precipitate that darkens on standing", "ion_identification"),
    QualitativeTest("Iron(III) (Fe³⁺)", "Sodium hydroxide", "Red-brown precipitate",
                    "Forms iron(III) hydroxide, red-brown gelatinous precipitate", "ion_identification"),
    QualitativeTest("Copper(II) (Cu²⁺)", "Sodium hydroxide", "Blue precipitate",
                    "Forms copper(II) hydroxide, pale blue precipitate", "ion_identification"),
    QualitativeTest("Zinc (Zn²⁺)", "Sodium hydroxide", "White precipitate",
                    "Forms zinc hydroxide, white precipitate soluble in excess NaOH", "ion_identification"),
    QualitativeTest("Aluminum (Al³⁺)", "Sodium hydroxide", "White precipitate",
                    "Forms aluminum hydroxide, white precipitate soluble in excess NaOH", "ion_identification"),
)


SOLUBILITY_RULES: Tuple[SolubilityRule, ...] = (
    SolubilityRule("All nitrates are soluble", ("NaNO₃", "Ca(NO₃)₂", "AgNO₃", "Pb(NO₃)₂"), (), 1),
    SolubilityRule("All Group 1 compounds are soluble", ("NaCl", "KBr", "LiI", "Na₂SO₄"), (), 1),
    SolubilityRule("All ammonium compounds are soluble", ("NH₄Cl", "(NH₄)₂SO₄", "NH₄NO₃"), (), 1),
    SolubilityRule("Most chlorides are soluble", ("NaCl", "KCl", "MgCl₂"), ("AgCl", "PbCl₂", "Hg₂Cl₂"), 2),
    SolubilityRule("Most sulfates are soluble", ("Na₂SO₄", "K₂SO₄", "MgSO₄"), ("BaSO₄", "PbSO₄", "CaSO₄"), 2),
    SolubilityRule("Most carbonates are insoluble", ("CaCO₃", "BaCO₃", "PbCO₃"), ("Na₂CO₃", "K₂CO₃", "(NH₄)₂CO₃"), 2),
    SolubilityRule("Most hydroxides are insoluble", ("Mg(OH)₂", "Ca(OH)₂", "Fe(OH)₃"), ("NaOH", "KOH", "Ba(OH)₂"), 2),
    SolubilityRule("Most phosphates are insoluble", ("Ca₃(PO₄)₂", "AlPO₄", "FePO₄"), ("Na₃PO₄", "K₃PO₄", "(NH₄)₃PO₄"), 3),
)
