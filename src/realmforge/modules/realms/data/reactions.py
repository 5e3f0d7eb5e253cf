"""Observation and prediction content for the Seer's Challenge."""

from __future__ import annotations

from typing import NamedTuple, Optional, Tuple


class PrecipitationReaction(NamedTuple):
    reactant1: str
    reactant2: str
    will_precipitate: bool
    precipitate: Optional[str]
    explanation: str
    difficulty: int
    topic: str


class ColorChangeReaction(NamedTuple):
    id: str
    reactants: Tuple[str, ...]
    initial_color: str
    final_color: str
    color_description: str
    text_clue: str
    explanation: str
    difficulty: int
    topic: str
    additional_observations: Tuple[str, ...] = ()


class MysteryReaction(NamedTuple):
    id: str
    reactants: Tuple[str, ...]
    gas_produced: str
    visual_effects: Tuple[str, ...]
    equation: str
    explanation: str
    difficulty: int
    topic: str


PRECIPITATION_REACTIONS: Tuple[PrecipitationReaction, ...] = (
    PrecipitationReaction("AgNO₃", "NaCl", True, "AgCl",
                          "Silver chloride (AgCl) is insoluble in water and forms a white precipitate.",
                          1, "Halide precipitation"),
    PrecipitationReaction("BaCl₂", "Na₂SO₄", True, "BaSO₄",
                          "Barium sulfate (BaSO₄) is insoluble in water and forms a white precipitate.",
                          1, "Sulfate precipitation"),
    PrecipitationReaction("Pb(NO₃)₂", "KI", True, "PbI₂",
                          "Lead iodide (PbI₂) is insoluble in water and forms a bright yellow precipitate.",
                          1, "Heavy metal precipitation"),
    PrecipitationReaction("CaCl₂", "Na₂CO₃", True, "CaCO₃",
                          "Calcium carbonate (CaCO₃) is insoluble in water and forms a white precipitate.",
                          1, "Carbonate precipitation"),
    PrecipitationReaction("Ca(OH)₂", "CO₂", True, "CaCO₃",
                          "Limewater test: calcium carbonate precipitates, turning clear limewater milky.",
                          1, "Gas absorption"),
    PrecipitationReaction("Cu(NO₃)₂", "Na₂S", True, "CuS",
                          "Copper sulfide (CuS) is highly insoluble and forms a black precipitate.",
                          2, "Sulfide precipitation"),
    PrecipitationReaction("Zn(NO₃)₂", "K₂CrO₄", True, "ZnCrO₄",
                          "Zinc chromate (ZnCrO₄) is insoluble and forms a yellow precipitate.",
                          2, "Chromate precipitation"),
    PrecipitationReaction("NaCl", "KNO₃", False, None,
                          "All products (NaNO₃ and KCl) are soluble in water, so no precipitate forms.",
                          2, "Soluble salts"),
    PrecipitationReaction("Ca(NO₃)₂", "KCl", False, None,
                          "Both calcium chloride and potassium nitrate are soluble, no precipitate forms.",
                          2, "Soluble salts"),
    PrecipitationReaction("NH₄NO₃", "NaOH", False, None,
                          "Produces ammonia gas (detectable by smell), water, and soluble sodium nitrate.",
                          2, "Gas evolution"),
    PrecipitationReaction("NH₄Cl", "KOH", False, None,
                          "This produces ammonia gas and water, with soluble KCl. No solid precipitate forms.",
                          3, "Gas evolution"),
    PrecipitationReaction("FeCl₃", "KSCN", False, None,
                          "Forms a deep red complex ion [Fe(SCN)]²⁺ in solution, not a precipitate.",
                          3, "Complex ion formation"),
    PrecipitationReaction("Mn(NO₃)₂", "NaOH", True, "Mn(OH)₂",
                          "Manganese(II) hydroxide forms a white precipitate that quickly oxidizes to brown in air.",
                          3, "Oxidation-sensitive precipitate"),
    PrecipitationReaction("Bi(NO₃)₃", "H₂O", True, "BiONO₃",
                          "Bismuth nitrate hydrolyzes in water to form insoluble bismuth oxonitrate (white precipitate).",
                          4, "Hydrolysis precipitation"),
    PrecipitationReaction("Al(NO₃)₃", "NH₄OH", True, "Al(OH)₃",
                          "Aluminum hydroxide precipitates as white gelatinous solid, amphoteric (dissolves in excess base).",
                          4, "Amphoteric hydroxide"),
    PrecipitationReaction("Hg₂(NO₃)₂", "HCl", True, "Hg₂Cl₂",
                          "Mercury(I) chloride (calomel) forms a white precipitate, distinguishes Hg₂²⁺ from Hg²⁺.",
                          5, "Mercury chemistry"),
    PrecipitationReaction("Co(NO₃)₂", "K₄[Fe(CN)₆]", True, "Co₃[Fe(CN)₆]₂",
                          "Cobalt ferrocyanide forms a brown precipitate, used in qualitative analysis.",
                          5, "Complex precipitation"),
)


COLOR_CHANGE_REACTIONS: Tuple[ColorChangeReaction, ...] = (
    ColorChangeReaction(
        "cc-001", ("Cu²⁺", "NH₃"), "pale blue", "deep blue", "deep blue",
        "A pale blue solution of copper ions becomes intensely blue when ammonia is added dropwise.",
        "Copper ions form a deep blue complex with ammonia: [Cu(NH₃)₄]²⁺",
        1, "Complex ion formation", ("Solution becomes more viscous", "No precipitate forms"),
    ),
    ColorChangeReaction(
        "cc-002", ("Fe³⁺", "SCN⁻"), "pale yellow", "blood red", "blood red",
        "A pale yellow iron(III) solution turns blood red when thiocyanate ions are added.",
        "Iron(III) forms a blood red complex with thiocyanate: [Fe(SCN)]²⁺",
        1, "Complex ion formation", ("Intense red color even at low concentrations", "Used as a test for Fe³⁺"),
    ),
    ColorChangeReaction(
        "cc-003", ("I₂", "starch"), "brown", "blue-black", "blue-black",
        "Brown iodine solution turns blue-black when starch solution is added.",
        "Iodine forms a characteristic blue-black complex with starch molecules.",
        1, "Starch test", ("Very sensitive test for iodine", "Color disappears on heating"),
    ),
    ColorChangeReaction(
        "cc-004", ("Cr₂O₇²⁻", "H⁺"), "orange", "green", "orange to green",
        "An orange dichromate solution turns green when a reducing agent is added in acidic conditions.",
        "Dichromate(VI) ions are reduced to green chromium(III) ions.",
        2, "Redox reactions",
    ),
    ColorChangeReaction(
        "cc-005", ("MnO₄⁻", "H⁺"), "purple", "colorless", "purple to colorless",
        "A deep purple permanganate solution becomes colorless when a reducing agent is added in acidic solution.",
        "Manganate(VII) ions are reduced to almost colorless manganese(II) ions.",
        2, "Redox reactions",
    ),
    ColorChangeReaction(
        "cc-006", ("Pb²⁺", "I⁻"), "colorless", "bright yellow", "bright yellow",
        "Colorless solutions mix to produce a bright yellow precipitate that dissolves in hot water.",
        "Lead(II) iodide is a bright yellow solid, more soluble in hot water.",
        2, "Precipitation",
    ),
    ColorChangeReaction(
        "cc-007", ("Ag⁺", "Br⁻"), "colorless", "cream", "cream",
        "Mixing colorless silver nitrate with bromide solution produces a cream-colored precipitate.",
        "Silver bromide is a cream precipitate, partially soluble in concentrated ammonia.",
        2, "Halide precipitation",
    ),
    ColorChangeReaction(
        "cc-013", ("Benedict's reagent", "reducing sugar"), "blue", "brick red", "brick red",
        "Blue Benedict's reagent turns brick red when heated with a reducing sugar.",
        "Reducing sugars reduce copper(II) to copper(I) oxide, a brick red precipitate.",
        2, "Biochemical test",
    ),
    ColorChangeReaction(
        "cc-009", ("Co²⁺", "OH⁻"), "pink", "blue precipitate", "blue precipitate",
        "A pink cobalt solution forms a blue precipitate when hydroxide is added, which turns brown in air.",
        "Cobalt(II) hydroxide precipitates blue and is oxidised by air to brown cobalt(III) species.",
        3, "Oxidation-sensitive precipitation",
    ),
    ColorChangeReaction(
        "cc-019", ("Biuret reagent", "protein"), "blue", "purple", "purple",
        "Blue biuret reagent turns purple in the presence of proteins.",
        "Proteins with peptide bonds form purple complexes with copper ions in biuret reagent.",
        3, "Protein test",
    ),
    ColorChangeReaction(
        "cc-020", ("Nessler's reagent", "NH₃"), "colorless", "brown", "brown",
        "Colorless Nessler's reagent turns brown when ammonia is present.",
        "Nessler's reagent (K₂HgI₄) forms a brown complex with ammonia.",
        4, "Ammonia test",
    ),
    ColorChangeReaction(
        "cc-023", ("Schiff's reagent", "aldehyde"), "colorless", "magenta", "magenta",
        "Colorless Schiff's reagent turns magenta (bright pink) when an aldehyde is added.",
        "Aldehydes restore the magenta color to decolorized fuchsin (Schiff's reagent).",
        4, "Aldehyde test",
    ),
    ColorChangeReaction(
        "cc-025", ("Ceric ammonium nitrate", "alcohol"), "yellow", "red", "red",
        "Yellow ceric ammonium nitrate solution turns red when an alcohol is added.",
        "Alcohols reduce Ce⁴⁺ (yellow) to Ce³⁺, forming red complexes.",
        5, "Alcohol test",
    ),
)


MYSTERY_REACTIONS: Tuple[MysteryReaction, ...] = (
    MysteryReaction(
        "mr-001", ("CaCO₃", "HCl"), "CO₂",
        ("vigorous fizzing", "bubbles rising through solution", "effervescence"),
        "CaCO₃ + 2HCl → CaCl₂ + H₂O + CO₂",
        "Calcium carbonate reacts with hydrochloric acid to produce carbon dioxide gas, which causes vigorous effervescence.",
        1, "Acid-carbonate reaction",
    ),
    MysteryReaction(
        "mr-002", ("Zn", "HCl"), "H₂",
        ("steady bubbling", "metal surface becomes rough", "gas bubbles rise quickly"),
        "Zn + 2HCl → ZnCl₂ + H₂",
        "Zinc metal displaces hydrogen from hydrochloric acid, producing hydrogen gas which burns with a pop sound.",
        1, "Metal-acid reaction",
    ),
    MysteryReaction(
        "mr-003", ("NH₄Cl", "NaOH"), "NH₃",
        ("gentle warming", "strong smell develops", "turns damp red litmus blue"),
        "NH₄Cl + NaOH → NaCl + H₂O + NH₃",
        "Ammonium chloride reacts with sodium hydroxide to produce ammonia gas, which has a characteristic pungent smell.",
        2, "Base displacement",
    ),
    MysteryReaction(
        "mr-004", ("Na₂SO₃", "HCl"), "SO₂",
        ("immediate fizzing", "choking smell", "solution may turn cloudy"),
        "Na₂SO₃ + 2HCl → 2NaCl + H₂O + SO₂",
        "Sodium sulfite reacts with hydrochloric acid to produce sulfur dioxide, a toxic gas with a characteristic sharp smell.",
        2, "Sulfite-acid reaction",
    ),
    MysteryReaction(
        "mr-009", ("FeS", "HCl"), "H₂S",
        ("strong rotten egg smell", "blackens silver", "bubbling"),
        "FeS + 2HCl → FeCl₂ + H₂S",
        "Iron sulfide reacts with hydrochloric acid to produce hydrogen sulfide, which has a characteristic rotten egg smell.",
        2, "Sulfide-acid reaction",
    ),
    MysteryReaction(
        "mr-005", ("KMnO₄", "HCl"), "Cl₂",
        ("purple solution turns colorless", "green-yellow gas evolved", "strong bleach smell"),
        "2KMnO₄ + 16HCl → 2KCl + 2MnCl₂ + 8H₂O + 5Cl₂",
        "Potassium permanganate oxidizes hydrochloric acid, producing chlorine gas which is toxic and has bleaching properties.",
        3, "Redox gas evolution",
    ),
    MysteryReaction(
        "mr-006", ("CaC₂", "H₂O"), "C₂H₂",
        ("vigorous reaction with water", "heat evolution", "gas burns with sooty flame"),
        "CaC₂ + 2H₂O → Ca(OH)₂ + C₂H₂",
        "Calcium carbide reacts violently with water to produce acetylene gas, which burns with a very hot flame.",
        3, "Carbide hydrolysis",
    ),
    MysteryReaction(
        "mr-008", ("Cu", "HNO₃ (conc.)"), "NO₂",
        ("brown gas evolution", "copper dissolves", "solution turns blue-green"),
        "Cu + 4HNO₃ → Cu(NO₃)₂ + 2H₂O + 2NO₂",
        "Copper reacts with concentrated nitric acid to produce nitrogen dioxide, a toxic brown gas.",
        4, "Metal-nitric acid reaction",
    ),
    MysteryReaction(
        "mr-012", ("Al₄C₃", "H₂O"), "CH₄",
        ("aluminum hydroxide precipitate", "gas bubbles", "burns with blue flame"),
        "Al₄C₃ + 12H₂O → 4Al(OH)₃ + 3CH₄",
        "Aluminum carbide hydrolyzes to produce methane gas and aluminum hydroxide precipitate.",
        4, "Carbide hydrolysis",
    ),
    MysteryReaction(
        "mr-014", ("CaP₂", "H₂O"), "PH₃",
        ("spontaneous ignition", "white smoke rings", "garlic odor"),
        "CaP₂ + 6H₂O → 3Ca(OH)₂ + 2PH₃",
        "Calcium phosphide reacts with water to produce phosphine gas, which ignites spontaneously in air.",
        5, "Phosphide hydrolysis",
    ),
)

GAS_CHOICES: Tuple[str, ...] = (
    "H₂", "O₂", "CO₂", "NH₃", "SO₂", "Cl₂", "H₂S", "NO₂", "N₂", "CH₄", "C₂H₂", "PH₃", "HF",
)

COLOR_SYNONYMS = {
    "red": ("crimson", "scarlet", "cherry", "blood red", "brick red"),
    "blue": ("azure", "navy", "deep blue", "pale blue", "light blue"),
    "green": ("emerald", "lime", "forest green", "pale green"),
    "yellow": ("golden", "bright yellow", "pale yellow", "lemon"),
    "purple": ("violet", "magenta", "lavender", "deep purple"),
    "orange": ("amber", "bright orange", "golden orange"),
    "brown": ("tan", "chocolate", "dark brown", "light brown"),
    "black": ("dark", "charcoal", "jet black"),
    "white": ("colorless", "clear", "transparent", "pale"),
    "pink": ("rose", "salmon", "light red"),
    "cream": ("off-white", "beige", "pale yellow"),
}

COLOR_WORDS: Tuple[str, ...] = (
    "red", "blue", "green", "yellow", "purple", "orange", "brown", "black",
    "white", "pink", "cream", "colorless", "clear", "dark", "light", "pale",
    "deep", "bright", "crimson", "scarlet", "azure", "emerald", "golden",
    "violet", "magenta", "amber",
)
