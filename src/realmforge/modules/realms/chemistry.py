"""
Chemical formula and equation helpers.

Parses formulas written with ASCII digits or Unicode subscripts, including
parenthesised and bracketed groups, into element counts, and checks whether
a set of coefficients balances an equation.

Examples
--------
>>> parse_formula("Ca₃(PO₄)₂") == {"Ca": 3, "P": 2, "O": 8}
True
>>> is_balanced("H₂ + O₂ → H₂O", [2, 1, 2])
True
>>> is_balanced("H₂ + O₂ → H₂O", [1, 1, 1])
False
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

_SUBSCRIPTS = str.maketrans("₀₁₂₃₄₅₆₇₈₉", "0123456789")
_ARROWS = ("→", "->", "⟶", "=")
_TOKEN = re.compile(r"[A-Z][a-z]?|\d+|[()\[\]]")
_TERM = re.compile(r"^(\d*)\s*(.+)$")
_OPEN = {"(": ")", "[": "]"}


class FormulaError(ValueError):
    """Raised for text that is not a parseable formula or equation."""


@dataclass(frozen=True)
class Term:
    coefficient: int
    formula: str
    elements: Dict[str, int]


@dataclass(frozen=True)
class Equation:
    reactants: Tuple[Term, ...]
    products: Tuple[Term, ...]

    @property
    def terms(self) -> Tuple[Term, ...]:
        return self.reactants + self.products

    @property
    def coefficients(self) -> List[int]:
        return [term.coefficient for term in self.terms]


def normalize_formula(text: str) -> str:
    """ASCII digits, no whitespace."""
    return re.sub(r"\s+", "", text.translate(_SUBSCRIPTS))


def parse_formula(formula: str) -> Dict[str, int]:
    """
    Count atoms per element.

    Raises:
        FormulaError: unknown characters or unbalanced brackets
    """
    text = normalize_formula(formula)
    if not text:
        raise FormulaError("Empty formula")

    tokens = _TOKEN.findall(text)
    if "".join(tokens) != text:
        raise FormulaError(f"Invalid formula: {formula}")

    stack: List[Tuple[Optional[str], Counter]] = [(None, Counter())]
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1

        multiplier = 1
        if index < len(tokens) and tokens[index].isdigit():
            multiplier = int(tokens[index])
            index += 1

        if token in _OPEN:
            if multiplier != 1:
                raise FormulaError(f"Invalid formula: {formula}")
            stack.append((_OPEN[token], Counter()))
        elif token in (")", "]"):
            closer, group = stack.pop() if len(stack) > 1 else (None, None)
            if closer != token or group is None:
                raise FormulaError(f"Unbalanced brackets in formula: {formula}")
            for element, count in group.items():
                stack[-1][1][element] += count * multiplier
        elif token.isdigit():
            raise FormulaError(f"Misplaced number in formula: {formula}")
        else:
            stack[-1][1][token] += multiplier

    if len(stack) != 1:
        raise FormulaError(f"Unbalanced brackets in formula: {formula}")
    return dict(stack[0][1])


def _parse_side(side: str) -> Tuple[Term, ...]:
    terms = []
    for raw in side.split("+"):
        match = _TERM.match(raw.strip())
        if not match:
            raise FormulaError(f"Invalid compound: {raw.strip()!r}")
        coefficient = int(match.group(1)) if match.group(1) else 1
        formula = match.group(2).strip()
        terms.append(Term(coefficient, normalize_formula(formula), parse_formula(formula)))
    return tuple(terms)


def parse_equation(equation: str) -> Equation:
    """Split on the reaction arrow and parse both sides."""
    for arrow in _ARROWS:
        if arrow in equation:
            left, _, right = equation.partition(arrow)
            break
    else:
        raise FormulaError(f"No reaction arrow in: {equation}")

    if not left.strip() or not right.strip():
        raise FormulaError(f"Incomplete equation: {equation}")
    return Equation(_parse_side(left), _parse_side(right))


def _totals(terms: Sequence[Term], coefficients: Sequence[int]) -> Counter:
    totals: Counter = Counter()
    for term, coefficient in zip(terms, coefficients):
        for element, count in term.elements.items():
            totals[element] += count * coefficient
    return totals


def is_balanced(equation: "str | Equation", coefficients: Optional[Sequence[int]] = None) -> bool:
    """
    True if every element has equal totals on both sides.

    Uses the coefficients written in the equation unless `coefficients` is
    given; a coefficient list of the wrong length, or one with a
    non-positive entry, is never balanced.
    """
    parsed = parse_equation(equation) if isinstance(equation, str) else equation
    coeffs = list(coefficients) if coefficients is not None else parsed.coefficients
    if len(coeffs) != len(parsed.terms) or any(c <= 0 for c in coeffs):
        return False

    split = len(parsed.reactants)
    return _totals(parsed.reactants, coeffs[:split]) == _totals(parsed.products, coeffs[split:])


def equations_equivalent(first: str, second: str) -> bool:
    """Same terms with the same coefficients on each side, in any order."""
    try:
        a, b = parse_equation(first), parse_equation(second)
    except FormulaError:
        return " ".join(first.split()).lower() == " ".join(second.split()).lower()

    def side_key(terms: Tuple[Term, ...]) -> Counter:
        return Counter((term.coefficient, term.formula) for term in terms)

    return side_key(a.reactants) == side_key(b.reactants) and side_key(a.products) == side_key(b.products)
