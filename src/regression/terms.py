"""Linear-predictor terms: main effects, quadratics and two-way interactions.

Terms are written in a small formula-like syntax, for example::

    Terms.parse("ph + nutrient + ph^2 + ph:nutrient")
    Terms.parse("ph * nutrient + I(ph^2)")

``a*b`` expands to ``a + b + a:b``. Each term becomes one design-matrix column
whose value is the product of its factors.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Set, Tuple

import numpy as np
import pandas as pd

from src.datahub.helpers import require_columns

_NAME = r"[A-Za-z_][A-Za-z0-9_]*"
_MAIN = re.compile(rf"^({_NAME})$")
_SQUARE = re.compile(rf"^(?:I\(\s*({_NAME})\s*\^\s*2\s*\)|({_NAME})\s*\^\s*2)$")
_INTERACTION = re.compile(rf"^({_NAME})\s*:\s*({_NAME})$")
_CROSS = re.compile(rf"^({_NAME})\s*\*\s*({_NAME})$")


@dataclass(frozen=True)
class Term:
    """One column of the design matrix, the product of ``factors``."""

    factors: Tuple[str, ...]

    @property
    def label(self) -> str:
        if len(self.factors) == 1:
            return self.factors[0]
        if len(set(self.factors)) == 1:
            return f"{self.factors[0]}^{len(self.factors)}"
        return ":".join(self.factors)

    @property
    def key(self) -> Tuple[str, ...]:
        """Order-free identity; ``a:b`` and ``b:a`` share a key."""
        return tuple(sorted(self.factors))

    @property
    def order(self) -> int:
        return len(self.factors)

    def evaluate(self, frame: pd.DataFrame, suffix: str = "") -> np.ndarray:
        values = np.ones(len(frame), dtype=float)
        for factor in self.factors:
            values = values * frame[f"{factor}{suffix}"].to_numpy(dtype=float)
        return values


@dataclass(frozen=True)
class Terms:
    """Ordered, duplicate-free collection of terms."""

    terms: Tuple[Term, ...]

    def __post_init__(self) -> None:
        if not self.terms:
            raise ValueError("At least one term is required.")
        keys = [term.key for term in self.terms]
        duplicates = sorted({term.label for term in self.terms if keys.count(term.key) > 1})
        if duplicates:
            raise ValueError(f"Duplicate terms: {', '.join(duplicates)}")

    @classmethod
    def parse(cls, text: str) -> "Terms":
        """Parse a ``+``-separated term list."""
        pieces = [piece.strip() for piece in text.split("+")]
        if not text.strip() or any(not piece for piece in pieces):
            raise ValueError(f"Malformed term list: {text!r}")

        terms: List[Term] = []
        implied: Set[Tuple[str, ...]] = set()
        for piece in pieces:
            parsed, crossed = _parse_piece(piece)
            for term in parsed:
                if term.key in {known.key for known in terms}:
                    # a*b may overlap terms listed on either side of it, once
                    if crossed:
                        continue
                    if term.key in implied:
                        implied.discard(term.key)
                        continue
                terms.append(term)
                if crossed:
                    implied.add(term.key)
        return cls(tuple(terms))

    @classmethod
    def from_labels(cls, labels: Iterable[str]) -> "Terms":
        return cls.parse(" + ".join(labels))

    @property
    def labels(self) -> List[str]:
        return [term.label for term in self.terms]

    @property
    def variables(self) -> List[str]:
        """Covariates referenced by any term, in first-use order."""
        seen: List[str] = []
        for term in self.terms:
            for factor in term.factors:
                if factor not in seen:
                    seen.append(factor)
        return seen

    def extend(self, extra: "Terms | str") -> "Terms":
        """Return a new collection with ``extra`` appended (duplicates rejected)."""
        other = Terms.parse(extra) if isinstance(extra, str) else extra
        return Terms(self.terms + other.terms)

    def design(self, frame: pd.DataFrame, suffix: str = "") -> pd.DataFrame:
        """Design matrix with one column per term label; ``suffix`` selects e.g. rescaled columns."""
        require_columns(frame, [f"{name}{suffix}" for name in self.variables])
        return pd.DataFrame(
            {term.label: term.evaluate(frame, suffix) for term in self.terms},
            index=frame.index,
        )

    def __str__(self) -> str:
        return " + ".join(self.labels)


def _parse_piece(piece: str) -> Tuple[List[Term], bool]:
    """Terms for one piece, and whether they came from an ``a*b`` expansion."""
    match = _MAIN.match(piece)
    if match:
        return [Term((match.group(1),))], False
    match = _SQUARE.match(piece)
    if match:
        name = match.group(1) or match.group(2)
        return [Term((name, name))], False
    match = _INTERACTION.match(piece)
    if match:
        first, second = match.groups()
        if first == second:
            return [Term((first, first))], False
        return [Term((first, second))], False
    match = _CROSS.match(piece)
    if match:
        first, second = match.groups()
        if first == second:
            raise ValueError(f"Cross term needs two different covariates: {piece!r}")
        return [Term((first,)), Term((second,)), Term((first, second))], True
    raise ValueError(f"Cannot parse term {piece!r}; expected 'x', 'x^2', 'I(x^2)', 'a:b' or 'a*b'.")


__all__ = ["Term", "Terms"]
