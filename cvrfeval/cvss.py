"""CVSS impact value object attached to CVRF score sets."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class CvssCategory(Enum):
    BASE = "base"
    ENVIRONMENTAL = "environmental"
    TEMPORAL = "temporal"


def _same_score(a: float, b: float) -> bool:
    if math.isnan(a) and math.isnan(b):
        return True
    return a == b


@dataclass(eq=False)
class CvssImpact:
    """Base, environmental and temporal scores. NaN marks an absent score."""

    base_score: float = field(default=math.nan)
    environmental_score: float = field(default=math.nan)
    temporal_score: float = field(default=math.nan)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CvssImpact):
            return NotImplemented
        return all(
            _same_score(getattr(self, name), getattr(other, name))
            for name in ("base_score", "environmental_score", "temporal_score")
        )

    def get_score(self, category: CvssCategory) -> float:
        return getattr(self, f"{category.value}_score")

    def set_score(self, category: CvssCategory, score: float) -> None:
        setattr(self, f"{category.value}_score", score)

    def set_score_text(self, category: CvssCategory, text: Optional[str]) -> bool:
        """Parse a score from element text. Returns False if it is not a number."""
        if text is None:
            return False
        try:
            score = float(text)
        except ValueError:
            return False
        self.set_score(category, score)
        return True

    def score_text(self, category: CvssCategory) -> Optional[str]:
        """Score as element text, or None when absent."""
        score = self.get_score(category)
        if math.isnan(score):
            return None
        return str(score)
