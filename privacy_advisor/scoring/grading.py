"""Letter grades and score bands."""
from enum import Enum
from typing import Optional


class ScoreBand(str, Enum):
    SAFE = "safe"
    RISKY = "risky"
    DANGEROUS = "dangerous"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return SCORE_BAND_LABELS[self]


SCORE_BAND_LABELS = {
    ScoreBand.SAFE: "Safe",
    ScoreBand.RISKY: "Risky",
    ScoreBand.DANGEROUS: "Dangerous",
    ScoreBand.UNKNOWN: "Pending",
}

# (minimum score, letter, label)
GRADE_SCALE = (
    (90, "A", "Excellent"),
    (80, "B", "Good"),
    (70, "C", "Fair"),
    (60, "D", "Poor"),
    (0, "F", "Bad"),
)


def score_band(score: Optional[float]) -> ScoreBand:
    if score is None:
        return ScoreBand.UNKNOWN
    if score >= 80:
        return ScoreBand.SAFE
    if score >= 50:
        return ScoreBand.RISKY
    return ScoreBand.DANGEROUS


def letter_grade(score: float) -> str:
    """A (90+) through F (below 60)."""
    for minimum, letter, _ in GRADE_SCALE:
        if score >= minimum:
            return letter
    return "F"


def grade_label(score: float) -> str:
    for minimum, _, label in GRADE_SCALE:
        if score >= minimum:
            return label
    return "Bad"


def grade_description(score: float) -> str:
    """e.g. "Grade B: Good privacy score, 88 out of 100"."""
    return f"Grade {letter_grade(score)}: {grade_label(score)} privacy score, {score:g} out of 100"
