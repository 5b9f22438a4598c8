"""Explanatory score breakdown.

The rows explain where points go; they never replace the score the server
computed for the scan.
"""
from dataclasses import dataclass
from typing import List

from ..api.schemas import EvidenceKind, Report
from .signals import count_kind, tls_grade

BASELINE = 100

TRACKER_POINTS, TRACKER_CAP = 5, 30
MIXED_CONTENT_POINTS, MIXED_CONTENT_CAP = 10, 20
HEADER_POINTS, HEADER_CAP = 3, 15
THIRDPARTY_POINTS, THIRDPARTY_CAP = 2, 20
COOKIE_POINTS, COOKIE_CAP = 2, 10

TLS_GRADE_PENALTIES = {"C": 3, "D": 7, "F": 12}


@dataclass(frozen=True)
class ScoreBreakdownItem:
    category: str
    finding: str
    points: int
    positive: bool


def capped_deduction(count: int, points: int, cap: int) -> int:
    return -min(count * points, cap)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def score_breakdown(report: Report) -> List[ScoreBreakdownItem]:
    evidence = report.evidence
    rows = [ScoreBreakdownItem("Baseline", "Starting score", BASELINE, True)]

    trackers = count_kind(evidence, EvidenceKind.TRACKER)
    if trackers:
        rows.append(ScoreBreakdownItem(
            "Trackers",
            f"{_plural(trackers, 'tracker')} detected",
            capped_deduction(trackers, TRACKER_POINTS, TRACKER_CAP),
            False,
        ))
    else:
        rows.append(ScoreBreakdownItem("Trackers", "No trackers detected", 0, True))

    grade = tls_grade(evidence)
    penalty = TLS_GRADE_PENALTIES.get(grade or "", 0)
    if penalty:
        rows.append(ScoreBreakdownItem("TLS", f"TLS grade {grade}", -penalty, False))
    elif grade:
        rows.append(ScoreBreakdownItem("TLS", f"TLS grade {grade}", 0, True))
    elif count_kind(evidence, EvidenceKind.TLS):
        rows.append(ScoreBreakdownItem("TLS", "TLS configured (unrated)", 0, True))
    else:
        rows.append(ScoreBreakdownItem("TLS", "No TLS issues reported", 0, True))

    mixed = count_kind(evidence, EvidenceKind.INSECURE, EvidenceKind.MIXED_CONTENT)
    if mixed:
        rows.append(ScoreBreakdownItem(
            "Mixed content",
            f"{_plural(mixed, 'insecure resource')} loaded",
            capped_deduction(mixed, MIXED_CONTENT_POINTS, MIXED_CONTENT_CAP),
            False,
        ))

    headers = count_kind(evidence, EvidenceKind.HEADER)
    if headers:
        rows.append(ScoreBreakdownItem(
            "Headers",
            f"{_plural(headers, 'missing security header')}",
            capped_deduction(headers, HEADER_POINTS, HEADER_CAP),
            False,
        ))

    third_party = count_kind(evidence, EvidenceKind.THIRDPARTY)
    if third_party:
        rows.append(ScoreBreakdownItem(
            "Third-party",
            f"{_plural(third_party, 'third-party request')}",
            capped_deduction(third_party, THIRDPARTY_POINTS, THIRDPARTY_CAP),
            False,
        ))

    cookies = count_kind(evidence, EvidenceKind.COOKIE)
    if cookies:
        rows.append(ScoreBreakdownItem(
            "Cookies",
            f"{_plural(cookies, 'cookie')} missing flags",
            capped_deduction(cookies, COOKIE_POINTS, COOKIE_CAP),
            False,
        ))

    return rows
