"""Signals read out of evidence: domains, counts and TLS status."""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from ..api.schemas import Evidence, EvidenceKind
from .details import ThirdPartyDetails, TlsDetails, TrackerDetails, evidence_details

WEAK_TLS_GRADES = ("C", "D", "F")
UNRATED = "unrated"


class TlsState(str, Enum):
    VALID = "Valid"
    WEAK = "Weak"
    INVALID = "Invalid"


@dataclass(frozen=True)
class TlsStatus:
    status: TlsState
    grade: Optional[str] = None
    qualifier: Optional[str] = None

    @property
    def display(self) -> str:
        if self.qualifier:
            return f"{self.status.value} ({self.qualifier})"
        return self.status.value


def of_kind(evidence: Iterable[Evidence], *kinds: EvidenceKind) -> List[Evidence]:
    wanted = {k.value for k in kinds}
    return [item for item in evidence if item.kind in wanted]


def count_kind(evidence: Iterable[Evidence], *kinds: EvidenceKind) -> int:
    return len(of_kind(evidence, *kinds))


def collect_domains(evidence: Iterable[Evidence], kind: EvidenceKind) -> List[str]:
    """Distinct ``details.domain`` values of one kind, in first-seen order."""
    if kind not in (EvidenceKind.TRACKER, EvidenceKind.THIRDPARTY):
        return []
    domains: List[str] = []
    for item in of_kind(evidence, kind):
        details = evidence_details(item)
        domain = details.domain if isinstance(details, (TrackerDetails, ThirdPartyDetails)) else None
        if domain and domain not in domains:
            domains.append(domain)
    return domains


def tls_grade(evidence: Iterable[Evidence]) -> Optional[str]:
    """Grade of the first TLS evidence item, if it carries a recognised one."""
    for item in of_kind(evidence, EvidenceKind.TLS):
        details = evidence_details(item)
        if isinstance(details, TlsDetails):
            return details.grade
        return None
    return None


def tls_status(evidence: Iterable[Evidence]) -> TlsStatus:
    evidence = list(evidence)
    grade = tls_grade(evidence)

    if count_kind(evidence, EvidenceKind.INSECURE) > 0:
        return TlsStatus(TlsState.INVALID, grade)
    if grade in WEAK_TLS_GRADES:
        return TlsStatus(TlsState.WEAK, grade)
    if not of_kind(evidence, EvidenceKind.TLS):
        return TlsStatus(TlsState.VALID, None, UNRATED)
    return TlsStatus(TlsState.VALID, grade)
