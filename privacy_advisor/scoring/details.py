"""Typed views over the opaque evidence ``details`` payload.

Every reader here is total: a payload of the wrong shape produces
``UnknownDetails`` or empty fields, never an exception.
"""
from dataclasses import dataclass
from typing import Any, Optional, Union

from ..api.schemas import Evidence, EvidenceKind

TLS_GRADES = ("A+", "A", "B", "C", "D", "F")


def detail_string(details: Any, key: str) -> Optional[str]:
    """``details[key]`` when details is a mapping and the value a string."""
    if isinstance(details, dict):
        value = details.get(key)
        if isinstance(value, str):
            return value
    return None


def detail_bool(details: Any, key: str) -> bool:
    if isinstance(details, dict):
        return details.get(key) is True
    return False


@dataclass(frozen=True)
class TrackerDetails:
    domain: Optional[str] = None
    fingerprinting: bool = False


@dataclass(frozen=True)
class ThirdPartyDetails:
    domain: Optional[str] = None


@dataclass(frozen=True)
class CookieDetails:
    name: Optional[str] = None
    domain: Optional[str] = None


@dataclass(frozen=True)
class HeaderDetails:
    name: Optional[str] = None


@dataclass(frozen=True)
class TlsDetails:
    grade: Optional[str] = None


@dataclass(frozen=True)
class InsecureDetails:
    url: Optional[str] = None


@dataclass(frozen=True)
class PolicyDetails:
    url: Optional[str] = None


@dataclass(frozen=True)
class FingerprintDetails:
    signal: Optional[str] = None


@dataclass(frozen=True)
class UnknownDetails:
    """Payload of an unknown kind or of an unexpected shape."""
    raw: Any = None


EvidenceDetails = Union[
    TrackerDetails,
    ThirdPartyDetails,
    CookieDetails,
    HeaderDetails,
    TlsDetails,
    InsecureDetails,
    PolicyDetails,
    FingerprintDetails,
    UnknownDetails,
]


def _normalize_grade(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    grade = value.strip().upper()
    return grade if grade in TLS_GRADES else None


def parse_details(kind: Any, raw: Any) -> EvidenceDetails:
    """Parse ``raw`` into the details variant for ``kind``."""
    kind = EvidenceKind.parse(kind)
    if kind is None or not isinstance(raw, dict):
        return UnknownDetails(raw)

    if kind is EvidenceKind.TRACKER:
        return TrackerDetails(detail_string(raw, "domain"), detail_bool(raw, "fingerprinting"))
    if kind is EvidenceKind.THIRDPARTY:
        return ThirdPartyDetails(detail_string(raw, "domain"))
    if kind is EvidenceKind.COOKIE:
        return CookieDetails(detail_string(raw, "name"), detail_string(raw, "domain"))
    if kind is EvidenceKind.HEADER:
        return HeaderDetails(detail_string(raw, "name"))
    if kind is EvidenceKind.TLS:
        return TlsDetails(_normalize_grade(detail_string(raw, "grade")))
    if kind in (EvidenceKind.INSECURE, EvidenceKind.MIXED_CONTENT):
        return InsecureDetails(detail_string(raw, "url"))
    if kind is EvidenceKind.POLICY:
        return PolicyDetails(detail_string(raw, "url"))
    if kind is EvidenceKind.FINGERPRINT:
        return FingerprintDetails(detail_string(raw, "signal") or detail_string(raw, "type"))
    return UnknownDetails(raw)


def evidence_details(item: Evidence) -> EvidenceDetails:
    return parse_details(item.kind, item.details)
