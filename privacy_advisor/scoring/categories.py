"""Category grouping and severity filtering of evidence."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Tuple

from ..api.schemas import Evidence, EvidenceKind

TRACKING = "Tracking & Privacy"
SECURITY = "Security"
COMPLIANCE = "Compliance"
OTHER = "Other"

# Display order of buckets.
CATEGORY_ORDER = (TRACKING, SECURITY, COMPLIANCE, OTHER)

KIND_CATEGORIES: Dict[EvidenceKind, str] = {
    EvidenceKind.TRACKER: TRACKING,
    EvidenceKind.THIRDPARTY: TRACKING,
    EvidenceKind.COOKIE: TRACKING,
    EvidenceKind.FINGERPRINT: TRACKING,
    EvidenceKind.HEADER: SECURITY,
    EvidenceKind.INSECURE: SECURITY,
    EvidenceKind.TLS: SECURITY,
    EvidenceKind.MIXED_CONTENT: SECURITY,
    EvidenceKind.POLICY: COMPLIANCE,
}

# Checked in order against the lower-cased title when the kind is unknown.
TITLE_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("track", TRACKING),
    ("analytics", TRACKING),
    ("cookie", TRACKING),
    ("fingerprint", TRACKING),
    ("pixel", TRACKING),
    ("third-party", TRACKING),
    ("third party", TRACKING),
    ("tls", SECURITY),
    ("ssl", SECURITY),
    ("https", SECURITY),
    ("certificate", SECURITY),
    ("header", SECURITY),
    ("mixed content", SECURITY),
    ("insecure", SECURITY),
    ("policy", COMPLIANCE),
    ("consent", COMPLIANCE),
    ("gdpr", COMPLIANCE),
)

EVIDENCE_LABELS: Dict[EvidenceKind, str] = {
    EvidenceKind.TRACKER: "Tracker",
    EvidenceKind.COOKIE: "Cookie",
    EvidenceKind.HEADER: "Header",
    EvidenceKind.INSECURE: "Insecure",
    EvidenceKind.THIRDPARTY: "Third-Party",
    EvidenceKind.POLICY: "Policy",
    EvidenceKind.TLS: "TLS",
    EvidenceKind.FINGERPRINT: "Fingerprint",
    EvidenceKind.MIXED_CONTENT: "Mixed Content",
}

HIGH_SEVERITY = 4
MEDIUM_SEVERITY = 3


class SeverityFilter(str, Enum):
    ALL = "all"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def parse(cls, value: object) -> "SeverityFilter":
        try:
            return cls(value)
        except ValueError:
            return cls.ALL

    def matches(self, severity: int) -> bool:
        if self is SeverityFilter.HIGH:
            return severity >= HIGH_SEVERITY
        if self is SeverityFilter.MEDIUM:
            return severity == MEDIUM_SEVERITY
        if self is SeverityFilter.LOW:
            return severity < MEDIUM_SEVERITY
        return True


def display_kind(kind: str) -> str:
    """Human label for an evidence kind; unknown kinds fall back to a title-cased name."""
    known = EvidenceKind.parse(kind)
    if known is not None:
        return EVIDENCE_LABELS[known]
    label = str(kind or "").replace("-", " ").replace("_", " ").strip()
    return label.title() if label else "Unknown"


def categorize(item: Evidence) -> str:
    """Bucket for one evidence item: kind first, then title keywords, then Other."""
    known = item.known_kind
    if known is not None:
        return KIND_CATEGORIES[known]

    title = item.title.lower() if isinstance(item.title, str) else ""
    for keyword, category in TITLE_KEYWORDS:
        if keyword in title:
            return category
    return OTHER


@dataclass
class CategoryGroup:
    """Evidence of one bucket with its severity split."""
    name: str
    items: List[Evidence] = field(default_factory=list)

    @property
    def high(self) -> int:
        return sum(1 for item in self.items if item.severity >= HIGH_SEVERITY)

    @property
    def medium(self) -> int:
        return sum(1 for item in self.items if item.severity == MEDIUM_SEVERITY)

    @property
    def low(self) -> int:
        return sum(1 for item in self.items if item.severity < MEDIUM_SEVERITY)

    @property
    def expanded(self) -> bool:
        """Open by default only when the bucket holds a high severity finding."""
        return self.high > 0

    def __len__(self) -> int:
        return len(self.items)


def group_by_category(evidence: Iterable[Evidence]) -> List[CategoryGroup]:
    """Non-empty groups in ``CATEGORY_ORDER``, items kept in report order."""
    groups: Dict[str, CategoryGroup] = {name: CategoryGroup(name) for name in CATEGORY_ORDER}
    for item in evidence:
        groups[categorize(item)].items.append(item)
    return [groups[name] for name in CATEGORY_ORDER if groups[name].items]


def filter_by_severity(evidence: Iterable[Evidence], severity_filter: SeverityFilter) -> List[Evidence]:
    severity_filter = SeverityFilter.parse(severity_filter)
    return [item for item in evidence if severity_filter.matches(item.severity)]
