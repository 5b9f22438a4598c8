"""Data sharing level."""
from enum import Enum
from typing import Any, Optional

from ..api.schemas import EvidenceKind, Report
from .signals import collect_domains, count_kind

TRACKER_WEIGHT = 2
THIRDPARTY_WEIGHT = 1
COOKIE_WEIGHT = 1
LOW_THRESHOLD = 3
MEDIUM_THRESHOLD = 8


class DataSharingLevel(str, Enum):
    NONE = "None"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def parse(cls, value: Any) -> Optional["DataSharingLevel"]:
        try:
            return cls(value)
        except ValueError:
            return None


def compute_data_sharing_level(
    tracker_domains: int,
    thirdparty_domains: int,
    cookies: int
) -> DataSharingLevel:
    """Weighted index of distinct tracker/third-party domains and cookie findings."""
    index = (
        tracker_domains * TRACKER_WEIGHT
        + thirdparty_domains * THIRDPARTY_WEIGHT
        + cookies * COOKIE_WEIGHT
    )
    if index == 0:
        return DataSharingLevel.NONE
    if index <= LOW_THRESHOLD:
        return DataSharingLevel.LOW
    if index <= MEDIUM_THRESHOLD:
        return DataSharingLevel.MEDIUM
    return DataSharingLevel.HIGH


def resolve_data_sharing(report: Report) -> DataSharingLevel:
    """Server-provided level if present, otherwise computed from evidence."""
    if report.meta is not None:
        level = DataSharingLevel.parse(report.meta.data_sharing)
        if level is not None:
            return level

    return compute_data_sharing_level(
        len(collect_domains(report.evidence, EvidenceKind.TRACKER)),
        len(collect_domains(report.evidence, EvidenceKind.THIRDPARTY)),
        count_kind(report.evidence, EvidenceKind.COOKIE),
    )
