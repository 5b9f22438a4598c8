"""Persistence layer for scan history."""
from .history import ScanHistory, ScanHistoryEntry, HISTORY_LIMIT

__all__ = ["ScanHistory", "ScanHistoryEntry", "HISTORY_LIMIT"]
