# ==============================================
# TOPIC 2: FIELD DETECTION
# ==============================================
#
# This package discovers which fields a record has, whether
# they hold values, and summarises them for callers deciding
# what to clone.
#
# Modules:
# --------
# - field_presence.py   → Data classes for detection results
# - field_detector.py   → Walk the schema for a record, cache per record
#
# ==============================================

from .field_presence import (
    FieldPresenceInfo,
    DetectedField,
    DetectedGroup,
    FieldStatistics,
    SelectionReport,
)
from .field_detector import FieldDetector

__all__ = [
    "FieldPresenceInfo",
    "DetectedField",
    "DetectedGroup",
    "FieldStatistics",
    "SelectionReport",
    "FieldDetector",
]
