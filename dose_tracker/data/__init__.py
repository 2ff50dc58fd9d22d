"""Data layer for the dose tracker.

This module provides data models and the dose log store.
"""

from .models import DoseStatus, LoggedDose
from .storage import DoseLog

__all__ = [
    "DoseStatus",
    "LoggedDose",
    "DoseLog",
]
