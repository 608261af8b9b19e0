"""
Visit Services Module
Records page visits against the shared counter in the cache store
"""

from .visit_service import VisitService, format_greeting, GREETING

__all__ = [
    "VisitService",
    "format_greeting",
    "GREETING"
]
