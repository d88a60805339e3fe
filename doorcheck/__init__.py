# =======================================================================================
# doorcheck/__init__.py - Package Initialization
# =======================================================================================
"""
Door Check-in Service

Resolves codes scanned at the venue door to members, decides admission per
event and keeps an append-only audit trail of every decision.
"""

__version__ = "1.0.0"
__author__ = "Door Check-in Team"
