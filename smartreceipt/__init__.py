"""
SmartReceipt - Source Package

A single-user expense tracker with AI-assisted receipt scanning,
designed to run entirely on the user's own device.

DESIGN PRINCIPLES:
1. AI suggests → Human confirms → System saves
2. Every write is followed by a full reload (no optimistic patching)
3. Aggregations and filters are pure functions of the snapshot
4. Failures are surfaced to the user, never swallowed
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "SmartReceipt Team"
