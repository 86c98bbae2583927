"""
FinTrack - Source Package

A personal finance tracker: income/expense transactions tagged with
user-defined categories, per-category spending goals, monthly views
and CSV export, persisted as a single local snapshot.

DESIGN PRINCIPLES:
1. One store owns the state; derived views are pure functions of it
2. Every mutation is persisted immediately
3. Bad input is reported, never silently turned into a number
4. Every operation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FinTrack Team"
