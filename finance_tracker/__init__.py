"""
FB finance - Source Package

A personal finance tracker: accounts, income/expense transactions,
savings goals, dashboards and AI-generated saving tips.

DESIGN PRINCIPLES:
1. Every account's data lives in its own blob
2. Totals are derived, never stored
3. Every mutation is written through immediately
4. Failures are terminal for one action, never for the app
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FB finance Team"
