"""
Expense Tracker - Source Package

Persistence, sync and statistics core for a personal expense tracker.
Expenses and categories live either on the device (local mode) or in a
hosted spreadsheet backend scoped per user (remote mode).

DESIGN PRINCIPLES:
1. Storage backend is swappable - repositories never branch on mode
2. The backend confirms before memory changes (except optimistic category edits)
3. Loads never crash the caller - failures are logged and read as "no data"
4. Sync is manual, one-shot and never merges
5. Every mutation is logged
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
