"""
Expense Tracker - Source Package

A personal expense tracker that runs in the browser.

DESIGN PRINCIPLES:
1. One store owns the collection; everything else derives from it
2. Storage problems degrade to safe defaults, never crash the page
3. Nothing in storage is repaired; malformed records are dropped
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
