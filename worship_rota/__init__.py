"""
Worship rota: assigns volunteer musicians and vocalists to service role slots.
Greedy, deterministic autofill with per-member targets, availability,
weekly lead-vocalist uniqueness and sing-and-play rules.

Single-workbook workflow: the roster workbook is the source of truth.
"""

__version__ = "1.0.0"
