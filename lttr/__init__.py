"""
lttr. - Letter Tracker Source Package

A single-user tracker for a letter-writing side hustle: letters sent,
responses received, target companies, supplies and calendar notes,
plus the profitability metrics derived from them.

DESIGN PRINCIPLES:
1. One store, constructed once, passed to every consumer
2. Corrupt local state never crashes the app
3. User-initiated imports fail visibly and atomically
4. Every mutation is audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "lttr. Team"
