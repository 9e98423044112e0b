"""
Activity Log Module
===================

Bounded context for the append-only case activity trail.

Responsibilities:
- Record status changes, assignment changes, notes, visibility changes
- Serve ordered timelines, optionally filtered to client-visible entries
"""

__version__ = "1.0.0"
