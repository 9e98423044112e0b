"""
Cases Module
============

Bounded context for the case lifecycle (the Case Store).

Responsibilities:
- Create cases and enforce the status state machine
- Optimistic versioning on every caller-initiated write
- Record the response marker that stops the SLA response clock
"""

__version__ = "1.0.0"
