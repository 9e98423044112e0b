"""
Shared Kernel Module
====================

This module contains shared infrastructure used across all bounded contexts
(cases, activity, SLA, retainer, alerts, visibility).

Architecture Pattern: Modular Monolith
- Each module is a bounded context
- Shared kernel contains only generic infrastructure (clock, logging, HTTP middleware)

DO NOT add case, SLA or retainer business logic to the shared kernel.
"""

__version__ = "1.0.0"
