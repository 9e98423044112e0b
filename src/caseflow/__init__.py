"""
Caseflow
========

Case lifecycle, SLA compliance, retainer accounting and client visibility
engine for an HR consulting practice.
"""

__version__ = "1.0.0"
