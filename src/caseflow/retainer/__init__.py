"""
Retainer Module
===============

Bounded context for the Retainer Ledger.

Responsibilities:
- Track contracted hours per company per monthly billing period
- Consume hours as billable service-log entries are posted
- Raise utilization and overage alerts once per crossing
- Carry unused hours into the next period (capped, idempotent)
- Waive entries after the fact
"""

__version__ = "1.0.0"
