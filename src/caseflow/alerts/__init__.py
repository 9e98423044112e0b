"""
Alerts Module
=============

Bounded context for the Escalation/Alert Dispatcher.

Responsibilities:
- Persist SLA and retainer alerts exactly once per dedup key
- Deliver notifications after the originating transaction commits
- Redeliver undelivered alerts from the background sweep
"""

__version__ = "1.0.0"
