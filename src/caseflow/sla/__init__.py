"""
SLA Module
==========

Bounded context for SLA policy resolution and compliance evaluation.

Responsibilities:
- Resolve the response/resolution/escalation budgets that apply to a case
- Evaluate both SLA clocks and raise breach/escalation alerts once
- Sweep open cases in the background so idle cases still breach on time
- Hot-reload global default policies from YAML
"""

__version__ = "1.0.0"
