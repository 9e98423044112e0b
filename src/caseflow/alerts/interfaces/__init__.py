"""
Alert Interfaces Layer
======================
"""

from caseflow.alerts.interfaces.controllers import router as alerts_router

__all__ = ["alerts_router"]
