"""
Retainer Interfaces Layer
=========================
"""

from caseflow.retainer.interfaces.controllers import router as retainer_router

__all__ = ["retainer_router"]
