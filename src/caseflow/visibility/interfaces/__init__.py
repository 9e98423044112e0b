"""
Visibility Interfaces Layer
===========================

Two routers: staff-side share management under ``/cases`` and the public,
token-addressed client view under ``/shared``.
"""

from caseflow.visibility.interfaces.controllers import router as visibility_router
from caseflow.visibility.interfaces.controllers import shared_router

__all__ = ["shared_router", "visibility_router"]
