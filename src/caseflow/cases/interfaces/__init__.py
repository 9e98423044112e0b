"""
Case Interfaces Layer
=====================

Contains:
- Controllers: FastAPI route handlers for the case lifecycle
"""

from caseflow.cases.interfaces.controllers import router as cases_router

__all__ = ["cases_router"]
