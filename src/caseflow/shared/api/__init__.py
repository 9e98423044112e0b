"""
Shared API
==========

Middleware and exception handlers used by every router.
"""
