"""
Client Visibility Module
========================

Bounded context for the Client Visibility Gateway.

Responsibilities:
- Issue, regenerate and revoke share tokens (one valid token per case)
- Resolve a token to a read-only, allow-listed case timeline
- Collect client feedback on closed cases
"""

__version__ = "1.0.0"
