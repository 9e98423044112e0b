"""
Infrastructure Layer
=====================

Low-level technical concerns:
- Clock (injectable time source)
- Logging setup
"""
