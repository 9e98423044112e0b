"""
Infrastructure
==============

Cross-context technical infrastructure (database engine and session lifecycle).
"""
