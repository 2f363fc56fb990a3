"""
Application State
=================

Thread-safe state store with cached plot data and JSON persistence.
"""
