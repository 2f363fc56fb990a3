"""
Data Models
===========

Pydantic models for signal components, application state and API payloads.
"""
