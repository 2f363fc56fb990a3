"""
API Routes
==========

Versioned REST endpoints mounted under /api/v1.
"""
