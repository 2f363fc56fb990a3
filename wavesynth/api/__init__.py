"""
API Layer
=========

FastAPI application serving the REST API and the static front-end.
"""
