"""
State Documents
===============

Parsing, validation and export of JSON/YAML state documents.
"""
