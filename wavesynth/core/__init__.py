"""
Core Business Logic
===================

Components:
- signal: Waveform synthesis, spectrum analysis, caching and compute history
- state: Application state store and persistence
- presets: JSON/YAML state document parsing and validation
- rendering: Plot image rendering
- build: Static front-end asset builder
"""
