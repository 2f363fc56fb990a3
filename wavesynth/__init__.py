"""
wavesynth
=========

Periodic waveform composer with an FFT spectrum view, shipped as a static
web front-end and served by a small HTTP server.

This package provides:
- Signal synthesis and spectrum analysis (sine, square, sawtooth components)
- FastAPI REST endpoints for editing and plotting the composition
- A release asset builder producing the static front-end bundle
- A static file server with HTTPS promotion and access logging
"""

__version__ = "1.0.0"
__author__ = "wavesynth Team"
