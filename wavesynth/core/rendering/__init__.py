"""
Rendering
=========

Plot image rendering with Pillow.
"""
