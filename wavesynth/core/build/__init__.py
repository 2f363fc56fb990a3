"""
Asset Builder
=============

Renders the static web front-end into a deployable asset directory.
"""
