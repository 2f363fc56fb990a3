"""
Test Suite
==========

Test suite matching the wavesynth/ package structure.

Test Categories:
- unit: Unit tests for individual components
- integration: API and static server tests through the FastAPI test client
- deployment: Container image build and run tests (need a Docker daemon)
"""
