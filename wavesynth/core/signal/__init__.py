"""
Signal Processing
=================

Periodic waveform components, waveform synthesis and FFT spectrum analysis.
"""
