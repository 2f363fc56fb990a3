"""
Spectrum Analysis
=================

Single-shot FFT magnitude spectrum of a sampled waveform.
"""

from typing import Tuple

import numpy as np

from wavesynth.models.schemas import FMAX_SCALE


def compute_spectrum(samples: np.ndarray, sample_rate: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute the magnitude spectrum of ``samples``.

    Bin i sits at ``i * sample_rate / n`` and holds ``|X_i| / n``. Bins are
    kept while their frequency stays below ``sample_rate / FMAX_SCALE``.

    Returns:
        Tuple of (frequencies, magnitudes); both empty for an empty input
    """
    n = len(samples)
    if n == 0:
        empty = np.zeros(0, dtype=np.float64)
        return empty, empty

    resolution = sample_rate / n
    fmax = sample_rate / FMAX_SCALE

    frequencies = np.arange(n, dtype=np.float64) * resolution
    kept = int(np.count_nonzero(frequencies < fmax))

    magnitudes = np.abs(np.fft.fft(samples)) / n
    return frequencies[:kept], magnitudes[:kept]


def peak_frequency(frequencies: np.ndarray, magnitudes: np.ndarray) -> float:
    """Frequency of the strongest non-DC bin, 0.0 when there is none."""
    if len(magnitudes) < 2:
        return 0.0
    return float(frequencies[1 + int(np.argmax(magnitudes[1:]))])
