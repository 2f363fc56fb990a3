"""
Waveform Synthesis
==================

Sums components into a sampled waveform and assembles plot data.
"""

from typing import Sequence

import numpy as np

from wavesynth.core.signal.components import evaluate
from wavesynth.core.signal.spectrum import compute_spectrum, peak_frequency
from wavesynth.models.schemas import Component, PlotData, SpectrumMarker, FMAX_SCALE


def sample_times(sample_rate: float, n_samples: int) -> np.ndarray:
    return np.arange(n_samples, dtype=np.float64) / sample_rate


def synthesize(components: Sequence[Component], sample_rate: float, n_samples: int) -> np.ndarray:
    """
    Sample the sum of all components.

    Args:
        components: Components to add together
        sample_rate: Samples per second
        n_samples: Number of samples, sample i is taken at i / sample_rate

    Returns:
        Array of ``n_samples`` values, all zero when there are no components
    """
    if sample_rate <= 0:
        raise ValueError(f"Sample rate must be positive, got {sample_rate}")
    if n_samples < 0:
        raise ValueError(f"Sample count must not be negative, got {n_samples}")

    t = sample_times(sample_rate, n_samples)
    samples = np.zeros(n_samples, dtype=np.float64)
    for component in components:
        samples += evaluate(component, t)
    return samples


def compute_plot_data(
    components: Sequence[Component], sample_rate: float, n_samples: int
) -> PlotData:
    """Synthesize the waveform and its spectrum for plotting."""
    samples = synthesize(components, sample_rate, n_samples)
    t = sample_times(sample_rate, n_samples)
    frequencies, magnitudes = compute_spectrum(samples, sample_rate)

    return PlotData(
        waveform=list(zip(t.tolist(), samples.tolist())),
        spectrum=list(zip(frequencies.tolist(), magnitudes.tolist())),
        markers=[
            SpectrumMarker(
                name=c.name,
                frequency=c.frequency,
                above_nyquist=c.is_above_nyquist(sample_rate),
            )
            for c in components
        ],
        sample_rate=sample_rate,
        n_samples=n_samples,
        fmax=sample_rate / FMAX_SCALE,
        resolution=sample_rate / n_samples if n_samples else None,
        peak_frequency=peak_frequency(frequencies, magnitudes) if len(magnitudes) > 1 else None,
    )
