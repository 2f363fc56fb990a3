"""
Waveform Components
===================

Evaluation of the periodic functions behind each component kind.
Phase is expressed as a fraction of one period, so ``x = f * t + phase``
counts elapsed periods.
"""

from typing import Callable, Dict

import numpy as np

from wavesynth.models.schemas import Component, ComponentKind


def sine(t: np.ndarray, frequency: float, amplitude: float, phase: float) -> np.ndarray:
    x = frequency * t + phase
    return amplitude * np.sin(2.0 * np.pi * x)


def square(t: np.ndarray, frequency: float, amplitude: float, phase: float) -> np.ndarray:
    """+amplitude on the first half of each period, -amplitude on the second."""
    x = frequency * t + phase
    half_periods = np.floor(2.0 * x)
    return amplitude * np.where(np.mod(half_periods, 2.0) == 0.0, 1.0, -1.0)


def sawtooth(t: np.ndarray, frequency: float, amplitude: float, phase: float) -> np.ndarray:
    """Rising ramp from -amplitude to amplitude, crossing zero at whole periods."""
    x = frequency * t + phase
    return 2.0 * amplitude * (x - np.floor(x + 0.5))


PeriodicFunction = Callable[[np.ndarray, float, float, float], np.ndarray]

FUNCTIONS: Dict[ComponentKind, PeriodicFunction] = {
    ComponentKind.SINE: sine,
    ComponentKind.SQUARE: square,
    ComponentKind.SAWTOOTH: sawtooth,
}


def evaluate(component: Component, t: np.ndarray) -> np.ndarray:
    """Evaluate a component at the given instants (seconds)."""
    function = FUNCTIONS[component.kind]
    return function(t, component.frequency, component.amplitude, component.phase)
