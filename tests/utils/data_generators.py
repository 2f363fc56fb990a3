"""
Test Data Generators
====================

Generate state documents for testing scenarios.
"""

from typing import Any, Dict, List

__all__ = ["StateDataGenerator"]


class StateDataGenerator:
    """Generate state document data."""

    @staticmethod
    def component(kind: str = "sine", **fields: Any) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": kind}
        data.update(fields)
        return data

    @staticmethod
    def generate_two_tones() -> Dict[str, Any]:
        """Two sine tones well below the Nyquist limit."""
        return {
            "version": "1",
            "sample_rate": 1000.0,
            "n_samples": 1000,
            "components": [
                {"kind": "sine", "name": "Low", "frequency": 50.0, "amplitude": 1.0, "phase": 0.0},
                {"kind": "sine", "name": "High", "frequency": 200.0, "amplitude": 0.5, "phase": 0.25},
            ],
        }

    @staticmethod
    def generate_mixed(count: int = 3) -> Dict[str, Any]:
        """Cycle through all kinds at increasing frequencies."""
        kinds: List[str] = ["sine", "square", "sawtooth"]
        return {
            "sample_rate": 3000.0,
            "n_samples": 1000,
            "components": [
                {"kind": kinds[i % len(kinds)], "frequency": 10.0 * (i + 1)}
                for i in range(count)
            ],
        }

    @staticmethod
    def generate_above_nyquist() -> Dict[str, Any]:
        """A component too fast for the sample rate."""
        return {
            "sample_rate": 1000.0,
            "n_samples": 500,
            "components": [{"kind": "square", "frequency": 450.0}],
        }
