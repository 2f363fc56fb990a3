"""
Plot Image Generator
====================

Pillow-based line plots of waveform and spectrum data, with optional vertical
markers at component frequencies.
"""

from typing import Any, Iterable, Optional, Sequence, Tuple
import io

from PIL import Image, ImageDraw

from wavesynth.config.logging import get_logger
from wavesynth.models.schemas import SpectrumMarker

logger = get_logger(__name__)

MIN_SIZE = 16
MAX_SIZE = 4000
MARGIN = 8

BACKGROUND = (255, 255, 255)
FRAME = (200, 200, 200)
LINE = (31, 119, 180)
MARKER = (120, 120, 120)
MARKER_WARN = (214, 39, 40)


class PlotRenderError(Exception):
    """Exception raised when plot image rendering fails."""

    pass


def _bounds(values: Sequence[float], extra: Iterable[float] = ()) -> Tuple[float, float]:
    candidates = list(values) + list(extra)
    if not candidates:
        return 0.0, 1.0
    lo, hi = min(candidates), max(candidates)
    if hi == lo:
        # Flat data still gets a visible band around it
        pad = abs(lo) * 0.1 or 1.0
        return lo - pad, hi + pad
    return lo, hi


def render_plot_png(
    points: Sequence[Tuple[float, float]],
    width: int,
    height: int,
    markers: Sequence[SpectrumMarker] = (),
    x_range: Optional[Tuple[float, float]] = None,
) -> bytes:
    """
    Render a line plot to PNG bytes.

    Args:
        points: (x, y) pairs in drawing order
        width: Image width in pixels
        height: Image height in pixels
        markers: Vertical lines drawn at marker frequencies
        x_range: Fixed x-axis range; derived from the data when omitted

    Returns:
        PNG image bytes

    Raises:
        PlotRenderError: If the image size is out of range or drawing fails
    """
    if not (MIN_SIZE <= width <= MAX_SIZE and MIN_SIZE <= height <= MAX_SIZE):
        raise PlotRenderError(
            f"Plot size {width}x{height} outside {MIN_SIZE}..{MAX_SIZE} pixels"
        )

    log: Any = logger.bind(width=width, height=height, points=len(points))

    try:
        image = Image.new("RGB", (width, height), BACKGROUND)
        draw = ImageDraw.Draw(image)

        # Small images shrink the margin so the frame keeps a drawable interior
        margin = min(MARGIN, (min(width, height) - 2) // 4)
        left, top = margin, margin
        right, bottom = width - margin - 1, height - margin - 1
        draw.rectangle([left, top, right, bottom], outline=FRAME)

        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        x_lo, x_hi = x_range if x_range is not None else _bounds(xs)
        if x_hi <= x_lo:
            x_hi = x_lo + 1.0
        y_lo, y_hi = _bounds(ys, extra=(0.0,))

        def to_pixel(x: float, y: float) -> Tuple[float, float]:
            px = left + (x - x_lo) / (x_hi - x_lo) * (right - left)
            py = bottom - (y - y_lo) / (y_hi - y_lo) * (bottom - top)
            return px, py

        for marker in markers:
            if x_lo <= marker.frequency <= x_hi:
                mx, _ = to_pixel(marker.frequency, y_lo)
                color = MARKER_WARN if marker.above_nyquist else MARKER
                draw.line([(mx, top), (mx, bottom)], fill=color, width=1)

        if len(points) == 1:
            px, py = to_pixel(*points[0])
            draw.ellipse([px - 1, py - 1, px + 1, py + 1], fill=LINE)
        elif points:
            draw.line([to_pixel(x, y) for x, y in points], fill=LINE, width=2)

        output = io.BytesIO()
        image.save(output, format="PNG", optimize=True)
    except (OSError, ValueError) as e:
        log.error("Plot rendering failed", error=str(e))
        raise PlotRenderError(f"Plot rendering failed: {e}")

    png_bytes = output.getvalue()
    log.debug("Plot rendered", file_size=len(png_bytes))
    return png_bytes
