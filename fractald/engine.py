"""
Viewport state and escape-field computation for one pixel grid.

The FieldEngine owns the viewport (center, zoom, iteration cap) for a grid
of fixed size. Input handlers mutate it through pan/adjust_zoom/zoom_to/
reset; compute() turns the current viewport into an escape field.

The engine holds no threads or locks. Callers that compute off the
interactive thread should take a snapshot() and pass it to render_view(),
so later viewport changes cannot affect a computation in flight.
"""

import math
import time
from dataclasses import dataclass, replace

from .colormaps import DEFAULT_PALETTE, get_palette
from .compute import (
    MAX_FIELD_VALUE,
    compute_field_direct,
    compute_field_traced,
    pixel_to_complex,
    view_bounds,
)
from .util.logging_setup import get_logger

logger = get_logger("engine")


def _check_zoom(zoom):
    zoom = float(zoom)
    if not math.isfinite(zoom) or zoom <= 0:
        raise ValueError(f"zoom must be a positive finite number, got {zoom!r}")
    return zoom


def _check_max_iterations(max_iterations):
    if isinstance(max_iterations, bool) or int(max_iterations) != max_iterations:
        raise ValueError(f"max_iterations must be an integer, got {max_iterations!r}")
    max_iterations = int(max_iterations)
    if max_iterations <= 0:
        raise ValueError(f"max_iterations must be positive, got {max_iterations}")
    if max_iterations > MAX_FIELD_VALUE:
        raise ValueError(f"max_iterations must be at most {MAX_FIELD_VALUE}, got {max_iterations}")
    return max_iterations


def _check_factor(factor):
    factor = float(factor)
    if not math.isfinite(factor) or factor <= 0:
        raise ValueError(f"zoom factor must be a positive finite number, got {factor!r}")
    return factor


@dataclass(frozen=True)
class ViewState:
    """
    Immutable snapshot of a viewport plus the palette it was viewed with.

    This is what bookmarks, history and settings store. The palette is kept
    as its name so stale or hand-edited values survive until they are
    resolved by get_palette().
    """
    center_x: float
    center_y: float
    zoom: float
    max_iterations: int
    palette: str = DEFAULT_PALETTE.value

    def __post_init__(self):
        object.__setattr__(self, "center_x", float(self.center_x))
        object.__setattr__(self, "center_y", float(self.center_y))
        object.__setattr__(self, "zoom", _check_zoom(self.zoom))
        object.__setattr__(self, "max_iterations", _check_max_iterations(self.max_iterations))
        object.__setattr__(self, "palette", get_palette(self.palette).value)

    def with_palette(self, palette):
        return replace(self, palette=get_palette(palette).value)

    def to_dict(self):
        return {
            "center_x": self.center_x,
            "center_y": self.center_y,
            "zoom": self.zoom,
            "max_iterations": self.max_iterations,
            "palette": self.palette,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            center_x=data["center_x"],
            center_y=data["center_y"],
            zoom=data["zoom"],
            max_iterations=data["max_iterations"],
            palette=data.get("palette", DEFAULT_PALETTE.value),
        )


def render_view(state, width, height, trace_borders=True):
    """
    Compute the escape field for a ViewState on a width x height grid.

    Args:
        state: ViewState to render
        width, height: Grid size in pixels
        trace_borders: Use border tracing (fast, approximate) instead of
            computing every pixel (exact)

    Returns:
        int32 array of shape (height, width) with values in [0, max_iterations]
    """
    x_min, x_max, y_min, y_max = view_bounds(
        state.center_x, state.center_y, state.zoom, width, height
    )
    compute = compute_field_traced if trace_borders else compute_field_direct

    start = time.perf_counter()
    field = compute(x_min, x_max, y_min, y_max, width, height, state.max_iterations)
    logger.debug("Computed %sx%s field center=(%r, %r) zoom=%r iter=%s traced=%s in %.1f ms",
                 width, height, state.center_x, state.center_y, state.zoom,
                 state.max_iterations, trace_borders, (time.perf_counter() - start) * 1000.0)
    return field


class FieldEngine:
    """
    Escape-time engine for a fixed-size pixel grid.

    Usage:
        engine = FieldEngine(160, 120)
        engine.zoom_to(80, 60, 2.0)
        field = engine.compute()

    Attributes:
        width, height: Grid size in pixels (fixed per instance)
        trace_borders: Whether compute() uses border tracing by default
    """

    DEFAULT_CENTER_X = -0.5
    DEFAULT_CENTER_Y = 0.0
    DEFAULT_ZOOM = 0.6
    DEFAULT_MAX_ITER = 256

    def __init__(self, width, height, max_iterations=None, trace_borders=True):
        if int(width) <= 0 or int(height) <= 0:
            raise ValueError(f"grid size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.trace_borders = trace_borders

        self._center_x = self.DEFAULT_CENTER_X
        self._center_y = self.DEFAULT_CENTER_Y
        self._zoom = self.DEFAULT_ZOOM
        self._max_iterations = _check_max_iterations(
            self.DEFAULT_MAX_ITER if max_iterations is None else max_iterations
        )

    @property
    def center_x(self):
        return self._center_x

    @center_x.setter
    def center_x(self, value):
        self._center_x = float(value)

    @property
    def center_y(self):
        return self._center_y

    @center_y.setter
    def center_y(self, value):
        self._center_y = float(value)

    @property
    def zoom(self):
        return self._zoom

    @zoom.setter
    def zoom(self, value):
        self._zoom = _check_zoom(value)

    @property
    def max_iterations(self):
        return self._max_iterations

    @max_iterations.setter
    def max_iterations(self, value):
        self._max_iterations = _check_max_iterations(value)

    def bounds(self):
        """Current (x_min, x_max, y_min, y_max) in the complex plane."""
        return view_bounds(self._center_x, self._center_y, self._zoom,
                           self.width, self.height)

    def pixel_to_complex(self, px, py):
        """Complex-plane point under pixel (px, py) for the current viewport."""
        x_min, x_max, y_min, y_max = self.bounds()
        return pixel_to_complex(float(px), float(py), x_min, x_max, y_min, y_max,
                                self.width, self.height)

    def compute(self, trace_borders=None):
        """
        Compute the escape field for the current viewport.

        Args:
            trace_borders: Override the instance default for this call

        Returns:
            int32 array of shape (height, width)
        """
        if trace_borders is None:
            trace_borders = self.trace_borders
        return render_view(self.snapshot(), self.width, self.height, trace_borders)

    def pan(self, delta_x, delta_y):
        """
        Move the center by a fraction of the visible range.

        Args:
            delta_x, delta_y: Offsets in viewport units (1.0 = one full
                screen width/height)
        """
        x_min, x_max, y_min, y_max = self.bounds()
        self._center_x += delta_x * (x_max - x_min)
        self._center_y += delta_y * (y_max - y_min)

    def adjust_zoom(self, factor):
        """Multiply zoom by factor (>1 zooms in, <1 zooms out)."""
        self.zoom = self._zoom * _check_factor(factor)

    def zoom_to(self, px, py, factor):
        """
        Center the view on the point under pixel (px, py), then zoom.

        Pixel coordinates outside the grid are clamped to its edge, since
        they usually come from imprecise gestures.
        """
        factor = _check_factor(factor)
        px = min(max(float(px), 0.0), float(self.width - 1))
        py = min(max(float(py), 0.0), float(self.height - 1))

        new_x, new_y = self.pixel_to_complex(px, py)
        self.zoom = self._zoom * factor
        self._center_x = new_x
        self._center_y = new_y

    def reset(self):
        """Back to the default view framing the whole set."""
        self._center_x = self.DEFAULT_CENTER_X
        self._center_y = self.DEFAULT_CENTER_Y
        self._zoom = self.DEFAULT_ZOOM

    def snapshot(self, palette=DEFAULT_PALETTE):
        """Current viewport as an immutable ViewState."""
        return ViewState(self._center_x, self._center_y, self._zoom,
                         self._max_iterations, get_palette(palette).value)

    def restore(self, state):
        """Apply a saved ViewState. Its palette is left to the caller."""
        self.zoom = state.zoom
        self.max_iterations = state.max_iterations
        self._center_x = float(state.center_x)
        self._center_y = float(state.center_y)
