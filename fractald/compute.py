"""
Escape-time computation functions using Numba JIT compilation.

This module contains the performance-critical functions behind the
FieldEngine. They handle:
- Mapping pixel coordinates to the complex plane
- Per-point escape time with cardioid/bulb shortcuts and smooth coloring
- Whole-frame computation, either pixel by pixel or with recursive
  rectangle subdivision and border tracing

Escape fields are int32 arrays of shape (height, width). A value equal to
max_iter means the point never escaped. The value 0 is never produced for a
computed pixel and marks "not yet filled" while tracing.
"""

import math

import numpy as np
from numba import jit


LOG2 = math.log(2.0)
ESCAPE_RADIUS_SQ = 4.0
UNFILLED = 0
MAX_FIELD_VALUE = int(np.iinfo(np.int32).max)


@jit(nopython=True, cache=True)
def view_bounds(center_x, center_y, zoom, width, height):
    """
    Complex-plane bounds of a viewport.

    The vertical span is 2/zoom and the horizontal span follows the aspect
    ratio of the pixel grid, so pixels stay square.

    Returns:
        (x_min, x_max, y_min, y_max)
    """
    aspect = width / height
    range_y = 2.0 / zoom
    range_x = range_y * aspect
    return (center_x - range_x / 2.0, center_x + range_x / 2.0,
            center_y - range_y / 2.0, center_y + range_y / 2.0)


@jit(nopython=True, cache=True)
def pixel_to_complex(px, py, x_min, x_max, y_min, y_max, width, height):
    """Map pixel (px, py) to its point (x0, y0) in the complex plane."""
    x0 = x_min + (px / width) * (x_max - x_min)
    y0 = y_min + (py / height) * (y_max - y_min)
    return x0, y0


@jit(nopython=True, cache=True)
def in_main_cardioid(x0, y0):
    """Closed-form membership test for the main cardioid."""
    xq = x0 - 0.25
    q = xq * xq + y0 * y0
    return q * (q + xq) <= 0.25 * y0 * y0


@jit(nopython=True, cache=True)
def in_period2_bulb(x0, y0):
    """Closed-form membership test for the period-2 bulb around -1."""
    return (x0 + 1.0) * (x0 + 1.0) + y0 * y0 <= 0.0625


@jit(nopython=True, cache=True)
def escape_time(x0, y0, max_iter):
    """
    Compute the smoothed escape time of c = x0 + i*y0.

    Points inside the main cardioid or the period-2 bulb return max_iter
    without iterating. Escaped points get the normalized iteration count
    truncated to an integer; if the logarithms are not finite the raw
    iteration count is used instead.

    Args:
        x0, y0: Real and imaginary parts of c
        max_iter: Iteration cap

    Returns:
        Integer in [1, max_iter]. max_iter means the point did not escape.
    """
    if in_main_cardioid(x0, y0):
        return max_iter
    if in_period2_bulb(x0, y0):
        return max_iter

    x = 0.0
    y = 0.0
    iteration = 0
    while x * x + y * y <= ESCAPE_RADIUS_SQ and iteration < max_iter:
        x_temp = x * x - y * y + x0
        y = 2.0 * x * y + y0
        x = x_temp
        iteration += 1

    if iteration >= max_iter:
        return max_iter

    log_zn = math.log(x * x + y * y) / 2.0
    if math.isfinite(log_zn) and log_zn > 0.0:
        nu = math.log(log_zn / LOG2) / LOG2
        if math.isfinite(nu):
            iteration = int(iteration + 1 - nu)

    # 0 is the unfilled sentinel for border tracing
    if iteration < 1:
        iteration = 1
    return iteration


@jit(nopython=True, cache=True)
def _fill_pixel(field, px, py, x_min, x_max, y_min, y_max, width, height, max_iter):
    """Compute one pixel if it is still unfilled and return its value."""
    if field[py, px] == UNFILLED:
        x0, y0 = pixel_to_complex(px, py, x_min, x_max, y_min, y_max, width, height)
        field[py, px] = escape_time(x0, y0, max_iter)
    return field[py, px]


@jit(nopython=True, cache=True)
def compute_field_direct(x_min, x_max, y_min, y_max, width, height, max_iter):
    """
    Compute every pixel of the field independently.

    Exact but slower than compute_field_traced. Uses the same pixel mapping,
    so both agree wherever the traced path did not fill a region.

    Returns:
        int32 array of shape (height, width)
    """
    field = np.zeros((height, width), dtype=np.int32)
    for py in range(height):
        for px in range(width):
            _fill_pixel(field, px, py, x_min, x_max, y_min, y_max, width, height, max_iter)
    return field


@jit(nopython=True, cache=True)
def compute_field_traced(x_min, x_max, y_min, y_max, width, height, max_iter):
    """
    Compute the field with recursive rectangle subdivision and border tracing.

    Starting from the whole grid, each rectangle has its border computed.
    If every border pixel has the same value the interior is filled with it
    without iterating; otherwise the rectangle is split into four quadrants
    at its midpoints. Rectangles 2 pixels wide or high are computed directly.

    An island of different values fully enclosed by a uniform border is
    painted over. This is the accepted cost of the speedup.

    The recursion is driven by an explicit stack. Quadrants share their
    middle row/column; shared pixels are only computed once.

    Returns:
        int32 array of shape (height, width)
    """
    field = np.zeros((height, width), dtype=np.int32)
    stack = [(0, 0, width - 1, height - 1)]

    while len(stack) > 0:
        x1, y1, x2, y2 = stack.pop()
        rect_w = x2 - x1 + 1
        rect_h = y2 - y1 + 1

        if rect_w <= 2 or rect_h <= 2:
            for py in range(y1, y2 + 1):
                for px in range(x1, x2 + 1):
                    _fill_pixel(field, px, py, x_min, x_max, y_min, y_max,
                                width, height, max_iter)
            continue

        border_value = _fill_pixel(field, x1, y1, x_min, x_max, y_min, y_max,
                                   width, height, max_iter)
        all_same = True

        # Top and bottom rows
        for px in range(x1, x2 + 1):
            top = _fill_pixel(field, px, y1, x_min, x_max, y_min, y_max,
                              width, height, max_iter)
            bottom = _fill_pixel(field, px, y2, x_min, x_max, y_min, y_max,
                                 width, height, max_iter)
            if top != border_value or bottom != border_value:
                all_same = False

        # Left and right columns, corners already done
        for py in range(y1 + 1, y2):
            left = _fill_pixel(field, x1, py, x_min, x_max, y_min, y_max,
                               width, height, max_iter)
            right = _fill_pixel(field, x2, py, x_min, x_max, y_min, y_max,
                                width, height, max_iter)
            if left != border_value or right != border_value:
                all_same = False

        if all_same:
            for py in range(y1 + 1, y2):
                for px in range(x1 + 1, x2):
                    field[py, px] = border_value
            continue

        mid_x = (x1 + x2) // 2
        mid_y = (y1 + y2) // 2
        # Pushed in reverse so the top-left quadrant is processed first
        stack.append((mid_x, mid_y, x2, y2))
        stack.append((x1, mid_y, mid_x, y2))
        stack.append((mid_x, y1, x2, mid_y))
        stack.append((x1, y1, mid_x, mid_y))

    return field


def warmup_jit():
    """
    Warm up JIT compilation with a tiny grid.

    Call this once at startup to pre-compile the Numba functions,
    avoiding a delay on the first real frame.
    """
    x_min, x_max, y_min, y_max = view_bounds(-0.5, 0.0, 0.6, 8, 8)
    compute_field_traced(x_min, x_max, y_min, y_max, 8, 8, 16)
    compute_field_direct(x_min, x_max, y_min, y_max, 8, 8, 16)
