"""
fractald: interactive Mandelbrot explorer

Computes escape-time fields with border tracing (Numba JIT) and colors
them with rotating palettes. Pygame provides the interactive viewer.

Quick Start:
    from fractald import FieldEngine, apply_palette
    engine = FieldEngine(320, 240)
    rgb = apply_palette(engine.compute(), engine.max_iterations, "FIRE")

Or from command line:
    fractald view
    fractald render out.png --zoom 40 --center=-0.745,0.11

Package Structure:
    - compute.py: JIT-compiled escape-time and border-tracing functions
    - engine.py: FieldEngine viewport state and ViewState snapshots
    - colormaps.py: Palette definitions and apply_palette
    - renderer.py: Background rendering with request coalescing
    - history.py, bookmarks.py, config.py: navigation and persistence
    - images.py: PNG export and thumbnails
    - app.py: Interactive viewer and event loop
    - cli.py: Command-line entry point

Controls:
    - Drag: Pan around
    - Scroll: Zoom in/out at mouse position
    - Click: Zoom 2x into the clicked point
    - R: Reset to default view
    - P: Next palette, A: toggle animation, +/-: animation speed
    - I: Next iteration cap
    - Left/Right: Back/forward through history
    - B: Bookmark current view, S: save PNG
    - ESC: Quit
"""

from .engine import FieldEngine, ViewState, render_view
from .colormaps import PALETTES, PaletteType, apply_palette, get_palette, list_palette_names
from .renderer import FieldRenderer
from .history import NavigationHistory

__version__ = "1.0.0"
__all__ = [
    "FieldEngine",
    "ViewState",
    "render_view",
    "PALETTES",
    "PaletteType",
    "apply_palette",
    "get_palette",
    "list_palette_names",
    "FieldRenderer",
    "NavigationHistory",
]
