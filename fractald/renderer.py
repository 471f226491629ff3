"""
Background escape-field rendering with request coalescing.

The FieldRenderer class handles:
- Background (async) computation so the UI stays responsive
- Coalescing bursts of requests: only the newest pending view is computed
- Tagging results with a generation number so stale frames can be dropped
- Keeping the last good field when a computation fails

Coloring is not done here. The escape field is cached by the caller and
re-colored every animation tick with apply_palette.
"""

import threading

from .engine import render_view
from .util.logging_setup import get_logger

logger = get_logger("renderer")


class FieldRenderer:
    """
    Runs render_view on a single worker thread, at most one at a time.

    Usage:
        renderer = FieldRenderer(160, 120)
        renderer.compute_async(engine.snapshot())

        # In your game loop:
        field, state, generation = renderer.get_result()
        if field is not None:
            display(apply_palette(field, state.max_iterations, palette, phase))

    Attributes:
        width, height: Grid size in pixels
        trace_borders: Whether border tracing is used
    """

    def __init__(self, width, height, trace_borders=True):
        self.width = width
        self.height = height
        self.trace_borders = trace_borders

        # Async computation state
        self.computing = False
        self.result_ready = False
        self.pending = None          # (generation, state) waiting to be computed
        self.generation = 0          # Last generation handed out
        self.lock = threading.Lock()
        self.idle = threading.Condition(self.lock)

        # Last successful result
        self.field = None
        self.field_state = None
        self.field_generation = 0

    def compute_async(self, state):
        """
        Queue a computation for the given ViewState.

        If the worker is busy, this replaces any request still waiting, so
        a burst of pan/zoom events costs at most one extra frame.

        Args:
            state: ViewState snapshot to render

        Returns:
            The generation number of this request
        """
        with self.lock:
            self.generation += 1
            generation = self.generation
            if self.pending is not None:
                logger.debug("Dropping pending request %s for %s", self.pending[0], generation)
            self.pending = (generation, state)
            if not self.computing:
                self.computing = True
                thread = threading.Thread(target=self._compute_thread, name="fractald-render")
                thread.daemon = True
                thread.start()
        return generation

    def _compute_thread(self):
        """Background thread: compute pending requests until none are left."""
        while True:
            with self.lock:
                request = self.pending
                self.pending = None
                if request is None:
                    self.computing = False
                    self.idle.notify_all()
                    break

            generation, state = request
            try:
                field = render_view(state, self.width, self.height, self.trace_borders)
            except Exception:
                logger.exception("Render of generation %s failed; keeping previous field", generation)
                continue

            with self.lock:
                self.field = field
                self.field_state = state
                self.field_generation = generation
                self.result_ready = True

    def get_result(self):
        """
        Get the latest render result if a new one is ready.

        Returns:
            Tuple of (field, state, generation) if a new result is ready,
            (None, None, None) otherwise.
        """
        with self.lock:
            if self.result_ready:
                self.result_ready = False
                return self.field, self.field_state, self.field_generation
        return None, None, None

    def is_stale(self, generation):
        """True if a newer request than `generation` has been made."""
        with self.lock:
            return generation < self.generation

    def wait(self, timeout=None):
        """
        Block until the worker has no more work.

        Returns:
            True if idle, False if the timeout expired first
        """
        with self.lock:
            return self.idle.wait_for(lambda: not self.computing, timeout=timeout)
