"""
Interactive viewer for the Mandelbrot set.

Contains the FractalApp class which handles:
- Window setup and main loop
- User input (drag to pan, scroll/click to zoom, keyboard)
- Debounced background rendering and palette animation
- History, bookmarks and settings persistence

Each logical pixel of the escape field is drawn as a scale x scale block.
"""

import time

import pygame

from .bookmarks import BookmarkStore
from .colormaps import apply_palette, get_palette, next_palette
from .compute import view_bounds, warmup_jit
from .config import ITERATION_OPTIONS, load_settings, save_settings
from .engine import FieldEngine
from .history import NavigationHistory
from .images import make_thumbnail, save_png
from .renderer import FieldRenderer
from .util.logging_setup import get_logger

logger = get_logger("app")


class FractalApp:
    """
    Main application class for the viewer.

    Handles the pygame window, event loop, and coordinates between the
    engine, the background renderer and the persistence stores.
    """

    # Default configuration
    DEFAULT_WIDTH = 960
    DEFAULT_HEIGHT = 720
    DEFAULT_SCALE = 4
    RENDER_DELAY_MS = 150  # Quiet time after the last input before rendering
    CLICK_TOLERANCE = 4    # Pixels of mouse travel still counted as a click

    # Zoom factors
    SCROLL_ZOOM_FACTOR = 1.18
    CLICK_ZOOM_FACTOR = 2.0

    # Phase advance per second at animation speed 1.0
    PHASE_PER_SECOND = 1.5

    def __init__(self, width=None, height=None, scale=None, settings_path=None,
                 bookmarks_path=None, initial_view=None):
        """
        Initialize the application.

        Args:
            width, height: Window size in screen pixels
            scale: Screen pixels per computed pixel
            settings_path: Settings JSON file (None for the default location)
            bookmarks_path: Bookmarks JSON file (None for the default location)
            initial_view: ViewState to open instead of the saved one
        """
        self.scale = max(1, scale or self.DEFAULT_SCALE)
        self.width = width or self.DEFAULT_WIDTH
        self.height = height or self.DEFAULT_HEIGHT
        grid_w = max(1, self.width // self.scale)
        grid_h = max(1, self.height // self.scale)

        self.settings_path = settings_path
        self.settings = load_settings(settings_path)
        self.bookmarks = BookmarkStore(bookmarks_path)
        self.history = NavigationHistory()

        self.engine = FieldEngine(grid_w, grid_h, self.settings.max_iterations)
        if initial_view is not None:
            self.engine.restore(initial_view)
            self.settings.palette = initial_view.palette
        elif self.settings.restore_last_view:
            self.engine.restore(self.settings.last_view())
        self.palette = get_palette(self.settings.palette)

        # Pygame state (initialized in run())
        self.screen = None
        self.clock = None
        self.renderer = None

        # Display state
        self.field = None
        self.field_state = None
        self.field_generation = 0
        self.rgb = None
        self.surface = None
        self.phase = 0.0
        self.recolor = False

        # Input state
        self.dragging = False
        self.drag_origin = None
        self.drag_moved = False

        # Render timing
        self.last_action_time = 0
        self.pending_render = False

        self.running = False

    def run(self):
        """Run the application main loop."""
        self._init_pygame()
        self._warmup_and_initial_render()

        self.running = True
        try:
            while self.running:
                current_time = pygame.time.get_ticks()
                dt = self.clock.tick(60) / 1000.0

                self._handle_events(current_time)
                self._check_render_result()
                self._maybe_start_render(current_time)
                self._advance_animation(dt)
                self._draw()
        finally:
            self._save_settings()
            pygame.quit()

    def _init_pygame(self):
        """Initialize pygame and create window."""
        pygame.init()
        self.screen = pygame.display.set_mode((self.width, self.height), pygame.DOUBLEBUF)
        self.clock = pygame.time.Clock()
        self.renderer = FieldRenderer(self.engine.width, self.engine.height)

    def _warmup_and_initial_render(self):
        """Warm up JIT and render the first frame synchronously."""
        pygame.display.set_caption("Compiling (first run only)...")
        warmup_jit()

        state = self.engine.snapshot(self.palette)
        self._accept_field(self.engine.compute(), state, 0)
        self._update_caption()

    def _handle_events(self, current_time):
        """Process all pending pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.MOUSEWHEEL:
                self._handle_zoom(event, current_time)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self.dragging = True
                self.drag_origin = event.pos
                self.drag_moved = False
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self._handle_mouse_up(event, current_time)
            elif event.type == pygame.MOUSEMOTION:
                self._handle_mouse_motion(event, current_time)
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event, current_time)

    def _request_render(self, current_time):
        self.last_action_time = current_time
        self.pending_render = True

    def _view_changed(self, current_time):
        """User input moved the view, so the next render is a new history entry."""
        self.history.finish_navigation()
        self._request_render(current_time)

    def _grid_pos(self, pos):
        """Window position to (fractional) grid pixel."""
        return pos[0] / self.scale, pos[1] / self.scale

    def _handle_zoom(self, event, current_time):
        """Zoom in/out keeping the point under the cursor fixed."""
        px, py = self._grid_pos(pygame.mouse.get_pos())
        before = self.engine.pixel_to_complex(px, py)

        factor = self.SCROLL_ZOOM_FACTOR if event.y > 0 else 1.0 / self.SCROLL_ZOOM_FACTOR
        self.engine.adjust_zoom(factor)

        after = self.engine.pixel_to_complex(px, py)
        x_min, x_max, y_min, y_max = self.engine.bounds()
        self.engine.pan((before[0] - after[0]) / (x_max - x_min),
                        (before[1] - after[1]) / (y_max - y_min))
        self._view_changed(current_time)

    def _handle_mouse_motion(self, event, current_time):
        """Drag to pan."""
        if not self.dragging:
            return
        ox, oy = self.drag_origin
        if abs(event.pos[0] - ox) + abs(event.pos[1] - oy) > self.CLICK_TOLERANCE:
            self.drag_moved = True
        if self.drag_moved:
            dx, dy = event.rel
            self.engine.pan(-dx / self.width, -dy / self.height)
            self._view_changed(current_time)

    def _handle_mouse_up(self, event, current_time):
        """A click without dragging zooms into the clicked point."""
        was_click = self.dragging and not self.drag_moved
        self.dragging = False
        if was_click:
            px, py = self._grid_pos(event.pos)
            self.engine.zoom_to(px, py, self.CLICK_ZOOM_FACTOR)
        self._view_changed(current_time)

    def _handle_key(self, event, current_time):
        """Handle keyboard input."""
        if event.key == pygame.K_ESCAPE:
            self.running = False
        elif event.key == pygame.K_r:
            self.engine.reset()
            self._view_changed(current_time)
        elif event.key == pygame.K_p:
            self.palette = next_palette(self.palette)
            self.settings.palette = self.palette.value
            self.recolor = True
        elif event.key == pygame.K_a:
            self.settings.animated = not self.settings.animated
        elif event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_MINUS):
            step = 0.1 if event.key != pygame.K_MINUS else -0.1
            self.settings.animation_speed = min(2.0, max(0.1, self.settings.animation_speed + step))
        elif event.key == pygame.K_i:
            self._cycle_iterations(current_time)
        elif event.key in (pygame.K_LEFT, pygame.K_BACKSPACE):
            self._navigate(self.history.back(), current_time)
        elif event.key == pygame.K_RIGHT:
            self._navigate(self.history.forward(), current_time)
        elif event.key == pygame.K_b:
            self._save_bookmark()
        elif event.key == pygame.K_s:
            self._save_image()
        self._update_caption()

    def _cycle_iterations(self, current_time):
        """Step to the next iteration cap from the preset list."""
        current = self.engine.max_iterations
        larger = [n for n in ITERATION_OPTIONS if n > current]
        self.engine.max_iterations = larger[0] if larger else ITERATION_OPTIONS[0]
        self.settings.max_iterations = self.engine.max_iterations
        self._view_changed(current_time)

    def _navigate(self, state, current_time):
        if state is None:
            return
        self.engine.restore(state)
        self.palette = get_palette(state.palette)
        self.recolor = True
        self._request_render(current_time)

    def _save_bookmark(self):
        if self.rgb is None:
            return
        name = time.strftime("View %Y-%m-%d %H:%M:%S")
        self.bookmarks.add(name, self.field_state.with_palette(self.palette),
                           make_thumbnail(self.rgb))
        pygame.display.set_caption(f"Bookmarked: {name}")

    def _save_image(self):
        if self.rgb is None:
            return
        filename = time.strftime("fractald_%Y%m%d_%H%M%S.png")
        save_png(self.rgb, filename, self.scale)

    def _save_settings(self):
        if self.field_state is not None:
            self.settings.remember_view(self.field_state)
        try:
            save_settings(self.settings, self.settings_path)
        except OSError:
            logger.exception("Could not save settings")

    def _accept_field(self, field, state, generation):
        self.field = field
        self.field_state = state
        self.field_generation = generation
        self.history.add(state.with_palette(self.palette))
        self.settings.remember_view(state)
        self.recolor = True

    def _check_render_result(self):
        """Pick up a finished background render, ignoring stale ones."""
        field, state, generation = self.renderer.get_result()
        if field is None or generation < self.field_generation:
            return
        self._accept_field(field, state, generation)
        if not self.renderer.is_stale(generation):
            self._update_caption()

    def _maybe_start_render(self, current_time):
        """Start a render once input has been quiet for RENDER_DELAY_MS."""
        if self.pending_render and not self.dragging and \
                current_time - self.last_action_time > self.RENDER_DELAY_MS:
            self.pending_render = False
            self.renderer.compute_async(self.engine.snapshot(self.palette))
            pygame.display.set_caption("Computing...")

    def _advance_animation(self, dt):
        if self.settings.animated:
            self.phase += self.settings.animation_speed * self.PHASE_PER_SECOND * dt
            self.recolor = True

    def _draw(self):
        """Draw the current frame."""
        if self.recolor and self.field is not None:
            self.rgb = apply_palette(self.field, self.field_state.max_iterations,
                                     self.palette, self.phase)
            self.surface = pygame.surfarray.make_surface(self.rgb.swapaxes(0, 1))
            self.recolor = False

        self.screen.fill((0, 0, 0))
        if self.surface is not None:
            self._blit_field_surface()
        pygame.display.flip()

    def _blit_field_surface(self):
        """
        Blit the last field to the screen, transformed for the current view.

        Until the next render arrives the old frame is shifted and scaled so
        that pan and zoom feel immediate.
        """
        surf_w = self.surface.get_width()
        surf_h = self.surface.get_height()
        s = self.field_state
        bx_min, bx_max, by_min, by_max = view_bounds(s.center_x, s.center_y, s.zoom, surf_w, surf_h)
        x_min, x_max, y_min, y_max = self.engine.bounds()

        # Current view in pixel coordinates of the rendered surface
        src_left = (x_min - bx_min) / (bx_max - bx_min) * surf_w
        src_right = (x_max - bx_min) / (bx_max - bx_min) * surf_w
        src_top = (y_min - by_min) / (by_max - by_min) * surf_h
        src_bottom = (y_max - by_min) / (by_max - by_min) * surf_h

        view_w = src_right - src_left
        view_h = src_bottom - src_top
        if view_w <= 0 or view_h <= 0:
            return

        left = max(0.0, min(surf_w, src_left))
        right = max(0.0, min(surf_w, src_right))
        top = max(0.0, min(surf_h, src_top))
        bottom = max(0.0, min(surf_h, src_bottom))
        if int(right - left) <= 0 or int(bottom - top) <= 0:
            return

        dst_left = (left - src_left) / view_w * self.width
        dst_right = self.width - (src_right - right) / view_w * self.width
        dst_top = (top - src_top) / view_h * self.height
        dst_bottom = self.height - (src_bottom - bottom) / view_h * self.height
        if int(dst_right - dst_left) <= 0 or int(dst_bottom - dst_top) <= 0:
            return

        try:
            sub = self.surface.subsurface(pygame.Rect(int(left), int(top),
                                                      int(right - left), int(bottom - top)))
            scaled = pygame.transform.scale(sub, (int(dst_right - dst_left), int(dst_bottom - dst_top)))
            self.screen.blit(scaled, (int(dst_left), int(dst_top)))
        except ValueError:
            pass  # Subsurface out of bounds, skip this frame

    def _update_caption(self):
        s = self.engine
        anim = f"anim x{self.settings.animation_speed:.1f}" if self.settings.animated else "static"
        pygame.display.set_caption(
            f"fractald - ({s.center_x:.6g}, {s.center_y:.6g}) zoom {s.zoom:.3g} - "
            f"{s.max_iterations} iter - {self.palette.value} - {anim}"
        )


def run(width=None, height=None, scale=None, settings_path=None, bookmarks_path=None,
        initial_view=None):
    """
    Run the viewer.

    Args:
        width, height: Window size (default 960x720)
        scale: Screen pixels per computed pixel (default 4)
        settings_path, bookmarks_path: Override storage locations
        initial_view: ViewState to open
    """
    app = FractalApp(width, height, scale, settings_path, bookmarks_path, initial_view)
    try:
        app.run()
    except KeyboardInterrupt:
        pass
