"""
Command-line entry point.

    fractald view                    open the interactive viewer
    fractald render out.png [...]    render one frame to a PNG file
    fractald bookmarks [--delete N]  list or delete saved bookmarks

Global options choose the settings/bookmarks files and logging. Bad
arguments or unknown bookmarks are logged and give exit status 2.
"""

import argparse
import logging
import sys
import time

from .bookmarks import BookmarkStore
from .colormaps import apply_palette, list_palette_names
from .config import load_settings
from .engine import FieldEngine, ViewState
from .images import make_thumbnail, save_png
from .util.logging_setup import configure_logging, get_logger

logger = get_logger("cli")


def _parse_center(text):
    """'re,im' to a (re, im) tuple of floats."""
    try:
        real, imag = text.split(",")
        return float(real), float(imag)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"center must look like 're,im', got {text!r}") from e


def build_parser():
    """Create the argument parser with its three subcommands."""
    parser = argparse.ArgumentParser(
        prog="fractald",
        description="Explore the Mandelbrot set with animated palettes.",
    )
    parser.add_argument("--settings", default=None,
                        help="Settings file (default ~/.fractald/settings.json)")
    parser.add_argument("--bookmarks", default=None,
                        help="Bookmarks file (default ~/.fractald/bookmarks.json)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", default=None, help="Also log to this rotating file")
    commands = parser.add_subparsers(dest="cmd", required=True)

    view = commands.add_parser("view", help="Open the interactive viewer")
    view.add_argument("--width", type=int, default=None, help="Window width")
    view.add_argument("--height", type=int, default=None, help="Window height")
    view.add_argument("--scale", type=int, default=None, help="Screen pixels per computed pixel")
    view.add_argument("--bookmark", default=None, help="Start at the bookmark with this name")

    render = commands.add_parser("render", help="Render one frame to a PNG file")
    render.add_argument("output", help="PNG file to write")
    render.add_argument("--width", type=int, default=320, help="Grid width")
    render.add_argument("--height", type=int, default=240, help="Grid height")
    render.add_argument("--scale", type=int, default=1, help="Output pixels per computed pixel")
    render.add_argument("--center", type=_parse_center, default=None, help="View center as 're,im'")
    render.add_argument("--zoom", type=float, default=None, help="Zoom (vertical span is 2/zoom)")
    render.add_argument("--max-iter", type=int, default=None, help="Iteration cap")
    render.add_argument("--palette", default=None, help=", ".join(list_palette_names()))
    render.add_argument("--phase", type=float, default=0.0, help="Palette rotation phase")
    render.add_argument("--exact", action="store_true", help="Compute every pixel, no border tracing")
    render.add_argument("--bookmark", default=None, help="Render the bookmark with this name")
    render.add_argument("--save-bookmark", default=None, help="Store the rendered view under this name")

    bookmarks = commands.add_parser("bookmarks", help="List or delete bookmarks")
    bookmarks.add_argument("--delete", type=int, default=None, metavar="ID", help="Delete this bookmark")
    return parser


def _bookmarked_view(store, name):
    bookmark = store.find(name)
    if bookmark is None:
        raise ValueError(f"No bookmark named {name!r}")
    return bookmark.view


def _render(args):
    """Handle `fractald render`."""
    settings = load_settings(args.settings)
    store = BookmarkStore(args.bookmarks)

    if args.bookmark:
        base = _bookmarked_view(store, args.bookmark)
    else:
        base = ViewState(FieldEngine.DEFAULT_CENTER_X, FieldEngine.DEFAULT_CENTER_Y,
                         FieldEngine.DEFAULT_ZOOM, settings.max_iterations, settings.palette)

    center_x, center_y = args.center or (base.center_x, base.center_y)
    view = ViewState(
        center_x=center_x,
        center_y=center_y,
        zoom=base.zoom if args.zoom is None else args.zoom,
        max_iterations=base.max_iterations if args.max_iter is None else args.max_iter,
        palette=args.palette or base.palette,
    )

    engine = FieldEngine(args.width, args.height, trace_borders=not args.exact)
    engine.restore(view)

    start = time.perf_counter()
    rgb = apply_palette(engine.compute(), view.max_iterations, view.palette, args.phase)
    logger.info("Rendered %dx%d at (%r, %r) zoom %r, %d iterations, %s, in %.2fs",
                args.width, args.height, view.center_x, view.center_y, view.zoom,
                view.max_iterations, view.palette, time.perf_counter() - start)

    save_png(rgb, args.output, args.scale)
    if args.save_bookmark:
        store.add(args.save_bookmark, view, make_thumbnail(rgb))
    return 0


def _list_or_delete_bookmarks(args):
    """Handle `fractald bookmarks`."""
    store = BookmarkStore(args.bookmarks)
    if args.delete is not None:
        if not store.delete(args.delete):
            raise ValueError(f"No bookmark with id {args.delete}")
        return 0

    for bookmark in store.all():
        v = bookmark.view
        saved = time.strftime("%Y-%m-%d %H:%M", time.localtime(bookmark.timestamp))
        print(f"{bookmark.id:4d}  {bookmark.name:<30} ({v.center_x:.10g}, {v.center_y:.10g}) "
              f"zoom={v.zoom:.4g} iter={v.max_iterations} {v.palette} [{saved}]")
    return 0


def main(argv=None):
    """
    Run the command line.

    Args:
        argv: Arguments without the program name (default sys.argv[1:])

    Returns:
        Exit status: 0 on success, 2 on a bad value or unknown bookmark
    """
    args = build_parser().parse_args(argv)
    configure_logging(level=getattr(logging, args.log_level), log_file=args.log_file or None)

    try:
        if args.cmd == "view":
            # Imported here so render/bookmarks work without a display
            from .app import run
            initial = _bookmarked_view(BookmarkStore(args.bookmarks), args.bookmark) if args.bookmark else None
            run(args.width, args.height, args.scale, args.settings, args.bookmarks, initial)
            return 0
        if args.cmd == "render":
            return _render(args)
        return _list_or_delete_bookmarks(args)
    except ValueError as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
