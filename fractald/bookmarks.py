"""
Named bookmarks of views, stored as one JSON file.

Each bookmark holds a ViewState, an optional PNG thumbnail (base64 in the
file) and the time it was saved. Listing is newest first.
"""

import base64
import binascii
import json
import os
import time
from dataclasses import dataclass, field
from typing import List, Optional

from .config import DEFAULT_BOOKMARKS_PATH
from .engine import ViewState
from .util.logging_setup import get_logger

logger = get_logger("bookmarks")


@dataclass
class Bookmark:
    name: str
    view: ViewState
    thumbnail: Optional[bytes] = None
    timestamp: float = field(default_factory=time.time)
    id: int = 0

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "view": self.view.to_dict(),
            "thumbnail": base64.b64encode(self.thumbnail).decode("ascii") if self.thumbnail else None,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data):
        thumbnail = data.get("thumbnail")
        return cls(
            id=int(data["id"]),
            name=str(data["name"]),
            view=ViewState.from_dict(data["view"]),
            thumbnail=base64.b64decode(thumbnail) if thumbnail else None,
            timestamp=float(data.get("timestamp", 0.0)),
        )


class BookmarkStore:
    """
    JSON-file backed bookmark collection.

    The whole file is read on construction and rewritten on every change.
    Entries that cannot be parsed are skipped with a warning.
    """

    def __init__(self, path=None):
        self.path = path or DEFAULT_BOOKMARKS_PATH
        self._bookmarks = {}
        self._load()

    def _load(self):
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            return
        except (OSError, ValueError) as e:
            logger.warning("Could not read bookmarks %s: %s; starting empty", self.path, e)
            return

        if not isinstance(raw, list):
            logger.warning("Bookmarks file %s is not a list; starting empty", self.path)
            return
        for entry in raw:
            try:
                bookmark = Bookmark.from_dict(entry)
            except (KeyError, TypeError, ValueError, binascii.Error) as e:
                logger.warning("Skipping bad bookmark entry %r: %s", entry, e)
                continue
            self._bookmarks[bookmark.id] = bookmark
        logger.info("Loaded %s bookmarks from %s", len(self._bookmarks), self.path)

    def _save(self):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump([b.to_dict() for b in self._bookmarks.values()], f, indent=2)
        os.replace(tmp, self.path)

    def __len__(self):
        return len(self._bookmarks)

    def all(self) -> List[Bookmark]:
        return sorted(self._bookmarks.values(), key=lambda b: (b.timestamp, b.id), reverse=True)

    def get(self, bookmark_id) -> Optional[Bookmark]:
        return self._bookmarks.get(bookmark_id)

    def find(self, name) -> Optional[Bookmark]:
        for bookmark in self.all():
            if bookmark.name == name:
                return bookmark
        return None

    def add(self, name, view, thumbnail=None) -> Bookmark:
        """Save a new bookmark and return it with its assigned id."""
        next_id = max(self._bookmarks, default=0) + 1
        bookmark = Bookmark(name=name, view=view, thumbnail=thumbnail, id=next_id)
        self._bookmarks[next_id] = bookmark
        self._save()
        logger.info("Saved bookmark %s %r", next_id, name)
        return bookmark

    def delete(self, bookmark_id):
        """Remove a bookmark. Returns False if it did not exist."""
        if self._bookmarks.pop(bookmark_id, None) is None:
            return False
        self._save()
        logger.info("Deleted bookmark %s", bookmark_id)
        return True
