"""
Back/forward navigation through previously rendered views.
"""

from .util.logging_setup import get_logger

logger = get_logger("history")


class NavigationHistory:
    """
    Linear history of ViewStates with a cursor, like a browser.

    Adding a view after going back drops everything ahead of the cursor.
    A view equal to the current one is not added twice. The oldest entry
    is dropped once max_entries is exceeded.
    """

    MAX_ENTRIES = 100

    def __init__(self, max_entries=None):
        self.max_entries = max_entries or self.MAX_ENTRIES
        self._entries = []
        self._index = -1
        self._navigating = False

    def __len__(self):
        return len(self._entries)

    @property
    def current(self):
        if 0 <= self._index < len(self._entries):
            return self._entries[self._index]
        return None

    @property
    def can_go_back(self):
        return self._index > 0

    @property
    def can_go_forward(self):
        return self._index < len(self._entries) - 1

    def add(self, state):
        """
        Record a newly rendered view.

        The first add after back()/forward() is the render of the view we
        navigated to, so it is swallowed instead of truncating the history.

        Returns:
            True if the state was appended
        """
        if self._navigating:
            self._navigating = False
            return False

        if self.current == state:
            return False

        del self._entries[self._index + 1:]
        self._entries.append(state)
        self._index = len(self._entries) - 1

        if len(self._entries) > self.max_entries:
            self._entries.pop(0)
            self._index -= 1
        return True

    def back(self):
        """Step back and return that view, or None at the start."""
        if not self.can_go_back:
            return None
        self._index -= 1
        self._navigating = True
        logger.debug("History back to %s/%s", self._index + 1, len(self._entries))
        return self._entries[self._index]

    def forward(self):
        """Step forward and return that view, or None at the end."""
        if not self.can_go_forward:
            return None
        self._index += 1
        self._navigating = True
        logger.debug("History forward to %s/%s", self._index + 1, len(self._entries))
        return self._entries[self._index]

    def finish_navigation(self):
        """Clear the pending-navigation flag if the navigated view was never rendered."""
        self._navigating = False

    def clear(self):
        self._entries.clear()
        self._index = -1
        self._navigating = False
