"""Active tab bookkeeping for one document page.

The URL decides the tab on load and navigation; a tab click decides it
afterwards and hands back the query to push into the URL. Pushing that
query comes back through :meth:`TabSynchronizer.on_navigation` as the same
value, possibly after other pushes, and is recognised and ignored.
"""
from __future__ import annotations

from collections import deque
from enum import Enum

TAB_PARAM = "tab"


class Tab(str, Enum):
    PENDING = "pendientes"
    APPROVED = "aprobados"


def parse_tab(value: str | None) -> Tab:
    if not value:
        return Tab.PENDING
    try:
        return Tab(value.strip().lower())
    except ValueError:
        return Tab.PENDING


class TabSynchronizer:
    def __init__(self, url_value: str | None = None) -> None:
        self._seen = url_value
        # values handed to the router by select() that have not come back yet
        self._pushed: deque[str] = deque()
        self._active = parse_tab(url_value)

    @property
    def active(self) -> Tab:
        return self._active

    def on_navigation(self, url_value: str | None) -> Tab:
        if url_value == self._seen:
            return self._active
        self._seen = url_value
        if url_value is not None and url_value in self._pushed:
            # echo of our own push; pushes the router skipped are dropped too
            while self._pushed.popleft() != url_value:
                pass
            return self._active
        self._pushed.clear()
        self._active = parse_tab(url_value)
        return self._active

    def select(self, tab: Tab | str) -> dict[str, str]:
        """Apply a user tab click and return the query parameters for the URL."""

        self._active = Tab(tab)
        self._pushed.append(self._active.value)
        return self.query_params()

    def query_params(self) -> dict[str, str]:
        return {TAB_PARAM: self._active.value}
