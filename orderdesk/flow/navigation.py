"""
orderdesk/flow/navigation.py

Purpose: Client-side navigation

- Tracks the current route path
- Records navigation history (push / replace)
- Notifies listeners when the path changes
"""

from typing import Callable, List

from orderdesk.core.logging import get_logger

logger = get_logger(__name__)


class Navigator:
    """In-process stand-in for the browser router."""

    def __init__(self, initial_path: str = "/"):
        self._history: List[str] = [initial_path]
        self._listeners: List[Callable[[str], None]] = []

    @property
    def current_path(self) -> str:
        return self._history[-1]

    @property
    def history(self) -> List[str]:
        return list(self._history)

    def navigate(self, path: str, replace: bool = False) -> None:
        if replace:
            self._history[-1] = path
        else:
            self._history.append(path)

        logger.debug(f"Navigated to {path}", extra={"path": path})

        for listener in list(self._listeners):
            listener(path)

    def back(self) -> str:
        if len(self._history) > 1:
            self._history.pop()
        return self.current_path

    def subscribe(self, listener: Callable[[str], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
