from __future__ import annotations

import logging
from collections import OrderedDict

from query_console.console.schemas import ConsoleState, ConsoleView
from query_console.core.config import settings

logger = logging.getLogger(__name__)


class ResultArea:
    """Displayed state of one console page.

    Every submission takes a sequence token when it is dispatched. An outcome
    may only replace the display if no newer token was dispatched in the
    meantime, so the most recent submission wins regardless of which response
    arrives last. RENDERED, DOWNLOADED and ERRORED are resting states: the
    console is idle again and the next dispatch is accepted from any of them.
    All access happens on the event loop thread.
    """

    def __init__(self):
        self._sequence = 0
        self._view = ConsoleView(state=ConsoleState.IDLE)

    @property
    def view(self) -> ConsoleView:
        return self._view

    @property
    def state(self) -> ConsoleState:
        return self._view.state

    def dispatch(self) -> int:
        self._sequence += 1
        self._view = ConsoleView(state=ConsoleState.SUBMITTING, html=self._view.html)
        return self._sequence

    def is_current(self, token: int) -> bool:
        return token == self._sequence

    def commit(self, token: int, view: ConsoleView) -> bool:
        if not self.is_current(token):
            logger.debug("Dropping outcome %d, submission %d is newer", token, self._sequence)
            return False
        self._view = view
        return True

    def settle(self, token: int, state: ConsoleState) -> bool:
        """Record a state change that leaves the displayed fragment as it is."""
        return self.commit(token, ConsoleView(state=state, html=self._view.html))


class ResultAreaRegistry:
    def __init__(self, max_sessions: int = 1024):
        self._max_sessions = max(1, max_sessions)
        self._areas: OrderedDict[str, ResultArea] = OrderedDict()

    def get(self, session_id: str) -> ResultArea:
        area = self._areas.get(session_id)
        if area is None:
            area = ResultArea()
            self._areas[session_id] = area
            while len(self._areas) > self._max_sessions:
                evicted, _ = self._areas.popitem(last=False)
                logger.debug("Evicted console session %s", evicted)
        else:
            self._areas.move_to_end(session_id)
        return area

    def peek(self, session_id: str) -> ResultArea | None:
        return self._areas.get(session_id)

    def __len__(self) -> int:
        return len(self._areas)

    def clear(self) -> None:
        self._areas.clear()


_registry: ResultAreaRegistry | None = None


def get_result_areas() -> ResultAreaRegistry:
    global _registry
    if _registry is None:
        _registry = ResultAreaRegistry(max_sessions=settings.CONSOLE_MAX_SESSIONS)
    return _registry
