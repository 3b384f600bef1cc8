import logging
import time

from backend.services.grid_state import GridState

logger = logging.getLogger(__name__)


class GridStateCache:
    """Saved grid states keyed by view id, so a re-opened view resumes where it was.

    ``max_age`` is in seconds; 0 disables expiry.
    """

    def __init__(self, max_age: float = 0):
        self.max_age = max_age
        self._states: dict[str, GridState] = {}

    def save_state(self, key: str, state: GridState) -> None:
        state.timestamp = time.time()
        self._states[key] = state

    def get_state(self, key: str) -> GridState | None:
        state = self._states.get(key)
        if state is None:
            return None

        if not isinstance(state.data_by_route, dict) or not isinstance(
            state.scroll_top, (int, float)
        ):
            logger.warning("Invalid cached grid state for %s, clearing", key)
            self._states.pop(key, None)
            return None

        if self.max_age > 0 and time.time() - state.timestamp > self.max_age:
            self._states.pop(key, None)
            return None

        return state

    def clear_state(self, key: str) -> None:
        self._states.pop(key, None)

    def clear_all(self) -> None:
        self._states.clear()

    def has_state(self, key: str) -> bool:
        return self.get_state(key) is not None

    def get_stats(self) -> dict:
        return {"size": len(self._states), "keys": list(self._states)}
