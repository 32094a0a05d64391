"""
Observable quest board state.

Subscribers are held per instance: global subscribers see every change,
path subscribers see changes at, above or below a dot path, and event
subscribers receive dispatched events.
"""
from __future__ import annotations

import copy
import json
import typing as t

from loguru import logger

StateUpdate = t.Union[t.Mapping[str, t.Any], t.Callable[[dict[str, t.Any]], t.Mapping[str, t.Any]]]
Unsubscribe = t.Callable[[], None]

INITIAL_STATE: dict[str, t.Any] = {
    "students": [],
    "tasks": [],
    "active_filter": "all",
    "show_recent_only": False,
    "show_archive": False,
    "streak": {
        "count": 0,
        "target": 7,
        "last_active": None,
    },
}


def _get_path(state: t.Any, path: str) -> t.Any:
    value = state
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def find_changed_paths(previous: t.Any, current: t.Any, path: str = "") -> list[str]:
    """List the dot paths whose values differ between two states.

    Dicts are compared key by key; any difference inside a list marks the
    whole list as changed.
    """
    if isinstance(previous, dict) and isinstance(current, dict):
        changed: list[str] = []
        for key in list(previous) + [k for k in current if k not in previous]:
            child = f"{path}.{key}" if path else key
            if key not in previous or key not in current:
                changed.append(child)
            else:
                changed.extend(find_changed_paths(previous[key], current[key], child))
        return changed

    if type(previous) is not type(current) or previous != current:
        return [path]
    return []


def _path_affected(path: str, changed_paths: t.Iterable[str]) -> bool:
    return any(
        changed == path or changed.startswith(f"{path}.") or path.startswith(f"{changed}.")
        for changed in changed_paths
    )


class BoardState:
    """Board state with change notification.

    Args:
        initial: Starting state; defaults to :data:`INITIAL_STATE`.
    """

    def __init__(self, initial: t.Optional[t.Mapping[str, t.Any]] = None) -> None:
        self._initial = copy.deepcopy(dict(initial) if initial is not None else INITIAL_STATE)
        self._state: dict[str, t.Any] = copy.deepcopy(self._initial)
        self._global: list[t.Callable[..., t.Any]] = []
        self._paths: dict[str, list[t.Callable[..., t.Any]]] = {}
        self._events: dict[str, list[t.Callable[..., t.Any]]] = {}

    @property
    def state(self) -> dict[str, t.Any]:
        """A copy of the current state."""
        return copy.deepcopy(self._state)

    def get_slice(self, path: t.Optional[str] = None) -> t.Any:
        """Value at a dot path, or the whole state; None if the path is missing."""
        if not path:
            return self.state
        return copy.deepcopy(_get_path(self._state, path))

    def subscribe(
            self,
            callback: t.Callable[..., t.Any],
            path: t.Optional[str] = None,
            event: t.Optional[str] = None,
    ) -> Unsubscribe:
        """Register a callback and return a function that removes it.

        Global callbacks receive ``(new_state, previous_state, info)``, path
        callbacks ``(value, previous_value, info)`` and event callbacks
        ``(payload, event)``.
        """
        if not callable(callback):
            raise TypeError("Subscriber callback must be callable")

        if path:
            bucket = self._paths.setdefault(path, [])
        elif event:
            bucket = self._events.setdefault(event, [])
        else:
            bucket = self._global
        bucket.append(callback)

        def unsubscribe() -> None:
            if callback in bucket:
                bucket.remove(callback)

        return unsubscribe

    def set_state(self, update: StateUpdate, source: str = "unknown") -> list[str]:
        """Merge ``update`` into the top level of the state and notify subscribers.

        ``update`` may be a mapping or a function of the current state
        returning one.

        :return: The changed dot paths.
        """
        previous = self._state
        changes = update(self.state) if callable(update) else update
        current = {**previous, **copy.deepcopy(dict(changes))}

        changed_paths = find_changed_paths(previous, current)
        self._state = current
        self._notify(previous, current, changed_paths, source)
        return changed_paths

    def dispatch(self, event: str, payload: t.Any = None) -> None:
        if not event:
            raise ValueError("Event name is required")
        for callback in list(self._events.get(event, [])):
            try:
                callback(payload, event)
            except Exception as e:
                logger.error(f"Error in event subscriber for {event}: {e}")

    def reset(self) -> None:
        self.set_state(copy.deepcopy(self._initial), source="reset")

    def to_json(self, keys: t.Optional[t.Sequence[str]] = None) -> str:
        """Serialize the state, or only the top-level ``keys``."""
        data = self._state if not keys else {key: self._state[key] for key in keys if key in self._state}
        return json.dumps(data, ensure_ascii=False)

    def load_json(self, text: str) -> None:
        """Merge previously saved state; unreadable input is logged and ignored."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error(f"Error loading saved board state: {e}")
            return
        if not isinstance(data, dict):
            logger.error("Saved board state is not an object, ignoring it")
            return
        self.set_state(data, source="storage")

    def _notify(
            self,
            previous: dict[str, t.Any],
            current: dict[str, t.Any],
            changed_paths: list[str],
            source: str,
    ) -> None:
        info = {"changed_paths": changed_paths, "source": source}
        for callback in list(self._global):
            try:
                callback(copy.deepcopy(current), copy.deepcopy(previous), info)
            except Exception as e:
                logger.error(f"Error in global state subscriber: {e}")

        if not changed_paths:
            return

        for path, callbacks in list(self._paths.items()):
            if not _path_affected(path, changed_paths):
                continue
            value = copy.deepcopy(_get_path(current, path))
            previous_value = copy.deepcopy(_get_path(previous, path))
            for callback in list(callbacks):
                try:
                    callback(value, previous_value, {"path": path, "source": source})
                except Exception as e:
                    logger.error(f"Error in path subscriber for {path}: {e}")
