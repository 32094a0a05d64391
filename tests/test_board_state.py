"""Tests for the observable board state."""
from board.state import INITIAL_STATE, BoardState, find_changed_paths


def test_find_changed_paths() -> None:
    previous = {"a": 1, "nested": {"x": 1, "y": 2}, "items": [1, 2]}
    current = {"a": 1, "nested": {"x": 1, "y": 3}, "items": [1, 2, 3], "new": True}

    assert find_changed_paths(previous, current) == ["nested.y", "items", "new"]
    assert find_changed_paths(previous, previous) == []


def test_global_subscriber_receives_changes() -> None:
    state = BoardState()
    calls = []
    state.subscribe(lambda new, old, info: calls.append((new["active_filter"], old["active_filter"], info)))

    changed = state.set_state({"active_filter": "math"}, source="filter-bar")

    assert changed == ["active_filter"]
    assert calls == [("math", "all", {"changed_paths": ["active_filter"], "source": "filter-bar"})]


def test_path_subscribers_match_parents_and_children() -> None:
    state = BoardState()
    seen = {}
    state.subscribe(lambda value, old, info: seen.setdefault("streak", (value["count"], old["count"])), path="streak")
    state.subscribe(lambda value, old, info: seen.setdefault("count", (value, old)), path="streak.count")
    state.subscribe(lambda value, old, info: seen.setdefault("tasks", value), path="tasks")

    state.set_state({"streak": {"count": 3, "target": 7, "last_active": None}})

    assert seen == {"streak": (3, 0), "count": (3, 0)}


def test_update_function_and_unsubscribe() -> None:
    state = BoardState()
    calls = []
    unsubscribe = state.subscribe(lambda value, old, info: calls.append(value), path="tasks")

    state.set_state(lambda current: {"tasks": current["tasks"] + [{"id": "t1"}]})
    unsubscribe()
    unsubscribe()
    state.set_state({"tasks": []})

    assert calls == [[{"id": "t1"}]]


def test_unchanged_update_skips_path_subscribers() -> None:
    state = BoardState()
    calls = []
    state.subscribe(lambda value, old, info: calls.append(value), path="show_archive")

    assert state.set_state({"show_archive": False}) == []
    assert calls == []


def test_failing_subscriber_does_not_stop_others() -> None:
    state = BoardState()
    calls = []

    def broken(*args) -> None:
        raise RuntimeError("render failed")

    state.subscribe(broken)
    state.subscribe(lambda *args: calls.append("global"))
    state.subscribe(broken, path="show_archive")
    state.subscribe(lambda *args: calls.append("path"), path="show_archive")
    state.subscribe(broken, event="task-completed")
    state.subscribe(lambda payload, event: calls.append((event, payload)), event="task-completed")

    state.set_state({"show_archive": True})
    state.dispatch("task-completed", {"id": "t1"})

    assert calls == ["global", "path", ("task-completed", {"id": "t1"})]


def test_get_slice_and_isolation() -> None:
    state = BoardState()

    assert state.get_slice("streak.target") == 7
    assert state.get_slice("streak.missing") is None
    assert state.get_slice() == INITIAL_STATE

    state.get_slice("streak")["count"] = 99
    assert state.get_slice("streak.count") == 0


def test_reset() -> None:
    state = BoardState()
    state.set_state({"active_filter": "math", "show_recent_only": True})

    state.reset()

    assert state.state == INITIAL_STATE


def test_json_persistence() -> None:
    state = BoardState()
    state.set_state({"active_filter": "exams", "streak": {"count": 2, "target": 7, "last_active": "2024-06-03"}})

    saved = state.to_json(keys=["active_filter", "streak"])
    restored = BoardState()
    restored.load_json(saved)

    assert restored.get_slice("active_filter") == "exams"
    assert restored.get_slice("streak.last_active") == "2024-06-03"
    assert restored.get_slice("tasks") == []


def test_load_json_ignores_bad_input() -> None:
    state = BoardState()

    state.load_json("{broken")
    state.load_json("[1, 2]")

    assert state.state == INITIAL_STATE
