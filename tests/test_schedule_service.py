"""Tests for the schedule service REST API."""
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

import services.schedule_service.app as schedule_service
from quest_planner.schedule import DEFAULT_SCHEDULE_CONFIG
from task_store.store import ConfigStore, InMemoryRecordStore, RecordStoreError, SCHEDULE_CONFIG


class OfflineStore(InMemoryRecordStore):
    def read_one(self, collection, key):
        raise RecordStoreError("record service unreachable")


@pytest.fixture
def client(monkeypatch) -> TestClient:
    store = InMemoryRecordStore({SCHEDULE_CONFIG: DEFAULT_SCHEDULE_CONFIG})
    monkeypatch.setattr(schedule_service, "config_store", ConfigStore(store))
    return TestClient(schedule_service.app)


def test_resolve_from_stored_schedule(client: TestClient) -> None:
    response = client.post("/due-date/resolve", json={"subject": "Matematiikka", "creation_date": "2024-06-03"})

    assert response.status_code == 200
    assert response.json() == {
        "subject": "Math",
        "dueDate": "2024-06-07",
        "calculationMethod": "schedule",
        "nextClassInfo": "Friday, 4 days after assignment",
    }


def test_resolve_unknown_subject(client: TestClient) -> None:
    body = client.post("/due-date/resolve", json={"subject": "Chemistry", "creation_date": "03.06.2024"}).json()

    assert body["dueDate"] == "2024-06-10"
    assert body["calculationMethod"] == "default"


def test_resolve_bad_date(client: TestClient) -> None:
    body = client.post("/due-date/resolve", json={"subject": "Math", "creation_date": "someday"}).json()

    assert body["calculationMethod"] == "error"
    assert body["dueDate"] == (date.today() + timedelta(days=7)).isoformat()


def test_resolve_rejects_non_positive_interval(client: TestClient) -> None:
    response = client.post(
        "/due-date/resolve",
        json={"subject": "Math", "creation_date": "2024-06-03", "default_interval": 0},
    )

    assert response.status_code == 422


def test_resolve_survives_offline_store(monkeypatch, client: TestClient) -> None:
    monkeypatch.setattr(schedule_service, "config_store", ConfigStore(OfflineStore()))

    body = client.post("/due-date/resolve", json={"subject": "Math", "creation_date": "2024-06-03"}).json()

    assert body["calculationMethod"] == "default"
    assert body["dueDate"] == "2024-06-10"


def test_get_schedule(client: TestClient) -> None:
    assert client.get("/schedule/Math").json() == {"classDays": ["Monday", "Friday"], "defaultDueInterval": 7}
    assert client.get("/schedule/Chemistry").status_code == 404


def test_get_schedule_offline_is_502(monkeypatch, client: TestClient) -> None:
    monkeypatch.setattr(schedule_service, "config_store", ConfigStore(OfflineStore()))

    assert client.get("/schedule/Math").status_code == 502


def test_put_schedule_then_resolve(client: TestClient) -> None:
    response = client.put("/schedule/Music", json={"classDays": ["thursday", "Tuesday"], "defaultDueInterval": 5})

    assert response.json() == {"classDays": ["Thursday", "Tuesday"], "defaultDueInterval": 5}

    body = client.post("/due-date/resolve", json={"subject": "Music", "creation_date": "2024-06-04"}).json()
    assert body["dueDate"] == "2024-06-06"


def test_put_schedule_rejects_non_positive_interval(client: TestClient) -> None:
    response = client.put("/schedule/Music", json={"classDays": ["Tuesday"], "defaultDueInterval": 0})

    assert response.status_code == 422


def test_next_class(client: TestClient) -> None:
    body = client.get("/next-class/History", params={"today": "2024-06-03"}).json()

    assert body == {
        "subject": "History",
        "found": True,
        "daysUntil": 1,
        "weekday": "Tuesday",
        "label": "Tomorrow",
    }
