"""Tests for the record service REST API and the HTTP record store client."""
import httpx
import pytest
from fastapi.testclient import TestClient

import mcp_wrappers.record_store.mcp_service as record_wrapper
import services.record_service.app as record_service
from mcp_wrappers.record_store.mcp_service import HttpRecordStore
from task_store.store import InMemoryRecordStore, RecordStoreError, TASKS


@pytest.fixture
def client(monkeypatch) -> TestClient:
    monkeypatch.setattr(record_service, "store", InMemoryRecordStore())
    return TestClient(record_service.app)


@pytest.fixture
def remote(client: TestClient) -> HttpRecordStore:
    return HttpRecordStore(client=client)


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_crud_over_http(client: TestClient) -> None:
    key = client.post("/collections/tasks", json={"data": {"subject": "Math"}}).json()["key"]

    assert client.get(f"/collections/tasks/{key}").json() == {"data": {"subject": "Math"}}
    assert client.get("/collections/tasks").json() == {"documents": {key: {"subject": "Math"}}}

    patched = client.patch(f"/collections/tasks/{key}", json={"data": {"completed": True}})
    assert patched.json()["data"] == {"subject": "Math", "completed": True}

    assert client.delete(f"/collections/tasks/{key}").status_code == 200
    assert client.get(f"/collections/tasks/{key}").status_code == 404


def test_patch_missing_document_is_404(client: TestClient) -> None:
    response = client.patch("/collections/tasks/nope", json={"data": {"completed": True}})

    assert response.status_code == 404


def test_query_endpoint(client: TestClient) -> None:
    client.put("/collections/tasks/t1", json={"data": {"subject": "Math", "type": "exam"}})
    client.put("/collections/tasks/t2", json={"data": {"subject": "Art", "type": "exam"}})

    response = client.post("/collections/tasks/query", json={"equals": {"subject": "Math"}})

    assert response.json() == {"documents": {"t1": {"subject": "Math", "type": "exam"}}}


def test_http_store_against_service(remote: HttpRecordStore) -> None:
    key = remote.add(TASKS, {"subject": "Math", "description": "p. 12"})
    remote.write_one(TASKS, "fixed", {"subject": "Art", "description": "Sketch"})

    assert remote.read_one(TASKS, key) == {"subject": "Math", "description": "p. 12"}
    assert remote.read_one(TASKS, "missing") is None
    assert set(remote.read_all(TASKS)) == {key, "fixed"}
    assert list(remote.query(TASKS, subject="Art")) == ["fixed"]

    remote.update(TASKS, key, {"completed": True})
    assert remote.read_one(TASKS, key)["completed"] is True

    with pytest.raises(RecordStoreError):
        remote.update(TASKS, "missing", {"completed": True})

    remote.delete(TASKS, "fixed")
    assert remote.read_one(TASKS, "fixed") is None


def test_http_store_wraps_server_errors() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
    remote = HttpRecordStore(client=httpx.Client(transport=transport, base_url="http://records"))

    with pytest.raises(RecordStoreError, match="500"):
        remote.read_all(TASKS)


def test_http_store_wraps_connection_errors() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    remote = HttpRecordStore(client=httpx.Client(transport=httpx.MockTransport(refuse), base_url="http://records"))

    with pytest.raises(RecordStoreError, match="connection refused"):
        remote.add(TASKS, {"subject": "Math"})


def test_http_store_wraps_timeouts() -> None:
    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    remote = HttpRecordStore(client=httpx.Client(transport=httpx.MockTransport(slow), base_url="http://records"))

    with pytest.raises(RecordStoreError, match="timed out"):
        remote.query(TASKS, subject="Math")


def test_wrapper_task_functions(monkeypatch, remote: HttpRecordStore) -> None:
    monkeypatch.setattr(record_wrapper, "remote_store", remote)

    created = record_wrapper._create_task("Math", "p. 12", date="2024-06-03", due_date="2024-06-04")
    record_wrapper._create_task("Art", "Sketch", type="exam", due_date="2024-06-10", topic="Colours")

    assert created.id
    assert {task.subject for task in record_wrapper._list_tasks()} == {"Math", "Art"}

    exams = record_wrapper._find_tasks(type="exam")
    assert [(task.subject, task.topic) for task in exams] == [("Art", "Colours")]
