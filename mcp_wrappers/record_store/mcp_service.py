"""
MCP wrapper for the record service.

This module provides ``HttpRecordStore``, the RecordStore implementation
that talks to the record service over HTTP, and exposes the task store tools
with the same signatures as ``task_store.server`` backed by that remote
store.
"""
from __future__ import annotations

import os
import typing as t
from contextlib import contextmanager

import httpx
from fastmcp import FastMCP

from task_store.models import Task
from task_store.server import format_tasks
from task_store.store import Document, RecordStoreError, TASKS


mcp = FastMCP("RecordStoreMCPWrapper")

# Service URL - configurable via environment variable
RECORD_SERVICE_URL = os.getenv("RECORD_SERVICE_URL", "http://localhost:8001")

# Timeout settings for fast operations (in seconds)
STANDARD_TIMEOUT = 30.0


class HttpRecordStore:
    """RecordStore backed by the record service REST API.

    :param base_url: Root URL of the record service.
    :param timeout: Per-request timeout in seconds.
    :param client: Optional pre-built client (e.g. a FastAPI TestClient);
        when given, requests are sent through it and relative to its base URL.
    """

    def __init__(
            self,
            base_url: str = RECORD_SERVICE_URL,
            timeout: float = STANDARD_TIMEOUT,
            client: t.Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @contextmanager
    def _session(self) -> t.Iterator[httpx.Client]:
        if self._client is not None:
            yield self._client
            return
        with httpx.Client(base_url=self.base_url, timeout=self.timeout) as client:
            yield client

    def _request(self, method: str, path: str, **kwargs: t.Any) -> t.Optional[httpx.Response]:
        """Send a request; returns None on 404 and raises RecordStoreError otherwise."""
        try:
            with self._session() as client:
                response = client.request(method, path, **kwargs)
                if response.status_code == 404:
                    return None
                response.raise_for_status()
                return response
        except httpx.TimeoutException:
            raise RecordStoreError(f"Record service {method} {path} timed out after {self.timeout} seconds")
        except httpx.HTTPStatusError as e:
            raise RecordStoreError(
                f"HTTP error from record service: {e.response.status_code} {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise RecordStoreError(f"Error calling record service: {str(e)}") from e

    def read_all(self, collection: str) -> dict[str, Document]:
        response = self._request("GET", f"/collections/{collection}")
        return response.json()["documents"] if response is not None else {}

    def read_one(self, collection: str, key: str) -> t.Optional[Document]:
        response = self._request("GET", f"/collections/{collection}/{key}")
        return response.json()["data"] if response is not None else None

    def write_one(self, collection: str, key: str, document: Document) -> None:
        self._request("PUT", f"/collections/{collection}/{key}", json={"data": document})

    def add(self, collection: str, document: Document) -> str:
        response = self._request("POST", f"/collections/{collection}", json={"data": document})
        if response is None:
            raise RecordStoreError(f"Record service rejected add to '{collection}'")
        return response.json()["key"]

    def update(self, collection: str, key: str, changes: Document) -> None:
        response = self._request("PATCH", f"/collections/{collection}/{key}", json={"data": changes})
        if response is None:
            raise RecordStoreError(f"No document '{key}' in collection '{collection}'")

    def delete(self, collection: str, key: str) -> None:
        self._request("DELETE", f"/collections/{collection}/{key}")

    def query(self, collection: str, **equals: t.Any) -> dict[str, Document]:
        response = self._request("POST", f"/collections/{collection}/query", json={"equals": equals})
        return response.json()["documents"] if response is not None else {}


remote_store = HttpRecordStore()


def _create_task(
        subject: str,
        description: str,
        type: str = "homework",
        date: str = "",
        due_date: str = "",
        topic: str = "",
) -> Task:
    """
    Create a task in the record service.

    This maintains the exact same signature as the local MCP tool
    but stores the task in the distributed record service.
    """
    task = Task(subject=subject, description=description, type=type, date=date, due_date=due_date, topic=topic)
    task.id = remote_store.add(TASKS, task.to_document())
    return task


def _list_tasks() -> list[Task]:
    """List all tasks stored in the record service."""
    return [Task.from_document(key, doc) for key, doc in remote_store.read_all(TASKS).items()]


def _find_tasks(subject: str = "", type: str = "", status: str = "") -> list[Task]:
    """Find tasks whose fields equal all given non-empty values."""
    equals = {k: v for k, v in {"subject": subject, "type": type, "status": status}.items() if v}
    return [Task.from_document(key, doc) for key, doc in remote_store.query(TASKS, **equals).items()]


@mcp.tool()
def create_task(
        subject: str,
        description: str,
        type: str = "homework",
        date: str = "",
        due_date: str = "",
        topic: str = "",
) -> Task:
    """Creates a task."""
    return _create_task(subject, description, type, date, due_date, topic)


@mcp.tool()
def list_tasks() -> list[Task]:
    """Lists all tasks."""
    return _list_tasks()


@mcp.tool()
def find_tasks(subject: str = "", type: str = "", status: str = "") -> list[Task]:
    """Finds tasks matching every given field."""
    return _find_tasks(subject, type, status)


@mcp.tool()
def show_tasks() -> str:
    """Displays all tasks in a formatted table."""
    return format_tasks(_list_tasks())


if __name__ == "__main__":
    mcp.run()
