"""
FastAPI service for quest board records.

This service exposes the document store as REST endpoints: whole
collections, single documents by key, and equality queries. Storage is the
in-memory store, so records live as long as the process.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from loguru import logger

from services.shared.models import (
    AddDocumentResponse,
    CollectionResponse,
    DocumentBody,
    QueryRequest,
)
from task_store.store import InMemoryRecordStore, RecordStoreError


store = InMemoryRecordStore()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize resources on startup and cleanup on shutdown."""
    logger.info("Record service starting with in-memory store")
    yield


app = FastAPI(
    title="Record Service",
    description="REST API for quest board document collections",
    version="1.0.0",
    lifespan=lifespan,
)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "service": "record-service"}


@app.get("/collections/{collection}", response_model=CollectionResponse)
async def read_all(collection: str) -> CollectionResponse:
    """Return every document of a collection."""
    return CollectionResponse(documents=store.read_all(collection))


@app.get("/collections/{collection}/{key}", response_model=DocumentBody)
async def read_one(collection: str, key: str) -> DocumentBody:
    """Return one document, or 404 if it does not exist."""
    document = store.read_one(collection, key)
    if document is None:
        raise HTTPException(status_code=404, detail=f"No document '{key}' in '{collection}'")
    return DocumentBody(data=document)


@app.put("/collections/{collection}/{key}", response_model=DocumentBody)
async def write_one(collection: str, key: str, body: DocumentBody) -> DocumentBody:
    """Create or replace a document under a known key."""
    try:
        store.write_one(collection, key, body.data)
        return body
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error writing document: {str(e)}")


@app.post("/collections/{collection}", response_model=AddDocumentResponse)
async def add(collection: str, body: DocumentBody) -> AddDocumentResponse:
    """Add a document under a generated key."""
    try:
        key = store.add(collection, body.data)
        logger.debug(f"Added document {key} to {collection}")
        return AddDocumentResponse(key=key)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error adding document: {str(e)}")


@app.patch("/collections/{collection}/{key}", response_model=DocumentBody)
async def update(collection: str, key: str, body: DocumentBody) -> DocumentBody:
    """Merge fields into an existing document."""
    try:
        store.update(collection, key, body.data)
    except RecordStoreError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return DocumentBody(data=store.read_one(collection, key) or {})


@app.delete("/collections/{collection}/{key}")
async def delete(collection: str, key: str):
    """Delete a document; deleting a missing document is not an error."""
    store.delete(collection, key)
    return {"deleted": key}


@app.post("/collections/{collection}/query", response_model=CollectionResponse)
async def query(collection: str, request: QueryRequest) -> CollectionResponse:
    """Return documents whose fields equal every given value."""
    return CollectionResponse(documents=store.query(collection, **request.equals))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
