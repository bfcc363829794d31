import json

import pytest
from fastapi.testclient import TestClient

from conftest import FakeImageProcessor, FakeLLMService
from intelliread.api.dependencies import get_ingestion_pipeline, get_rag_pipeline, get_repository
from intelliread.db import DocumentRepository, MemoryStore
from intelliread.exceptions import LLMServiceError
from intelliread.main import app
from intelliread.services import IngestionPipeline
from intelliread.services.rag_pipeline import RAGPipeline
from intelliread.services.vector_store import VectorStore


@pytest.fixture
def client(repository, pipeline, llm_service):
    rag = RAGPipeline(repository, VectorStore(), llm_service)
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_ingestion_pipeline] = lambda: pipeline
    app.dependency_overrides[get_rag_pipeline] = lambda: rag
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def upload(client, data, filename="report.pdf", path="/api/documents/upload"):
    return client.post(path, files={"file": (filename, data, "application/pdf")})


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"
    assert client.get("/health").json()["status"] == "healthy"


def test_upload_and_inspect_document(client, report_pdf):
    response = upload(client, report_pdf)

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "indexed"
    assert payload["title"] == "Annual Report"
    assert payload["total_pages"] == 3
    assert payload["chunk_count"] > 0
    document_id = payload["document_id"]

    listed = client.get("/api/documents").json()
    assert [d["id"] for d in listed] == [document_id]

    document = client.get(f"/api/documents/{document_id}").json()
    assert document["status"] == "indexed"

    sections = client.get(f"/api/documents/{document_id}/sections").json()
    assert any(s["title"] == "Visual Content (Page 2)" for s in sections)

    assert client.get(f"/api/documents/{document_id}/tables").status_code == 200

    results = client.post(f"/api/documents/{document_id}/search",
                          json={"query": "revenue growth", "top_k": 2}).json()
    assert 0 < len(results) <= 2
    assert results[0]["score"] >= results[-1]["score"]


def test_upload_rejects_non_pdf_and_broken_files(client):
    assert upload(client, b"hello", filename="notes.txt").status_code == 400

    response = upload(client, b"not really a pdf", filename="broken.pdf")
    assert response.status_code == 400
    documents = client.get("/api/documents").json()
    assert documents[0]["status"] == "error"


def test_streaming_upload_emits_progress_then_done(client, report_pdf):
    response = upload(client, report_pdf, path="/api/documents/upload/stream")

    assert response.status_code == 200
    events = [
        json.loads(line[len("data: "):])
        for line in response.text.splitlines()
        if line.startswith("data: ")
    ]
    assert events[0]["stage"] == "uploading"
    assert events[-1]["type"] == "done"
    assert events[-2]["stage"] == "indexed"
    assert events[-1]["document_id"] == events[0]["document_id"]


def test_streaming_upload_reports_error(client):
    response = upload(client, b"garbage", path="/api/documents/upload/stream")

    events = [json.loads(line[6:]) for line in response.text.splitlines() if line.startswith("data: ")]
    assert events[-1]["type"] == "error"
    assert events[-1]["document_id"]


def test_unknown_document_is_404(client):
    assert client.get("/api/documents/doc_missing").status_code == 404
    assert client.get("/api/documents/doc_missing/sections").status_code == 404
    assert client.delete("/api/documents/doc_missing").status_code == 404
    response = client.post("/api/chat/query", json={"query": "Hi?", "document_id": "doc_missing"})
    assert response.status_code == 404


def test_chat_query_and_history(client, report_pdf, llm_service):
    document_id = upload(client, report_pdf).json()["document_id"]

    response = client.post("/api/chat/query", json={
        "query": "How did revenue grow?",
        "document_id": document_id,
        "provider": "groq",
    })

    assert response.status_code == 200
    assert response.json()["answer"] == llm_service.answer
    assert response.json()["citations"]

    history = client.get(f"/api/chat/{document_id}/history", params={"provider": "groq"}).json()
    assert [m["role"] for m in history["messages"]] == ["user", "assistant"]

    assert client.delete(f"/api/chat/{document_id}/history", params={"provider": "groq"}).status_code == 200
    history = client.get(f"/api/chat/{document_id}/history", params={"provider": "groq"}).json()
    assert history["messages"] == []


def test_chat_provider_failure_is_502(client, repository, report_pdf):
    document_id = upload(client, report_pdf).json()["document_id"]
    failing = RAGPipeline(repository, VectorStore(), FakeLLMService(error=LLMServiceError("AI request failed: down")))
    app.dependency_overrides[get_rag_pipeline] = lambda: failing

    response = client.post("/api/chat/query", json={"query": "Hello?", "document_id": document_id})

    assert response.status_code == 502
    assert response.json()["detail"] == "AI request failed: down"
    history = client.get(f"/api/chat/{document_id}/history").json()
    assert history["messages"] == []


def test_delete_document_removes_everything(client, report_pdf):
    document_id = upload(client, report_pdf).json()["document_id"]

    assert client.delete(f"/api/documents/{document_id}").status_code == 200
    assert client.get(f"/api/documents/{document_id}").status_code == 404
    assert client.get("/api/documents").json() == []


def test_api_keys_are_stored_and_masked(client):
    response = client.put("/api/settings/api-keys", json={"groq_api_key": "gsk_abcdef1234"})

    assert response.status_code == 200
    assert response.json()["groq_api_key"] == "****1234"
    assert response.json()["anthropic_api_key"] is None

    client.put("/api/settings/api-keys", json={"anthropic_api_key": "sk-ant-9999"})
    keys = client.get("/api/settings/api-keys").json()
    assert keys["groq_api_key"] == "****1234"
    assert keys["anthropic_api_key"] == "****9999"

    client.put("/api/settings/api-keys", json={"groq_api_key": ""})
    assert client.get("/api/settings/api-keys").json()["groq_api_key"] is None


def test_upload_storage_failure_is_500(client, report_pdf):
    class BrokenTableRepository(DocumentRepository):
        async def save_tables(self, tables):
            raise RuntimeError("table collection unavailable")

    broken = IngestionPipeline(repository=BrokenTableRepository(MemoryStore()), image_processor=FakeImageProcessor())
    app.dependency_overrides[get_ingestion_pipeline] = lambda: broken

    response = upload(client, report_pdf)

    assert response.status_code == 500
    assert "table collection unavailable" in response.json()["detail"]
