import pytest
from fastapi.testclient import TestClient

from src.main import create_app
from src.notebook import NotebookConfig, NotebookPipeline, ProviderError
from src.notebook.orchestrator import NO_DOCUMENTS_MESSAGE

from conftest import EchoLLM, FailingLLM, FakeEmbeddings


@pytest.fixture
def client(pipeline):
    return TestClient(create_app(pipeline))


def _upload(client, name, content, content_type="text/plain"):
    return client.post("/documents", files={"file": (name, content, content_type)})


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["documents"] == 0


def test_pipeline_not_initialized():
    client = TestClient(create_app())
    response = client.get("/documents")
    assert response.status_code == 503
    assert response.json()["status"] == "error"


def test_upload_list_and_delete(client):
    response = _upload(client, "bees.txt", b"Bees make honey.")
    assert response.status_code == 200
    assert response.json()["source"] == "bees.txt"
    assert response.json()["chunks_indexed"] == 1

    assert client.get("/documents").json()["sources"] == ["bees.txt"]

    response = client.delete("/documents/bees.txt")
    assert response.status_code == 200
    assert client.get("/documents").json()["sources"] == []


def test_duplicate_upload_conflicts(client):
    _upload(client, "bees.txt", b"Bees make honey.")
    response = _upload(client, "bees.txt", b"Other content.")
    assert response.status_code == 409
    assert "already uploaded" in response.json()["error"]


def test_unsupported_upload(client, fake_embeddings):
    response = _upload(client, "deck.pptx", b"x", "application/octet-stream")
    assert response.status_code == 415
    assert response.json()["error"] == "Unsupported file type: .pptx"
    assert fake_embeddings.calls == []


def test_unreadable_upload(client):
    response = _upload(client, "broken.pdf", b"not a pdf", "application/pdf")
    assert response.status_code == 422
    messages = client.get("/messages").json()
    assert messages[-1]["content"].startswith('Error processing file "broken.pdf"')


def test_upload_provider_failure():
    class BrokenEmbeddings(FakeEmbeddings):
        def embed_batch(self, texts, intent=None):
            raise ProviderError("embedding service down", status_code=503)

    pipeline = NotebookPipeline(NotebookConfig(), embeddings=BrokenEmbeddings(), llm=EchoLLM())
    client = TestClient(create_app(pipeline))

    response = _upload(client, "bees.txt", b"Bees make honey.")

    assert response.status_code == 502
    assert "embedding service down" in response.json()["error"]
    assert pipeline.list_sources() == []


def test_query_without_documents(client, echo_llm):
    response = client.post("/query", json={"question": "anything"})
    assert response.status_code == 200
    assert response.json()["answer"] == NO_DOCUMENTS_MESSAGE
    assert response.json()["status"] == "success"
    assert echo_llm.prompts == []


def test_query_answers_and_logs_conversation(client):
    _upload(client, "bees.txt", b"Bees make honey.")

    response = client.post("/query", json={"question": "What do bees make?"})

    answer = response.json()["answer"]
    assert "bees.txt" in answer
    assert "Bees make honey." in answer

    messages = client.get("/messages").json()
    roles = [m["role"] for m in messages]
    assert roles[0] == "ai"
    assert roles[-2:] == ["user", "ai"]
    assert messages[-2]["content"] == "What do bees make?"
    assert "system" in roles


def test_query_provider_failure_becomes_error_answer():
    pipeline = NotebookPipeline(
        NotebookConfig(),
        embeddings=FakeEmbeddings(),
        llm=FailingLLM(ProviderError("AI Gateway request failed with status 500: boom"))
    )
    client = TestClient(create_app(pipeline))
    _upload(client, "bees.txt", b"Bees make honey.")

    response = client.post("/query", json={"question": "What do bees make?"})

    assert response.status_code == 200
    assert response.json()["status"] == "error"
    assert response.json()["answer"] == "Error: AI Gateway request failed with status 500: boom"
    assert pipeline.list_sources() == ["bees.txt"]


def test_empty_question_is_rejected(client):
    response = client.post("/query", json={"question": "   "})
    assert response.status_code == 400


def test_reset(client):
    _upload(client, "bees.txt", b"Bees make honey.")
    response = client.post("/reset")
    assert response.status_code == 200
    assert client.get("/documents").json()["sources"] == []
    assert len(client.get("/messages").json()) == 1
