import pytest

from intelliread.exceptions import DocumentNotFoundError, LLMServiceError
from intelliread.models.response import AIProvider, APIKeys
from intelliread.services.rag_pipeline import RAGPipeline
from intelliread.services.vector_store import VectorStore


@pytest.fixture
async def indexed_document(pipeline, report_pdf):
    result = await pipeline.ingest(report_pdf, "report.pdf", gemini_api_key="key")
    return result.document


@pytest.mark.anyio
async def test_chat_answers_and_saves_history(repository, llm_service, indexed_document):
    rag = RAGPipeline(repository, VectorStore(), llm_service, top_k=3)

    response = await rag.chat(indexed_document.id, "How did revenue grow?", AIProvider.GROQ)

    assert response.answer == llm_service.answer
    assert 0 < len(response.citations) <= 3
    assert all(len(c.text) <= 103 for c in response.citations)
    assert [m.role for m in response.messages] == ["user", "assistant"]

    call = llm_service.calls[0]
    assert call["provider"] == AIProvider.GROQ
    assert call["context"].startswith('[Source: "')
    assert [m.content for m in call["messages"]] == ["How did revenue grow?"]

    history = await rag.get_history(indexed_document.id, AIProvider.GROQ)
    assert len(history.messages) == 2
    assert history.id == f"{indexed_document.id}_groq"


@pytest.mark.anyio
async def test_follow_up_sends_previous_messages(repository, llm_service, indexed_document):
    rag = RAGPipeline(repository, VectorStore(), llm_service)

    await rag.chat(indexed_document.id, "How did revenue grow?")
    await rag.chat(indexed_document.id, "And next year?")

    assert [m.role for m in llm_service.calls[1]["messages"]] == ["user", "assistant", "user"]
    history = await rag.get_history(indexed_document.id, AIProvider.GROQ)
    assert len(history.messages) == 4


@pytest.mark.anyio
async def test_failed_call_leaves_history_untouched(repository, llm_service, failing_llm_service,
                                                    indexed_document):
    await RAGPipeline(repository, VectorStore(), llm_service).chat(indexed_document.id, "First question?")
    rag = RAGPipeline(repository, VectorStore(), failing_llm_service)

    with pytest.raises(LLMServiceError):
        await rag.chat(indexed_document.id, "Second question?")

    history = await rag.get_history(indexed_document.id, AIProvider.GROQ)
    assert [m.content for m in history.messages if m.role == "user"] == ["First question?"]


@pytest.mark.anyio
async def test_histories_are_kept_per_provider(repository, llm_service, indexed_document):
    rag = RAGPipeline(repository, VectorStore(), llm_service)

    await rag.chat(indexed_document.id, "Question for groq?", AIProvider.GROQ)

    assert (await rag.get_history(indexed_document.id, AIProvider.ANTHROPIC)).messages == []
    await rag.delete_history(indexed_document.id, AIProvider.GROQ)
    assert (await rag.get_history(indexed_document.id, AIProvider.GROQ)).messages == []


@pytest.mark.anyio
async def test_stored_provider_key_is_passed_through(repository, llm_service, indexed_document):
    await repository.save_api_keys(APIKeys(perplexity_api_key="pplx-stored"))
    rag = RAGPipeline(repository, VectorStore(), llm_service)

    await rag.chat(indexed_document.id, "Anything?", AIProvider.PERPLEXITY)
    await rag.chat(indexed_document.id, "Anything else?", AIProvider.PERPLEXITY, api_key="explicit")

    assert [c["api_key"] for c in llm_service.calls] == ["pplx-stored", "explicit"]


@pytest.mark.anyio
async def test_unknown_document(repository, llm_service):
    rag = RAGPipeline(repository, VectorStore(), llm_service)

    with pytest.raises(DocumentNotFoundError):
        await rag.chat("doc_missing", "Hello?")
    with pytest.raises(DocumentNotFoundError):
        await rag.search("doc_missing", "Hello?")
