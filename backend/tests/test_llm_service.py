import json

import httpx
import pytest

from intelliread.exceptions import LLMServiceError
from intelliread.models.response import AIProvider, ChatMessage
from intelliread.services.llm_service import LLMService


def recording_transport(payload, status_code=200):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, json=payload)

    return httpx.MockTransport(handler), requests


@pytest.mark.anyio
async def test_groq_request_carries_context_and_answer_is_cleaned():
    transport, requests = recording_transport(
        {"choices": [{"message": {"content": "**Revenue** grew.\n\n\n\n- fast"}}]}
    )
    service = LLMService(transport=transport)

    answer = await service.call(
        AIProvider.GROQ,
        [ChatMessage(role="user", content="How did revenue do?")],
        '[Source: "Results", Page 1]\nRevenue grew.',
        api_key="gsk-test",
    )

    assert answer == "Revenue grew.\n\n• fast"
    request = requests[0]
    assert request.url == "https://api.groq.com/openai/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer gsk-test"
    body = json.loads(request.content)
    assert body["model"] == "llama-3.3-70b-versatile"
    assert body["messages"][0]["role"] == "system"
    assert "DOCUMENT CONTEXT:" in body["messages"][0]["content"]
    assert "Revenue grew." in body["messages"][0]["content"]
    assert body["messages"][1] == {"role": "user", "content": "How did revenue do?"}


@pytest.mark.anyio
async def test_anthropic_uses_system_field_and_content_blocks():
    transport, requests = recording_transport({"content": [{"type": "text", "text": "Costs fell."}]})
    service = LLMService(api_keys={AIProvider.ANTHROPIC: "sk-ant"}, transport=transport)

    answer = await service.call(AIProvider.ANTHROPIC, [ChatMessage(role="user", content="Costs?")], "ctx")

    assert answer == "Costs fell."
    request = requests[0]
    assert request.url == "https://api.anthropic.com/v1/messages"
    assert request.headers["x-api-key"] == "sk-ant"
    assert request.headers["anthropic-version"] == "2023-06-01"
    body = json.loads(request.content)
    assert "DOCUMENT CONTEXT:\nctx" in body["system"]
    assert body["messages"] == [{"role": "user", "content": "Costs?"}]


@pytest.mark.anyio
async def test_perplexity_endpoint():
    transport, requests = recording_transport({"choices": [{"message": {"content": "Yes."}}]})
    service = LLMService(transport=transport)

    await service.call(AIProvider.PERPLEXITY, [ChatMessage(role="user", content="Hi")], "", api_key="pplx")

    assert requests[0].url == "https://api.perplexity.ai/chat/completions"
    assert json.loads(requests[0].content)["model"] == "sonar-pro"


@pytest.mark.anyio
async def test_http_error_message_is_surfaced():
    transport, _ = recording_transport({"error": {"message": "Invalid API Key"}}, status_code=401)
    service = LLMService(transport=transport)

    with pytest.raises(LLMServiceError, match="AI request failed: Invalid API Key"):
        await service.call(AIProvider.GROQ, [ChatMessage(role="user", content="Hi")], "", api_key="bad")


@pytest.mark.anyio
async def test_malformed_response_is_an_error():
    transport, _ = recording_transport({"unexpected": True})
    service = LLMService(transport=transport)

    with pytest.raises(LLMServiceError, match="AI request failed"):
        await service.call(AIProvider.GROQ, [ChatMessage(role="user", content="Hi")], "", api_key="k")


@pytest.mark.anyio
async def test_missing_key_is_an_error():
    with pytest.raises(LLMServiceError, match="no API key"):
        await LLMService().call(AIProvider.GROQ, [ChatMessage(role="user", content="Hi")], "")
