"""Question answering through Groq, Perplexity or Anthropic chat APIs"""
import httpx
from typing import Any, Dict, List, Optional
import logging
from ..exceptions import LLMServiceError
from ..models.response import AIProvider, ChatMessage
from ..utils.helpers import clean_ai_response

logger = logging.getLogger(__name__)

GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"
PERPLEXITY_URL = "https://api.perplexity.ai/chat/completions"
ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"

SYSTEM_PROMPT = """You are intelliAi, an intelligent PDF analysis assistant built into intelliRead platform. You help users understand and extract information from their PDF documents through natural conversation.

Key traits:
- You are intelliAi (not ChatGPT, Claude, or any other AI)
- You specialize in PDF document analysis and information extraction
- You provide accurate, cited answers based strictly on the document content
- You are concise, professional, and helpful
- When users ask who you are, introduce yourself as "intelliAi, your PDF intelligence assistant"
- Do not use markdown formatting like asterisks for bold or italic text

Always cite your sources with page numbers when referencing document content."""


def build_system_prompt(context: str) -> str:
    """System prompt carrying the retrieved document context"""
    return f"""{SYSTEM_PROMPT}

DOCUMENT CONTEXT:
{context}

Instructions:
- Answer based on the document context provided
- If the answer isn't in the context, say so
- Be concise but thorough
- Reference specific sections when applicable
- Do not use markdown formatting"""


class LLMService:
    """Send a conversation plus document context to a chat provider"""

    def __init__(
        self,
        api_keys: Optional[Dict[AIProvider, Optional[str]]] = None,
        models: Optional[Dict[AIProvider, str]] = None,
        max_tokens: int = 2048,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize LLM service

        Args:
            api_keys: Default credential per provider
            models: Model name per provider
            max_tokens: Answer length limit
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used to stub the network
        """
        self.api_keys = api_keys or {}
        self.models = {
            AIProvider.GROQ: "llama-3.3-70b-versatile",
            AIProvider.PERPLEXITY: "sonar-pro",
            AIProvider.ANTHROPIC: "claude-sonnet-4-20250514",
            **(models or {}),
        }
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.transport = transport

        logger.info(f"LLMService initialized with providers: {', '.join(p.value for p in self.models)}")

    def _request(
        self,
        provider: AIProvider,
        api_key: str,
        messages: List[ChatMessage],
        system_prompt: str
    ) -> Dict[str, Any]:
        """URL, headers and JSON body for a provider"""
        conversation = [{"role": m.role, "content": m.content} for m in messages]

        if provider == AIProvider.ANTHROPIC:
            return {
                "url": ANTHROPIC_URL,
                "headers": {
                    "x-api-key": api_key,
                    "Content-Type": "application/json",
                    "anthropic-version": ANTHROPIC_VERSION,
                },
                "json": {
                    "model": self.models[provider],
                    "system": system_prompt,
                    "messages": conversation,
                    "max_tokens": self.max_tokens,
                },
            }

        payload = {
            "model": self.models[provider],
            "messages": [{"role": "system", "content": system_prompt}] + conversation,
            "max_tokens": self.max_tokens,
        }
        if provider == AIProvider.GROQ:
            payload["temperature"] = 0.7
        return {
            "url": GROQ_URL if provider == AIProvider.GROQ else PERPLEXITY_URL,
            "headers": {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            "json": payload,
        }

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            return response.json()["error"]["message"]
        except Exception:
            return f"HTTP {response.status_code}"

    async def call(
        self,
        provider: AIProvider,
        messages: List[ChatMessage],
        context: str,
        api_key: Optional[str] = None
    ) -> str:
        """
        Ask a provider to answer the latest message

        Args:
            provider: Chat provider to use
            messages: Conversation so far, ending with the user's question
            context: Assembled document context
            api_key: Credential for this call, defaults to the configured one

        Returns:
            Answer text with markdown formatting removed

        Raises:
            LLMServiceError: On missing credential, HTTP failure or malformed response
        """
        key = api_key or self.api_keys.get(provider)
        if not key:
            raise LLMServiceError(f"AI request failed: no API key configured for {provider.value}")

        request = self._request(provider, key, messages, build_system_prompt(context))
        logger.info(f"Calling {provider.value} with {len(messages)} messages")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    request["url"], headers=request["headers"], json=request["json"]
                )
                if response.status_code >= 400:
                    raise LLMServiceError(f"AI request failed: {self._error_message(response)}")
                data = response.json()

            if provider == AIProvider.ANTHROPIC:
                content = data["content"][0]["text"]
            else:
                content = data["choices"][0]["message"]["content"]

        except LLMServiceError as e:
            logger.error(f"{provider.value} request failed: {e}")
            raise
        except Exception as e:
            logger.error(f"{provider.value} request failed: {e}")
            raise LLMServiceError(f"AI request failed: {e}") from e

        return clean_ai_response(content)
