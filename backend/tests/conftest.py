"""Shared fixtures: generated PDFs, in-memory storage and fake collaborators."""
import asyncio
import io
from typing import List, Optional

import fitz
import pytest
from PIL import Image

from intelliread.db import DocumentRepository, MemoryStore
from intelliread.exceptions import ImageDescriptionError, LLMServiceError
from intelliread.services import IngestionPipeline

CHART_DESCRIPTION = "A bar chart showing quarterly revenue growth across four regions."


@pytest.fixture
def anyio_backend():
    return "asyncio"


def png_bytes(color=(200, 30, 30)) -> bytes:
    image = Image.new("RGB", (120, 80), color)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def build_pdf(pages: List[dict]) -> bytes:
    """
    Each page spec may carry ``title`` (large font), ``text`` (body lines)
    and ``image`` (insert a bitmap).
    """
    doc = fitz.open()
    for spec in pages:
        page = doc.new_page()
        y = 72
        if spec.get("title"):
            page.insert_text((72, y), spec["title"], fontsize=20)
            y += 40
        if spec.get("text"):
            page.insert_text((72, y), spec["text"], fontsize=11)
        if spec.get("image"):
            page.insert_image(fitz.Rect(100, 400, 400, 600), stream=png_bytes())
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def report_pdf() -> bytes:
    return build_pdf([
        {
            "title": "Annual Report",
            "text": (
                "1. Overview\n"
                "Revenue grew by ten percent during the year.\n"
                "The board approved a new strategy for growth.\n"
                "2. Results\n"
                "Net income rose to a record level this year.\n"
                "Operating margins improved in every region."
            ),
        },
        {"image": True},
        {
            "text": (
                "3. Outlook\n"
                "The company expects continued revenue growth next year.\n"
                "Hiring will continue in engineering and sales."
            ),
        },
    ])


class FakeImageProcessor:
    """Stands in for the Gemini describer"""

    def __init__(self, description: str = CHART_DESCRIPTION, image_type: str = "chart",
                 fail: bool = False, delay: float = 0.0):
        self.description = description
        self.image_type = image_type
        self.fail = fail
        self.delay = delay
        self.calls = 0
        self.active = 0
        self.max_active = 0

    async def describe_image(self, image, api_key: Optional[str] = None) -> str:
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail:
                raise ImageDescriptionError("model unavailable")
            return self.description
        finally:
            self.active -= 1

    async def classify_image_type(self, image, api_key: Optional[str] = None) -> str:
        return self.image_type


class FakeLLMService:
    """Records calls and returns a canned answer or raises"""

    def __init__(self, answer: str = "Revenue grew by ten percent [Page 1].",
                 error: Optional[Exception] = None):
        self.answer = answer
        self.error = error
        self.calls = []

    async def call(self, provider, messages, context, api_key=None) -> str:
        self.calls.append({
            "provider": provider,
            "messages": list(messages),
            "context": context,
            "api_key": api_key,
        })
        if self.error is not None:
            raise self.error
        return self.answer


@pytest.fixture
def repository() -> DocumentRepository:
    return DocumentRepository(MemoryStore())


@pytest.fixture
def image_processor() -> FakeImageProcessor:
    return FakeImageProcessor()


@pytest.fixture
def pipeline(repository, image_processor) -> IngestionPipeline:
    return IngestionPipeline(repository=repository, image_processor=image_processor)


@pytest.fixture
def llm_service() -> FakeLLMService:
    return FakeLLMService()


@pytest.fixture
def failing_llm_service() -> FakeLLMService:
    return FakeLLMService(error=LLMServiceError("AI request failed: HTTP 503"))
