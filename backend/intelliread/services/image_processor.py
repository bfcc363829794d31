"""Image page handling using Gemini VLM for description generation"""
from PIL import Image
from typing import Any, Callable, Dict, List, Optional
import asyncio
import inspect
import logging
import io
import base64

from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.messages import HumanMessage

from ..exceptions import ImageDescriptionError
from ..models.document import Page, PageClassification

logger = logging.getLogger(__name__)

DESCRIPTION_PROMPT = (
    "Describe this image in detail. Focus on what it shows, any text visible, "
    "and its purpose in the document."
)
CHART_PROMPT = "Is this image a chart, graph, or data visualization? Answer only YES or NO."

FALLBACK_DESCRIPTION = "Image content detected on this page."
NO_KEY_NOTICE = "Configure Gemini API for AI-powered image analysis."


def image_content_block(page_number: int, description: str) -> str:
    """Searchable text block standing in for a rendered page image"""
    return f"[Image Content - Page {page_number}]\n{description}"


class ImageProcessor:
    """Describe page bitmaps with a Gemini vision model"""

    def __init__(
        self,
        gemini_vlm_model: str = "gemini-2.5-flash-lite",
        google_api_key: Optional[str] = None
    ):
        self.gemini_vlm_model = gemini_vlm_model
        self.google_api_key = google_api_key
        self._models: Dict[str, ChatGoogleGenerativeAI] = {}

        logger.info(f"ImageProcessor initialized with Gemini VLM: {gemini_vlm_model}")

    def _get_model(self, api_key: str) -> ChatGoogleGenerativeAI:
        """Lazy load one Gemini client per credential"""
        if api_key not in self._models:
            logger.info(f"Loading Gemini VLM model: {self.gemini_vlm_model}")
            self._models[api_key] = ChatGoogleGenerativeAI(
                model=self.gemini_vlm_model,
                google_api_key=api_key,
                temperature=0.2,
            )
        return self._models[api_key]

    def _prepare_image(self, image: Image.Image) -> str:
        """Convert PIL Image to base64 PNG string"""
        if image.mode != "RGB":
            image = image.convert("RGB")

        buffered = io.BytesIO()
        image.save(buffered, format="PNG")
        return base64.b64encode(buffered.getvalue()).decode("utf-8")

    async def _ask(self, image: Image.Image, prompt: str, api_key: str) -> str:
        image_data = self._prepare_image(image)
        message = HumanMessage(
            content=[
                {"type": "text", "text": prompt},
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:image/png;base64,{image_data}"},
                },
            ]
        )
        response = await self._get_model(api_key).ainvoke([message])
        content = response.content
        if isinstance(content, list):
            content = " ".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        return str(content).strip()

    async def describe_image(self, image: Image.Image, api_key: Optional[str] = None) -> str:
        """
        Generate a natural-language description of an image

        Args:
            image: PIL image of a rendered page
            api_key: Gemini credential, defaults to the configured one

        Returns:
            Description text

        Raises:
            ImageDescriptionError: On missing credential, API failure or empty response
        """
        key = api_key or self.google_api_key
        if not key:
            raise ImageDescriptionError("Gemini API key is required for image descriptions")

        try:
            description = await self._ask(image, DESCRIPTION_PROMPT, key)
        except Exception as e:
            raise ImageDescriptionError(f"Gemini image description failed: {e}") from e

        if not description:
            raise ImageDescriptionError("Gemini returned an empty description")
        return description

    async def classify_image_type(self, image: Image.Image, api_key: Optional[str] = None) -> str:
        """Return "chart" when the model says the image is a data visualization, else "image" """
        key = api_key or self.google_api_key
        if not key:
            return "image"
        try:
            answer = await self._ask(image, CHART_PROMPT, key)
        except Exception as e:
            logger.debug(f"Chart detection failed: {e}")
            return "image"
        return "chart" if "yes" in answer.lower() else "image"


class ImagePageResolver:
    """
    Turn IMAGE_ONLY and MIXED pages into searchable text.

    Description failures never propagate: the page gets a fallback
    placeholder and ingestion continues.
    """

    def __init__(
        self,
        image_processor: ImageProcessor,
        api_key: Optional[str] = None,
        render_scale: float = 2.0,
        max_concurrent: int = 3,
        timeout: Optional[float] = 60.0,
        detect_image_types: bool = True
    ):
        self.image_processor = image_processor
        self.api_key = api_key
        self.render_scale = render_scale
        self.max_concurrent = max_concurrent
        self.timeout = timeout
        self.detect_image_types = detect_image_types

    async def resolve_pages(
        self,
        pages: List[Page],
        render: Callable[[int, float], Image.Image],
        on_page_done: Optional[Callable[[Page], Any]] = None
    ) -> List[Page]:
        """
        Resolve every image-bearing page with bounded concurrency

        Args:
            pages: All document pages in order
            render: Callable producing a bitmap for (page_number, scale)
            on_page_done: Optional sync or async hook invoked after each resolved page

        Returns:
            Pages in their original order, image-bearing ones resolved
        """
        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def resolve(page: Page) -> Page:
            if not page.needs_image_resolution:
                return page
            async with semaphore:
                resolved = await self.resolve_page(page, render)
            if on_page_done is not None:
                result = on_page_done(resolved)
                if inspect.isawaitable(result):
                    await result
            return resolved

        resolved_pages = list(await asyncio.gather(*[resolve(page) for page in pages]))

        image_only_count = sum(1 for p in resolved_pages if p.is_image_only)
        ai_analyzed_count = sum(1 for p in resolved_pages if p.ai_analyzed)
        logger.info(
            f"Resolved image pages: {image_only_count} image-only, "
            f"{ai_analyzed_count} analyzed with AI"
        )
        return resolved_pages

    async def resolve_page(
        self,
        page: Page,
        render: Callable[[int, float], Image.Image]
    ) -> Page:
        """Produce a copy of the page carrying its image description"""
        image_type = None
        ai_analyzed = False

        if not self.api_key:
            description = FALLBACK_DESCRIPTION
            block_text = f"{FALLBACK_DESCRIPTION} {NO_KEY_NOTICE}"
        else:
            try:
                image = render(page.page_number, self.render_scale)
                description = await asyncio.wait_for(
                    self.image_processor.describe_image(image, self.api_key),
                    timeout=self.timeout
                )
                ai_analyzed = True
                if self.detect_image_types:
                    image_type = await asyncio.wait_for(
                        self.image_processor.classify_image_type(image, self.api_key),
                        timeout=self.timeout
                    )
            except Exception as e:
                logger.warning(f"Failed to process image on page {page.page_number}: {e}")
                if not ai_analyzed:
                    description = FALLBACK_DESCRIPTION
            block_text = description

        block = image_content_block(page.page_number, block_text)
        if page.classification == PageClassification.IMAGE_ONLY:
            text = block
        else:
            text = f"{page.text}\n\n{block}"

        return page.model_copy(update={
            "text": text,
            "image_description": description,
            "image_type": image_type or "image",
            "ai_analyzed": ai_analyzed,
        })
