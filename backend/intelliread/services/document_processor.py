"""Document extraction pass: classify pages, resolve images, find tables"""
import re
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional
from ..models.document import ExtractedTable, Page
from ..models.response import IngestionStage
from ..utils.helpers import count_words
from .image_processor import ImagePageResolver
from .page_classifier import classify_page
from .pdf_source import PDFSource
from .progress import ProgressReporter
from .table_extractor import TableExtractor

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100

THEME_KEYWORDS = [
    'technology', 'business', 'finance', 'healthcare', 'education',
    'research', 'analysis', 'strategy', 'development', 'management',
    'innovation', 'data', 'security', 'compliance', 'operations',
    'marketing', 'sales', 'engineering', 'design', 'architecture',
]
CAPITALIZED_TERM = re.compile(r'\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\b')


@dataclass
class ExtractionAccumulator:
    """Running counters threaded through the sequential page fold"""
    word_count: int = 0
    image_only_page_count: int = 0
    ai_analyzed_page_count: int = 0
    has_images: bool = False
    tables: List[ExtractedTable] = field(default_factory=list)

    def add_page(self, page: Page):
        self.word_count += count_words(page.text)
        if page.is_image_only:
            self.image_only_page_count += 1
        if page.ai_analyzed:
            self.ai_analyzed_page_count += 1
        if page.image_count > 0:
            self.has_images = True


@dataclass
class ExtractionResult:
    """Everything the extraction pass learned about a document"""
    pages: List[Page]
    tables: List[ExtractedTable]
    page_count: int
    word_count: int
    title: str
    has_images: bool
    is_image_based: bool
    image_only_page_count: int
    ai_analyzed: bool


def find_title(pages: List[Page]) -> Optional[str]:
    """Tallest non-blank text item on the first page"""
    if not pages:
        return None
    candidates = [item for item in pages[0].items if item.text.strip()]
    if not candidates:
        return None
    tallest = max(candidates, key=lambda item: item.height or 12)
    return tallest.text.strip()[:MAX_TITLE_LENGTH]


def extract_themes(text: str) -> List[str]:
    """Keyword hits plus capitalised terms repeated at least three times"""
    text_lower = text.lower()
    found = [keyword for keyword in THEME_KEYWORDS if keyword in text_lower]

    term_counts = Counter(term for term in CAPITALIZED_TERM.findall(text) if len(term) > 3)
    frequent = [term for term, count in term_counts.most_common() if count >= 3][:5]

    themes: List[str] = []
    for theme in found + frequent:
        if theme not in themes:
            themes.append(theme)
    return themes[:8]


def build_summary(result: ExtractionResult, image_analysis_configured: bool) -> str:
    """One-paragraph description of the document's make-up"""
    if result.is_image_based:
        summary = (
            f"This is an image-based document with {result.image_only_page_count} image page(s) "
            f"out of {result.page_count} total pages. "
        )
        if image_analysis_configured:
            summary += "AI-powered image analysis was used to extract content descriptions."
        else:
            summary += "Configure Gemini API in settings for AI-powered image analysis."
        return summary

    summary = f"This document contains {result.word_count:,} words across {result.page_count} pages."
    if result.image_only_page_count > 0:
        summary += f" Includes {result.image_only_page_count} image-only page(s)."
    return summary


class DocumentProcessor:
    """Run the page-level extraction pass over a PDF source"""

    def __init__(self, table_extractor: Optional[TableExtractor] = None):
        self.table_extractor = table_extractor or TableExtractor()

    async def process_pdf(
        self,
        source: PDFSource,
        document_id: str,
        resolver: ImagePageResolver,
        reporter: Optional[ProgressReporter] = None
    ) -> ExtractionResult:
        """
        Extract and classify every page of a document

        Pages are read and classified one after another; image-bearing pages
        are then described with bounded concurrency; finally the pages are
        folded in order into the document counters.

        Args:
            source: Open PDF source
            document_id: Owning document
            resolver: Image page resolver configured for this ingestion
            reporter: Progress reporter

        Returns:
            ExtractionResult for the document

        Raises:
            PDFProcessingError: If a page cannot be read
        """
        reporter = reporter or ProgressReporter()
        total_pages = source.page_count
        logger.info(f"Processing {total_pages} pages for document {document_id}")

        # 1. Read and classify pages
        pages: List[Page] = []
        for page_number in range(1, total_pages + 1):
            await reporter.report(
                IngestionStage.ANALYZING,
                f"Analyzing page {page_number}/{total_pages}...",
                page_number, total_pages
            )
            raw = source.extract_page(page_number)
            classification = classify_page(raw.text, raw.image_count)
            pages.append(Page(
                page_number=page_number,
                text=raw.text,
                items=raw.items,
                image_count=raw.image_count,
                classification=classification
            ))
            logger.debug(
                f"Page {page_number}: {classification.value} "
                f"({len(raw.text)} chars, {raw.image_count} images)"
            )

        # 2. Tables on pages that carry text
        tables: List[ExtractedTable] = []
        for page in pages:
            await reporter.report(
                IngestionStage.EXTRACTING,
                f"Processing page {page.page_number}/{total_pages}...",
                page.page_number, total_pages
            )
            if page.is_image_only:
                continue
            try:
                tables.extend(self.table_extractor.extract(
                    page.items, page.page_number, document_id, start_index=len(tables)
                ))
            except Exception as e:
                logger.warning(f"Table detection failed on page {page.page_number}: {e}")

        # 3. Describe image-bearing pages
        image_pages = [p for p in pages if p.needs_image_resolution]
        if image_pages:
            await reporter.report(
                IngestionStage.AI_PROCESSING,
                f"Processing {len(image_pages)} image page(s) with AI...",
                0, total_pages
            )

            async def page_done(page: Page):
                await reporter.report(
                    IngestionStage.AI_PROCESSING,
                    f"Page {page.page_number} image content processed",
                    page.page_number, total_pages
                )

            pages = await resolver.resolve_pages(pages, source.render_page, page_done)

        # 4. Fold pages in order into the document counters
        accumulator = ExtractionAccumulator(tables=tables)
        for page in pages:
            accumulator.add_page(page)

        image_only = accumulator.image_only_page_count
        result = ExtractionResult(
            pages=pages,
            tables=accumulator.tables,
            page_count=total_pages,
            word_count=accumulator.word_count,
            title=find_title(pages) or "",
            has_images=accumulator.has_images,
            is_image_based=image_only > (total_pages - image_only),
            image_only_page_count=image_only,
            ai_analyzed=accumulator.ai_analyzed_page_count > 0
        )

        logger.info(
            f"PDF processed: {total_pages} pages, {image_only} image-only, "
            f"{len(result.tables)} tables, {result.word_count} words"
        )
        return result
