"""Ingestion orchestrator: PDF bytes to an indexed, searchable document"""
import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Callable, List, Optional
from ..db.repository import DocumentRepository
from ..exceptions import PDFProcessingError
from ..models.chunk import Chunk
from ..models.document import Document, DocumentStatus, ExtractedTable, Section
from ..models.response import IngestionStage, ProgressEvent, UploadResponse
from ..utils.helpers import generate_document_id, generate_file_hash
from ..utils.sentence_chunker import SentenceChunker, validate_chunks
from .document_processor import DocumentProcessor, build_summary, extract_themes
from .embedding_service import EmbeddingService
from .image_processor import ImagePageResolver, ImageProcessor
from .pdf_source import PDFSource, PyMuPDFSource
from .progress import ProgressCallback, ProgressReporter
from .section_builder import SectionBuilder

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    """Records produced by one successful ingestion"""
    document: Document
    sections: List[Section]
    chunks: List[Chunk]
    tables: List[ExtractedTable]

    def to_response(self) -> UploadResponse:
        document = self.document
        return UploadResponse(
            document_id=document.id,
            filename=document.filename,
            title=document.title,
            total_pages=document.page_count,
            word_count=document.word_count,
            status=document.status.value,
            section_count=len(self.sections),
            chunk_count=len(self.chunks),
            table_count=len(self.tables),
            is_image_based=document.is_image_based
        )


class IngestionPipeline:
    """
    Drive a document through
    uploading -> analyzing -> extracting -> ai_processing -> normalizing
    -> chunking -> indexing -> indexed.

    Any fatal failure moves the document to ``error``: its derived records
    are removed, the message is stored on the document and the failure is
    raised as PDFProcessingError.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        image_processor: ImageProcessor,
        document_processor: Optional[DocumentProcessor] = None,
        section_builder: Optional[SectionBuilder] = None,
        chunker: Optional[SentenceChunker] = None,
        embedding_service: Optional[EmbeddingService] = None,
        source_factory: Callable[[bytes], PDFSource] = PyMuPDFSource,
        gemini_api_key: Optional[str] = None,
        render_scale: float = 2.0,
        max_concurrent_image_calls: int = 3,
        image_description_timeout: Optional[float] = 60.0,
        detect_image_types: bool = True
    ):
        self.repository = repository
        self.image_processor = image_processor
        self.document_processor = document_processor or DocumentProcessor()
        self.section_builder = section_builder or SectionBuilder()
        self.chunker = chunker or SentenceChunker()
        self.embedding_service = embedding_service or EmbeddingService()
        self.source_factory = source_factory
        self.gemini_api_key = gemini_api_key
        self.render_scale = render_scale
        self.max_concurrent_image_calls = max_concurrent_image_calls
        self.image_description_timeout = image_description_timeout
        self.detect_image_types = detect_image_types

    async def _resolve_api_key(self, gemini_api_key: Optional[str]) -> Optional[str]:
        """Explicit key, then the stored settings key, then the configured one"""
        if gemini_api_key:
            return gemini_api_key
        stored = await self.repository.get_api_keys()
        return stored.gemini_api_key or self.gemini_api_key

    def _make_resolver(self, api_key: Optional[str]) -> ImagePageResolver:
        return ImagePageResolver(
            image_processor=self.image_processor,
            api_key=api_key,
            render_scale=self.render_scale,
            max_concurrent=self.max_concurrent_image_calls,
            timeout=self.image_description_timeout,
            detect_image_types=self.detect_image_types
        )

    async def ingest(
        self,
        pdf_bytes: bytes,
        filename: str,
        on_progress: Optional[ProgressCallback] = None,
        gemini_api_key: Optional[str] = None
    ) -> IngestionResult:
        """
        Ingest a PDF and persist its sections, chunks and tables

        Args:
            pdf_bytes: Raw PDF content
            filename: Original file name
            on_progress: Optional sync or async progress callback
            gemini_api_key: Credential for image descriptions for this call

        Returns:
            IngestionResult with the indexed document

        Raises:
            PDFProcessingError: If the PDF could not be read or extracted.
                Other failures (storage, indexing) propagate unchanged; in
                both cases the document is left in the error state.
        """
        document = Document(
            id=generate_document_id(),
            filename=filename,
            title=filename,
            file_hash=generate_file_hash(pdf_bytes)
        )
        reporter = ProgressReporter(on_progress, document_id=document.id)

        await reporter.report(IngestionStage.UPLOADING, f"Uploading {filename}...")
        await self.repository.save_document(document)
        logger.info(f"Ingesting {filename} as {document.id}")

        source: Optional[PDFSource] = None
        try:
            api_key = await self._resolve_api_key(gemini_api_key)
            try:
                source = self.source_factory(pdf_bytes)
                extraction = await self.document_processor.process_pdf(
                    source, document.id, self._make_resolver(api_key), reporter
                )
            except PDFProcessingError:
                raise
            except Exception as e:
                raise PDFProcessingError(f"Error processing PDF: {e}") from e

            await reporter.report(
                IngestionStage.NORMALIZING, "Building document sections...",
                extraction.page_count, extraction.page_count
            )
            sections = self.section_builder.build(extraction.pages, document.id)

            await reporter.report(
                IngestionStage.CHUNKING, f"Chunking {len(sections)} sections...",
                extraction.page_count, extraction.page_count
            )
            chunks = self.chunker.chunk_sections(sections, document.id)
            for warning in validate_chunks(chunks):
                logger.warning(f"Chunk validation ({document.id}): {warning}")

            await reporter.report(
                IngestionStage.INDEXING, f"Indexing {len(chunks)} chunks...",
                extraction.page_count, extraction.page_count
            )
            chunks = self.embedding_service.embed_chunks(chunks)
            await self.repository.save_sections(sections)
            await self.repository.save_chunks(chunks)
            await self.repository.save_tables(extraction.tables)

            full_text = "\n\n".join(page.text for page in extraction.pages)
            document = document.model_copy(update={
                "title": extraction.title or filename,
                "page_count": extraction.page_count,
                "word_count": extraction.word_count,
                "status": DocumentStatus.INDEXED,
                "sections": sections,
                "has_images": extraction.has_images,
                "is_image_based": extraction.is_image_based,
                "image_only_page_count": extraction.image_only_page_count,
                "ai_analyzed": extraction.ai_analyzed,
                "themes": extract_themes(full_text),
                "summary": build_summary(extraction, image_analysis_configured=api_key is not None),
            })
            await self.repository.save_document(document)

        except Exception as e:
            logger.error(f"Ingestion of {document.id} failed: {e}")
            await self._mark_failed(document, str(e))
            await reporter.report(IngestionStage.ERROR, f"Processing failed: {e}")
            raise

        except asyncio.CancelledError:
            logger.warning(f"Ingestion of {document.id} cancelled")
            await self._mark_failed(document, "Ingestion cancelled")
            raise

        finally:
            if source is not None:
                source.close()

        await reporter.report(
            IngestionStage.INDEXED,
            f"Indexed {len(sections)} sections, {len(chunks)} chunks and {len(extraction.tables)} tables",
            extraction.page_count, extraction.page_count
        )
        logger.info(
            f"Document {document.id} indexed: {extraction.page_count} pages, "
            f"{len(sections)} sections, {len(chunks)} chunks"
        )
        return IngestionResult(document, sections, chunks, extraction.tables)

    async def _mark_failed(self, document: Document, error: str):
        """Store the failure on the document and drop anything derived from it"""
        try:
            await self.repository.clear_dependents(document.id)
            await self.repository.save_document(
                document.model_copy(update={"status": DocumentStatus.ERROR, "error": error})
            )
        except Exception as e:
            logger.error(f"Could not record failure for {document.id}: {e}")

    async def ingest_stream(
        self,
        pdf_bytes: bytes,
        filename: str,
        gemini_api_key: Optional[str] = None
    ) -> AsyncIterator[ProgressEvent]:
        """
        Run an ingestion and yield its progress events as they happen

        The last event is ``indexed`` or ``error``. On failure the
        PDFProcessingError is raised after the ``error`` event is yielded.
        Closing the iterator early cancels the ingestion.
        """
        queue: asyncio.Queue = asyncio.Queue()

        async def run() -> IngestionResult:
            try:
                return await self.ingest(pdf_bytes, filename, queue.put, gemini_api_key)
            finally:
                await queue.put(None)

        task = asyncio.create_task(run())
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
            await task
        finally:
            # Consumer went away before the end: stop the ingestion
            if not task.done():
                task.cancel()
            await asyncio.gather(task, return_exceptions=True)
