"""Document upload, inspection and search endpoints"""
from fastapi import APIRouter, UploadFile, File, HTTPException, Depends, Form
from fastapi.responses import StreamingResponse
from typing import List, Optional
import logging
import json
from ...config import settings
from ...db import DocumentRepository
from ...exceptions import DocumentNotFoundError, PDFProcessingError
from ...models.document import Document, ExtractedTable, Section
from ...models.response import IngestionStage, SearchRequest, SearchResult, UploadResponse
from ...services import IngestionPipeline, RAGPipeline
from ...api.dependencies import get_ingestion_pipeline, get_rag_pipeline, get_repository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/documents", tags=["documents"])


async def read_upload(file: UploadFile) -> bytes:
    """Validate an uploaded PDF and return its bytes"""
    if not file.filename or not file.filename.lower().endswith('.pdf'):
        raise HTTPException(status_code=400, detail="Only PDF files are supported")

    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(data) > settings.max_file_size:
        raise HTTPException(
            status_code=400,
            detail=f"File size exceeds maximum of {settings.max_file_size} bytes"
        )
    return data


@router.post("/upload", response_model=UploadResponse)
async def upload_document(
    file: UploadFile = File(...),
    gemini_api_key: Optional[str] = Form(None),
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline)
):
    """
    Upload and ingest a PDF document

    Steps:
    1. Validate the upload
    2. Classify pages and describe image pages
    3. Reconstruct tables and build sections
    4. Chunk at sentence boundaries and index
    """
    data = await read_upload(file)
    logger.info(f"Uploading file: {file.filename} ({len(data)} bytes)")

    try:
        result = await pipeline.ingest(data, file.filename, gemini_api_key=gemini_api_key)
    except PDFProcessingError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error uploading document: {e}")
        raise HTTPException(status_code=500, detail=f"Error processing document: {str(e)}")

    return result.to_response()


@router.post("/upload/stream")
async def upload_document_stream(
    file: UploadFile = File(...),
    gemini_api_key: Optional[str] = Form(None),
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline)
):
    """
    Upload a PDF and stream ingestion progress

    Returns Server-Sent Events (SSE) stream with:
    - data: One progress event per stage or page
    - type done: Final event carrying the indexed document id
    - type error: Final event when ingestion failed
    """
    data = await read_upload(file)
    filename = file.filename

    async def event_generator():
        document_id = None
        try:
            async for event in pipeline.ingest_stream(data, filename, gemini_api_key):
                document_id = event.document_id
                if event.stage == IngestionStage.ERROR:
                    continue
                yield f"data: {json.dumps({'type': 'progress', **event.model_dump(mode='json')})}\n\n"

            yield f"data: {json.dumps({'type': 'done', 'document_id': document_id})}\n\n"
            logger.info(f"Streaming upload of {filename} completed")

        except Exception as e:
            logger.error(f"Error in streaming upload: {e}")
            error_msg = {'type': 'error', 'document_id': document_id, 'message': str(e)}
            yield f"data: {json.dumps(error_msg)}\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        }
    )


@router.get("", response_model=List[Document])
async def list_documents(repository: DocumentRepository = Depends(get_repository)):
    """List documents, newest first"""
    return await repository.list_documents()


@router.get("/{document_id}", response_model=Document)
async def get_document(document_id: str, repository: DocumentRepository = Depends(get_repository)):
    try:
        return await repository.get_document(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{document_id}/sections", response_model=List[Section])
async def get_sections(document_id: str, repository: DocumentRepository = Depends(get_repository)):
    try:
        await repository.get_document(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return await repository.get_sections(document_id)


@router.get("/{document_id}/tables", response_model=List[ExtractedTable])
async def get_tables(document_id: str, repository: DocumentRepository = Depends(get_repository)):
    try:
        await repository.get_document(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return await repository.get_tables(document_id)


@router.post("/{document_id}/search", response_model=List[SearchResult])
async def search_document(
    document_id: str,
    request: SearchRequest,
    rag_pipeline: RAGPipeline = Depends(get_rag_pipeline)
):
    """Rank the document's chunks against a query without calling a provider"""
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="Query must not be empty")
    try:
        return await rag_pipeline.search(document_id, request.query, request.top_k)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{document_id}")
async def delete_document(document_id: str, repository: DocumentRepository = Depends(get_repository)):
    """Delete a document with its sections, chunks, tables and chat histories"""
    try:
        await repository.delete_document(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting document: {e}")
        raise HTTPException(status_code=500, detail=f"Error deleting document: {str(e)}")

    return {"message": "Document deleted successfully", "document_id": document_id}
