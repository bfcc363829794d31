"""Chat query and history endpoints"""
from fastapi import APIRouter, HTTPException, Depends
import logging
from ...exceptions import DocumentNotFoundError, LLMServiceError
from ...models.response import AIProvider, ChatHistory, ChatRequest, ChatResponse
from ...services import RAGPipeline
from ...api.dependencies import get_rag_pipeline

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/query", response_model=ChatResponse)
async def chat_query(
    request: ChatRequest,
    rag_pipeline: RAGPipeline = Depends(get_rag_pipeline)
):
    """
    Answer a question about a document

    Steps:
    1. Retrieve the top-ranked chunks of the document
    2. Assemble them into the provider's context
    3. Ask the selected provider with the stored conversation
    4. Persist the exchange with its citations
    """
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="Query must not be empty")

    try:
        return await rag_pipeline.chat(
            document_id=request.document_id,
            query=request.query,
            provider=request.provider,
            api_key=request.api_key,
            top_k=request.top_k
        )
    except HTTPException:
        raise
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LLMServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Error processing chat query: {e}")
        raise HTTPException(
            status_code=500,
            detail=f"Error processing query: {str(e)}"
        )


@router.get("/{document_id}/history", response_model=ChatHistory)
async def get_chat_history(
    document_id: str,
    provider: AIProvider = AIProvider.GROQ,
    rag_pipeline: RAGPipeline = Depends(get_rag_pipeline)
):
    """Conversation with one provider about a document"""
    try:
        return await rag_pipeline.get_history(document_id, provider)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{document_id}/history")
async def delete_chat_history(
    document_id: str,
    provider: AIProvider = AIProvider.GROQ,
    rag_pipeline: RAGPipeline = Depends(get_rag_pipeline)
):
    try:
        await rag_pipeline.delete_history(document_id, provider)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": "Chat history cleared", "document_id": document_id, "provider": provider.value}
