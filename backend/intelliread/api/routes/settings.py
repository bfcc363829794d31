"""Stored provider credentials"""
from fastapi import APIRouter, Depends
import logging
from ...db import DocumentRepository
from ...models.response import APIKeys
from ...api.dependencies import get_repository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/settings", tags=["settings"])


def mask_key(key):
    """Keep only the last four characters of a credential"""
    if not key:
        return None
    return f"****{key[-4:]}" if len(key) > 4 else "****"


@router.get("/api-keys", response_model=APIKeys)
async def get_api_keys(repository: DocumentRepository = Depends(get_repository)):
    """Configured credentials, masked"""
    keys = await repository.get_api_keys()
    return APIKeys(**{name: mask_key(value) for name, value in keys.model_dump().items()})


@router.put("/api-keys", response_model=APIKeys)
async def update_api_keys(keys: APIKeys, repository: DocumentRepository = Depends(get_repository)):
    """Merge the provided credentials into the stored ones; an empty string clears a key"""
    stored = await repository.get_api_keys()
    updates = {
        name: (value or None)
        for name, value in keys.model_dump(exclude_unset=True).items()
    }
    merged = stored.model_copy(update=updates)
    await repository.save_api_keys(merged)
    logger.info(f"Updated API keys: {', '.join(sorted(updates)) or 'none'}")
    return APIKeys(**{name: mask_key(value) for name, value in merged.model_dump().items()})
