"""FastAPI application entry point"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from .config import settings
from .api.routes import documents_router, chat_router, settings_router
from .api.dependencies import get_store
from .db import MongoStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="intelliRead PDF Intelligence API",
    description="PDF ingestion with image page descriptions, table reconstruction, sectioning and retrieval-grounded chat",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(documents_router, prefix="/api")
app.include_router(chat_router, prefix="/api")
app.include_router(settings_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "intelliRead PDF Intelligence API",
        "version": "1.0.0",
        "status": "running",
        "storage": settings.storage_backend
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "storage": settings.storage_backend}


@app.on_event("startup")
async def startup_event():
    """Startup tasks"""
    logger.info("Starting intelliRead API")

    store = get_store()
    if isinstance(store, MongoStore):
        await store.connect()
        logger.info("MongoDB connected successfully")
    else:
        logger.info("Using in-memory document store")


@app.on_event("shutdown")
async def shutdown_event():
    """Shutdown tasks"""
    logger.info("Shutting down intelliRead API")
    await get_store().close()


if __name__ == "__main__":
    import uvicorn
    import os
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "intelliread.main:app",
        host="0.0.0.0",
        port=port,
    )
