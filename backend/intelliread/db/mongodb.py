"""MongoDB database connection and store implementation"""
from motor.motor_asyncio import AsyncIOMotorClient
from typing import Any, Dict, List, Optional
import logging
from .store import DocumentStore, DEPENDENT_COLLECTIONS, DOCUMENTS

logger = logging.getLogger(__name__)


class MongoStore(DocumentStore):
    """DocumentStore backed by MongoDB through motor"""

    def __init__(self, mongodb_url: str, db_name: str):
        self.mongodb_url = mongodb_url
        self.db_name = db_name
        self.client: Optional[AsyncIOMotorClient] = None
        self.database = None

    async def connect(self):
        """Connect to MongoDB"""
        try:
            logger.info("Connecting to MongoDB")
            self.client = AsyncIOMotorClient(self.mongodb_url)
            self.database = self.client[self.db_name]

            # Test connection
            await self.client.admin.command('ping')
            logger.info(f"Successfully connected to MongoDB database: {self.db_name}")

            await self._create_indexes()

        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    async def close(self):
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed")

    async def _create_indexes(self):
        """Create database indexes for performance"""
        try:
            for name in DEPENDENT_COLLECTIONS:
                await self.database[name].create_index("document_id")
            logger.info("Database indexes created successfully")

        except Exception as e:
            logger.warning(f"Error creating indexes: {e}")

    def _collection(self, collection: str):
        if self.database is None:
            raise RuntimeError("Database not connected. Call connect() first")
        return self.database[collection]

    async def put(self, collection: str, record: Dict[str, Any]) -> None:
        await self._collection(collection).replace_one(
            {"id": record["id"]}, record, upsert=True
        )

    async def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        return await self._collection(collection).find_one({"id": key}, {"_id": 0})

    async def get_all(self, collection: str) -> List[Dict[str, Any]]:
        cursor = self._collection(collection).find({}, {"_id": 0})
        return await cursor.to_list(length=None)

    async def get_all_by_index(self, collection: str, document_id: str) -> List[Dict[str, Any]]:
        cursor = self._collection(collection).find({"document_id": document_id}, {"_id": 0})
        return await cursor.to_list(length=None)

    async def delete(self, collection: str, key: str) -> None:
        await self._collection(collection).delete_one({"id": key})

    async def delete_document(self, document_id: str, keep_document: bool = False) -> None:
        for name in DEPENDENT_COLLECTIONS:
            result = await self._collection(name).delete_many({"document_id": document_id})
            logger.debug(f"Deleted {result.deleted_count} {name} for document {document_id}")
        if not keep_document:
            await self._collection(DOCUMENTS).delete_one({"id": document_id})
