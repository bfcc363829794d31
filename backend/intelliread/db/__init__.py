"""Database module initialization"""
from .store import DocumentStore, MemoryStore
from .mongodb import MongoStore
from .repository import DocumentRepository

__all__ = ["DocumentStore", "MemoryStore", "MongoStore", "DocumentRepository"]
