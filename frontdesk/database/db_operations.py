"""
Database operations - Generic CRUD functions for all collections
"""
from typing import List, Dict, Optional, Any, Tuple
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from frontdesk.config.database import db_config
from datetime import datetime

def to_object_id(doc_id: str) -> Optional[ObjectId]:
    """Parse a string id, returning None for anything that is not an ObjectId"""
    try:
        return ObjectId(doc_id)
    except (InvalidId, TypeError):
        return None

class DBOperations:
    """Generic database operations for MongoDB collections"""

    @staticmethod
    async def get_all(
        collection_name: str,
        filter_query: Dict = None,
        skip: int = 0,
        limit: int = 100,
        sort: Optional[List[Tuple[str, int]]] = None,
    ) -> List[Dict]:
        """Get all documents from a collection with optional filtering and sorting (limit=0 means no limit)"""
        collection = db_config.get_collection(collection_name)
        filter_query = filter_query or {}
        cursor = collection.find(filter_query)
        if sort:
            cursor = cursor.sort(sort)
        cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        documents = await cursor.to_list(length=limit or None)
        return documents

    @staticmethod
    async def get_by_id(collection_name: str, doc_id: str) -> Optional[Dict]:
        """Get a single document by ID"""
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        collection = db_config.get_collection(collection_name)
        return await collection.find_one({"_id": oid})

    @staticmethod
    async def get_one(collection_name: str, filter_query: Dict, sort: Optional[List[Tuple[str, int]]] = None) -> Optional[Dict]:
        """Get a single document by filter query"""
        collection = db_config.get_collection(collection_name)
        document = await collection.find_one(filter_query, sort=sort)
        return document

    @staticmethod
    async def create(collection_name: str, document: Dict) -> Dict:
        """Create a new document"""
        collection = db_config.get_collection(collection_name)
        document["created_at"] = datetime.utcnow()
        document["updated_at"] = datetime.utcnow()
        result = await collection.insert_one(document)
        document["_id"] = result.inserted_id
        return document

    @staticmethod
    async def create_many(collection_name: str, documents: List[Dict]) -> List[Dict]:
        """Create several documents in one round trip"""
        if not documents:
            return []
        collection = db_config.get_collection(collection_name)
        now = datetime.utcnow()
        for document in documents:
            document["created_at"] = now
            document["updated_at"] = now
        result = await collection.insert_many(documents)
        for document, inserted_id in zip(documents, result.inserted_ids):
            document["_id"] = inserted_id
        return documents

    @staticmethod
    async def update(collection_name: str, doc_id: str, update_data: Dict, extra_filter: Dict = None) -> Optional[Dict]:
        """Update a document by ID.

        ``extra_filter`` narrows the match so the write only happens when the
        document is still in the expected state (e.g. a room that is still
        available). Returns None when nothing matched.
        """
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        collection = db_config.get_collection(collection_name)
        update_data["updated_at"] = datetime.utcnow()
        query = {"_id": oid}
        if extra_filter:
            query.update(extra_filter)
        result = await collection.find_one_and_update(
            query,
            {"$set": update_data},
            return_document=ReturnDocument.AFTER
        )
        return result

    @staticmethod
    async def delete(collection_name: str, doc_id: str) -> bool:
        """Delete a document by ID"""
        oid = to_object_id(doc_id)
        if oid is None:
            return False
        collection = db_config.get_collection(collection_name)
        result = await collection.delete_one({"_id": oid})
        return result.deleted_count > 0

    @staticmethod
    async def delete_many(collection_name: str, filter_query: Dict) -> int:
        """Delete every document matching the filter"""
        collection = db_config.get_collection(collection_name)
        result = await collection.delete_many(filter_query)
        return result.deleted_count

    @staticmethod
    async def count(collection_name: str, filter_query: Dict = None) -> int:
        """Count documents in a collection"""
        collection = db_config.get_collection(collection_name)
        filter_query = filter_query or {}
        count = await collection.count_documents(filter_query)
        return count

db_ops = DBOperations()
