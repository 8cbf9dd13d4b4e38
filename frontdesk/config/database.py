"""
Database configuration and connection management for MongoDB
"""
from motor.motor_asyncio import AsyncIOMotorClient
from typing import Optional
import logging
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

class DatabaseConfig:
    """MongoDB database configuration"""

    def __init__(self):
        self.MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
        self.DATABASE_NAME = os.getenv("DATABASE_NAME", "frontdesk_db")
        self.client: Optional[AsyncIOMotorClient] = None
        self.database = None

    async def connect_db(self):
        """Connect to MongoDB and make sure the indexes the workflows rely on exist"""
        try:
            self.client = AsyncIOMotorClient(self.MONGO_URI)
            self.database = self.client[self.DATABASE_NAME]
            # Test connection
            await self.client.admin.command('ping')
            await self.ensure_indexes()
            logger.info("✅ Connected to MongoDB: %s", self.DATABASE_NAME)
        except Exception as e:
            logger.error("❌ Error connecting to MongoDB: %s", e)
            raise

    async def ensure_indexes(self):
        await self.database[Collections.ROOMS].create_index("room_number", unique=True)
        await self.database[Collections.ROOMS].create_index([("floor", 1), ("room_number", 1)])
        await self.database[Collections.BOOKINGS].create_index("check_in")
        await self.database[Collections.BOOKINGS].create_index([("room_id", 1), ("status", 1)])
        await self.database[Collections.GUESTS].create_index([("phone_number", 1), ("created_at", -1)])
        await self.database[Collections.GUESTS].create_index("booking_id")

    async def close_db(self):
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            logger.info("✅ MongoDB connection closed")

    def get_collection(self, collection_name: str):
        """Get a specific collection"""
        if self.database is None:
            raise Exception("Database not connected")
        return self.database[collection_name]

# Global database instance
db_config = DatabaseConfig()

# Collection names
class Collections:
    ROOMS = "rooms"
    BOOKINGS = "bookings"
    GUESTS = "guests"
    WAITING_LIST = "waiting_list"
