from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure
import logging
from .config import get_db_config

logger = logging.getLogger(__name__)

def get_mongodb_client() -> AsyncIOMotorClient:
    """Get an async MongoDB client with proper connection settings."""
    db_config = get_db_config()
    uri = db_config.get("uri")
    options = db_config.get("options", {})

    return AsyncIOMotorClient(
        uri,
        serverSelectionTimeoutMS=options.get("serverSelectionTimeoutMS", 30000),
        socketTimeoutMS=options.get("socketTimeoutMS", 45000),
        connectTimeoutMS=options.get("connectTimeoutMS", 30000)
    )

def get_database(client: AsyncIOMotorClient) -> AsyncIOMotorDatabase:
    return client[get_db_config()["database"]]

async def ping(client: AsyncIOMotorClient) -> bool:
    """Check that the MongoDB server answers."""
    try:
        await client.admin.command('ping')
        logger.info("Successfully connected to MongoDB")
        return True
    except ConnectionFailure as e:
        logger.error(f"Failed to connect to MongoDB: {e}")
        return False
