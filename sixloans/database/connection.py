import logging
import re

import motor.motor_asyncio
from beanie import init_beanie

from sixloans.core.config import settings
from sixloans.database.models import DOCUMENT_MODELS

logger = logging.getLogger(__name__)

MONGO_TIMEOUT_MS = 30000

_client = None
database = None


def _mask_mongo_uri(uri: str) -> str:
    match = re.match(r"(?P<scheme>mongodb(?:\+srv)?://)(?:[^@]+@)?(?P<hosts>[^/?]+)", uri or "")
    if not match:
        return "mongodb://<redacted>"
    return f"{match.group('scheme')}***@{match.group('hosts')}"


def _required(name: str) -> str:
    value = getattr(settings, name)
    if not value:
        logger.error("%s is not set", name)
        raise RuntimeError(f"Configuration error: {name} is not set in environment variables")
    return value


async def init_db():
    """Connect to MongoDB and register every Beanie document model."""
    global _client, database

    uri = _required("MONGODB_URI")
    db_name = _required("MONGODB_DB_NAME")
    logger.info("Connecting to MongoDB at %s (database %s)", _mask_mongo_uri(uri), db_name)

    _client = motor.motor_asyncio.AsyncIOMotorClient(
        uri,
        serverSelectionTimeoutMS=MONGO_TIMEOUT_MS,
        connectTimeoutMS=MONGO_TIMEOUT_MS,
        socketTimeoutMS=MONGO_TIMEOUT_MS,
        retryWrites=True,
    )
    try:
        await _client.admin.command("ping")
        database = _client[db_name]
        await init_beanie(database=database, document_models=DOCUMENT_MODELS)
    except Exception:
        logger.exception("Database initialization failed")
        close_db()
        raise

    logger.info("Beanie initialized with %d document models", len(DOCUMENT_MODELS))
    return database


def close_db():
    global _client, database
    if _client is not None:
        _client.close()
        logger.info("MongoDB connection closed")
    _client = None
    database = None

