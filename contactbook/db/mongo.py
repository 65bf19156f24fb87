# contactbook/db/mongo.py

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from fastapi import Request

from contactbook.config import Settings

logger = logging.getLogger(__name__)

CONTACTS = "contacts"


def create_client(settings: Settings) -> AsyncIOMotorClient:
    # Motor connects lazily, so this never blocks app startup
    return AsyncIOMotorClient(
        settings.mongo_uri,
        serverSelectionTimeoutMS=settings.mongo_timeout_ms,
    )


def get_contacts_collection(db: AsyncIOMotorDatabase):
    return db[CONTACTS]


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    await get_contacts_collection(db).create_index([("created", -1)])
    logger.info("Indexes ensured on %s.%s", db.name, CONTACTS)


def contacts_collection(request: Request):
    """FastAPI dependency: the contacts collection of the app's database."""
    return get_contacts_collection(request.app.state.db)
