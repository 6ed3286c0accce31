import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Request
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorDatabase,
)
from pymongo import ASCENDING, DESCENDING

from app.core.config import Settings

logger = logging.getLogger(__name__)


class Database:
    """
    Data-access handle shared by every request.

    Built once at startup (or injected by tests) and stored on
    ``app.state.database``; routes receive it through ``get_database``.
    """

    def __init__(
        self,
        client: AsyncIOMotorClient,
        database_name: str,
        use_transactions: bool = False
    ):
        self.client = client
        self.db: AsyncIOMotorDatabase = client[database_name]
        self.use_transactions = use_transactions

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Open a Motor client for the configured MongoDB deployment"""
        client = AsyncIOMotorClient(settings.mongodb_url)
        logger.info("[OK] Connected to MongoDB (database=%s)", settings.database_name)
        return cls(client, settings.database_name, settings.use_transactions)

    @property
    def users(self):
        return self.db.users

    @property
    def contests(self):
        return self.db.contests

    @property
    def payments(self):
        return self.db.payments

    async def create_indexes(self):
        """Create database indexes"""
        # Unique email backs the register-or-noop check against concurrent sign-ins
        try:
            await self.users.create_index([("email", ASCENDING)], unique=True)
            logger.info("[OK] Created unique index on users.email")
        except Exception as e:
            logger.warning("[WARN] Index on users.email may already exist: %s", e)

        try:
            await self.contests.create_index([("status", ASCENDING), ("participationCount", DESCENDING)])
            await self.contests.create_index([("creatorEmail", ASCENDING)])
            logger.info("[OK] Created indexes on contests")
        except Exception as e:
            logger.warning("[WARN] Indexes on contests may already exist: %s", e)

        try:
            await self.payments.create_index([("email", ASCENDING)])
            await self.payments.create_index([("contestId", ASCENDING), ("status", ASCENDING)])
            logger.info("[OK] Created indexes on payments")
        except Exception as e:
            logger.warning("[WARN] Indexes on payments may already exist: %s", e)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Optional[AsyncIOMotorClientSession]]:
        """
        Run a block of writes atomically.

        Yields a session to pass as ``session=`` to every collection call in
        the block.  With transactions disabled (standalone servers, tests)
        it yields ``None`` and the writes run one after another.
        """
        if not self.use_transactions:
            yield None
            return

        async with await self.client.start_session() as session:
            async with session.start_transaction():
                yield session

    def close(self):
        """Close MongoDB connection"""
        self.client.close()
        logger.info("[OK] Disconnected from MongoDB")


async def get_database(request: Request) -> Database:
    """Dependency to get the database handle created at startup"""
    return request.app.state.database
