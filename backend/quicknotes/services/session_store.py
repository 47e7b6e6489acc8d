"""Persisted login credential storage."""

from datetime import datetime, timezone
from typing import Optional

import aiosqlite
from pydantic import BaseModel

from quicknotes.database.db import init_db
from quicknotes.logging import get_logger
from quicknotes.models import User

logger = get_logger('services.session_store')


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class StoredCredential(BaseModel):
    """The single credential kept on disk between runs."""
    user: User
    access_token: str
    created_at: Optional[str] = None


def _row_to_credential(row: dict) -> StoredCredential:
    return StoredCredential(
        user=User(id=row["user_id"], email=row["email"]),
        access_token=row["access_token"],
        created_at=row.get("created_at"),
    )


class SessionStore:
    """Reads and writes the persisted credential in a local SQLite file."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._initialized = False

    async def _get_db(self) -> aiosqlite.Connection:
        if not self._initialized:
            await init_db(self.db_path)
            self._initialized = True
        db = await aiosqlite.connect(self.db_path)
        db.row_factory = aiosqlite.Row
        return db

    async def load(self) -> StoredCredential | None:
        db = await self._get_db()
        try:
            cursor = await db.execute("SELECT * FROM persisted_session WHERE id = 1")
            row = await cursor.fetchone()
            return _row_to_credential(dict(row)) if row else None
        finally:
            await db.close()

    async def save(self, user: User, access_token: str) -> StoredCredential:
        credential = StoredCredential(user=user, access_token=access_token, created_at=_now())
        db = await self._get_db()
        try:
            await db.execute(
                """INSERT OR REPLACE INTO persisted_session (id, user_id, email, access_token, created_at)
                   VALUES (1, ?, ?, ?, ?)""",
                (user.id, user.email, access_token, credential.created_at),
            )
            await db.commit()
        finally:
            await db.close()
        logger.info(f"Persisted session for {user.email}")
        return credential

    async def clear(self) -> bool:
        db = await self._get_db()
        try:
            cursor = await db.execute("DELETE FROM persisted_session")
            await db.commit()
            cleared = cursor.rowcount > 0
        finally:
            await db.close()

        if cleared:
            logger.info("Cleared persisted session")
        return cleared

    async def get_access_token(self) -> str | None:
        credential = await self.load()
        return credential.access_token if credential else None
