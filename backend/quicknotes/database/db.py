"""
Local database connection and initialization.

Holds the persisted login credential so a restart can restore the session.
"""

import aiosqlite
from pathlib import Path
from quicknotes.config import settings
from quicknotes.logging import get_logger

logger = get_logger('database')


async def init_db(db_path: str | None = None) -> None:
    """Create the credential table if it does not exist yet."""
    path = Path(db_path or settings.SESSION_DB_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)

    async with aiosqlite.connect(path) as db:
        await db.execute(
            """CREATE TABLE IF NOT EXISTS persisted_session (
                id INTEGER PRIMARY KEY CHECK(id = 1),
                user_id TEXT NOT NULL,
                email TEXT NOT NULL,
                access_token TEXT NOT NULL,
                created_at TEXT NOT NULL
            )"""
        )
        await db.commit()

    logger.debug(f"Session database ready at {path}")
