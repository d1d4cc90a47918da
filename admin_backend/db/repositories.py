import logging
from typing import Any, Dict, List, Optional

from admin_backend.db.session import Database

logger = logging.getLogger(__name__)


async def insert_message(db: Database, user_id: str, text: Optional[str], status: str = "new") -> Dict[str, Any]:
    rows = await db.query(
        '''
        INSERT INTO messages (user_id, text, status)
        VALUES ($1, $2, $3)
        RETURNING *;
        ''',
        user_id,
        text,
        status,
    )
    return rows[0]


async def list_messages(
    db: Database,
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    if status:
        return await db.query(
            '''
            SELECT * FROM messages
            WHERE status = $1
            ORDER BY created_at DESC, id DESC
            LIMIT $2 OFFSET $3;
            ''',
            status,
            limit,
            offset,
        )
    return await db.query(
        '''
        SELECT * FROM messages
        ORDER BY created_at DESC, id DESC
        LIMIT $1 OFFSET $2;
        ''',
        limit,
        offset,
    )


async def count_messages(db: Database, status: Optional[str] = None) -> int:
    if status:
        rows = await db.query("SELECT COUNT(*) AS total FROM messages WHERE status = $1;", status)
    else:
        rows = await db.query("SELECT COUNT(*) AS total FROM messages;")
    return int(rows[0]["total"]) if rows else 0


async def get_message(db: Database, message_id: int) -> Optional[Dict[str, Any]]:
    rows = await db.query("SELECT * FROM messages WHERE id = $1;", message_id)
    return rows[0] if rows else None


async def update_message_status(db: Database, message_id: int, status: str) -> Optional[Dict[str, Any]]:
    rows = await db.query(
        '''
        UPDATE messages
        SET status = $2, updated_at = NOW()
        WHERE id = $1
        RETURNING *;
        ''',
        message_id,
        status,
    )
    return rows[0] if rows else None


async def delete_message(db: Database, message_id: int) -> bool:
    rows = await db.query("DELETE FROM messages WHERE id = $1 RETURNING id;", message_id)
    return bool(rows)


async def status_counts(db: Database) -> Dict[str, int]:
    rows = await db.query(
        '''
        SELECT status, COUNT(*) AS total
        FROM messages
        GROUP BY status;
        '''
    )
    return {r["status"]: int(r["total"]) for r in rows}
