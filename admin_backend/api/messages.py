import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from admin_backend.api.deps import get_gateway, require_db
from admin_backend.bot.gateway import TelegramGateway
from admin_backend.core.security import auth_required
from admin_backend.db import repositories
from admin_backend.db.session import Database
from admin_backend.models.message import MessageStatus, ReplyIn, StatusUpdate, StoredMessage

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(auth_required)])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")


@router.get("")
async def list_messages(
    status_filter: Optional[MessageStatus] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Database = Depends(require_db),
):
    status_value = status_filter.value if status_filter else None
    rows = await repositories.list_messages(db, status=status_value, limit=limit, offset=offset)
    total = await repositories.count_messages(db, status=status_value)
    return {
        "items": [StoredMessage.from_row(r) for r in rows],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


@router.get("/stats")
async def message_stats(db: Database = Depends(require_db)) -> Dict[str, Any]:
    by_status = await repositories.status_counts(db)
    return {"total": sum(by_status.values()), "by_status": by_status}


@router.get("/{message_id}", response_model=StoredMessage)
async def get_message(message_id: int, db: Database = Depends(require_db)):
    row = await repositories.get_message(db, message_id)
    if row is None:
        raise _not_found()
    return StoredMessage.from_row(row)


@router.patch("/{message_id}", response_model=StoredMessage)
async def update_message(message_id: int, body: StatusUpdate, db: Database = Depends(require_db)):
    row = await repositories.update_message_status(db, message_id, body.status.value)
    if row is None:
        raise _not_found()
    logger.info("Message %s marked as %s", message_id, body.status.value)
    return StoredMessage.from_row(row)


@router.post("/{message_id}/reply", response_model=StoredMessage)
async def reply_to_message(
    message_id: int,
    body: ReplyIn,
    db: Database = Depends(require_db),
    gateway: TelegramGateway = Depends(get_gateway),
):
    row = await repositories.get_message(db, message_id)
    if row is None:
        raise _not_found()

    # Bot conversations are private chats, where the chat id equals the user id
    delivered = await gateway.send_message(row["user_id"], body.text)
    if not delivered:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to deliver reply")

    updated = await repositories.update_message_status(db, message_id, MessageStatus.REPLIED.value)
    if updated is None:
        raise _not_found()
    logger.info("Replied to message %s (user %s)", message_id, row["user_id"])
    return StoredMessage.from_row(updated)


@router.delete("/{message_id}")
async def delete_message(message_id: int, db: Database = Depends(require_db)):
    if not await repositories.delete_message(db, message_id):
        raise _not_found()
    logger.info("Message %s deleted", message_id)
    return {"deleted": True, "id": message_id}
