import logging
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from connecto.core.errors import AppError
from connecto.core.security import COOKIE_NAME, decode_access_token
from connecto.db.database import get_db
from connecto.models.group import room_for_group
from connecto.models.user import User
from connecto.realtime.hub import ConnectionHub, get_hub
from connecto.services.messaging_service import MessagingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


def _socket_user(websocket: WebSocket, db: Session) -> Optional[User]:
    """The user named by `userId`, provided the session token belongs to them."""
    raw_user_id = websocket.query_params.get("userId")
    if not raw_user_id or not raw_user_id.isdigit():
        return None

    token = websocket.cookies.get(COOKIE_NAME) or websocket.query_params.get("token")
    if not token:
        logger.info("Socket for user %s refused: no session token", raw_user_id)
        return None
    try:
        token_user_id = decode_access_token(token)
    except AppError as e:
        logger.info("Socket for user %s refused: %s", raw_user_id, e.message)
        return None
    if token_user_id != int(raw_user_id):
        logger.warning("Socket for user %s refused: token belongs to user %s", raw_user_id, token_user_id)
        return None

    return db.query(User).filter(User.id == token_user_id).first()


@router.websocket("/ws")
async def realtime_channel(
    websocket: WebSocket,
    db: Session = Depends(get_db),
    hub: ConnectionHub = Depends(get_hub),
):
    """
    Presence and push channel. Connect with `?userId=<id>` and a session,
    either the `jwt` cookie or a `token` query parameter.

    Server frames are `{"event": ..., "data": ...}`. The connection is joined
    to the rooms of every group the user already belongs to.
    """
    user = _socket_user(websocket, db)
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    user_id = user.id
    rooms = [room_for_group(group_id) for group_id in MessagingService(hub).member_group_ids(db, user_id)]
    # Release the session; the socket may stay open for hours
    db.close()

    connection_id = None
    try:
        connection_id = await hub.connect(websocket, user_id, rooms)
        while True:
            frame = await websocket.receive_text()
            if frame == "ping":
                await websocket.send_json({"event": "pong", "data": None})
    except WebSocketDisconnect as e:
        logger.debug("Socket for user %s closed with code %s", user_id, e.code)
    finally:
        if connection_id is not None:
            await hub.disconnect(user_id, connection_id)
