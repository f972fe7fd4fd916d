"""
Chat Endpoints

Rooms, messages and a server-sent event stream that forwards new messages
of one room as they are inserted.
"""

import json
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import StreamingResponse

from projecthub.api.deps import AppState, get_app_state
from projecthub.controllers import ChatsController
from projecthub.core.logging import get_logger
from projecthub.schemas import ChatRoomCreate, MessageCreate
from projecthub.services.chat import ChatService
from projecthub.services.realtime import Subscription, get_change_broker

logger = get_logger(__name__)

router = APIRouter(prefix="/chats")

HEARTBEAT_SECONDS = 15.0


@router.get("", summary="Chats page")
async def chats(
    room: Optional[str] = Query(None, description="Room to open"),
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    return await ChatsController(app).render(room)


@router.post("/rooms", status_code=status.HTTP_201_CREATED, summary="Create room")
async def create_room(payload: ChatRoomCreate, app: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return await ChatsController(app).create_room(payload)


@router.get("/rooms/{room_id}", summary="Room with its latest messages")
async def get_room(room_id: str, app: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return await ChatsController(app).room(room_id)


@router.post("/rooms/{room_id}/messages", status_code=status.HTTP_201_CREATED, summary="Send message")
async def send_message(
    room_id: str,
    payload: MessageCreate,
    app: AppState = Depends(get_app_state),
) -> Dict[str, Any]:
    return await ChatsController(app).send(room_id, payload)


async def event_stream(request: Request, subscription: Subscription) -> AsyncIterator[str]:
    with subscription:
        yield ": connected\n\n"
        while not await request.is_disconnected():
            event = await subscription.get(timeout=HEARTBEAT_SECONDS)
            if event is None:
                yield ": keep-alive\n\n"
                continue
            yield f"event: message\ndata: {json.dumps(event.to_dict())}\n\n"
    logger.debug("Chat stream closed", subscription_id=subscription.id)


@router.get("/rooms/{room_id}/stream", summary="Live messages of a room")
async def stream_room(
    room_id: str,
    request: Request,
    app: AppState = Depends(get_app_state),
) -> StreamingResponse:
    await ChatService(app.data, app.user).get_room(room_id)
    subscription = get_change_broker().subscribe(
        app.mode.value,
        "chat_messages",
        column="room_id",
        value=room_id,
    )
    return StreamingResponse(
        event_stream(request, subscription),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
