"""WebSocket endpoint for real-time board chat."""

import asyncio
import json
import uuid
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from boardroom.config.database import SessionLocal
from boardroom.config.settings import settings
from boardroom.endpoints.chat import serialize_message, serialize_persona
from boardroom.integrations.claude import CompletionClient, get_completion_client
from boardroom.middleware.error_handler import APIError
from boardroom.models import Message, Persona
from boardroom.schemas.chat import ChatMessageEvent
from boardroom.services.chat import ChatOrchestrator
from boardroom.services.token import user_id_from_token

logger = structlog.get_logger()
router = APIRouter()


class ChatConnection:
    """One client tab. Sends are serialized; a closed socket drops events."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self.id = uuid.uuid4().hex[:8]
        self.closed = False
        self._send_lock = asyncio.Lock()

    async def send(self, event: dict) -> bool:
        if self.closed:
            return False
        try:
            async with self._send_lock:
                await self.websocket.send_json(event)
            return True
        except (WebSocketDisconnect, RuntimeError) as e:
            # Messages are already persisted; the client re-reads history on reconnect
            self.closed = True
            logger.info("Dropping event for closed connection", connection=self.id, event=event.get("type"), error=str(e))
            return False

    async def send_error(self, error: str) -> bool:
        return await self.send({"type": "error", "error": error})


class ConnectionManager:
    """Tracks live connections and the fan-out tasks they started."""

    def __init__(self):
        self.active_connections: dict[str, ChatConnection] = {}
        self.tasks: set[asyncio.Task] = set()

    async def connect(self, websocket: WebSocket) -> ChatConnection:
        await websocket.accept()
        connection = ChatConnection(websocket)
        self.active_connections[connection.id] = connection
        return connection

    def disconnect(self, connection: ChatConnection) -> None:
        connection.closed = True
        self.active_connections.pop(connection.id, None)

    def spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)
        return task


manager = ConnectionManager()


class WebSocketEventSink:
    """Pushes persona lifecycle events to one connection."""

    def __init__(self, connection: ChatConnection):
        self.connection = connection

    async def persona_typing(self, persona: Persona) -> None:
        await self.connection.send({
            "type": "persona_typing",
            "personaId": persona.id,
            "personaName": persona.name,
        })

    async def persona_reply(self, message: Message, persona: Persona) -> None:
        await self.connection.send({
            "type": "persona_reply",
            "message": serialize_message(message),
            "persona": serialize_persona(persona),
        })

    async def persona_failed(self, persona: Persona, reason: str) -> None:
        await self.connection.send({
            "type": "persona_error",
            "personaId": persona.id,
            "error": reason,
        })

    async def persona_stop_typing(self, persona: Persona) -> None:
        await self.connection.send({
            "type": "persona_stop_typing",
            "personaId": persona.id,
        })


async def receive_event(websocket: WebSocket) -> Optional[object]:
    """Read one frame, text or binary, and decode it as JSON.

    Returns None when the frame is not valid JSON.

    Raises:
        WebSocketDisconnect: the client went away
    """
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000))

    raw = message.get("text")
    if raw is None:
        raw = message.get("bytes") or b""
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


async def heartbeat(connection: ChatConnection, interval: float) -> None:
    """Ping the client until the connection closes."""
    while True:
        await asyncio.sleep(interval)
        if not await connection.send({"type": "ping"}):
            return


async def handle_chat_message(
    connection: ChatConnection,
    data: dict,
    token_user_id: Optional[int],
    completion_client: CompletionClient,
    session_factory: sessionmaker = SessionLocal,
) -> None:
    """Accept one chat_message and stream every persona's reply."""
    try:
        event = ChatMessageEvent.model_validate(data)
    except ValidationError as e:
        errors = e.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(loc) for loc in first.get("loc", []))
        await connection.send_error(f"Invalid chat_message: {field} {first.get('msg', '')}".strip())
        return

    user_id = token_user_id if token_user_id is not None else event.user_id
    if user_id is None:
        await connection.send_error("Not authenticated")
        return

    db: Session = session_factory()
    try:
        orchestrator = ChatOrchestrator(db, completion_client)
        try:
            accepted = orchestrator.accept(
                owner_id=user_id,
                conversation_id=event.conversation_id,
                content=event.content,
                message_type=event.message_type,
                persona_ids=event.persona_ids,
                attachment=event.attachment.model_dump(by_alias=True) if event.attachment else None,
            )
        except APIError as e:
            logger.info("chat_message rejected", connection=connection.id, code=e.code, error=e.message)
            await connection.send_error(e.message)
            return

        await connection.send({
            "type": "message_sent",
            "message": serialize_message(accepted.user_message),
        })

        await orchestrator.stream_replies(accepted, WebSocketEventSink(connection))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("chat_message failed", connection=connection.id, error=str(e))
        await connection.send_error("Failed to process message")
    except Exception as e:
        # Runs as a background task; nothing else would report this
        logger.exception("chat_message crashed", connection=connection.id, error=str(e))
        await connection.send_error("Failed to process message")
    finally:
        db.close()


@router.websocket("/ws")
async def chat_websocket(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    completion_client: CompletionClient = Depends(get_completion_client),
):
    """WebSocket endpoint for real-time board chat.

    Protocol:
    - Server sends {"type": "connection_established"} on connect
    - Client sends {"type": "chat_message", "conversationId", "content", "userId", "personaIds"}
    - Server sends {"type": "message_sent", "message"} once the user message is saved
    - Per persona: {"type": "persona_typing"}, then {"type": "persona_reply"} or
      {"type": "persona_error"}, then {"type": "persona_stop_typing"}
    - Server sends {"type": "ping"} every WS_HEARTBEAT_SECONDS; client may send
      {"type": "ping"} and gets {"type": "pong"}
    - Malformed events get {"type": "error", "error"}; the connection stays open

    Nothing is replayed on reconnect; clients reload history over HTTP.
    A session token (query `token` or the session cookie) takes precedence
    over the `userId` in the event.
    """
    connection = await manager.connect(websocket)
    session_token = token or websocket.cookies.get(settings.COOKIE_NAME)
    token_user_id = user_id_from_token(session_token) if session_token else None

    logger.info("WebSocket connected", connection=connection.id, authenticated=token_user_id is not None)

    await connection.send({
        "type": "connection_established",
        "message": "Connected to AI Board chat",
    })
    pinger = asyncio.create_task(heartbeat(connection, settings.WS_HEARTBEAT_SECONDS))

    try:
        while True:
            data = await receive_event(websocket)
            if data is None:
                await connection.send_error("Invalid JSON")
                continue

            if not isinstance(data, dict):
                await connection.send_error("Event must be a JSON object")
                continue

            msg_type = data.get("type")

            if msg_type == "chat_message":
                # Fan-out runs beside the receive loop; it outlives a disconnect
                # so replies are still persisted
                manager.spawn(handle_chat_message(connection, data, token_user_id, completion_client))
            elif msg_type == "ping":
                await connection.send({"type": "pong"})
            elif msg_type == "pong":
                continue
            else:
                await connection.send_error(f"Unknown event type: {msg_type}")

    except WebSocketDisconnect:
        logger.info("WebSocket disconnected", connection=connection.id)
    except Exception as e:
        logger.exception("WebSocket error", connection=connection.id, error=str(e))
        await connection.send_error("Server error")
    finally:
        pinger.cancel()
        manager.disconnect(connection)
