"""Chat submission endpoint (single request, single response).

The whole persona fan-out runs before the response is returned; use the
WebSocket channel to see replies as they land.
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from boardroom.config.database import get_db
from boardroom.integrations.claude import CompletionClient, get_completion_client
from boardroom.models import Message, Persona, User
from boardroom.schemas.base import ErrorResponse
from boardroom.schemas.chat import (
    ChatSendRequest,
    ChatSendResponse,
    PersonaFailureResponse,
    PersonaReplyResponse,
)
from boardroom.schemas.conversations import MessageResponse
from boardroom.schemas.personas import PersonaSummary
from boardroom.services.chat import ChatOrchestrator, ChatResult
from boardroom.services.rbac import get_current_user

logger = structlog.get_logger()
router = APIRouter()


def serialize_message(message: Message) -> dict:
    return MessageResponse.from_message(message).model_dump(by_alias=True, mode="json")


def serialize_persona(persona: Persona) -> dict:
    return PersonaSummary.model_validate(persona).model_dump(by_alias=True, mode="json")


def chat_response(result: ChatResult) -> ChatSendResponse:
    return ChatSendResponse(
        user_message=MessageResponse.from_message(result.user_message),
        persona_results=[
            PersonaReplyResponse(
                message=MessageResponse.from_message(reply.message),
                persona=PersonaSummary.model_validate(reply.persona),
            )
            for reply in result.results
        ],
        failures=[
            PersonaFailureResponse(persona_id=f.persona_id, reason=f.reason)
            for f in result.failures
        ],
    )


@router.post(
    "/send",
    response_model=ChatSendResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def send_message(
    data: ChatSendRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    completion_client: CompletionClient = Depends(get_completion_client),
) -> ChatSendResponse:
    """
    Send a message to the selected board members.

    Always returns the persisted user message. `personaResults` holds the
    replies that succeeded, in requested order; personas that failed or
    timed out are listed in `failures` instead. Fewer results than requested
    personas is a normal outcome, not an error.
    """
    orchestrator = ChatOrchestrator(db, completion_client)
    result = await orchestrator.submit_message(
        owner_id=user.id,
        conversation_id=data.conversation_id,
        content=data.content,
        message_type=data.message_type,
        persona_ids=data.persona_ids,
        attachment=data.attachment.model_dump(by_alias=True) if data.attachment else None,
    )
    return chat_response(result)
