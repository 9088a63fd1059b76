from fastapi import APIRouter, Depends, HTTPException, Request
import logging

from ..application.services.assistant_service import AssistantService
from ..schemas.assistant.assistant import AssistantQuery, AssistantReply
from ..schemas.common.common import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["Assistant"], responses={400: {"model": ErrorResponse}})


def get_assistant_service(request: Request) -> AssistantService:
    return request.app.state.assistant


@router.post("/query", response_model=AssistantReply, response_model_exclude_none=True)
def query_assistant(
    body: AssistantQuery,
    assistant: AssistantService = Depends(get_assistant_service),
):
    if not body.query or not isinstance(body.query, str):
        raise HTTPException(status_code=400, detail="Query is required and must be a string")
    return assistant.answer(body.query, include_image=body.includeImage)


@router.get("/welcome", response_model=AssistantReply, response_model_exclude_none=True)
def welcome(assistant: AssistantService = Depends(get_assistant_service)):
    return assistant.welcome()
