"""
Job Request Routes

GET /requests - Requests visible to the caller (inbox)
GET /requests/{id} - One request
PUT /requests/{id}/respond - Accept or reject (receiving party only)
GET /requests/{id}/messages - Conversation on a request
POST /requests/{id}/messages - Post a message
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from udyoga_mitra.core.auth import SessionContext, get_profiled_session
from udyoga_mitra.services.workflow_service import get_request_workflow
from udyoga_mitra.schemas.schemas import (
    JobRequestResponse, RespondRequest, MessageCreate, ChatMessageResponse, RequestStatus, UserType
)

router = APIRouter(prefix="/requests", tags=["Job Requests"])


@router.get("", response_model=List[JobRequestResponse])
async def list_requests(
    status: Optional[RequestStatus] = Query(None),
    job_id: Optional[int] = Query(None),
    initiated_by: Optional[UserType] = Query(None),
    session: SessionContext = Depends(get_profiled_session)
):
    """
    Students see requests addressed to or sent by them; employers see
    requests on jobs they own.
    """
    return get_request_workflow().list_requests(
        session,
        status=status.value if status else None,
        job_id=job_id,
        initiated_by=initiated_by.value if initiated_by else None
    )


@router.get("/{request_id}", response_model=JobRequestResponse)
async def get_request(request_id: int, session: SessionContext = Depends(get_profiled_session)):
    return get_request_workflow().get_request(session, request_id)


@router.put("/{request_id}/respond", response_model=JobRequestResponse)
async def respond_to_request(
    request_id: int,
    response: RespondRequest,
    session: SessionContext = Depends(get_profiled_session)
):
    """Accept or reject a pending request. Each request can be answered once."""
    return get_request_workflow().respond(session, request_id, response.outcome.value)


@router.get("/{request_id}/messages", response_model=List[ChatMessageResponse])
async def list_messages(request_id: int, session: SessionContext = Depends(get_profiled_session)):
    """Messages on a request, oldest first."""
    return get_request_workflow().list_messages(session, request_id)


@router.post("/{request_id}/messages", response_model=ChatMessageResponse, status_code=201)
async def post_message(request_id: int, data: MessageCreate, session: SessionContext = Depends(get_profiled_session)):
    return get_request_workflow().post_message(session, request_id, data.content)
