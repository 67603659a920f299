"""Session lifecycle and history routes."""

from __future__ import annotations

from fastapi import APIRouter, Request

from routes._deps import app_services
from routes.schemas import CreateSessionResponse, HistoryResponse, SuccessResponse

router = APIRouter(tags=["sessions"])


@router.post("/session/create", response_model=CreateSessionResponse)
async def create_session(request: Request) -> CreateSessionResponse:
    session = await app_services(request).engine.create_session()
    return CreateSessionResponse(session_id=session.id)


@router.get("/session/{session_id}/history", response_model=HistoryResponse)
async def get_history(request: Request, session_id: str) -> HistoryResponse:
    view = await app_services(request).engine.get_history(session_id)
    return HistoryResponse(
        session=view.session.to_dict(),
        history=[entry.to_dict() for entry in view.history],
        available_versions=view.available_versions,
    )


@router.delete(
    "/session/{session_id}", response_model=SuccessResponse, response_model_exclude_none=True
)
async def delete_session(request: Request, session_id: str) -> SuccessResponse:
    await app_services(request).engine.delete_session(session_id)
    return SuccessResponse()


@router.post("/cleanup", response_model=SuccessResponse)
async def cleanup(request: Request) -> SuccessResponse:
    await app_services(request).engine.reset()
    return SuccessResponse(message="Cleanup complete.")
