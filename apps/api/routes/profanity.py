"""Process-wide custom profanity list."""

from __future__ import annotations

from fastapi import APIRouter, Request

from routes._deps import app_services
from routes.schemas import ProfanityListResponse, WordsRequest

router = APIRouter(prefix="/profanity", tags=["profanity"])


@router.post("/add", response_model=ProfanityListResponse)
async def add_words(request: Request, payload: WordsRequest) -> ProfanityListResponse:
    words = app_services(request).custom_words.add(payload.words)
    return ProfanityListResponse(custom_profanity_list=words)


@router.post("/remove", response_model=ProfanityListResponse)
async def remove_words(request: Request, payload: WordsRequest) -> ProfanityListResponse:
    words = app_services(request).custom_words.remove(payload.words)
    return ProfanityListResponse(custom_profanity_list=words)


@router.get("/list", response_model=ProfanityListResponse)
async def list_words(request: Request) -> ProfanityListResponse:
    return ProfanityListResponse(custom_profanity_list=app_services(request).custom_words.words())
