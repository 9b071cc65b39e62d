from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.db_services import GeneratedSetStore
from app.core.logging import get_logger
from app.apis.deps import (
    current_user_id,
    get_generated_set_store,
    get_generation_service,
)
from app.modules.generation.errors import ErrorKind, GenerationError
from app.modules.generation.models import (
    ContentKind,
    GenerationRequest,
    GenerationResult,
)
from app.modules.generation.service import GenerationService
from .schemas import (
    ErrorResponse,
    FlashcardsResponse,
    GenerateRequest,
    GeneratedSetRead,
    QuizResponse,
    StudySetResponse,
)


router = APIRouter()
logger = get_logger(__name__)

ERROR_STATUS = {
    ErrorKind.REQUEST_INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFIGURATION_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.OVERLOADED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    ErrorKind.PARSING_FAILURE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

ERROR_RESPONSES = {
    code: {"model": ErrorResponse} for code in sorted(set(ERROR_STATUS.values()))
}


def _error_response(err: GenerationError) -> JSONResponse:
    body = ErrorResponse(error=err.message, kind=err.kind.value, retryable=err.retryable)
    return JSONResponse(status_code=ERROR_STATUS[err.kind], content=body.model_dump())


async def _generate_and_save(
    kind: ContentKind,
    req: GenerateRequest,
    user_id: int,
    service: GenerationService,
    store: GeneratedSetStore,
) -> tuple[int, GenerationResult] | GenerationError:
    outcome = await service.generate(
        GenerationRequest(
            content_kind=kind,
            topic=req.topic,
            item_count=req.item_count,
            difficulty=req.difficulty,
            source_text=req.source_text,
        )
    )
    if outcome.error is not None or outcome.result is None:
        return outcome.error or GenerationError(ErrorKind.UNKNOWN)
    result = outcome.result
    set_id = await store.save(user_id, result)
    logger.info("Saved %s set %d (%d items)", kind.value, set_id, result.accepted_count)
    return set_id, result


@router.post(
    f"/{settings.app.version}/generate/quiz",
    response_model=QuizResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["generation"],
)
async def generate_quiz(
    req: GenerateRequest,
    user_id: int = Depends(current_user_id),
    service: GenerationService = Depends(get_generation_service),
    store: GeneratedSetStore = Depends(get_generated_set_store),
):
    saved = await _generate_and_save(ContentKind.QUIZ, req, user_id, service, store)
    if isinstance(saved, GenerationError):
        return _error_response(saved)
    set_id, result = saved
    return QuizResponse(
        set_id=set_id,
        title=result.title,
        provider=result.provider_used,
        question_count=result.accepted_count,
        questions=result.items,
        warnings=result.warnings,
    )


@router.post(
    f"/{settings.app.version}/generate/flashcards",
    response_model=FlashcardsResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["generation"],
)
async def generate_flashcards(
    req: GenerateRequest,
    user_id: int = Depends(current_user_id),
    service: GenerationService = Depends(get_generation_service),
    store: GeneratedSetStore = Depends(get_generated_set_store),
):
    saved = await _generate_and_save(ContentKind.FLASHCARDS, req, user_id, service, store)
    if isinstance(saved, GenerationError):
        return _error_response(saved)
    set_id, result = saved
    return FlashcardsResponse(
        set_id=set_id,
        title=result.title,
        topic=result.topic,
        provider=result.provider_used,
        card_count=result.accepted_count,
        cards=result.items,
    )


@router.post(
    f"/{settings.app.version}/generate/study-set",
    response_model=StudySetResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["generation"],
)
async def generate_study_set(
    req: GenerateRequest,
    user_id: int = Depends(current_user_id),
    service: GenerationService = Depends(get_generation_service),
    store: GeneratedSetStore = Depends(get_generated_set_store),
):
    saved = await _generate_and_save(ContentKind.STUDY_SET, req, user_id, service, store)
    if isinstance(saved, GenerationError):
        return _error_response(saved)
    set_id, result = saved
    return StudySetResponse(
        set_id=set_id,
        title=result.title,
        provider=result.provider_used,
        study_set=result.items[0],
        warnings=result.warnings,
    )


@router.get(
    f"/{settings.app.version}/generate/sets/{{set_id}}",
    response_model=GeneratedSetRead,
    tags=["generation"],
)
async def get_generated_set(
    set_id: int,
    user_id: int = Depends(current_user_id),
    store: GeneratedSetStore = Depends(get_generated_set_store),
) -> GeneratedSetRead:
    db_set = await store.get(set_id, user_id)
    if not db_set:
        raise HTTPException(status_code=404, detail="Generated set not found")
    return GeneratedSetRead(
        id=db_set.id,
        kind=ContentKind(db_set.kind.value),
        title=db_set.title,
        topic=db_set.topic,
        provider=db_set.provider,
        requested_count=db_set.requested_count,
        accepted_count=db_set.accepted_count,
        items=[item.payload for item in db_set.items],
        created_at=db_set.created_at.isoformat(),
    )
