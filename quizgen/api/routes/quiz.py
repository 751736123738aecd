from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from quizgen.core.config import get_settings
from quizgen.core.security import require_api_key
from quizgen.core.wiring import build_completion_log, build_node_service
from quizgen.db.session import get_db
from quizgen.schemas.completion_schema import CompletionLogPage
from quizgen.schemas.quiz_schema import (
    QuizMetadata,
    QuizNodeCreateRequest,
    QuizNodeResponse,
    QuizPromptUpdateRequest,
)
from quizgen.services.completion_log import JsonlCompletionLog
from quizgen.services.quiz_metadata_service import QuizMetadataService
from quizgen.services.quiz_node_service import QuizNodeService

router = APIRouter(
    prefix="/ai/quiz",
    tags=["quiz"],
    dependencies=[Depends(require_api_key)],
)


@lru_cache
def get_node_service() -> QuizNodeService:
    return build_node_service(get_settings())


def get_metadata_service(
    node_service: QuizNodeService = Depends(get_node_service),
) -> QuizMetadataService:
    return node_service.metadata_service


def get_completion_log() -> JsonlCompletionLog:
    return build_completion_log(get_settings())


def _node_or_404(node, nid: int) -> QuizNodeResponse:
    if node is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"quiz node {nid} not found")
    return QuizNodeResponse.model_validate(node)


@router.post(
    "/metadata",
    response_model=QuizMetadata,
    summary="Generate quiz metadata without storing it",
)
def generate_metadata(
    service: QuizMetadataService = Depends(get_metadata_service),
) -> QuizMetadata:
    metadata = service.generate_quiz_metadata()
    if metadata is None:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="quiz metadata generation failed, check logs",
        )
    return metadata


@router.post(
    "/nodes",
    response_model=QuizNodeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate and store an AI quiz",
)
def create_ai_quiz_node(
    body: QuizNodeCreateRequest,
    db: Session = Depends(get_db),
    service: QuizNodeService = Depends(get_node_service),
) -> QuizNodeResponse:
    node = service.create_ai_generated_quiz_node(db, author_uid=body.author_uid, tags=body.tags)
    if node is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="quiz creation failed, check logs")
    return QuizNodeResponse.model_validate(node)


@router.post(
    "/nodes/test",
    response_model=QuizNodeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Store a fixed test quiz",
)
def create_test_quiz_node(
    db: Session = Depends(get_db),
    service: QuizNodeService = Depends(get_node_service),
) -> QuizNodeResponse:
    node = service.create_test_quiz_node(db)
    if node is None:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="quiz creation failed, check logs")
    return QuizNodeResponse.model_validate(node)


@router.get("/nodes/{nid}", response_model=QuizNodeResponse)
def get_quiz_node(
    nid: int,
    db: Session = Depends(get_db),
    service: QuizNodeService = Depends(get_node_service),
) -> QuizNodeResponse:
    return _node_or_404(service.get_quiz_node(db, nid), nid)


@router.patch("/nodes/{nid}/prompt", response_model=QuizNodeResponse)
def update_quiz_prompt(
    nid: int,
    body: QuizPromptUpdateRequest,
    db: Session = Depends(get_db),
    service: QuizNodeService = Depends(get_node_service),
) -> QuizNodeResponse:
    if not service.update_quiz_prompt(db, nid, body.prompt):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"quiz node {nid} not updated")
    return _node_or_404(service.get_quiz_node(db, nid), nid)


@router.get("/completions", response_model=CompletionLogPage)
def list_completions(
    limit: int = Query(10, ge=1, le=200),
    completion_log: JsonlCompletionLog = Depends(get_completion_log),
) -> CompletionLogPage:
    entries = completion_log.read_all()
    return CompletionLogPage(total=len(entries), completions=entries[-limit:])
