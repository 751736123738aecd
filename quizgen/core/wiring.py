"""Builds the service graph from Settings for the API, CLI and scheduler."""

from quizgen.clients.completion_client import CompletionClient
from quizgen.core.config import Settings
from quizgen.services.completion_log import JsonlCompletionLog
from quizgen.services.quiz_metadata_service import QuizMetadataService
from quizgen.services.quiz_node_service import QuizNodeService


def build_completion_log(settings: Settings) -> JsonlCompletionLog:
    return JsonlCompletionLog(settings.completions_log_path)


def build_completion_client(settings: Settings, completion_log: JsonlCompletionLog | None = None) -> CompletionClient:
    return CompletionClient(
        api_key=settings.openai_api_key,
        base_url=settings.base_url,
        completion_log=completion_log or build_completion_log(settings),
    )


def build_metadata_service(settings: Settings) -> QuizMetadataService:
    return QuizMetadataService(
        llm_client=build_completion_client(settings),
        config=settings.pipeline_config(),
    )


def build_node_service(settings: Settings) -> QuizNodeService:
    return QuizNodeService(
        metadata_service=build_metadata_service(settings),
        default_author_uid=settings.default_author_uid,
    )
