"""Command-line entry for quiz generation and completion-log inspection."""

from __future__ import annotations

import argparse
import logging
from typing import Iterable

from dotenv import load_dotenv

from quizgen.clients.completion_client import CompletionClientError
from quizgen.core.config import Settings, get_settings
from quizgen.core.wiring import (
    build_completion_client,
    build_completion_log,
    build_metadata_service,
    build_node_service,
)
from quizgen.db.session import SessionLocal, init_db

logger = logging.getLogger(__name__)


def _truncate(text: str, limit: int = 100) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def cmd_test_ai(args: argparse.Namespace, settings: Settings) -> int:
    print("Testing AI integration...")
    print(f"Message: {args.message}")
    print(f"Provider: {args.provider}")
    print(f"Model: {args.model}")
    print(f"Temperature: {args.temperature}")
    print()

    client = build_completion_client(settings)
    try:
        result = client.complete(
            args.message,
            provider=args.provider,
            model=args.model,
            temperature=args.temperature,
            max_tokens=settings.max_tokens,
            timeout_seconds=settings.timeout,
        )
    except CompletionClientError as exc:
        print(f"AI integration test failed: {exc}. Check the logs for details.")
        return 1

    print(f"AI Response: {result.text}")
    print()
    print("AI integration test successful!")
    print(f"Response logged to {settings.completions_log_path}")
    return 0


def cmd_view_completions(args: argparse.Namespace, settings: Settings) -> int:
    completion_log = build_completion_log(settings)
    if not completion_log.path.exists():
        print("No completions file found. Make some AI requests first.")
        return 0

    entries = completion_log.read_all()
    if not entries:
        print("No completions found in file.")
        return 0

    print("Recent AI Completions:")
    print()
    for entry in entries[-args.limit:]:
        print(f"ID: {entry.id}")
        print(f"Request: {entry.request}")
        print(f"Response: {_truncate(entry.response)}")
        print(f"Model: {entry.model}")
        print(f"Tokens: {entry.input_tokens} in / {entry.output_tokens} out / {entry.total_tokens} total")
        print(f"Temperature: {entry.temperature}")
        print(f"Response Time: {entry.response_time_ms}ms")
        print(f"Created: {entry.created}")
        if entry.error:
            print(f"Error: {entry.error}")
        print("---")

    print(f"Total completions in file: {len(entries)}")
    return 0


def cmd_generate_metadata(args: argparse.Namespace, settings: Settings) -> int:
    metadata = build_metadata_service(settings).generate_quiz_metadata()
    if metadata is None:
        print("Metadata generation failed. Check the logs for details.")
        return 1
    print(metadata.model_dump_json(indent=2))
    return 0


def cmd_create_quiz(args: argparse.Namespace, settings: Settings) -> int:
    init_db()
    service = build_node_service(settings)
    db = SessionLocal()
    try:
        node = service.create_ai_generated_quiz_node(db, author_uid=args.author_uid, tags=args.tag)
    finally:
        db.close()

    if node is None:
        print("Quiz creation failed. Check the logs for details.")
        return 1
    print(f"Created quiz node id={node.id} title={node.title!r}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quizgen", description="AI quiz generation tools")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("test-ai", help="Send one message to the completion provider")
    p.add_argument("message", nargs="?", default="hello")
    p.add_argument("--temperature", type=float, default=1.0)
    p.add_argument("--model", type=str, default="gpt-4o")
    p.add_argument("--provider", type=str, default="openai")
    p.set_defaults(func=cmd_test_ai)

    p = sub.add_parser("view-completions", help="Show recent completion log entries")
    p.add_argument("--limit", type=int, default=10, help="Number of recent completions to show")
    p.set_defaults(func=cmd_view_completions)

    p = sub.add_parser("generate-metadata", help="Run the metadata pipeline and print the result")
    p.set_defaults(func=cmd_generate_metadata)

    p = sub.add_parser("create-quiz", help="Generate and store one AI quiz")
    p.add_argument("--author-uid", type=int, default=None)
    p.add_argument("--tag", action="append", default=[], help="Tag to attach (repeatable)")
    p.set_defaults(func=cmd_create_quiz)

    return parser


def main(argv: Iterable[str] | None = None, settings: Settings | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    return args.func(args, settings or get_settings())


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
