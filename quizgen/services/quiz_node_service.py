import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quizgen.db.models.quiz_node import QuizNode
from quizgen.db.repositories.quiz_node_repo import QuizNodeRepository
from quizgen.services.quiz_metadata_service import QuizMetadataService

# QuizMetadata 필드 → QuizNode 컬럼
TAXONOMY_COLUMNS = {
    "subject": "subject_id",
    "education_level": "education_level_id",
    "difficulty": "difficulty_id",
    "cognitive_goal": "cognitive_goal_id",
}


@dataclass
class QuizNodeService:
    metadata_service: QuizMetadataService
    repo: QuizNodeRepository = field(default_factory=QuizNodeRepository)
    default_author_uid: int = 1
    logger: logging.Logger = logging.getLogger(__name__)

    def create_quiz_node(
        self,
        db: Session,
        title: str,
        quiz_prompt: str,
        author_uid: Optional[int] = None,
        taxonomy_fields: Optional[Mapping[str, Optional[int]]] = None,
        tags: Optional[Sequence[str]] = None,
    ) -> QuizNode | None:
        """
        Create and commit a published quiz record.

        ``taxonomy_fields`` maps column names (``subject_id`` ...) to term ids;
        empty values are skipped. Returns None when the database rejects the write.
        """
        uid = author_uid if author_uid is not None else self.default_author_uid
        node = QuizNode(title=title, prompt=quiz_prompt, author_uid=uid, status=True)
        for column, term_id in (taxonomy_fields or {}).items():
            if column not in TAXONOMY_COLUMNS.values():
                self.logger.warning("Ignoring unknown taxonomy column %s", column)
                continue
            if term_id:
                setattr(node, column, term_id)

        try:
            if tags:
                node.tag_terms = self.repo.resolve_tags(db, tags)
            self.repo.add(db, node)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            self.logger.error("Failed to create quiz node: %s", exc)
            return None

        self.logger.info('Created quiz node id=%s title="%s" author_uid=%s', node.id, title, uid)
        return node

    def create_ai_generated_quiz_node(
        self,
        db: Session,
        author_uid: Optional[int] = None,
        tags: Optional[Sequence[str]] = None,
    ) -> QuizNode | None:
        metadata = self.metadata_service.generate_quiz_metadata()
        if metadata is None:
            self.logger.error("Failed to generate AI metadata for quiz node creation.")
            return None

        taxonomy_fields = {column: getattr(metadata, name).id for name, column in TAXONOMY_COLUMNS.items()}
        node = self.create_quiz_node(
            db,
            metadata.title,
            metadata.prompt,
            author_uid=author_uid,
            taxonomy_fields=taxonomy_fields,
            tags=tags,
        )
        if node is not None:
            self.logger.info(
                "Created AI-generated quiz node",
                extra={
                    "nid": node.id,
                    "subject": metadata.subject.label,
                    "level": metadata.education_level.label,
                    "difficulty": metadata.difficulty.label,
                },
            )
        return node

    def create_test_quiz_node(self, db: Session) -> QuizNode | None:
        return self.create_quiz_node(db, "test", "calculus", author_uid=1)

    def get_quiz_node(self, db: Session, nid: int) -> QuizNode | None:
        try:
            return self.repo.get_by_id(db, nid)
        except SQLAlchemyError as exc:
            self.logger.error("Failed to load quiz node %s: %s", nid, exc)
            return None

    def update_quiz_prompt(self, db: Session, nid: int, new_prompt: str) -> bool:
        node = self.get_quiz_node(db, nid)
        if node is None:
            return False
        try:
            node.prompt = new_prompt
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            self.logger.error("Failed to update quiz node %s: %s", nid, exc)
            return False

        self.logger.info("Updated quiz node %s prompt", nid)
        return True
