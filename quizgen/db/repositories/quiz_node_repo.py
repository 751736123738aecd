from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from quizgen.db.models.quiz_node import QuizNode, Tag


class QuizNodeRepository:
    """
    퀴즈 노드와 태그 저장소.

    commit은 호출하는 서비스가 담당한다.
    """

    def get_by_id(self, db: Session, nid: int) -> QuizNode | None:
        return db.get(QuizNode, nid)

    def add(self, db: Session, node: QuizNode) -> QuizNode:
        db.add(node)
        db.flush()
        return node

    def resolve_tags(self, db: Session, names: Iterable[str]) -> list[Tag]:
        """Look up tags by name (case-insensitive), creating the missing ones."""
        resolved: list[Tag] = []
        seen: set[str] = set()
        for raw in names:
            name = (raw or "").strip()
            key = name.lower()
            if not name or key in seen:
                continue
            seen.add(key)
            tag = db.execute(select(Tag).where(func.lower(Tag.name) == key)).scalars().first()
            if tag is None:
                tag = Tag(name=name)
                db.add(tag)
                db.flush()
            resolved.append(tag)
        return resolved
