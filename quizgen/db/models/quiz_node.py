from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import relationship

from quizgen.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


quiz_node_tags = Table(
    "quiz_node_tags",
    Base.metadata,
    Column("quiz_node_id", Integer, ForeignKey("quiz_node.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(Base):
    __tablename__ = "tag"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)


class QuizNode(Base):
    __tablename__ = "quiz_node"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    prompt = Column(Text, nullable=False)
    author_uid = Column(Integer, nullable=False)
    status = Column(Boolean, nullable=False, default=True)
    subject_id = Column(Integer, nullable=True)
    education_level_id = Column(Integer, nullable=True)
    difficulty_id = Column(Integer, nullable=True)
    cognitive_goal_id = Column(Integer, nullable=True)
    created = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    changed = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    tag_terms = relationship(Tag, secondary=quiz_node_tags, lazy="selectin")

    @property
    def tags(self) -> list[str]:
        return [tag.name for tag in self.tag_terms]
