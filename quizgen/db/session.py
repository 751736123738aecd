from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from quizgen.core.config import get_settings


class Base(DeclarativeBase):
    pass


def _connect_args(db_url: str) -> dict:
    # sqlite 연결을 스케줄러 스레드와 요청 스레드가 같이 쓴다.
    if db_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


settings = get_settings()
engine = create_engine(settings.db_url, pool_pre_ping=True, future=True, connect_args=_connect_args(settings.db_url))
SessionLocal = sessionmaker(
    bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True
)


def init_db(bind=None) -> None:
    # 모델을 등록한 뒤 테이블을 만든다.
    from quizgen.db.models import quiz_node  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
