from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from blog_service.settings import settings

engine = create_engine(settings.DATABASE_URL, **settings.engine_kwargs())

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    # models must be imported so their tables are registered on Base
    from blog_service import models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
