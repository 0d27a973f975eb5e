from typing import Any

from sqlalchemy import JSON, create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from .core.config import get_settings


class Base(DeclarativeBase):
    """Declarative base for ORM models.

    List-typed columns (muscles, instructions, photos) are stored as JSON.
    """

    type_annotation_map = {
        list[str]: JSON,
        dict[str, Any]: JSON,
    }


settings = get_settings()
connect_args: dict = {}
if settings.database_url.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_pre_ping=True,
    connect_args=connect_args,
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
