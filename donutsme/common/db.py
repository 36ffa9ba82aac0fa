"""Database bootstrap helpers.

Engine and session factory are built by the composition root and handed to
services; nothing here opens a connection at import time.
"""

from sqlalchemy import JSON, create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool


# Portable JSON column: JSONB on postgres, plain JSON elsewhere (sqlite in tests).
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Declarative base for SQLAlchemy models."""

    pass


def make_engine(url: str) -> Engine:
    """Create one engine per process for `url`."""

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            # In-memory databases only live as long as their single connection.
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    # `expire_on_commit=False` keeps ORM objects readable after commit in handlers.
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    """Create all tables known to the model registry (dev and tests; prod uses alembic)."""

    # Importing the model modules registers their tables on `Base.metadata`.
    from donutsme.services.connect import models as _connect_models  # noqa: F401
    from donutsme.services.payouts import models as _payout_models  # noqa: F401
    from donutsme.services.users import models as _user_models  # noqa: F401
    from donutsme.services.wallets import models as _wallet_models  # noqa: F401

    Base.metadata.create_all(engine)
