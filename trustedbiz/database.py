# trustedbiz/database.py

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from trustedbiz.core.config import settings

Base = declarative_base()


class Database:
    """
    Owns the connection pool for one application instance.

    The engine is created by connect() at startup and drained by
    dispose() at shutdown. Nothing is opened at construction time.
    """

    def __init__(self, url: str, **engine_kwargs):
        self.url = url
        self.engine_kwargs = engine_kwargs
        self.engine: Engine | None = None
        self.SessionLocal: sessionmaker | None = None

    @classmethod
    def from_settings(cls) -> "Database":
        return cls(
            settings.DATABASE_URL,
            pool_size=settings.DB_POOL_SIZE,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )

    def _build_engine(self) -> Engine:
        if self.url.startswith("sqlite"):
            # Single shared connection for in-memory databases
            kwargs = {"connect_args": {"check_same_thread": False}}
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool
            return create_engine(self.url, **kwargs)

        return create_engine(
            self.url,
            pool_pre_ping=True,
            max_overflow=0,
            **self.engine_kwargs,
        )

    def connect(self):
        if self.engine is not None:
            return

        self.engine = self._build_engine()
        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
        )

    def create_tables(self):
        # Import models so they register on Base.metadata
        from trustedbiz.models import business, review, users  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        if self.SessionLocal is None:
            raise RuntimeError("Database is not connected")
        return self.SessionLocal()

    def dispose(self):
        if self.engine is None:
            return

        self.engine.dispose()
        self.engine = None
        self.SessionLocal = None


def get_db(request: Request):
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
