import logging
import time
from typing import Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import (
    DATABASE_URL,
    DB_MAX_OVERFLOW,
    DB_POOL_RECYCLE,
    DB_POOL_SIZE,
    DB_POOL_TIMEOUT,
    DB_STATEMENT_TIMEOUT_MS,
)

logger = logging.getLogger(__name__)

SLOW_QUERY_THRESHOLD = 1.0

Base = declarative_base()


def create_db_engine(database_url: Optional[str] = None) -> Engine:
    """
    Build the SQLAlchemy engine for the process.

    Called once from the application lifespan; the engine is then handed
    around through app.state rather than living as a module global.
    """
    url = database_url or DATABASE_URL

    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})
    else:
        connect_args = {}
        if url.startswith("postgresql"):
            # Bound every statement so a stuck query surfaces as a timeout
            connect_args["options"] = f"-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}"
        try:
            engine = create_engine(
                url,
                pool_pre_ping=True,  # Test connections before using
                pool_recycle=DB_POOL_RECYCLE,
                pool_size=DB_POOL_SIZE,
                max_overflow=DB_MAX_OVERFLOW,
                pool_timeout=DB_POOL_TIMEOUT,
                connect_args=connect_args,
                echo=False,
            )
        except Exception as e:
            logger.error(f"❌ Failed to create database engine: {e}")
            raise
        logger.info(
            f"📊 Connection pool: size={DB_POOL_SIZE}, max_overflow={DB_MAX_OVERFLOW}, "
            f"timeout={DB_POOL_TIMEOUT}s"
        )

    @event.listens_for(engine, "before_cursor_execute")
    def before_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(engine, "after_cursor_execute")
    def after_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
        total = time.time() - conn.info["query_start_time"].pop(-1)
        if total > SLOW_QUERY_THRESHOLD:
            logger.warning(f"🐌 Slow query ({total:.2f}s): {statement[:200]}...")

    logger.info("✅ Database engine created successfully")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
