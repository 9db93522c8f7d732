from __future__ import annotations

import os
from typing import Iterator

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

# carrega .env quando rodar localmente
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./optica.db").strip()
SQL_ECHO = os.getenv("SQL_ECHO", "0").strip() == "1"


def enable_sqlite_transactions(engine: Engine) -> Engine:
    """
    pysqlite não emite BEGIN sozinho antes de SELECT/SAVEPOINT;
    o SQLAlchemy passa a controlar o BEGIN para savepoints funcionarem.
    """
    if engine.dialect.name != "sqlite":
        return engine

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, _record):
        dbapi_conn.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = enable_sqlite_transactions(create_engine(
    DATABASE_URL,
    echo=SQL_ECHO,
    connect_args=_connect_args,
    pool_pre_ping=True,
    future=True,
))

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True,
)


def get_db() -> Iterator[Session]:
    """
    Uma sessão por request: commit no sucesso, rollback em qualquer erro.
    A request inteira é a unidade de transação.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
