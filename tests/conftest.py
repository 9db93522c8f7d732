from __future__ import annotations

import os

# antes de importar o app: o startup não deve tocar no banco local
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
# agenda dos testes em horário de Brasília (-03:00, sem horário de verão)
os.environ["SHOP_TZ"] = "America/Sao_Paulo"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from optica.main import app
from optica.infra.models import Base
from optica.infra.db import enable_sqlite_transactions, get_db


@pytest.fixture()
def engine():
    """
    Banco de teste em SQLite em memória, novo a cada teste.
    - Rápido
    - Isolado (numeração de O.S. começa em 701 em todo teste)
    - Sem depender do Postgres instalado
    """
    engine = enable_sqlite_transactions(create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    ))
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    TestingSessionLocal = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture()
def client(db_session):
    # override do get_db para usar SQLite em memória nos testes
    # mesma fronteira do get_db: commit por request, rollback em erro
    def _override_get_db():
        try:
            yield db_session
            db_session.commit()
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = _override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture()
def make_client(db_session):
    from optica.services.clients_service import create_client

    def _make(name: str = "Maria Souza", phone: str = "83987157461", **extra):
        return create_client(db_session, {"name": name, "phone": phone, **extra})

    return _make
