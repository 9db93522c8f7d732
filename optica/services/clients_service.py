from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from optica.infra.models import ClientORM
from optica.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

PRESCRIPTION_FIELDS = ("spherical", "cylindrical", "axis", "addition", "dnp", "co")


def _clean(v: Optional[str]) -> Optional[str]:
    return (v or "").strip() or None


def _clean_eye(eye: Optional[dict[str, Any]]) -> dict[str, Optional[str]]:
    eye = eye or {}
    return {k: _clean(eye.get(k)) for k in PRESCRIPTION_FIELDS}


def _apply_fields(client: ClientORM, data: dict[str, Any]) -> None:
    name = (data.get("name") or "").strip()
    phone = (data.get("phone") or "").strip()
    if not name:
        raise ValidationError("Nome é obrigatório.")
    if not phone:
        raise ValidationError("Telefone é obrigatório.")

    client.name = name
    client.phone = phone
    client.email = _clean(data.get("email"))
    client.cpf = _clean(data.get("cpf"))
    client.address = _clean(data.get("address"))
    client.birth_date = _clean(data.get("birth_date"))
    client.right_eye = _clean_eye(data.get("right_eye"))
    client.left_eye = _clean_eye(data.get("left_eye"))
    client.notes = _clean(data.get("notes"))


def create_client(db: Session, data: dict[str, Any]) -> ClientORM:
    client = ClientORM()
    _apply_fields(client, data)
    db.add(client)
    db.flush()
    logger.info("[clients] created client id=%s", client.id)
    return client


def get_client(db: Session, client_id: int) -> ClientORM:
    client = db.get(ClientORM, client_id)
    if not client:
        raise NotFoundError("Cliente não encontrado.")
    return client


def update_client(db: Session, client_id: int, data: dict[str, Any]) -> ClientORM:
    # o nome novo não altera vendas antigas (client_name é snapshot)
    client = get_client(db, client_id)
    _apply_fields(client, data)
    db.flush()
    return client


def remove_client(db: Session, client_id: int) -> None:
    """
    exclui o cliente. vendas e agendamentos ficam com client_id = NULL
    e mantêm o nome copiado na criação.
    """
    client = get_client(db, client_id)
    db.delete(client)
    db.flush()
    logger.info("[clients] removed client id=%s", client_id)


def list_clients(db: Session) -> list[ClientORM]:
    stmt = select(ClientORM).order_by(ClientORM.id.desc())
    return list(db.execute(stmt).scalars().all())


def search_clients(db: Session, text: str) -> list[ClientORM]:
    """
    varredura linear: nome/email sem diferenciar maiúsculas, telefone por trecho.
    busca vazia retorna lista vazia.
    """
    q = (text or "").strip()
    if not q:
        return []

    needle = q.casefold()
    found = []
    for c in list_clients(db):
        if needle in c.name.casefold():
            found.append(c)
        elif q in c.phone:
            found.append(c)
        elif c.email and needle in c.email.casefold():
            found.append(c)
    return found
