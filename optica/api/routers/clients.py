from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, Response
from sqlalchemy.orm import Session

from optica.api.deps import DBSession, raise_http
from optica.schemas.clients import ClientCreate, ClientUpdate, ClientOut
from optica.services.errors import ServiceError
from optica.services.clients_service import (
    create_client,
    get_client,
    update_client,
    remove_client,
    list_clients,
    search_clients,
)

router = APIRouter()


@router.get("", response_model=list[ClientOut])
def list_clients_endpoint(
    db: Session = DBSession,
    q: Optional[str] = Query(default=None, description="Busca por nome/telefone/email"),
):
    if q is not None:
        return search_clients(db, q)
    return list_clients(db)


@router.get("/{client_id}", response_model=ClientOut)
def get_client_endpoint(client_id: int, db: Session = DBSession):
    try:
        return get_client(db, client_id)
    except ServiceError as e:
        raise_http(e)


@router.post("", response_model=ClientOut, status_code=201)
def create_client_endpoint(payload: ClientCreate, db: Session = DBSession):
    try:
        return create_client(db, payload.model_dump())
    except ServiceError as e:
        raise_http(e)


@router.put("/{client_id}", response_model=ClientOut)
def update_client_endpoint(client_id: int, payload: ClientUpdate, db: Session = DBSession):
    try:
        return update_client(db, client_id, payload.model_dump())
    except ServiceError as e:
        raise_http(e)


@router.delete("/{client_id}", status_code=204)
def remove_client_endpoint(client_id: int, db: Session = DBSession):
    try:
        remove_client(db, client_id)
    except ServiceError as e:
        raise_http(e)
    return Response(status_code=204)
