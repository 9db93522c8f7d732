from __future__ import annotations

from fastapi import APIRouter
from sqlalchemy.orm import Session

from optica.api.deps import DBSession, raise_http
from optica.services.errors import ServiceError
from optica.services.sales_service import delete_payment

router = APIRouter()


@router.delete("/{payment_id}", response_model=dict)
def delete_payment_endpoint(payment_id: int, db: Session = DBSession):
    try:
        delete_payment(db, payment_id)
    except ServiceError as e:
        raise_http(e)
    return {"success": True}
