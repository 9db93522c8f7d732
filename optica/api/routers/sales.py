from __future__ import annotations

from fastapi import APIRouter, Query, Response
from sqlalchemy.orm import Session
from typing import Optional
from optica.api.deps import DBSession, raise_http
from optica.schemas.sales import (
    SaleCreate,
    SaleOut,
    SaleUpdate,
    PaymentCreate,
    PaymentOut,
    SalesStats,
)
from optica.services.errors import ServiceError
from optica.services.sales_service import (
    create_sale,
    get_sale,
    list_sales,
    search_sales,
    update_sale,
    delete_sale,
    add_payment,
    get_payments,
    get_next_service_order_number,
    get_total_sales,
)
from optica.infra.models import SaleStatus

router = APIRouter()


@router.get("/next-service-order-number", response_model=int)
def next_service_order_number_endpoint(db: Session = DBSession):
    return get_next_service_order_number(db)


@router.get("/stats", response_model=SalesStats)
def sales_stats_endpoint(db: Session = DBSession):
    return get_total_sales(db)


@router.post("", response_model=SaleOut, status_code=201)
def create_sale_endpoint(payload: SaleCreate, db: Session = DBSession):
    try:
        return create_sale(
            db,
            client_id=payload.client_id,
            items=[item.model_dump() for item in payload.items],
            frame_value=payload.frame_value,
            lens_value=payload.lens_value,
            discount=payload.discount,
            payment_method=payload.payment_method,
            installments=payload.installments,
            paid_amount=payload.paid_amount,
            delivery_date=payload.delivery_date,
            notes=payload.notes,
            service_order_number=payload.service_order_number,
            subtotal=payload.subtotal,
            total=payload.total,
            pending_amount=payload.pending_amount,
        )
    except ServiceError as e:
        raise_http(e)


@router.get("", response_model=list[SaleOut])
def list_sales_endpoint(
    db: Session = DBSession,
    q: Optional[str] = Query(default=None, description="Nome do cliente ou número da O.S."),
    status: Optional[SaleStatus] = Query(default=None),
    client_id: Optional[int] = Query(default=None),
):
    if q is not None:
        return search_sales(db, q)
    return list_sales(db, status=status, client_id=client_id)


@router.get("/{sale_id}", response_model=SaleOut)
def get_sale_endpoint(sale_id: int, db: Session = DBSession):
    try:
        return get_sale(db, sale_id)
    except ServiceError as e:
        raise_http(e)


@router.patch("/{sale_id}", response_model=SaleOut)
def update_sale_endpoint(sale_id: int, payload: SaleUpdate, db: Session = DBSession):
    try:
        return update_sale(db, sale_id=sale_id, fields=payload.model_dump(exclude_unset=True))
    except ServiceError as e:
        raise_http(e)


@router.delete("/{sale_id}", status_code=204)
def delete_sale_endpoint(sale_id: int, db: Session = DBSession):
    try:
        delete_sale(db, sale_id)
    except ServiceError as e:
        raise_http(e)
    return Response(status_code=204)


@router.get("/{sale_id}/payments", response_model=list[PaymentOut])
def list_payments_endpoint(sale_id: int, db: Session = DBSession):
    try:
        return get_payments(db, sale_id)
    except ServiceError as e:
        raise_http(e)


@router.post("/{sale_id}/payments", response_model=dict, status_code=201)
def add_payment_endpoint(sale_id: int, payload: PaymentCreate, db: Session = DBSession):
    try:
        payment = add_payment(
            db,
            sale_id=sale_id,
            amount=payload.amount,
            payment_method=payload.payment_method,
            notes=payload.notes,
        )
    except ServiceError as e:
        raise_http(e)

    return {"success": True, "payment": PaymentOut.model_validate(payment)}
