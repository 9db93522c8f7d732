from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query, Response
from sqlalchemy.orm import Session

from optica.api.deps import DBSession, raise_http
from optica.schemas.appointments import AppointmentCreate, AppointmentOut
from optica.services.errors import ServiceError
from optica.services.appointments_service import (
    create_appointment,
    cancel_appointment,
    list_by_day,
)

router = APIRouter()


@router.get("", response_model=list[AppointmentOut])
def list_by_day_endpoint(
    db: Session = DBSession,
    day: date = Query(..., alias="date", description="YYYY-MM-DD"),
):
    return list_by_day(db, day)


@router.post("", response_model=AppointmentOut, status_code=201)
def create_appointment_endpoint(payload: AppointmentCreate, db: Session = DBSession):
    try:
        return create_appointment(
            db,
            client_id=payload.client_id,
            date=payload.date,
            notes=payload.notes,
        )
    except ServiceError as e:
        raise_http(e)


@router.delete("/{appointment_id}", status_code=204)
def cancel_appointment_endpoint(appointment_id: int, db: Session = DBSession):
    try:
        cancel_appointment(db, appointment_id)
    except ServiceError as e:
        raise_http(e)
    return Response(status_code=204)
