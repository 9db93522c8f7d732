from __future__ import annotations

import logging
import os
from datetime import datetime, date, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from optica.infra.models import AppointmentORM
from optica.services.clients_service import get_client
from optica.services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

# fuso da loja: horário sem fuso e "dia da agenda" são locais
SHOP_TZ = ZoneInfo(os.getenv("SHOP_TZ", "America/Sao_Paulo").strip())

SLOT_TAKEN = "Este horário já está agendado."


def normalize_slot(dt: datetime) -> datetime:
    # horário -> UTC sem tzinfo (mesma base de comparação no banco)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=SHOP_TZ)
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def _find_at(db: Session, slot: datetime) -> Optional[AppointmentORM]:
    return db.execute(
        select(AppointmentORM).where(AppointmentORM.date == slot)
    ).scalars().first()


def create_appointment(
    db: Session,
    *,
    client_id: int,
    date: datetime,
    notes: Optional[str] = None,
) -> AppointmentORM:
    client = get_client(db, client_id)
    slot = normalize_slot(date)

    if _find_at(db, slot) is not None:
        raise ConflictError(SLOT_TAKEN)

    appt = AppointmentORM(
        client_id=client.id,
        client_name=client.name,
        date=slot,
        notes=(notes or "").strip() or None,
    )
    db.add(appt)
    try:
        db.flush()
    except IntegrityError:
        # outro agendamento entrou entre a checagem e o insert
        logger.warning("[appointments] slot %s taken concurrently", slot.isoformat())
        raise ConflictError(SLOT_TAKEN)

    logger.info("[appointments] booked id=%s client_id=%s at %s", appt.id, client.id, slot.isoformat())
    return appt


def cancel_appointment(db: Session, appointment_id: int) -> None:
    appt = db.get(AppointmentORM, appointment_id)
    if not appt:
        raise NotFoundError("Agendamento não encontrado.")
    db.delete(appt)
    db.flush()
    logger.info("[appointments] cancelled id=%s", appointment_id)


def list_by_day(db: Session, day: date) -> list[AppointmentORM]:
    # dia civil da loja [00:00, 00:00 do dia seguinte) convertido para UTC
    start = normalize_slot(datetime.combine(day, time.min))
    end = normalize_slot(datetime.combine(day + timedelta(days=1), time.min))
    stmt = (
        select(AppointmentORM)
        .where(AppointmentORM.date >= start, AppointmentORM.date < end)
        .order_by(AppointmentORM.date.asc())
    )
    return list(db.execute(stmt).scalars().all())
