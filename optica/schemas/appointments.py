from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional
from datetime import datetime, timezone


class AppointmentCreate(BaseModel):
    client_id: int
    # sem fuso = horário local da loja (SHOP_TZ)
    date: datetime
    notes: Optional[str] = None


class AppointmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: Optional[int]
    client_name: str
    date: datetime
    notes: Optional[str]

    @field_validator("date")
    @classmethod
    def _stored_as_utc(cls, v: datetime) -> datetime:
        # gravado como UTC sem tzinfo
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v
