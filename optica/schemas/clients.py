from __future__ import annotations

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class EyePrescription(BaseModel):
    spherical: Optional[str] = Field(default=None, max_length=20)
    cylindrical: Optional[str] = Field(default=None, max_length=20)
    axis: Optional[str] = Field(default=None, max_length=20)
    addition: Optional[str] = Field(default=None, max_length=20)
    dnp: Optional[str] = Field(default=None, max_length=20)  # distância naso-pupilar
    co: Optional[str] = Field(default=None, max_length=20)   # centro óptico


class ClientCreate(BaseModel):
    name: str = Field(min_length=1, max_length=140)
    phone: str = Field(min_length=1, max_length=20)

    email: Optional[str] = Field(default=None, max_length=160)
    cpf: Optional[str] = Field(default=None, max_length=14)
    address: Optional[str] = Field(default=None, max_length=255)
    birth_date: Optional[str] = Field(default=None, max_length=20)

    right_eye: EyePrescription = Field(default_factory=EyePrescription)
    left_eye: EyePrescription = Field(default_factory=EyePrescription)

    notes: Optional[str] = None


# o form de edição reenvia todos os campos
class ClientUpdate(ClientCreate):
    pass


class ClientOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone: str
    email: Optional[str]
    cpf: Optional[str]
    address: Optional[str]
    birth_date: Optional[str]
    right_eye: EyePrescription
    left_eye: EyePrescription
    notes: Optional[str]
    created_at: datetime
