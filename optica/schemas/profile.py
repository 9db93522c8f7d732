from __future__ import annotations

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional


class ProfileUpdate(BaseModel):
    fantasy_name: Optional[str] = Field(default=None, max_length=160)
    cnpj: Optional[str] = Field(default=None, max_length=20)
    contact_phone: Optional[str] = Field(default=None, max_length=20)


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    fantasy_name: Optional[str]
    cnpj: Optional[str]
    contact_phone: Optional[str]
