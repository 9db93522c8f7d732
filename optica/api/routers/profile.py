from __future__ import annotations

from typing import Optional

from fastapi import APIRouter
from sqlalchemy.orm import Session

from optica.api.deps import DBSession
from optica.schemas.profile import ProfileUpdate, ProfileOut
from optica.services.profile_service import get_profile, create_or_update_profile

router = APIRouter()


@router.get("", response_model=Optional[ProfileOut])
def get_profile_endpoint(db: Session = DBSession):
    return get_profile(db)


@router.put("", response_model=ProfileOut)
def save_profile_endpoint(payload: ProfileUpdate, db: Session = DBSession):
    return create_or_update_profile(
        db,
        fantasy_name=payload.fantasy_name,
        cnpj=payload.cnpj,
        contact_phone=payload.contact_phone,
    )
