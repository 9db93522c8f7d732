from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from optica.infra.models import CompanyProfileORM

logger = logging.getLogger(__name__)


def _clean(v: Optional[str]) -> Optional[str]:
    return (v or "").strip() or None


def get_profile(db: Session) -> Optional[CompanyProfileORM]:
    return db.get(CompanyProfileORM, CompanyProfileORM.SINGLETON_ID)


def create_or_update_profile(
    db: Session,
    *,
    fantasy_name: Optional[str] = None,
    cnpj: Optional[str] = None,
    contact_phone: Optional[str] = None,
) -> CompanyProfileORM:
    """Upsert do perfil único (id fixo); textos vazios viram None."""
    profile = get_profile(db)
    if profile is None:
        profile = CompanyProfileORM(id=CompanyProfileORM.SINGLETON_ID)
        db.add(profile)

    profile.fantasy_name = _clean(fantasy_name)
    profile.cnpj = _clean(cnpj)
    profile.contact_phone = _clean(contact_phone)

    db.flush()
    logger.info("[profile] saved company profile fantasy_name=%r", profile.fantasy_name)
    return profile
