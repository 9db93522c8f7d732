from typing import NoReturn

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session
from optica.infra.db import get_db
from optica.services.errors import ServiceError, NotFoundError, ConflictError

DBSession = Depends(get_db)


def raise_http(e: ServiceError) -> NoReturn:
    """Traduz erro de serviço em HTTP (404/409/400)."""
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ConflictError):
        raise HTTPException(status_code=409, detail=str(e))
    raise HTTPException(status_code=400, detail=str(e))
