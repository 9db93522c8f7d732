from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from optica.api.deps import DBSession
from optica.schemas.receipts import ReceiptData
from optica.schemas.sales import SaleOut
from optica.schemas.clients import ClientOut
from optica.schemas.profile import ProfileOut
from optica.services.errors import NotFoundError
from optica.services.sales_service import get_sale_for_receipt

router = APIRouter()

# consumido pelo fluxo de impressão (qualquer origem)
_CORS_ANY = {"Access-Control-Allow-Origin": "*"}


@router.get("/sales/{sale_id}/receipt-data")
def receipt_data_endpoint(sale_id: int, db: Session = DBSession):
    try:
        sale, client, profile = get_sale_for_receipt(db, sale_id)
    except NotFoundError:
        return JSONResponse(
            status_code=404,
            content={"error": "Dados não encontrados"},
            headers=_CORS_ANY,
        )

    data = ReceiptData(
        sale=SaleOut.model_validate(sale),
        client=ClientOut.model_validate(client) if client is not None else None,
        profile=ProfileOut.model_validate(profile) if profile is not None else None,
    )
    return JSONResponse(content=data.model_dump(mode="json"), headers=_CORS_ANY)
