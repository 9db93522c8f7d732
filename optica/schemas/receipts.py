from __future__ import annotations

from pydantic import BaseModel
from typing import Optional

from optica.schemas.sales import SaleOut
from optica.schemas.clients import ClientOut
from optica.schemas.profile import ProfileOut


class ReceiptData(BaseModel):
    sale: SaleOut
    client: Optional[ClientOut]  # None quando o cliente foi excluído
    profile: Optional[ProfileOut]
