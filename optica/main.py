from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from optica.infra.db import engine
from optica.infra.models import Base

from optica.api.routers.clients import router as clients_router
from optica.api.routers.sales import router as sales_router
from optica.api.routers.payments import router as payments_router
from optica.api.routers.appointments import router as appointments_router
from optica.api.routers.profile import router as profile_router
from optica.api.routers.receipts import router as receipts_router


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# origens do front, separadas por vírgula
DEFAULT_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000"
CORS_ORIGINS = [
    o.strip() for o in os.getenv("CORS_ORIGINS", DEFAULT_ORIGINS).split(",") if o.strip()
]


app = FastAPI(title="Ótica Gestão API")


@app.on_event("startup")
def _startup() -> None:
    logger.info("[startup] creating tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("[startup] tables created/checked")


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(clients_router, prefix="/clients", tags=["clients"])
app.include_router(sales_router, prefix="/sales", tags=["sales"])
app.include_router(payments_router, prefix="/payments", tags=["payments"])
app.include_router(appointments_router, prefix="/appointments", tags=["appointments"])
app.include_router(profile_router, prefix="/profile", tags=["profile"])
app.include_router(receipts_router, prefix="/api", tags=["receipts"])
