# ---------------------------------------------------------
# backend/main.py
# Asset Ledger - REST API over the asset contract
#
# Run: uvicorn backend.main:app --reload (from repo root)
#
# - FastAPI + local sqlite ledger
# - /api/assets                 : list all assets
# - /api/assets/{id}            : search asset by ID
# - /api/assets/{id}/exists     : existence check
# - /api/assets/{id}/history    : change history, newest first
# - /api/assets (POST)          : create asset
# - /api/assets/{id}/transfer   : change owner
# - /api/assets/{id}/price      : change price
# - /api/ledger/init            : seed sample assets
# ---------------------------------------------------------

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.config import CORS_ORIGINS, IS_PROD, SEED_ON_STARTUP
from backend.dependencies import get_gateway
from backend.routes_assets import router as assets_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    gateway = get_gateway()
    if SEED_ON_STARTUP:
        print("[STARTUP] Seeding ledger with sample assets")
        gateway.submit_transaction("InitLedger")
    yield
    print("[SHUTDOWN] Closing gateway")


app = FastAPI(title="Asset Ledger API", version="0.1", lifespan=lifespan)

# CORS configuration from config module
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if IS_PROD else ["*"],  # Restrict origins in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(assets_router)


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}
