"""
backend/dependencies.py

Reusable FastAPI dependencies.

The gateway is built once per process and handed to routes through
get_gateway, so tests can swap it with app.dependency_overrides.
"""

from __future__ import annotations

from typing import Optional

from backend.config import CHAINCODE_NAME, CHANNEL_NAME, IS_DEV, LEDGER_DB_PATH
from backend.gateway import LedgerGateway
from backend.ledger import SqliteLedger
from chaincode.asset_contract import AssetContract

_gateway: Optional[LedgerGateway] = None


def build_gateway(db_path: str = LEDGER_DB_PATH) -> LedgerGateway:
    """Create the ledger (schema included) and a gateway in front of it."""
    ledger = SqliteLedger(db_path)
    ledger.init_schema()
    if IS_DEV:
        print(f"[GATEWAY] Connected to {CHANNEL_NAME}/{CHAINCODE_NAME}")
    return LedgerGateway(
        ledger,
        AssetContract(),
        channel_name=CHANNEL_NAME,
        chaincode_name=CHAINCODE_NAME,
    )


def get_gateway() -> LedgerGateway:
    """FastAPI dependency returning the process-wide gateway."""
    global _gateway
    if _gateway is None:
        _gateway = build_gateway()
    return _gateway
