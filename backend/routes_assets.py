"""
backend/routes_assets.py

Asset endpoints backed by the ledger gateway.

- Reads evaluate a transaction (no commit)
- Writes submit a transaction (commit on success)
- Request bodies validated via Pydantic schemas
- Contract failures mapped to HTTP status codes:
  not found -> 404, already exists / no update performed / read conflict -> 409,
  invalid argument -> 400, anything else -> 500
"""

from __future__ import annotations

import json
from typing import List, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Path

from backend.config import IS_DEV
from backend.dependencies import get_gateway
from backend.gateway import LedgerGateway
from backend.schemas_assets import (
    AssetCreateRequest,
    AssetExistsResponse,
    MessageResponse,
    PriceUpdateRequest,
    TransferRequest,
)
from chaincode.errors import (
    AssetAlreadyExistsError,
    AssetNotFoundError,
    ContractError,
    InvalidArgumentError,
    NoUpdatePerformedError,
    ReadConflictError,
)
from chaincode.models import Asset, HistoryQueryResult


router = APIRouter(
    prefix="/api",
    tags=["assets"],
)


def _status_for(error: ContractError) -> int:
    if isinstance(error, AssetNotFoundError):
        return 404
    if isinstance(error, (AssetAlreadyExistsError, NoUpdatePerformedError, ReadConflictError)):
        return 409
    if isinstance(error, InvalidArgumentError):
        return 400
    return 500


def _raise_http(action: str, error: ContractError) -> NoReturn:
    if IS_DEV:
        print(f"[ASSETS] {action} failed: {error}")
    raise HTTPException(status_code=_status_for(error), detail=f"{action}: {error}")


def _decode(result: bytes, empty):
    return json.loads(result) if result else empty


@router.get("/assets", response_model=List[Asset])
def list_assets(gateway: LedgerGateway = Depends(get_gateway)):
    """Return every asset on the ledger, in key order."""
    try:
        result = gateway.evaluate_transaction("GetAllAssets")
    except ContractError as e:
        _raise_http("Failed to get assets", e)

    assets = _decode(result, [])
    if IS_DEV:
        print(f"[ASSETS] List: results={len(assets)}")
    return assets


@router.get("/assets/{asset_id}", response_model=Asset)
def get_asset(
    asset_id: str = Path(..., description="Asset ID"),
    gateway: LedgerGateway = Depends(get_gateway),
):
    """Search for an asset by ID."""
    try:
        result = gateway.evaluate_transaction("SearchAssetByID", asset_id)
    except ContractError as e:
        _raise_http(f"Failed to get asset {asset_id}", e)
    return _decode(result, {})


@router.get("/assets/{asset_id}/exists", response_model=AssetExistsResponse)
def asset_exists(
    asset_id: str = Path(..., description="Asset ID"),
    gateway: LedgerGateway = Depends(get_gateway),
) -> AssetExistsResponse:
    try:
        result = gateway.evaluate_transaction("AssetExists", asset_id)
    except ContractError as e:
        _raise_http(f"Failed to check asset {asset_id}", e)
    return AssetExistsResponse(id=asset_id, exists=_decode(result, False))


@router.get("/assets/{asset_id}/history", response_model=List[HistoryQueryResult])
def get_asset_history(
    asset_id: str = Path(..., description="Asset ID"),
    gateway: LedgerGateway = Depends(get_gateway),
):
    """Return the asset's change history, newest first."""
    try:
        result = gateway.evaluate_transaction("GetAssetHistory", asset_id)
    except ContractError as e:
        _raise_http("Failed to get asset history", e)
    return _decode(result, [])


@router.post("/assets", status_code=201, response_model=MessageResponse)
def create_asset(
    request: AssetCreateRequest,
    gateway: LedgerGateway = Depends(get_gateway),
) -> MessageResponse:
    """
    Create a new asset.

    Raises:
        HTTPException(409): An asset with this ID already exists
        HTTPException(422): Invalid body (handled by FastAPI)
    """
    try:
        gateway.submit_transaction(
            "CreateAsset",
            request.id,
            request.type,
            str(request.price),
            request.owner,
        )
    except ContractError as e:
        _raise_http("Failed to create asset", e)
    return MessageResponse(message=f"Asset {request.id} created successfully")


@router.put("/assets/{asset_id}/transfer", response_model=MessageResponse)
def transfer_asset(
    request: TransferRequest,
    asset_id: str = Path(..., description="Asset ID"),
    gateway: LedgerGateway = Depends(get_gateway),
) -> MessageResponse:
    """Transfer an asset to a new owner."""
    try:
        gateway.submit_transaction("TransferAsset", asset_id, request.newOwner)
    except ContractError as e:
        _raise_http("Failed to transfer asset", e)
    return MessageResponse(message=f"Asset {asset_id} transferred to {request.newOwner}")


@router.put("/assets/{asset_id}/price", response_model=MessageResponse)
def update_asset_price(
    request: PriceUpdateRequest,
    asset_id: str = Path(..., description="Asset ID"),
    gateway: LedgerGateway = Depends(get_gateway),
) -> MessageResponse:
    """Update the price of an asset."""
    try:
        gateway.submit_transaction("UpdateAssetPrice", asset_id, str(request.newPrice))
    except ContractError as e:
        _raise_http("Failed to update asset price", e)
    return MessageResponse(message=f"Price of asset {asset_id} updated to {request.newPrice}")


@router.post("/ledger/init", response_model=MessageResponse)
def init_ledger(gateway: LedgerGateway = Depends(get_gateway)) -> MessageResponse:
    """Seed the ledger with the sample assets (overwrites them if present)."""
    try:
        gateway.submit_transaction("InitLedger")
    except ContractError as e:
        _raise_http("Failed to initialize ledger", e)
    return MessageResponse(message="Ledger initialized with sample assets")
