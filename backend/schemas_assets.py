"""
backend/schemas_assets.py

Pydantic schemas for the asset REST endpoints.
Request field names follow the JSON the web client sends
(id/type/price/owner, newOwner, newPrice).
"""

from __future__ import annotations

from pydantic import BaseModel, Field, StrictInt, field_validator


class AssetCreateRequest(BaseModel):
    """Request schema for creating a new asset.

    - id is required and trimmed
    - price is a whole number (sent to the contract as a string)
    """
    id: str = Field(..., min_length=1, max_length=200, description="Asset ID (required, 1-200 chars)")
    type: str = Field(..., max_length=200, description="Asset type")
    price: StrictInt = Field(..., description="Asset price")
    owner: str = Field(..., max_length=200, description="Initial owner")

    @field_validator("id", mode="before")
    @classmethod
    def trim_id(cls, v):
        """Trim whitespace from id."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("id")
    @classmethod
    def validate_id_non_empty(cls, v):
        """Ensure id is not empty after trimming."""
        if not v:
            raise ValueError("id must not be empty")
        return v


class TransferRequest(BaseModel):
    newOwner: str = Field(..., max_length=200, description="New owner")


class PriceUpdateRequest(BaseModel):
    newPrice: StrictInt = Field(..., description="New price")


class MessageResponse(BaseModel):
    message: str


class AssetExistsResponse(BaseModel):
    id: str
    exists: bool
