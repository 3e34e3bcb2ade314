"""
chaincode/models.py

Pydantic models for assets as stored in world state and as reconstructed
from key history.

Wire names are fixed by the persisted record shape:
    {"ID": str, "Type": str, "Price": int, "Owner": str}
and the history entry shape:
    {"record": {"Price": int, "Owner": str} | null, "txId": str,
     "timestamp": RFC3339, "isDelete": bool}
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError
from pydantic_core import PydanticSerializationError

from chaincode.errors import SerializationError
from chaincode.stub import LedgerTimestamp

# Range accepted for ledger timestamps: 0001-01-01T00:00:00Z .. 9999-12-31T23:59:59Z
MIN_TIMESTAMP_SECONDS = -62135596800
MAX_TIMESTAMP_SECONDS = 253402300799

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Asset(BaseModel):
    """An asset as stored in world state, keyed by its ID."""
    model_config = ConfigDict(populate_by_name=True)

    id: StrictStr = Field(..., alias="ID", description="Unique asset key")
    asset_type: StrictStr = Field(..., alias="Type", description="Asset type, e.g. Car")
    price: StrictInt = Field(..., alias="Price", description="Price in whole units")
    owner: StrictStr = Field(..., alias="Owner", description="Current owner")


class HistoricalAssetRecord(BaseModel):
    """Mutable fields of an asset at one historical version."""
    model_config = ConfigDict(populate_by_name=True)

    price: StrictInt = Field(..., alias="Price")
    owner: StrictStr = Field(..., alias="Owner")

    @classmethod
    def from_asset(cls, asset: Asset) -> "HistoricalAssetRecord":
        return cls(price=asset.price, owner=asset.owner)


class HistoryQueryResult(BaseModel):
    """One entry of an asset's change history."""
    model_config = ConfigDict(populate_by_name=True)

    record: Optional[HistoricalAssetRecord] = Field(None, alias="record")
    tx_id: str = Field(..., alias="txId")
    timestamp: datetime = Field(..., alias="timestamp")
    is_delete: bool = Field(False, alias="isDelete")


def encode_asset(asset: Asset) -> bytes:
    """Serialize an asset to the world-state JSON representation."""
    try:
        return asset.model_dump_json(by_alias=True).encode("utf-8")
    except PydanticSerializationError as e:
        raise SerializationError(f"failed to encode asset {asset.id}: {e}") from e


def decode_asset(raw: bytes) -> Asset:
    """
    Decode world-state bytes into an Asset.

    All four fields are required; anything else is a SerializationError.
    """
    try:
        return Asset.model_validate_json(raw)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "value"
        raise SerializationError(f"failed to decode asset ({location}: {first['msg']})") from e


def convert_timestamp(ts: LedgerTimestamp) -> datetime:
    """
    Convert a ledger (seconds, nanos) timestamp to an aware UTC datetime.

    Sub-microsecond precision is truncated.

    Raises:
        SerializationError: nanos outside [0, 1e9) or seconds outside years 1..9999
    """
    if not 0 <= ts.nanos < 1_000_000_000:
        raise SerializationError(f"timestamp {ts}: nanos not in range [0, 1e9)")
    if not MIN_TIMESTAMP_SECONDS <= ts.seconds <= MAX_TIMESTAMP_SECONDS:
        raise SerializationError(f"timestamp {ts}: seconds before 0001-01-01 or after 9999-12-31")
    return _EPOCH + timedelta(seconds=ts.seconds, microseconds=ts.nanos // 1000)
