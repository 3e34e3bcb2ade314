"""
chaincode/asset_contract.py

Asset registry contract: create, read, update, transfer and enumerate
assets, and replay an asset's change history.

Every operation runs inside one invocation against the TransactionContext it
is given. Nothing is cached between invocations; each operation reads current
state from the stub and writes full records back.

Two absence semantics are deliberate and must stay distinct:
- asset_exists(): absent key -> False
- read_asset(): absent key -> AssetNotFoundError
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, List, Tuple

from pydantic import BaseModel

from chaincode.config import CONTRACT_NAME, IS_DEV
from chaincode.errors import (
    AssetAlreadyExistsError,
    AssetNotFoundError,
    InvalidArgumentError,
    LedgerStoreError,
    NoUpdatePerformedError,
    SerializationError,
)
from chaincode.models import (
    Asset,
    HistoricalAssetRecord,
    HistoryQueryResult,
    convert_timestamp,
    decode_asset,
    encode_asset,
)
from chaincode.stub import TransactionContext

SEED_ASSETS: Tuple[Asset, ...] = (
    Asset(id="asset1", asset_type="Car", price=10000, owner="Tomoko"),
    Asset(id="asset2", asset_type="House", price=250000, owner="Brad"),
    Asset(id="asset3", asset_type="Boat", price=50000, owner="Jin Soo"),
)

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class AssetContract:
    """Contract operations over the asset world state."""

    name = CONTRACT_NAME

    # Invocation name -> (method, [(parameter name, type)])
    TRANSACTIONS: Dict[str, Tuple[str, List[Tuple[str, type]]]] = {
        "InitLedger": ("init_ledger", []),
        "CreateAsset": ("create_asset", [("id", str), ("assetType", str), ("price", int), ("owner", str)]),
        "ReadAsset": ("read_asset", [("id", str)]),
        "SearchAssetByID": ("search_asset_by_id", [("id", str)]),
        "UpdateAssetPrice": ("update_asset_price", [("id", str), ("newPrice", int)]),
        "TransferAsset": ("transfer_asset", [("id", str), ("newOwner", str)]),
        "GetAllAssets": ("get_all_assets", []),
        "GetAssetHistory": ("get_asset_history", [("assetID", str)]),
        "AssetExists": ("asset_exists", [("id", str)]),
    }

    # ---------------------------------------------------------
    # Invocation boundary
    # ---------------------------------------------------------
    def invoke(self, ctx: TransactionContext, function: str, *args: Any) -> bytes:
        """
        Run a contract operation by its invocation name.

        Arguments arrive as strings (or ints) and are converted to the
        declared parameter types. The result is marshaled to JSON bytes;
        operations without a result return b"".

        Raises:
            InvalidArgumentError: unknown function, wrong arity, bad argument
            ContractError: whatever the operation itself raises
        """
        if function not in self.TRANSACTIONS:
            raise InvalidArgumentError(f"Function {function} not found in contract {self.name}")

        method_name, params = self.TRANSACTIONS[function]
        if len(args) != len(params):
            raise InvalidArgumentError(
                f"Incorrect number of params. Expected {len(params)}, received {len(args)}"
            )

        converted = [
            _convert_argument(index, param_name, param_type, value)
            for index, ((param_name, param_type), value) in enumerate(zip(params, args), start=1)
        ]

        method: Callable[..., Any] = getattr(self, method_name)
        return _marshal(method(ctx, *converted))

    # ---------------------------------------------------------
    # Operations
    # ---------------------------------------------------------
    def init_ledger(self, ctx: TransactionContext) -> None:
        """Write the sample assets, overwriting whatever is stored at their keys."""
        stub = ctx.get_stub()
        for asset in SEED_ASSETS:
            asset_json = encode_asset(asset)
            try:
                stub.put_state(asset.id, asset_json)
            except LedgerStoreError as e:
                raise LedgerStoreError(f"failed to put to world state. {e}") from e

        if IS_DEV:
            print(f"[CONTRACT] InitLedger: seeded {len(SEED_ASSETS)} assets")

    def create_asset(self, ctx: TransactionContext, asset_id: str, asset_type: str, price: int, owner: str) -> None:
        if self.asset_exists(ctx, asset_id):
            raise AssetAlreadyExistsError(asset_id)

        asset = Asset(id=asset_id, asset_type=asset_type, price=price, owner=owner)
        ctx.get_stub().put_state(asset_id, encode_asset(asset))

        if IS_DEV:
            print(f"[CONTRACT] CreateAsset: id={asset_id}")

    def read_asset(self, ctx: TransactionContext, asset_id: str) -> Asset:
        try:
            asset_json = ctx.get_stub().get_state(asset_id)
        except LedgerStoreError as e:
            raise LedgerStoreError(f"failed to read from world state: {e}") from e

        if asset_json is None:
            raise AssetNotFoundError(asset_id)

        return decode_asset(asset_json)

    def search_asset_by_id(self, ctx: TransactionContext, asset_id: str) -> Asset:
        return self.read_asset(ctx, asset_id)

    def update_asset_price(self, ctx: TransactionContext, asset_id: str, new_price: int) -> None:
        """Change the price of an existing asset; an unchanged price is rejected."""
        asset = self.read_asset(ctx, asset_id)
        if asset.price == new_price:
            raise NoUpdatePerformedError(f"price is already {new_price}, no update performed")

        updated = asset.model_copy(update={"price": new_price})
        ctx.get_stub().put_state(asset_id, encode_asset(updated))

        if IS_DEV:
            print(f"[CONTRACT] UpdateAssetPrice: id={asset_id}, {asset.price} -> {new_price}")

    def transfer_asset(self, ctx: TransactionContext, asset_id: str, new_owner: str) -> None:
        """Change the owner of an existing asset; an unchanged owner is rejected."""
        asset = self.read_asset(ctx, asset_id)
        if asset.owner == new_owner:
            raise NoUpdatePerformedError(f"asset is already owned by {new_owner}, no transfer performed")

        updated = asset.model_copy(update={"owner": new_owner})
        ctx.get_stub().put_state(asset_id, encode_asset(updated))

        if IS_DEV:
            print(f"[CONTRACT] TransferAsset: id={asset_id}")

    def get_all_assets(self, ctx: TransactionContext) -> List[Asset]:
        """
        Return every asset in world state, in key order.

        Full scan with no filtering; intended for small datasets. The first
        record that fails to decode aborts the whole query.
        """
        assets: List[Asset] = []
        with ctx.get_stub().get_state_by_range("", "") as results:
            for kv in results:
                assets.append(decode_asset(kv.value))
        return assets

    def get_asset_history(self, ctx: TransactionContext, asset_id: str) -> List[HistoryQueryResult]:
        """
        Return the chain of custody for an asset, newest change first.

        Deletions (and changes without a value) carry record=None.
        """
        if IS_DEV:
            print(f"[CONTRACT] GetAssetHistory: ID {asset_id}")

        records: List[HistoryQueryResult] = []
        with ctx.get_stub().get_history_for_key(asset_id) as results:
            for modification in results:
                historical_record = None
                if not modification.is_delete and modification.value:
                    asset = decode_asset(modification.value)
                    historical_record = HistoricalAssetRecord.from_asset(asset)

                records.append(
                    HistoryQueryResult(
                        record=historical_record,
                        tx_id=modification.tx_id,
                        timestamp=convert_timestamp(modification.timestamp),
                        is_delete=modification.is_delete,
                    )
                )
        return records

    def asset_exists(self, ctx: TransactionContext, asset_id: str) -> bool:
        try:
            asset_json = ctx.get_stub().get_state(asset_id)
        except LedgerStoreError as e:
            raise LedgerStoreError(f"failed to read from world state: {e}") from e

        return asset_json is not None


def _convert_argument(index: int, name: str, param_type: type, value: Any) -> Any:
    if param_type is int:
        converted = None
        if isinstance(value, int) and not isinstance(value, bool):
            converted = value
        elif isinstance(value, str) and _INT_PATTERN.fullmatch(value):
            converted = int(value)
        if converted is not None and INT64_MIN <= converted <= INT64_MAX:
            return converted
        raise InvalidArgumentError(
            f"Error managing parameter param{index} ({name}). Conversion error. "
            f"Cannot convert passed value {value} to int"
        )

    if not isinstance(value, str):
        raise InvalidArgumentError(
            f"Error managing parameter param{index} ({name}). Conversion error. "
            f"Cannot convert passed value {value} to string"
        )
    return value


def _marshal(result: Any) -> bytes:
    if result is None:
        return b""
    if isinstance(result, BaseModel):
        return result.model_dump_json(by_alias=True).encode("utf-8")
    if isinstance(result, list):
        items = [item.model_dump(mode="json", by_alias=True) for item in result]
        return json.dumps(items).encode("utf-8")
    if isinstance(result, bool):
        return b"true" if result else b"false"
    raise SerializationError(f"cannot marshal result of type {type(result).__name__}")
