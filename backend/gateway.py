"""
backend/gateway.py

Gateway between the REST API and the asset contract.

Mirrors a ledger gateway SDK: transactions are invoked by name with string
arguments and results come back as JSON bytes.

- evaluate_transaction: runs against current state, never commits
- submit_transaction: runs and commits the write set on success

Contract errors propagate unchanged so callers can map them.
"""

from __future__ import annotations

from typing import Any

from backend.config import IS_DEV
from backend.ledger import SqliteLedger
from chaincode.asset_contract import AssetContract
from chaincode.errors import ContractError


class LedgerGateway:
    def __init__(
        self,
        ledger: SqliteLedger,
        contract: AssetContract,
        channel_name: str = "mychannel",
        chaincode_name: str = "asset",
    ):
        self.ledger = ledger
        self.contract = contract
        self.channel_name = channel_name
        self.chaincode_name = chaincode_name

    def evaluate_transaction(self, name: str, *args: Any) -> bytes:
        if IS_DEV:
            print(f"[GATEWAY] --> Evaluate Transaction: {name} {list(args)}")
        return self._invoke(name, args, commit=False)

    def submit_transaction(self, name: str, *args: Any) -> bytes:
        if IS_DEV:
            print(f"[GATEWAY] --> Submit Transaction: {name} {list(args)}")
        result = self._invoke(name, args, commit=True)
        if IS_DEV:
            print("[GATEWAY] *** Transaction committed successfully")
        return result

    def _invoke(self, name: str, args: tuple, commit: bool) -> bytes:
        try:
            with self.ledger.transaction(commit=commit) as ctx:
                return self.contract.invoke(ctx, name, *args)
        except ContractError as e:
            if IS_DEV:
                print(f"[GATEWAY] {self.channel_name}/{self.chaincode_name} {name} failed: {e}")
            raise
