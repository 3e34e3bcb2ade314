"""
chaincode/errors.py

Error taxonomy for the asset contract.

Every failure an invocation can return derives from ContractError; str(err)
is the message the caller sees.

- AssetNotFoundError: operation on a key with no live value
- AssetAlreadyExistsError: CreateAsset on a live key
- NoUpdatePerformedError: update/transfer with the value already stored
- SerializationError: stored bytes or timestamps that cannot be converted
- LedgerStoreError: read/write/iterate failure inside the ledger
- ReadConflictError: another invocation committed over this one's reads
- InvalidArgumentError: unknown function, wrong arity, bad argument type
"""

from __future__ import annotations


class ContractError(Exception):
    """Base class for all contract invocation failures."""


class AssetNotFoundError(ContractError):
    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__(f"the asset {asset_id} does not exist")


class AssetAlreadyExistsError(ContractError):
    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__(f"the asset {asset_id} already exists")


class NoUpdatePerformedError(ContractError):
    """Raised when an update would leave the stored record unchanged."""


class SerializationError(ContractError):
    pass


class LedgerStoreError(ContractError):
    pass


class InvalidArgumentError(ContractError):
    pass


class ReadConflictError(LedgerStoreError):
    """A key or range read by the invocation changed before it could commit."""

    def __init__(self, tx_id: str, what: str):
        self.tx_id = tx_id
        super().__init__(f"MVCC_READ_CONFLICT: {what} changed since it was read, transaction {tx_id} not committed")
