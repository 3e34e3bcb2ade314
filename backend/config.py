# backend/config.py
# Environment-aware configuration for the asset ledger backend

import os
from pathlib import Path as FsPath
from typing import Literal

# Environment detection
ENV: Literal["dev", "staging", "prod"] = os.environ.get("ENV", "dev")  # type: ignore
IS_DEV = (ENV == "dev")
IS_STAGING = (ENV == "staging")
IS_PROD = (ENV == "prod")

# Ledger storage
# Relative paths resolve against the backend/ folder (same as the app DB did)
_raw_ledger_path = os.environ.get("LEDGER_DB_PATH", "ledger.db").strip() or "ledger.db"
LEDGER_DB_PATH = str(
    FsPath(_raw_ledger_path)
    if FsPath(_raw_ledger_path).is_absolute()
    else FsPath(__file__).resolve().parent / _raw_ledger_path
)

# Gateway target
CHANNEL_NAME = os.environ.get("CHANNEL_NAME", "mychannel")
CHAINCODE_NAME = os.environ.get("CHAINCODE_NAME", "asset")

# Submit InitLedger when the API starts
SEED_ON_STARTUP = os.environ.get("SEED_ON_STARTUP", "false").lower() in ("true", "1", "yes", "on")

# CORS origins (expand for staging/prod)
CORS_ORIGINS = [
    "http://localhost:8501",  # Streamlit default
    "http://127.0.0.1:8501",
]

if IS_STAGING or IS_PROD:
    extra_origins = os.environ.get("CORS_ORIGINS", "")
    if extra_origins:
        CORS_ORIGINS.extend(origin.strip() for origin in extra_origins.split(",") if origin.strip())

print(f"[CONFIG] Environment: {ENV}")
print(f"[CONFIG] Ledger: {LEDGER_DB_PATH}")
print(f"[CONFIG] Channel: {CHANNEL_NAME}, chaincode: {CHAINCODE_NAME}")
print(f"[CONFIG] Seed on startup: {SEED_ON_STARTUP}")
