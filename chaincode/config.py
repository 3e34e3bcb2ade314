# chaincode/config.py
# Environment-aware configuration for the asset contract

import os
from typing import Literal

# Environment detection
ENV: Literal["dev", "staging", "prod"] = os.environ.get("ENV", "dev")  # type: ignore
IS_DEV = (ENV == "dev")

# Name reported in invocation errors
CONTRACT_NAME = os.environ.get("CONTRACT_NAME", "AssetContract")

if IS_DEV:
    print(f"[CONFIG] Contract: {CONTRACT_NAME} (env={ENV})")
