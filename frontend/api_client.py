"""
frontend/api_client.py
Centralized API client for all asset API requests.

This module ensures:
1. All API calls go through api_request (one place for headers, timeouts, errors)
2. Connection problems surface as st.error and a None result, never an exception
3. Error details returned by the API are shown to the user as-is
"""

from typing import Any, Dict, List, Literal, Optional
from urllib.parse import quote

import requests
import streamlit as st

from frontend.config import IS_LOCAL, REQUEST_TIMEOUT, get_api_base_url

__all__ = [
    "api_request",
    "list_assets",
    "get_asset",
    "asset_exists",
    "get_asset_history",
    "create_asset",
    "transfer_asset",
    "update_asset_price",
    "init_ledger",
]


def api_request(
    method: Literal["GET", "POST", "PUT"],
    path: str,
    json: Optional[Dict[str, Any]] = None,
    params: Optional[Dict[str, Any]] = None,
    timeout: int = REQUEST_TIMEOUT,
) -> Optional[requests.Response]:
    """
    Make an API request with consistent error handling.

    Args:
        method: HTTP method (GET, POST, PUT)
        path: API endpoint path (e.g., "/api/assets")
        json: JSON body for POST/PUT requests
        params: Query parameters
        timeout: Request timeout in seconds

    Returns:
        Response object (any status code), or None on timeout/connection error
    """
    try:
        base_url = get_api_base_url()
    except (RuntimeError, ValueError) as e:
        st.error(f"⚙️ Configuration error: {str(e)}")
        return None

    url = f"{base_url}{path}"
    headers = {"Accept": "application/json"}
    if json is not None:
        headers["Content-Type"] = "application/json"

    try:
        if method == "GET":
            return requests.get(url, headers=headers, params=params, timeout=timeout)
        elif method == "POST":
            return requests.post(url, json=json, headers=headers, params=params, timeout=timeout)
        elif method == "PUT":
            return requests.put(url, json=json, headers=headers, params=params, timeout=timeout)
        raise ValueError(f"Unsupported HTTP method: {method}")

    except requests.exceptions.Timeout:
        if IS_LOCAL:
            print(f"[API] Timeout on {method} {path}")
        st.error(f"⏱️ Request timed out after {timeout}s. Please try again.")
        return None

    except requests.exceptions.ConnectionError:
        if IS_LOCAL:
            print(f"[API] Connection error on {method} {path}")
        st.error(f"🔌 Cannot connect to backend at {base_url}. Please check that the API is running.")
        return None

    except requests.exceptions.RequestException as e:
        if IS_LOCAL:
            print(f"[API] Unexpected error on {method} {path}: {type(e).__name__}")
        st.error(f"❌ Unexpected error: {str(e)[:100]}")
        return None


def _result(resp: Optional[requests.Response], ok_status: int = 200) -> Optional[Any]:
    """Return the JSON body of a successful response; show the API error otherwise."""
    if resp is None:
        return None
    if resp.status_code == ok_status:
        return resp.json()

    try:
        detail = resp.json().get("detail", resp.text)
    except ValueError:
        detail = resp.text
    if IS_LOCAL:
        print(f"[API] HTTP {resp.status_code}: {detail}")
    st.error(f"❌ {detail}")
    return None


def _asset_path(asset_id: str, action: str = "") -> str:
    path = f"/api/assets/{quote(asset_id, safe='')}"
    return f"{path}/{action}" if action else path


def list_assets() -> Optional[List[Dict[str, Any]]]:
    return _result(api_request("GET", "/api/assets"))


def get_asset(asset_id: str) -> Optional[Dict[str, Any]]:
    return _result(api_request("GET", _asset_path(asset_id)))


def asset_exists(asset_id: str) -> Optional[bool]:
    data = _result(api_request("GET", _asset_path(asset_id, "exists")))
    return None if data is None else bool(data.get("exists"))


def get_asset_history(asset_id: str) -> Optional[List[Dict[str, Any]]]:
    return _result(api_request("GET", _asset_path(asset_id, "history")))


def create_asset(asset_id: str, asset_type: str, price: int, owner: str) -> Optional[Dict[str, Any]]:
    body = {"id": asset_id, "type": asset_type, "price": price, "owner": owner}
    return _result(api_request("POST", "/api/assets", json=body), ok_status=201)


def transfer_asset(asset_id: str, new_owner: str) -> Optional[Dict[str, Any]]:
    return _result(api_request("PUT", _asset_path(asset_id, "transfer"), json={"newOwner": new_owner}))


def update_asset_price(asset_id: str, new_price: int) -> Optional[Dict[str, Any]]:
    return _result(api_request("PUT", _asset_path(asset_id, "price"), json={"newPrice": new_price}))


def init_ledger() -> Optional[Dict[str, Any]]:
    return _result(api_request("POST", "/api/ledger/init"))
