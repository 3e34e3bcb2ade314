# frontend/app.py
# Asset Ledger – browse, create, transfer and reprice assets
#
# Run from repo root (after pip install -e .): streamlit run frontend/app.py

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd
import streamlit as st

from frontend.api_client import (
    asset_exists,
    create_asset,
    get_asset,
    get_asset_history,
    init_ledger,
    list_assets,
    transfer_asset,
    update_asset_price,
)
from frontend.config import ENV, IS_LOCAL

ASSET_COLUMNS = ["ID", "Type", "Price", "Owner"]


def assets_frame(assets: List[Dict[str, Any]]) -> pd.DataFrame:
    """Assets as a table, one row per asset, in the API's order."""
    return pd.DataFrame(assets, columns=ASSET_COLUMNS)


def history_frame(history: List[Dict[str, Any]]) -> pd.DataFrame:
    """Flatten history entries; deleted versions show empty price/owner."""
    rows = []
    for entry in history:
        record = entry.get("record") or {}
        rows.append(
            {
                "timestamp": entry.get("timestamp"),
                "txId": entry.get("txId"),
                "Price": record.get("Price"),
                "Owner": record.get("Owner"),
                "isDelete": entry.get("isDelete", False),
            }
        )
    return pd.DataFrame(rows, columns=["timestamp", "txId", "Price", "Owner", "isDelete"])


def render_assets() -> None:
    st.subheader("All assets")
    col_refresh, col_seed = st.columns([1, 1])
    with col_seed:
        if st.button("Seed sample assets"):
            result = init_ledger()
            if result:
                st.success(result["message"])
    with col_refresh:
        st.button("Refresh")

    assets = list_assets()
    if assets is None:
        return
    if not assets:
        st.info("No assets on the ledger yet.")
        return
    st.dataframe(assets_frame(assets), width="stretch")


def render_search() -> None:
    st.subheader("Search by ID")
    asset_id = st.text_input("Asset ID", key="search_id")
    if st.button("Search") and asset_id:
        asset = get_asset(asset_id)
        if asset:
            st.json(asset)


def submit_new_asset(asset_id: str, asset_type: str, price: int, owner: str) -> bool:
    """Create the asset unless the ID is blank or already taken; returns True on success."""
    asset_id = asset_id.strip()
    if not asset_id:
        st.warning("ID is required.")
        return False

    exists = asset_exists(asset_id)
    if exists is None:
        return False
    if exists:
        st.warning(f"Asset {asset_id} already exists. Use Transfer / Price to change it.")
        return False

    result = create_asset(asset_id, asset_type, price, owner)
    if not result:
        return False
    st.success(result["message"])
    return True


def render_create() -> None:
    st.subheader("Create asset")
    with st.form("create_asset_form"):
        c1, c2 = st.columns(2)
        asset_id = c1.text_input("ID")
        asset_type = c2.text_input("Type")
        c3, c4 = st.columns(2)
        price = c3.number_input("Price", min_value=0, step=1, value=0)
        owner = c4.text_input("Owner")
        submitted = st.form_submit_button("Create")

    if submitted:
        submit_new_asset(asset_id, asset_type, int(price), owner)


def render_update() -> None:
    st.subheader("Transfer / reprice")
    col_transfer, col_price = st.columns(2)

    with col_transfer:
        with st.form("transfer_form"):
            asset_id = st.text_input("Asset ID", key="transfer_id")
            new_owner = st.text_input("New owner")
            if st.form_submit_button("Transfer") and asset_id:
                result = transfer_asset(asset_id, new_owner)
                if result:
                    st.success(result["message"])

    with col_price:
        with st.form("price_form"):
            asset_id = st.text_input("Asset ID", key="price_id")
            new_price = st.number_input("New price", min_value=0, step=1, value=0)
            if st.form_submit_button("Update price") and asset_id:
                result = update_asset_price(asset_id, int(new_price))
                if result:
                    st.success(result["message"])


def render_history() -> None:
    st.subheader("Asset history")
    asset_id = st.text_input("Asset ID", key="history_id")
    if st.button("Show history") and asset_id:
        history = get_asset_history(asset_id)
        if history is None:
            return
        if not history:
            st.info(f"No history recorded for {asset_id}.")
            return
        st.dataframe(history_frame(history), width="stretch")


def main() -> None:
    st.set_page_config(page_title="Asset Ledger", layout="wide")
    st.title("Asset Ledger")
    if IS_LOCAL:
        st.caption(f"Environment: {ENV}")

    tab_assets, tab_search, tab_create, tab_update, tab_history = st.tabs(
        ["Assets", "Search", "Create", "Transfer / Price", "History"]
    )
    with tab_assets:
        render_assets()
    with tab_search:
        render_search()
    with tab_create:
        render_create()
    with tab_update:
        render_update()
    with tab_history:
        render_history()


if __name__ == "__main__":
    main()
