# frontend/test_api_client.py
# Unit tests for the asset API client, config URL rules, table helpers and the create form

from unittest.mock import MagicMock, patch

import pandas as pd
import pytest
import requests

from frontend import api_client, app
from frontend.app import assets_frame, history_frame
from frontend.config import get_api_base_url, validate_api_url


def make_response(status_code, payload=None, text=""):
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.text = text
    if payload is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture(autouse=True)
def local_backend(monkeypatch):
    monkeypatch.delenv("BACKEND_URL", raising=False)
    monkeypatch.setenv("API_BASE_URL", "http://127.0.0.1:9000")
    monkeypatch.setattr("frontend.config.ENV", "local")
    monkeypatch.setattr("frontend.config.IS_LOCAL", True)


@pytest.fixture
def st_mock():
    with patch.object(api_client, "st") as st:
        yield st


class TestApiRequest:
    def test_get_uses_base_url_and_timeout(self, st_mock):
        with patch.object(api_client.requests, "get", return_value=make_response(200, [])) as get:
            resp = api_client.api_request("GET", "/api/assets", timeout=5)

        assert resp.status_code == 200
        args, kwargs = get.call_args
        assert args[0] == "http://127.0.0.1:9000/api/assets"
        assert kwargs["timeout"] == 5
        st_mock.error.assert_not_called()

    def test_timeout_shows_error_and_returns_none(self, st_mock):
        with patch.object(api_client.requests, "get", side_effect=requests.exceptions.Timeout()):
            assert api_client.api_request("GET", "/api/assets", timeout=3) is None
        assert "timed out after 3s" in st_mock.error.call_args[0][0]

    def test_connection_error_names_backend(self, st_mock):
        with patch.object(api_client.requests, "post", side_effect=requests.exceptions.ConnectionError()):
            assert api_client.api_request("POST", "/api/ledger/init") is None
        assert "http://127.0.0.1:9000" in st_mock.error.call_args[0][0]


class TestAssetHelpers:
    def test_create_posts_body_and_expects_201(self, st_mock):
        created = make_response(201, {"message": "Asset x created successfully"})
        with patch.object(api_client.requests, "post", return_value=created) as post:
            result = api_client.create_asset("x", "Car", 10, "Ann")

        assert result == {"message": "Asset x created successfully"}
        assert post.call_args.kwargs["json"] == {"id": "x", "type": "Car", "price": 10, "owner": "Ann"}

    def test_api_error_detail_is_shown(self, st_mock):
        conflict = make_response(409, {"detail": "Failed to create asset: the asset x already exists"})
        with patch.object(api_client.requests, "post", return_value=conflict):
            assert api_client.create_asset("x", "Car", 10, "Ann") is None
        assert "already exists" in st_mock.error.call_args[0][0]

    def test_non_json_error_falls_back_to_text(self, st_mock):
        with patch.object(api_client.requests, "get", return_value=make_response(502, text="Bad Gateway")):
            assert api_client.list_assets() is None
        assert "Bad Gateway" in st_mock.error.call_args[0][0]

    def test_asset_id_is_url_quoted(self, st_mock):
        with patch.object(api_client.requests, "put", return_value=make_response(200, {"message": "ok"})) as put:
            api_client.transfer_asset("a/b c", "Max")

        assert put.call_args[0][0] == "http://127.0.0.1:9000/api/assets/a%2Fb%20c/transfer"
        assert put.call_args.kwargs["json"] == {"newOwner": "Max"}

    def test_asset_exists_returns_bool(self, st_mock):
        with patch.object(api_client.requests, "get", return_value=make_response(200, {"id": "a", "exists": False})):
            assert api_client.asset_exists("a") is False


class TestConfig:
    def test_explicit_url_is_used_without_trailing_slash(self, monkeypatch):
        monkeypatch.setenv("BACKEND_URL", "http://127.0.0.1:8123/")
        assert get_api_base_url() == "http://127.0.0.1:8123"

    def test_production_requires_https(self):
        with pytest.raises(ValueError, match="https"):
            validate_api_url("http://assets.example.com", "production")

    def test_production_rejects_localhost(self):
        with pytest.raises(ValueError, match="localhost"):
            validate_api_url("https://localhost:8000", "staging")

    def test_local_allows_http(self):
        validate_api_url("http://127.0.0.1:8000", "local")

    def test_local_default_when_nothing_configured(self, monkeypatch):
        monkeypatch.delenv("API_BASE_URL")
        assert get_api_base_url() == "http://127.0.0.1:8000"

    def test_production_without_url_fails(self, monkeypatch):
        monkeypatch.delenv("API_BASE_URL")
        monkeypatch.setattr("frontend.config.ENV", "production")
        monkeypatch.setattr("frontend.config.IS_LOCAL", False)
        with pytest.raises(RuntimeError, match="BACKEND_URL"):
            get_api_base_url()


class TestTables:
    def test_assets_frame_columns(self):
        df = assets_frame([{"ID": "a", "Type": "Car", "Price": 1, "Owner": "o"}])
        assert list(df.columns) == ["ID", "Type", "Price", "Owner"]
        assert df.iloc[0]["Owner"] == "o"

    def test_history_frame_flattens_deleted_entries(self):
        df = history_frame([
            {"record": None, "txId": "t2", "timestamp": "2024-01-01T00:00:01Z", "isDelete": True},
            {"record": {"Price": 5, "Owner": "o"}, "txId": "t1", "timestamp": "2024-01-01T00:00:00Z", "isDelete": False},
        ])
        assert list(df["txId"]) == ["t2", "t1"]
        assert pd.isna(df.iloc[0]["Owner"])
        assert bool(df.iloc[0]["isDelete"]) is True
        assert df.iloc[1]["Price"] == 5


class TestCreateForm:
    @pytest.fixture
    def app_st(self):
        with patch.object(app, "st") as st:
            yield st

    def test_existing_id_is_not_submitted(self, app_st):
        with patch.object(app, "asset_exists", return_value=True) as exists, \
                patch.object(app, "create_asset") as create:
            assert app.submit_new_asset(" car-1 ", "Car", 1, "Ann") is False

        exists.assert_called_once_with("car-1")
        create.assert_not_called()
        assert "already exists" in app_st.warning.call_args[0][0]

    def test_new_id_is_created(self, app_st):
        with patch.object(app, "asset_exists", return_value=False), \
                patch.object(app, "create_asset", return_value={"message": "Asset car-1 created successfully"}) as create:
            assert app.submit_new_asset("car-1", "Car", 1, "Ann") is True

        create.assert_called_once_with("car-1", "Car", 1, "Ann")
        app_st.success.assert_called_once_with("Asset car-1 created successfully")

    def test_unreachable_backend_stops_before_create(self, app_st):
        with patch.object(app, "asset_exists", return_value=None), \
                patch.object(app, "create_asset") as create:
            assert app.submit_new_asset("car-1", "Car", 1, "Ann") is False
        create.assert_not_called()

    def test_blank_id_is_rejected_locally(self, app_st):
        with patch.object(app, "asset_exists") as exists:
            assert app.submit_new_asset("   ", "Car", 1, "Ann") is False
        exists.assert_not_called()
        app_st.warning.assert_called_once_with("ID is required.")
