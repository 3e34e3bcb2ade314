"""
Smoke Test for the Asset Ledger API

Tests:
1. Seed the ledger and list the sample assets
2. Create a new asset; a second create with the same ID is rejected (409)
3. Reprice and transfer it; repeating the same value is rejected (409)
4. History shows create -> reprice -> transfer, newest first
5. Unknown IDs: search returns 404, exists returns false

Run: python smoke_test_asset_api.py

Requirements:
- Backend running on localhost:8000 (uvicorn backend.main:app)
"""

import os
import sys
import uuid

import requests

BASE_URL = os.environ.get("BACKEND_URL", "http://localhost:8000").rstrip("/")


class SmokeResult:
    def __init__(self):
        self.passed = 0
        self.failed = 0

    def check(self, name: str, ok: bool, detail: str = ""):
        if ok:
            self.passed += 1
            print(f"✅ PASS: {name}")
        else:
            self.failed += 1
            print(f"❌ FAIL: {name}")
        if detail:
            print(f"  └─ {detail}")

    def summary(self):
        print("\n" + "=" * 60)
        print(f"SMOKE TEST SUMMARY: {self.passed} passed, {self.failed} failed")
        print("=" * 60)
        return self.failed == 0


def main():
    result = SmokeResult()
    asset_id = f"smoke-{uuid.uuid4().hex[:8]}"

    print("=" * 60)
    print("SMOKE TEST: Asset Ledger API")
    print("=" * 60)

    print("\n📋 TEST 1: Seed + list")
    resp = requests.post(f"{BASE_URL}/api/ledger/init", timeout=10)
    result.check("InitLedger", resp.status_code == 200, resp.text)
    ids = {a["ID"] for a in requests.get(f"{BASE_URL}/api/assets", timeout=10).json()}
    result.check("Sample assets listed", {"asset1", "asset2", "asset3"} <= ids, f"ids={sorted(ids)}")

    print("\n📋 TEST 2: Create")
    body = {"id": asset_id, "type": "Car", "price": 100, "owner": "Smoke"}
    resp = requests.post(f"{BASE_URL}/api/assets", json=body, timeout=10)
    result.check("Create asset", resp.status_code == 201, resp.text)
    resp = requests.post(f"{BASE_URL}/api/assets", json=body, timeout=10)
    result.check("Duplicate create rejected", resp.status_code == 409, resp.text)

    print("\n📋 TEST 3: Reprice + transfer")
    resp = requests.put(f"{BASE_URL}/api/assets/{asset_id}/price", json={"newPrice": 150}, timeout=10)
    result.check("Reprice", resp.status_code == 200, resp.text)
    resp = requests.put(f"{BASE_URL}/api/assets/{asset_id}/price", json={"newPrice": 150}, timeout=10)
    result.check("Same price rejected", resp.status_code == 409, resp.text)
    resp = requests.put(f"{BASE_URL}/api/assets/{asset_id}/transfer", json={"newOwner": "Smoke2"}, timeout=10)
    result.check("Transfer", resp.status_code == 200, resp.text)
    resp = requests.put(f"{BASE_URL}/api/assets/{asset_id}/transfer", json={"newOwner": "Smoke2"}, timeout=10)
    result.check("Same owner rejected", resp.status_code == 409, resp.text)

    print("\n📋 TEST 4: History")
    history = requests.get(f"{BASE_URL}/api/assets/{asset_id}/history", timeout=10).json()
    records = [h["record"] for h in history]
    result.check(
        "History newest first",
        records == [
            {"Price": 150, "Owner": "Smoke2"},
            {"Price": 150, "Owner": "Smoke"},
            {"Price": 100, "Owner": "Smoke"},
        ],
        f"records={records}",
    )

    print("\n📋 TEST 5: Unknown IDs")
    missing = f"missing-{uuid.uuid4().hex[:8]}"
    resp = requests.get(f"{BASE_URL}/api/assets/{missing}", timeout=10)
    result.check("Search unknown -> 404", resp.status_code == 404, resp.text)
    resp = requests.get(f"{BASE_URL}/api/assets/{missing}/exists", timeout=10)
    result.check("Exists unknown -> false", resp.json().get("exists") is False, resp.text)

    return 0 if result.summary() else 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nTest interrupted by user")
        sys.exit(1)
    except requests.exceptions.RequestException as e:
        print(f"\n\n❌ ERROR: cannot reach {BASE_URL}: {e}")
        sys.exit(1)
