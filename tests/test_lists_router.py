"""API tests for the list endpoints."""

import pytest
from fastapi.testclient import TestClient

from app.schemas.army import SavedList
from app.services.lists import encode_list

from .conftest import USER_ID, FakeSupabase

BASE = "/api/v1/lists"


@pytest.fixture
def list_payload(sample_list: SavedList) -> dict:
    return sample_list.model_dump()


class TestSharing:
    def test_share_then_load(self, client: TestClient, list_payload: dict):
        response = client.post(f"{BASE}/share", json=list_payload)

        assert response.status_code == 200
        body = response.json()
        assert body["url"].endswith(f"/shared-list/{body['code']}")

        loaded = client.get(f"{BASE}/shared/{body['code']}")
        assert loaded.status_code == 200
        assert loaded.json()["name"] == "Frost Raiders"
        assert loaded.json()["id"].startswith("temp-")

    def test_bad_token(self, client: TestClient):
        response = client.get(f"{BASE}/shared/not-valid-base64")

        assert response.status_code == 404
        assert response.json()["detail"] == "Could not load shared list"

    def test_shared_token_matches_codec(self, client: TestClient, sample_list: SavedList):
        response = client.post(f"{BASE}/share", json=sample_list.model_dump())

        assert response.json()["code"] == encode_list(sample_list)


class TestExportAndBuild:
    def test_export(self, client: TestClient, list_payload: dict):
        response = client.post(f"{BASE}/export", json={"list": list_payload})

        body = response.json()
        assert body["total_points"] == 100
        assert body["total_command"] == 2
        assert "Eskold Scouts" in body["text"]

    def test_courtesy_export_hides_scouts(self, client: TestClient, list_payload: dict):
        response = client.post(f"{BASE}/export", json={"list": list_payload, "courtesy": True})

        body = response.json()
        assert "Eskold Scouts" not in body["text"]
        assert body["total_points"] == 85

    def test_add_unit(self, client: TestClient, list_payload: dict):
        unit = {
            "id": "ice-wolves",
            "name": "Ice Wolves",
            "faction": "northern-tribes",
            "points_cost": 10,
            "availability": 2,
        }

        response = client.post(
            f"{BASE}/units",
            json={"faction": "northern-tribes", "units": list_payload["units"], "unit": unit},
        )

        assert response.status_code == 200
        assert response.json()["units"][-1]["id"] == "ice-wolves"
        assert response.json()["total_points"] == 110

    def test_add_unit_rule_violation(self, client: TestClient, list_payload: dict):
        unit = {
            "id": "warlord",
            "name": "Warlord",
            "faction": "northern-tribes",
            "points_cost": 40,
            "availability": 1,
            "high_command": True,
        }

        response = client.post(
            f"{BASE}/units",
            json={"faction": "northern-tribes", "units": list_payload["units"], "unit": unit},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "HIGH_COMMAND_LIMIT"


class TestSavedLists:
    def test_save_and_list(self, client: TestClient, fake_supabase: FakeSupabase, list_payload: dict):
        request = {
            "id": "temp-123",
            "name": list_payload["name"],
            "faction": list_payload["faction"],
            "units": list_payload["units"],
        }

        response = client.post(BASE, json=request)

        assert response.status_code == 201
        saved = response.json()
        assert not saved["id"].startswith("temp-")
        assert saved["user_id"] == USER_ID
        row = fake_supabase.tables["army_lists"][0]
        assert row["units"][0]["pointsCost"] == 25

        listed = client.get(BASE).json()
        assert [item["id"] for item in listed] == [saved["id"]]
        assert listed[0]["units"][1]["high_command"] is True

    def test_save_requires_name(self, client: TestClient):
        response = client.post(BASE, json={"name": "", "faction": "syenann"})

        assert response.status_code == 422

    def test_delete(self, client: TestClient, fake_supabase: FakeSupabase):
        fake_supabase.tables["army_lists"] = [
            {"id": "l1", "name": "Mine", "faction": "syenann", "units": [], "user_id": USER_ID},
            {"id": "l2", "name": "Theirs", "faction": "syenann", "units": [], "user_id": "other"},
        ]

        assert client.delete(f"{BASE}/l1").status_code == 204
        assert client.delete(f"{BASE}/l2").status_code == 404
        assert [row["id"] for row in fake_supabase.tables["army_lists"]] == ["l2"]

    def test_lists_for_wab_id(self, client: TestClient, fake_supabase: FakeSupabase):
        fake_supabase.tables["army_lists"] = [
            {"id": "l1", "name": "Raid", "faction": "northern-tribes", "units": [], "wab_id": "WAB-9"},
            {"id": "l2", "name": "Other", "faction": "syenann", "units": [], "wab_id": "WAB-1"},
        ]

        response = client.get(f"{BASE}/wab/WAB-9")

        assert response.status_code == 200
        assert [item["id"] for item in response.json()] == ["l1"]
