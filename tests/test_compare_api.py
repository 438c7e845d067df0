"""Tests for /compare endpoints."""

import pytest

from src.change_engine import __engine_version__


class TestCompareObjects:
    """Tests for POST /compare/objects endpoint."""

    @pytest.mark.asyncio
    async def test_changed_documents(self, client):
        """Should return sparse snapshots of the changed fields."""
        payload = {
            "old": {"Name": "Alice", "Role": "Admin", "Id": 1},
            "new": {"Name": "Alicia", "Role": "Admin", "Id": 1},
            "always_include_properties": ["Role"],
        }

        response = await client.post("/compare/objects", json=payload)
        assert response.status_code == 200

        data = response.json()
        assert data["engine_version"] == __engine_version__
        assert data["changed"] is True
        assert data["old_value"] == {"Name": "Alice", "Role": "Admin"}
        assert data["new_value"] == {"Name": "Alicia", "Role": "Admin"}
        assert data["paths"] == ["Name", "Role"]

    @pytest.mark.asyncio
    async def test_unchanged_documents(self, client):
        """Should report no change with null snapshots."""
        payload = {"old": {"Name": "Alice"}, "new": {"Name": "Alice"}}

        response = await client.post("/compare/objects", json=payload)
        assert response.status_code == 200

        data = response.json()
        assert data["changed"] is False
        assert data["old_value"] is None
        assert data["new_value"] is None
        assert data["paths"] == []

    @pytest.mark.asyncio
    async def test_ignored_properties(self, client):
        payload = {
            "old": {"Name": "Alice", "UpdatedAt": "2024-01-01"},
            "new": {"Name": "Alice", "UpdatedAt": "2024-02-01"},
            "ignore_properties": ["UpdatedAt"],
        }

        response = await client.post("/compare/objects", json=payload)
        assert response.status_code == 200
        assert response.json()["changed"] is False

    @pytest.mark.asyncio
    async def test_suppress_unchanged_always_included(self, client):
        payload = {
            "old": {"Name": "Alice", "Role": "Admin"},
            "new": {"Name": "Alice", "Role": "Admin"},
            "always_include_properties": ["Role"],
            "include_unchanged_always_included": False,
        }

        response = await client.post("/compare/objects", json=payload)
        assert response.status_code == 200
        assert response.json()["changed"] is False

    @pytest.mark.asyncio
    async def test_indexed_paths(self, client):
        """Sequence positions appear as object keys in snapshots."""
        payload = {
            "old": {"Phones": ["555-1234", "555-5678"]},
            "new": {"Phones": ["555-1234", "555-0000"]},
        }

        response = await client.post("/compare/objects", json=payload)
        assert response.status_code == 200

        data = response.json()
        assert data["paths"] == ["Phones[1]"]
        assert data["new_value"] == {"Phones": {"1": "555-0000"}}

    @pytest.mark.asyncio
    async def test_type_mismatch_rejected(self, client):
        """Should return 422 when shapes differ."""
        payload = {"old": {"Tags": ["a"]}, "new": {"Tags": "a"}}

        response = await client.post("/compare/objects", json=payload)
        assert response.status_code == 422

        detail = response.json()["detail"]
        assert detail["error"] == "comparison.type_mismatch"
        assert detail["path"] == "Tags"

    @pytest.mark.asyncio
    async def test_blank_pattern_rejected(self, client):
        """Should return 422 for blank path patterns."""
        payload = {"old": {}, "new": {}, "ignore_properties": ["  "]}

        response = await client.post("/compare/objects", json=payload)
        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "validation_error"


class TestCompareLists:
    """Tests for POST /compare/lists endpoint."""

    @pytest.mark.asyncio
    async def test_keyed_lists(self, client, old_people, new_people):
        """Should classify items paired by key."""
        payload = {
            "old": old_people,
            "new": new_people,
            "key_path": "Id",
        }

        response = await client.post("/compare/lists", json=payload)
        assert response.status_code == 200

        data = response.json()
        assert data["engine_version"] == __engine_version__
        assert (data["added"], data["removed"], data["modified"]) == (1, 1, 1)
        assert [(e["key"], e["kind"]) for e in data["entries"]] == [
            (1, "modified"),
            (2, "removed"),
            (3, "added"),
        ]

        modified = data["entries"][0]
        assert modified["old_value"] == {"Name": "Alice"}
        assert modified["new_value"] == {"Name": "Alicia"}
        assert modified["paths"] == ["Name"]

    @pytest.mark.asyncio
    async def test_nested_key_path(self, client):
        payload = {
            "old": [{"Ref": {"Code": "A"}, "Qty": 1}],
            "new": [{"Ref": {"Code": "A"}, "Qty": 2}],
            "key_path": "Ref.Code",
        }

        response = await client.post("/compare/lists", json=payload)
        assert response.status_code == 200

        entries = response.json()["entries"]
        assert [(e["key"], e["kind"]) for e in entries] == [("A", "modified")]

    @pytest.mark.asyncio
    async def test_positional_lists(self, client):
        """Should pair by index without a key path."""
        payload = {
            "old": [{"a": 1}],
            "new": [{"a": 2}, {"a": 3}],
        }

        response = await client.post("/compare/lists", json=payload)
        assert response.status_code == 200

        entries = response.json()["entries"]
        assert [(e["key"], e["kind"]) for e in entries] == [
            (0, "modified"),
            (1, "added"),
        ]
        assert entries[1]["old_value"] is None
        assert entries[1]["new_value"] == {"a": 3}

    @pytest.mark.asyncio
    async def test_missing_lists(self, client):
        """Should treat absent lists as empty."""
        response = await client.post("/compare/lists", json={})
        assert response.status_code == 200
        assert response.json()["entries"] == []

    @pytest.mark.asyncio
    async def test_duplicate_keys_rejected(self, client):
        """Should return 422 when a side repeats a key."""
        payload = {
            "old": [{"Id": 1}, {"Id": 1}],
            "new": [],
            "key_path": "Id",
        }

        response = await client.post("/compare/lists", json=payload)
        assert response.status_code == 422

        detail = response.json()["detail"]
        assert detail["error"] == "comparison.configuration"
        assert detail["meta"]["side"] == "old"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key_path", ["", "Ref..Code", "Items[x]"])
    async def test_invalid_key_path(self, client, key_path):
        """Should reject malformed key paths."""
        payload = {"old": [], "new": [], "key_path": key_path}

        response = await client.post("/compare/lists", json=payload)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_always_include_in_modified_item(self, client, old_people, new_people):
        """Forced fields ride along only on items that really changed."""
        payload = {
            "old": old_people,
            "new": new_people,
            "key_path": "Id",
            "always_include_properties": ["Role"],
        }

        response = await client.post("/compare/lists", json=payload)
        assert response.status_code == 200

        modified = response.json()["entries"][0]
        assert modified["kind"] == "modified"
        assert modified["new_value"] == {"Name": "Alicia", "Role": "Admin"}
        assert modified["paths"] == ["Name", "Role"]
