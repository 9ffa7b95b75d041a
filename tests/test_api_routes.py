"""Tests for API routes."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from sheetbind.api.routes import WorkbookRequest, router

CSV = "k, p, v\na, 1, 3\nb, 2"

OUTLINE = {
    "dimensions": [{"label": "k"}],
    "parameters": [{"label": "p", "bindings": [{"dimensionLabel": "k"}]}],
    "variables": [{"label": "v", "bindings": [{"dimensionLabel": "k"}]}],
}


@pytest.fixture
def client():
    """Create a test client with the API router."""
    app = FastAPI()
    app.include_router(router, prefix="/api")
    return TestClient(app)


class TestWorkbookRequest:
    """Test workbook request validation."""

    def test_requires_exactly_one_source(self):
        """Test that sheets and csvs are mutually exclusive."""
        with pytest.raises(ValueError):
            WorkbookRequest()
        with pytest.raises(ValueError):
            WorkbookRequest(sheets={"s": []}, csvs={"s": "a"})

    def test_to_spreadsheet(self):
        """Test that both sources build the same workbook."""
        from_csv = WorkbookRequest(csvs={"s": "a, b\n1, x"}).to_spreadsheet()
        from_columns = WorkbookRequest(sheets={"s": [["a", 1], ["b", "x"]]}).to_spreadsheet()

        assert from_csv.to_columns("s") == from_columns.to_columns("s")


class TestTablesEndpoint:
    """Test the /api/tables endpoint."""

    def test_detect_tables(self, client):
        """Test detecting a slim table."""
        response = client.post("/api/tables", json={"csvs": {"s1": "a, b\n1, 2"}})

        assert response.status_code == 200
        [table] = response.json()["tables"]
        assert list(table["blocks"]) == ["a", "b"]
        assert table["blocks"]["b"]["kind"] == "slim"
        assert table["blocks"]["b"]["body_range"]["left"] == 2

    def test_invalid_request(self, client):
        """Test that a request without a workbook is rejected."""
        response = client.post("/api/tables", json={})

        assert response.status_code == 422

    def test_binding_error(self, client):
        """Test that table errors are returned as 422."""
        response = client.post("/api/tables", json={"csvs": {"s1": "a, a\n1, 2"}})

        assert response.status_code == 422
        assert "Duplicate table header" in response.json()["detail"]


class TestMappingEndpoint:
    """Test the /api/mapping endpoint."""

    def test_map_outline(self, client):
        """Test mapping an outline onto a workbook."""
        response = client.post("/api/mapping", json={"csvs": {"s1": CSV}, "outline": OUTLINE})

        assert response.status_code == 200
        data = response.json()
        assert [p["label"] for p in data["parameters"]] == ["p"]
        assert [v["label"] for v in data["variables"]] == ["v"]
        assert data["dimensions"][0]["label"] == "k"

    def test_missing_parameter(self, client):
        """Test that an unmapped parameter is reported."""
        response = client.post(
            "/api/mapping",
            json={"csvs": {"s1": "k, v\na, 1"}, "outline": OUTLINE},
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "Parameter not found: p"


class TestInputsEndpoint:
    """Test the /api/inputs endpoint."""

    def test_extract_inputs(self, client):
        """Test extracting inputs from an outline."""
        response = client.post("/api/inputs", json={"csvs": {"s1": CSV}, "outline": OUTLINE})

        assert response.status_code == 200
        assert response.json() == {
            "dimensions": [{"label": "k", "items": ["a", "b"]}],
            "parameters": [
                {"label": "p", "entries": [{"key": ["a"], "value": 1}, {"key": ["b"], "value": 2}]}
            ],
            "pinnedVariables": [{"label": "v", "entries": [{"key": ["a"], "value": 3}]}],
        }

    def test_extract_inputs_from_mapping(self, client):
        """Test that a previously computed mapping can be reused."""
        mapping = client.post(
            "/api/mapping", json={"csvs": {"s1": CSV}, "outline": OUTLINE}
        ).json()

        from_mapping = client.post("/api/inputs", json={"csvs": {"s1": CSV}, "mapping": mapping})
        from_outline = client.post("/api/inputs", json={"csvs": {"s1": CSV}, "outline": OUTLINE})

        assert from_mapping.status_code == 200
        assert from_mapping.json() == from_outline.json()

    def test_requires_outline_or_mapping(self, client):
        """Test that inputs cannot be extracted without a binding."""
        response = client.post("/api/inputs", json={"csvs": {"s1": CSV}})

        assert response.status_code == 422

    def test_non_numeric_value(self, client):
        """Test that extraction errors are returned as 422."""
        response = client.post(
            "/api/inputs",
            json={"sheets": {"s1": [["k", "a"], ["p", "x"]]}, "outline": OUTLINE},
        )

        assert response.status_code == 422
        assert "Non-numeric value" in response.json()["detail"]


class TestResultsEndpoint:
    """Test the /api/results endpoint."""

    def test_inject_results(self, client):
        """Test writing results and returning the updated workbook."""
        response = client.post(
            "/api/results",
            json={
                "csvs": {"s1": CSV},
                "outline": OUTLINE,
                "results": [{"label": "v", "entries": [{"key": ["c"], "value": 5}]}],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["patch_count"] == 2
        assert data["sheets"] == {"s1": [["k", "a", "b", "c"], ["p", 1, 2], ["v", 0, 0, 5]]}

    def test_reset_results(self, client):
        """Test clearing variable values."""
        response = client.post(
            "/api/results",
            json={"csvs": {"s1": CSV}, "outline": OUTLINE, "reset": True},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["patch_count"] == 1
        assert data["sheets"]["s1"][2] == ["v", 0, 0]

    def test_missing_result(self, client):
        """Test that a variable without a result is reported."""
        response = client.post(
            "/api/results",
            json={"csvs": {"s1": CSV}, "outline": OUTLINE, "results": []},
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "Missing result for v"
