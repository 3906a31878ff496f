import pytest

from cable_design_validator.api.main import app


@pytest.mark.contract
def test_openapi_contract_contains_expected_paths():
    schema = app.openapi()

    assert schema["info"]["title"] == "Cable Design Validator API"

    paths = schema["paths"]
    expected_paths = {
        "/": {"get"},
        "/health": {"get"},
        "/design/validate": {"post"},
    }

    for path, methods in expected_paths.items():
        assert path in paths
        for method in methods:
            assert method in paths[path]
            assert "responses" in paths[path][method]
            assert "200" in paths[path][method]["responses"]


@pytest.mark.contract
def test_validate_contract_accepts_input_or_record_id():
    schema = app.openapi()

    request_schema = schema["components"]["schemas"]["DesignValidationRequest"]

    assert set(request_schema["properties"]) == {"input", "recordId"}
    assert not request_schema.get("required")


@pytest.mark.contract
def test_health_contract_response_shape():
    pytest.importorskip("httpx")
    from fastapi.testclient import TestClient

    client = TestClient(app)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
