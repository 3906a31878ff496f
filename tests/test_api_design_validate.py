import json

import pytest
from fastapi.testclient import TestClient

import cable_design_validator.api.main as main
from cable_design_validator.validation.design_validator import DesignValidator
from cable_design_validator.validation.errors import UpstreamError
from cable_design_validator.validation.llm_client import GeminiClient

VALID_RESPONSE = {
    "fields": {"standard": "IEC 60502-1", "csa": 16},
    "validation": [
        {
            "field": "csa",
            "provided": None,
            "expected": "16",
            "status": "WARN",
            "comment": "x",
        }
    ],
    "reasoning": "The design is borderline and requires review.",
    "confidence": {"overall": 0.99},
}


class FakeClient:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = 0

    def generate_text(self, prompt):
        self.calls += 1
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def install_client(monkeypatch):
    def _install(*responses):
        fake = FakeClient(*responses)
        validator = DesignValidator(fake, sleep=lambda _delay: None)
        monkeypatch.setitem(
            main.app.dependency_overrides, main.get_design_validator, lambda: validator
        )
        return fake

    return _install


def test_validate_returns_normalized_result(install_client):
    fake = install_client("```json\n" + json.dumps(VALID_RESPONSE) + "\n```")
    client = TestClient(main.app)

    response = client.post("/design/validate", json={"input": "Cu 16 sqmm"})

    assert response.status_code == 200
    body = response.json()
    assert body["confidence"]["overall"] == 0.95
    assert body["validation"][0]["provided"] is None
    assert fake.calls == 1


def test_validate_without_input_returns_error_object(install_client):
    fake = install_client()
    client = TestClient(main.app)

    response = client.post("/design/validate", json={})

    assert response.status_code == 200
    assert response.json() == {"error": "Input text or recordId required"}
    assert fake.calls == 0


def test_validate_reports_overload_after_retry(install_client):
    fake = install_client(
        UpstreamError("overloaded", status_code=503),
        UpstreamError("overloaded", status_code=503),
    )
    client = TestClient(main.app)

    response = client.post("/design/validate", json={"input": "Cu 16 sqmm"})

    assert response.status_code == 503
    assert response.json() == {
        "detail": "AI service is temporarily overloaded. Please try again."
    }
    assert fake.calls == 2


def test_validate_hides_parse_errors_behind_generic_message(install_client):
    install_client("{not json")
    client = TestClient(main.app)

    response = client.post("/design/validate", json={"input": "Cu 16 sqmm"})

    assert response.status_code == 500
    assert response.json() == {"detail": "AI-based design validation failed"}


def test_validate_reports_malformed_upstream_shape(install_client):
    install_client(json.dumps({"fields": {}, "validation": "none"}))
    client = TestClient(main.app)

    response = client.post("/design/validate", json={"input": "Cu 16 sqmm"})

    assert response.status_code == 502
    assert response.json() == {"detail": "AI returned a malformed validation response"}


def test_form_page_is_served():
    client = TestClient(main.app)

    response = client.get("/")

    assert response.status_code == 200
    assert "AI-Driven Cable Design Validator" in response.text
    assert "'/design/validate'" in response.text


def test_form_page_escapes_model_output():
    client = TestClient(main.app)

    page = client.get("/").text

    assert "function escapeHtml(value)" in page
    assert ".replace(/</g, '&lt;')" in page
    for value in ("row.field", "row.provided", "row.expected", "row.status", "row.comment", "reasoning"):
        assert f"escapeHtml({value})" in page
        assert "${" + value + "}" not in page


def test_startup_fails_without_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    with pytest.raises(RuntimeError, match="GEMINI_API_KEY is not set"):
        with TestClient(main.app):
            pass


def test_startup_builds_client_once(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "secret")

    with TestClient(main.app) as client:
        validator = main.app.state.design_validator
        assert isinstance(validator.llm_client, GeminiClient)
        assert client.get("/health").json() == {"status": "ok"}
        assert main.app.state.design_validator is validator
