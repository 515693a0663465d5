import dataclasses
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from design_studio.config import Settings
from design_studio.errors import ConfigurationError
from design_studio.main import create_app

from conftest import FakeGenaiClient, ImageBackend


@pytest.fixture
def backend():
    return ImageBackend(fail_when=lambda prompt: prompt.startswith("warm minimal"))


@pytest.fixture
def text_client(concepts_json):
    return FakeGenaiClient(text=concepts_json)


@pytest.fixture
def client(settings, text_client, backend):
    app = create_app(settings, text_client=text_client, http_client=backend.client())
    with TestClient(app) as test_client:
        yield test_client


def test_generate_design(client):
    response = client.post("/api/generate-design", json={"prompt": "bright living room", "useCase": "interior"})

    assert response.status_code == 200
    body = response.json()
    assert [c["title"] for c in body["concepts"]] == ["Nordic Calm", "Industrial Loft", "Warm Minimal"]
    assert body["concepts"][0]["imageUrl"].startswith("data:image/png;base64,")
    assert body["concepts"][0]["imagePrompt"] == "nordic living room with pale oak floor"
    assert "imageUrl" not in body["concepts"][2]
    assert body["timestamp"].endswith("Z")


@pytest.mark.parametrize("payload", [{}, {"prompt": "loft"}, {"useCase": "interior"}, {"prompt": "", "useCase": ""}])
def test_missing_fields_rejected_without_upstream_calls(client, text_client, backend, payload):
    response = client.post("/api/generate-design", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Prompt and use case are required"}
    assert text_client.calls == []
    assert backend.prompts == []


def test_malformed_body_is_bad_request(client, text_client):
    response = client.post(
        "/api/generate-design", content=b"not json", headers={"content-type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Prompt and use case are required"}
    assert text_client.calls == []


def test_unknown_use_case(client):
    response = client.post("/api/generate-design", json={"prompt": "garden", "useCase": "landscaping"})

    assert response.status_code == 400
    assert response.json() == {"error": "Unsupported use case"}


def test_upstream_failure_returns_generic_error(settings, backend):
    text_client = FakeGenaiClient(error=RuntimeError("API key not valid: secret-detail"))
    app = create_app(settings, text_client=text_client, http_client=backend.client())

    with TestClient(app) as test_client:
        response = test_client.post("/api/generate-design", json={"prompt": "loft", "useCase": "interior"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate designs. Please try again."}
    assert "secret-detail" not in response.text


def test_empty_generation_returns_generic_error(settings, backend):
    app = create_app(settings, text_client=FakeGenaiClient(text='{"concepts": []}'), http_client=backend.client())

    with TestClient(app) as test_client:
        response = test_client.post("/api/generate-design", json={"prompt": "loft", "useCase": "interior"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate designs. Please try again."}


def test_health(client):
    body = client.get("/api/health").json()

    assert body["status"] == "OK"
    assert body["env"] == {"gemini": True, "huggingface": True}
    assert body["timestamp"]


def test_health_reports_missing_secret(settings):
    app = create_app(dataclasses.replace(settings, huggingface_token=""))
    # no lifespan: the app is never started, only inspected
    body = TestClient(app).get("/api/health").json()

    assert body["env"] == {"gemini": True, "huggingface": False}


@pytest.mark.parametrize("missing", ["gemini_api_key", "huggingface_token"])
def test_startup_fails_without_secrets(settings, missing):
    app = create_app(dataclasses.replace(settings, **{missing: ""}), text_client=FakeGenaiClient())

    with pytest.raises(ConfigurationError):
        with TestClient(app):
            pass


def test_use_cases(client):
    body = client.get("/api/use-cases").json()

    assert [u["id"] for u in body] == ["interior", "architecture", "construction", "event"]
    assert body[0] == {"id": "interior", "label": "Interior Design", "description": "Layout, style, materials"}


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == "API is running..."


def test_default_settings_are_empty():
    assert Settings().missing_secrets() == ["GEMINI_API_KEY", "HUGGINGFACE_TOKEN"]


def test_owned_gemini_client_is_closed_on_shutdown(settings, backend, monkeypatch):
    closed = []

    async def aclose():
        closed.append(True)

    owned = SimpleNamespace(aio=SimpleNamespace(aclose=aclose))
    monkeypatch.setattr("design_studio.main.get_genai_client", lambda current: owned)
    app = create_app(settings, http_client=backend.client())

    with TestClient(app):
        assert closed == []
    assert closed == [True]


def test_injected_gemini_client_is_left_open(settings, backend, text_client):
    text_client.aio.aclose = lambda: pytest.fail("injected client must not be closed")
    app = create_app(settings, text_client=text_client, http_client=backend.client())

    with TestClient(app):
        pass
