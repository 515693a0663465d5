import io
import json
from types import SimpleNamespace

import httpx
import pytest
from PIL import Image

from design_studio.config import Settings

IMAGE_API_URL = "https://images.test/generate"

SAMPLE_CONCEPTS = {
    "concepts": [
        {
            "title": "Nordic Calm",
            "summary": "Pale oak, linen and soft daylight for a quiet living room.",
            "highlights": ["Oak flooring", "Linen sofa", "Layered lighting", "Hidden storage"],
            "imagePrompt": "nordic living room with pale oak floor",
        },
        {
            "title": "Industrial Loft",
            "summary": "Exposed brick and black steel with warm leather accents.",
            "highlights": ["Exposed brick", "Steel shelving", "Leather seating", "Pendant lamps"],
            "imagePrompt": "industrial loft living room with exposed brick",
        },
        {
            "title": "Warm Minimal",
            "summary": "Terracotta tones and curved furniture in an uncluttered space.",
            "highlights": ["Terracotta palette", "Curved sofa", "Travertine table", "Arched niches"],
            "imagePrompt": "warm minimal living room with terracotta walls",
        },
    ]
}


def png_bytes(color=(200, 180, 150)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


class FakeGenaiClient:
    """Stands in for google.genai.Client; only client.aio.models is used."""

    def __init__(self, text=None, error=None):
        self.models = FakeModels(text=text, error=error)
        self.aio = SimpleNamespace(models=self.models)

    @property
    def calls(self):
        return self.models.calls


class ImageBackend:
    """Records prompts sent to the image API and answers per prompt."""

    def __init__(self, fail_when=lambda prompt: False, payload=None):
        self.fail_when = fail_when
        self.payload = payload or png_bytes()
        self.prompts = []
        self.headers = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        prompt = json.loads(request.content)["inputs"]
        self.prompts.append(prompt)
        self.headers.append(request.headers)
        if self.fail_when(prompt):
            return httpx.Response(503, json={"error": "Model is currently loading"})
        return httpx.Response(200, content=self.payload, headers={"content-type": "image/png"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def settings():
    return Settings(
        gemini_api_key="test-gemini-key",
        huggingface_token="test-hf-token",
        image_api_url=IMAGE_API_URL,
        image_batch_timeout=5.0,
    )


@pytest.fixture
def concepts_json():
    return json.dumps(SAMPLE_CONCEPTS)
