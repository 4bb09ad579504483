"""
Tests for the thumbnail service API.
"""

import io

import pytest
from conftest import TEST_FAMILY, FakeFetcher, MemoryFontStore
from fastapi.testclient import TestClient
from PIL import Image

from thumbnail_service.api.app import app
from thumbnail_service.api.dependencies import get_font_handler, get_thumbnail_handler
from thumbnail_service.entities import AssistantEntity, ModelEntity
from thumbnail_service.handlers import FontHandler, ThumbnailHandler
from thumbnail_service.repositories import FileAvatarRepository, JsonAssistantRepository, StaticModelRegistry
from thumbnail_service.services import FontCache, RenderPipeline, ThumbnailService

ASSISTANT_ID = "65f1c0ffee0000000000beef"


def build_app_state(fetcher: FakeFetcher, avatars_dir) -> tuple[ThumbnailHandler, FontHandler, FontCache]:
    font_cache = FontCache.create(fetcher=fetcher, store=MemoryFontStore(), provider_url="https://provider.test/css2")
    font_cache.initialize()
    pipeline = RenderPipeline.create(font_family=TEST_FAMILY, width=1200, height=648)
    service = ThumbnailService(
        font_cache=font_cache,
        pipeline=pipeline,
        assistants=JsonAssistantRepository(
            [AssistantEntity(id=ASSISTANT_ID, name="Helper", description="Answers questions.")]
        ),
        avatars=FileAvatarRepository(avatars_dir),
        models=StaticModelRegistry(
            [
                ModelEntity(id="meta-llama/Llama-3.1-8B-Instruct", name="Llama 3.1 8B"),
                ModelEntity(id="org/hidden", name="Hidden", unlisted=True),
            ]
        ),
        fetcher=fetcher,
        base_path="/",
    )
    font_handler = FontHandler(font_cache=font_cache, family=TEST_FAMILY, weights={500, 700})
    return ThumbnailHandler(thumbnail_service=service), font_handler, font_cache


@pytest.fixture
def fetcher(fonts) -> FakeFetcher:
    return FakeFetcher(fonts)


@pytest.fixture
def client(fetcher, tmp_path):
    """Create a test client with in-memory collaborators."""
    thumbnail_handler, font_handler, _ = build_app_state(fetcher, tmp_path)
    app.dependency_overrides[get_thumbnail_handler] = lambda: thumbnail_handler
    app.dependency_overrides[get_font_handler] = lambda: font_handler
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Thumbnail Service API"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "font_store_healthy": True}


def test_assistant_thumbnail(client):
    response = client.get(f"/assistant/{ASSISTANT_ID}/thumbnail.png")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.headers["cache-control"] == "public, max-age=3600"
    with Image.open(io.BytesIO(response.content)) as image:
        assert image.size == (1200, 648)


def test_assistant_thumbnail_with_avatar(client, tmp_path):
    Image.new("RGBA", (32, 32), (255, 0, 0, 128)).save(tmp_path / f"{ASSISTANT_ID}.png")

    response = client.get(f"/assistant/{ASSISTANT_ID}/thumbnail.png")

    assert response.status_code == 200


def test_unknown_assistant(client):
    response = client.get(f"/assistant/{'a' * 24}/thumbnail.png")

    assert response.status_code == 404
    assert response.json()["detail"] == "Assistant not found."


def test_malformed_assistant_id(client):
    response = client.get("/assistant/nope/thumbnail.png")
    assert response.status_code == 400


def test_model_thumbnail_with_slashes_in_id(client):
    response = client.get("/models/meta-llama/Llama-3.1-8B-Instruct/thumbnail.png")

    assert response.status_code == 200
    with Image.open(io.BytesIO(response.content)) as image:
        assert image.size == (1200, 648)


@pytest.mark.parametrize("model_id", ["org/hidden", "org/unknown"])
def test_unlisted_model_redirects_without_touching_fonts(client, fetcher, model_id):
    response = client.get(f"/models/{model_id}/thumbnail.png", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/"
    assert fetcher.css_calls == []


def test_font_failure_is_server_error(fonts, tmp_path):
    fetcher = FakeFetcher({500: fonts[500]})
    thumbnail_handler, _, _ = build_app_state(fetcher, tmp_path)
    app.dependency_overrides[get_thumbnail_handler] = lambda: thumbnail_handler
    try:
        response = TestClient(app).get(f"/assistant/{ASSISTANT_ID}/thumbnail.png")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert "weight_not_found" in response.json()["detail"]


def test_warm_and_stats(client, fetcher):
    response = client.post("/fonts/warm")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert set(data["weights"]) == {"500", "700"}

    stats = client.get("/fonts/stats").json()
    assert stats["family"] == TEST_FAMILY
    assert stats["memory_entries"] == 2
    assert stats["persistent_entries"] == 2
    assert len(fetcher.css_calls) == 2


def test_warm_unknown_weight(client, fetcher):
    response = client.post("/fonts/warm", json={"weights": [900]})
    assert response.status_code == 400
    assert "900" in response.json()["detail"]
    assert fetcher.css_calls == []


def test_warm_other_family_rejected(client, fetcher):
    response = client.post("/fonts/warm", json={"family": "Comic Sans"})
    assert response.status_code == 400
    assert fetcher.css_calls == []


def test_warm_configured_subset(client):
    response = client.post("/fonts/warm", json={"weights": [700]})
    assert response.status_code == 200
    assert set(response.json()["weights"]) == {"700"}
