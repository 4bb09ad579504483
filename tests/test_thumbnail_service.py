"""Tests for thumbnail request validation and input assembly."""

import io
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import TEST_FAMILY, FakeFetcher, MemoryFontStore
from PIL import Image

from thumbnail_service.entities import AssistantEntity, ModelEntity
from thumbnail_service.exceptions import EntityNotFoundError, EntityRedirect, InvalidRequestError
from thumbnail_service.repositories import JsonAssistantRepository, StaticModelRegistry
from thumbnail_service.services import FontCache, ThumbnailService

ASSISTANT_ID = "65f1c0ffee0000000000beef"
LOGO_URL = "https://cdn.test/logo.png"


def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), (0, 0, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeAvatars:
    def __init__(self, data: bytes | None = None, error: OSError | None = None) -> None:
        self.data = data
        self.error = error

    async def get_avatar(self, assistant_id: str) -> bytes | None:
        if self.error is not None:
            raise self.error
        return self.data


@pytest.fixture
def pipeline():
    pipeline = MagicMock()
    pipeline.font_family = TEST_FAMILY
    pipeline.font_weights = {500, 700}
    pipeline.render_assistant = AsyncMock(return_value=b"assistant-png")
    pipeline.render_model = AsyncMock(return_value=b"model-png")
    return pipeline


def make_service(fetcher, pipeline, avatars=None) -> ThumbnailService:
    cache = FontCache.create(fetcher=fetcher, store=MemoryFontStore(), provider_url="https://provider.test/css2")
    return ThumbnailService(
        font_cache=cache,
        pipeline=pipeline,
        assistants=JsonAssistantRepository([AssistantEntity(id=ASSISTANT_ID, name="Helper")]),
        avatars=avatars or FakeAvatars(),
        models=StaticModelRegistry(
            [
                ModelEntity(id="org/listed", name="Listed", logo_url=LOGO_URL),
                ModelEntity(id="org/hidden", name="Hidden", unlisted=True),
            ]
        ),
        fetcher=fetcher,
        base_path="/chat",
    )


@pytest.mark.asyncio
async def test_malformed_assistant_id(fetcher, pipeline):
    service = make_service(fetcher, pipeline)

    with pytest.raises(InvalidRequestError):
        await service.assistant_thumbnail("not-an-id")

    assert fetcher.css_calls == []


@pytest.mark.asyncio
async def test_unknown_assistant(fetcher, pipeline):
    service = make_service(fetcher, pipeline)

    with pytest.raises(EntityNotFoundError, match="Assistant not found."):
        await service.assistant_thumbnail("0" * 24)

    assert fetcher.css_calls == []


@pytest.mark.asyncio
async def test_assistant_fonts_resolved_and_rendered(fetcher, pipeline, fonts):
    service = make_service(fetcher, pipeline)

    assert await service.assistant_thumbnail(ASSISTANT_ID) == b"assistant-png"

    call = pipeline.render_assistant.await_args
    assert call.args[0].name == "Helper"
    assert call.kwargs["avatar"] == ""
    assert call.kwargs["fonts"] == fonts


@pytest.mark.asyncio
async def test_avatar_is_embedded_as_jpeg(fetcher, pipeline):
    service = make_service(fetcher, pipeline, avatars=FakeAvatars(data=png_bytes()))

    await service.assistant_thumbnail(ASSISTANT_ID)

    assert pipeline.render_assistant.await_args.kwargs["avatar"].startswith("data:image/jpeg;base64,")


@pytest.mark.asyncio
async def test_unreadable_avatar_degrades_to_placeholder(fetcher, pipeline):
    service = make_service(fetcher, pipeline, avatars=FakeAvatars(error=PermissionError("denied")))

    assert await service.assistant_thumbnail(ASSISTANT_ID) == b"assistant-png"
    assert pipeline.render_assistant.await_args.kwargs["avatar"] == ""


@pytest.mark.asyncio
async def test_corrupt_avatar_degrades_to_placeholder(fetcher, pipeline):
    service = make_service(fetcher, pipeline, avatars=FakeAvatars(data=b"not an image"))

    await service.assistant_thumbnail(ASSISTANT_ID)

    assert pipeline.render_assistant.await_args.kwargs["avatar"] == ""


@pytest.mark.asyncio
@pytest.mark.parametrize("model_id", ["org/hidden", "org/unknown"])
async def test_unlisted_or_unknown_model_redirects_without_fonts(fetcher, pipeline, model_id):
    service = make_service(fetcher, pipeline)

    with pytest.raises(EntityRedirect) as exc_info:
        await service.model_thumbnail(model_id)

    assert exc_info.value.location == "/chat"
    assert fetcher.css_calls == []
    assert fetcher.byte_calls == []
    pipeline.render_model.assert_not_called()


@pytest.mark.asyncio
async def test_model_logo_fetched_and_embedded(fonts, pipeline):
    fetcher = FakeFetcher(fonts, assets={LOGO_URL: png_bytes()})
    service = make_service(fetcher, pipeline)

    assert await service.model_thumbnail("org/listed") == b"model-png"

    assert LOGO_URL in fetcher.byte_calls
    assert pipeline.render_model.await_args.kwargs["logo"].startswith("data:image/jpeg;base64,")


@pytest.mark.asyncio
async def test_model_logo_failure_degrades(fetcher, pipeline):
    service = make_service(fetcher, pipeline)

    assert await service.model_thumbnail("org/listed") == b"model-png"
    assert pipeline.render_model.await_args.kwargs["logo"] == ""
