"""
Tests for feed queries, uploads and downloads
"""
import os
import re

import pytest

from pixgallery.config import FeedConfig
from pixgallery.database.schemas import ImageRecord
from pixgallery.domain.entities import GeneratedAsset, GenerationRequest
from pixgallery.errors import StorageError
from pixgallery.image_library import ImageLibrary

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def library(backend, http_session) -> ImageLibrary:
    return ImageLibrary(backend, FeedConfig(recent_limit=2), session=http_session)


class TestFeed:

    @pytest.mark.asyncio
    async def test_recent_is_newest_first_and_capped(self, library, fake_supabase):
        for title in ("old", "middle", "new"):
            fake_supabase.add_image(title=title)

        images = await library.fetch_recent_images()

        assert [i.title for i in images] == ["new", "middle"]

    @pytest.mark.asyncio
    async def test_explicit_limit(self, library, fake_supabase):
        for title in ("a", "b", "c"):
            fake_supabase.add_image(title=title)

        assert len(await library.fetch_recent_images(limit=3)) == 3

    @pytest.mark.asyncio
    async def test_user_and_generated_filters(self, library, fake_supabase):
        fake_supabase.add_image(title="mine", user_id="u1")
        fake_supabase.add_image(title="theirs", user_id="u2")
        fake_supabase.add_image(
            title="robot", user_id="u2", is_ai_generated=True, ai_prompt="robot", ai_model="pollinations-flux"
        )

        assert [i.title for i in await library.fetch_user_images("u1")] == ["mine"]
        assert [i.title for i in await library.fetch_generated_images()] == ["robot"]
        assert len(await library.fetch_all_images()) == 3

    @pytest.mark.asyncio
    async def test_legacy_row_does_not_break_feed(self, library, fake_supabase):
        fake_supabase.add_image(title="legacy", ai_prompt="stray prompt")
        fake_supabase.add_image(title="fresh")

        images = await library.fetch_recent_images()

        assert [i.title for i in images] == ["fresh", "legacy"]

    @pytest.mark.asyncio
    async def test_listing_failure(self, library, fake_supabase):
        fake_supabase.fail_next("images", "select", RuntimeError("offline"))

        with pytest.raises(StorageError) as exc_info:
            await library.fetch_all_images()

        assert exc_info.value.op == "fetch_all"


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_stores_blob_and_row(self, library, fake_supabase):
        record = await library.upload_image(
            PNG_BYTES, "image/png", "  Beach  ", "u1",
            description="Summer", tags=["sea", " sea ", "sun", ""],
        )

        (bucket, path), (data, options) = next(iter(fake_supabase.storage.objects.items()))
        assert bucket == "images"
        assert re.fullmatch(r"uploads/u1/\d+_[0-9a-f]{8}\.png", path)
        assert data == PNG_BYTES
        assert options == {"content-type": "image/png"}

        assert record.title == "Beach"
        assert record.tags == ["sea", "sun"]
        assert record.image_url.endswith(path)
        assert record.is_ai_generated is False
        assert (record.like_count, record.comment_count) == (0, 0)
        assert fake_supabase.tables["images"][0]["ai_model"] is None

    @pytest.mark.asyncio
    async def test_extension_from_file_name(self, library, fake_supabase):
        await library.upload_image(PNG_BYTES, "application/octet-stream", "Scan", "u1", file_name="scan.JPG")

        (_, path), _ = next(iter(fake_supabase.storage.objects.items()))
        assert path.endswith(".jpg")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", ["", "  ", "<script>alert(1)</script>", "x" * 201])
    async def test_invalid_title_uploads_nothing(self, library, fake_supabase, title):
        with pytest.raises(ValueError):
            await library.upload_image(PNG_BYTES, "image/png", title, "u1")

        assert fake_supabase.storage.objects == {}

    @pytest.mark.asyncio
    async def test_upload_failure(self, library, fake_supabase):
        fake_supabase.storage.fail_upload = RuntimeError("bucket not found")

        with pytest.raises(StorageError) as exc_info:
            await library.upload_image(PNG_BYTES, "image/png", "Beach", "u1")

        assert exc_info.value.op == "upload"
        assert fake_supabase.tables["images"] == []

    @pytest.mark.asyncio
    async def test_insert_failure(self, library, fake_supabase):
        fake_supabase.fail_next("images", "insert", RuntimeError("rls"))

        with pytest.raises(StorageError) as exc_info:
            await library.upload_image(PNG_BYTES, "image/png", "Beach", "u1")

        assert exc_info.value.op == "insert"

    @pytest.mark.asyncio
    async def test_provenance_on_plain_upload_is_rejected(self, library):
        with pytest.raises(ValueError):
            await library.upload_image(PNG_BYTES, "image/png", "Beach", "u1", ai_model="dall-e-34")


class TestSaveGenerated:

    @pytest.mark.asyncio
    async def test_records_prompt_and_model(self, library, fake_supabase):
        asset = GeneratedAsset(data=PNG_BYTES, media_type="image/webp", provider_id="dall-e-34")
        request = GenerationRequest(prompt="a neon city in the rain", model="dall-e-34")

        record = await library.save_generated_image(asset, request, "u1", tags=["city"])

        assert record.is_ai_generated is True
        assert record.ai_prompt == "a neon city in the rain"
        assert record.ai_model == "dall-e-34"
        assert record.title == "a neon city in the rain"
        assert record.tags == ["city"]
        (_, path), (_, options) = next(iter(fake_supabase.storage.objects.items()))
        assert path.endswith(".webp")
        assert options == {"content-type": "image/webp"}

    @pytest.mark.asyncio
    async def test_title_falls_back_to_truncated_prompt(self, library):
        asset = GeneratedAsset(data=PNG_BYTES, media_type="image/png", provider_id="pollinations-flux")
        request = GenerationRequest(prompt="p" * 80, model="pollinations-flux")

        record = await library.save_generated_image(asset, request, "u1", title="   ")

        assert record.title == "p" * 50


class TestDownload:

    def _image(self, **fields) -> ImageRecord:
        row = {
            "id": "img-1",
            "title": "My Beach: day/1",
            "image_url": "https://cdn.test/beach",
            "user_id": "u1",
            "created_at": "2024-01-01T00:00:00+00:00",
        }
        row.update(fields)
        return ImageRecord.model_validate(row)

    @pytest.mark.asyncio
    async def test_writes_file(self, library, http_session, tmp_path):
        http_session.add("GET", "https://cdn.test/beach", body=PNG_BYTES, content_type="image/png")

        path = await library.download_image(self._image(), str(tmp_path / "out"))

        assert os.path.basename(path) == "My_Beach_day1.png"
        with open(path, "rb") as f:
            assert f.read() == PNG_BYTES

    @pytest.mark.asyncio
    async def test_unknown_type_defaults_to_jpg(self, library, http_session, tmp_path):
        http_session.add("GET", "https://cdn.test/beach", body=b"\xff\xd8", content_type=None)

        path = await library.download_image(self._image(), str(tmp_path))

        assert path.endswith(".jpg")

    @pytest.mark.asyncio
    async def test_http_failure(self, library, http_session, tmp_path):
        http_session.add("GET", "https://cdn.test/beach", status=404, body=b"", content_type="text/plain")

        with pytest.raises(StorageError) as exc_info:
            await library.download_image(self._image(), str(tmp_path))

        assert exc_info.value.op == "download"
        assert list(tmp_path.iterdir()) == []
