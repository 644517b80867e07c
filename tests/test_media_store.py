"""Tests for the attachment store."""

import os
import stat

import pytest

from reactbot.bus.events import EventKind, InboundEvent, MediaKind
from reactbot.media.store import DEFAULT_EXTENSION, MediaStore, extension_for


def _make_media_event(message_id="1001", mime_type="image/png", media_kind=MediaKind.IMAGE):
    return InboundEvent(
        channel="telegram",
        message_id=message_id,
        sender_id="user1",
        chat_id="42",
        kind=EventKind.MEDIA,
        media_kind=media_kind,
        mime_type=mime_type,
        media_ref="file-abc",
    )


class TestExtensionFor:
    def test_known_type(self):
        assert extension_for("image/png") == ".png"

    def test_parameters_ignored(self):
        assert extension_for("image/png; charset=binary") == extension_for("image/png")

    def test_case_insensitive(self):
        assert extension_for("IMAGE/PNG") == ".png"

    def test_empty_type(self):
        assert extension_for("") == DEFAULT_EXTENSION

    def test_unknown_type(self):
        assert extension_for("application/x-reactbot-unknown") == DEFAULT_EXTENSION

    def test_deterministic(self):
        assert extension_for("image/jpeg") == extension_for("image/jpeg")


class TestMediaStore:
    def test_path_uses_message_key_and_extension(self, tmp_path):
        store = MediaStore(tmp_path)
        event = _make_media_event()
        assert store.path_for(event) == tmp_path / "telegram_42_1001.png"

    @pytest.mark.asyncio
    async def test_write_then_read_round_trip(self, tmp_path):
        store = MediaStore(tmp_path / "media")
        event = _make_media_event()

        path = await store.write(event, b"\x89PNG data")

        assert path == store.path_for(event)
        assert store.exists(event)
        assert await store.read(event) == b"\x89PNG data"

    @pytest.mark.asyncio
    async def test_writer_and_reader_agree_for_separate_events(self, tmp_path):
        """A fresh event with the same identity resolves to the stored file."""
        store = MediaStore(tmp_path)
        await store.write(_make_media_event(mime_type="audio/ogg", media_kind=MediaKind.AUDIO), b"ogg")

        reader_view = _make_media_event(mime_type="audio/ogg", media_kind=MediaKind.AUDIO)
        assert await store.read(reader_view) == b"ogg"

    @pytest.mark.asyncio
    async def test_file_is_owner_only(self, tmp_path):
        store = MediaStore(tmp_path)
        path = await store.write(_make_media_event(), b"data")

        mode = stat.S_IMODE(os.stat(path).st_mode)
        assert mode == 0o600

    @pytest.mark.asyncio
    async def test_overwrite_keeps_permissions(self, tmp_path):
        store = MediaStore(tmp_path)
        event = _make_media_event()
        path = store.path_for(event)
        path.write_bytes(b"old")
        os.chmod(path, 0o644)

        await store.write(event, b"new")

        assert path.read_bytes() == b"new"
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    @pytest.mark.asyncio
    async def test_read_missing_raises(self, tmp_path):
        store = MediaStore(tmp_path)
        with pytest.raises(FileNotFoundError):
            await store.read(_make_media_event())

    def test_distinct_messages_get_distinct_paths(self, tmp_path):
        store = MediaStore(tmp_path)
        assert store.path_for(_make_media_event("1")) != store.path_for(_make_media_event("2"))
