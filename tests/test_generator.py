"""Tests for the reaction generator state machine."""

import asyncio
from pathlib import Path

import pytest

from reactbot.errors import GenerationError
from reactbot.prompts.reaction import REACTION_PREAMBLE
from reactbot.providers.base import LLMProvider, LLMResponse, UploadedFile
from reactbot.reaction.content import Audio, Image, Text, Unsupported
from reactbot.reaction.conversation import HISTORY_SHARED, ConversationStore
from reactbot.reaction.generator import ReactionGenerator

FALLBACK = "🤷"


class FakeProvider(LLMProvider):
    """Scripted provider recording every call."""

    def __init__(self, replies=None, delays=None, chat_error=None, upload_error=None):
        super().__init__(api_key="test")
        self.replies = dict(replies or {})
        self.delays = dict(delays or {})
        self.chat_error = chat_error
        self.upload_error = upload_error
        self.calls: list[list[dict]] = []
        self.uploaded: list[UploadedFile] = []
        self.deleted: list[UploadedFile] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def chat(self, messages, model=None, max_tokens=None, temperature=None):
        self.calls.append(messages)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            key = self._key(messages[-1]["content"])
            await asyncio.sleep(self.delays.get(key, 0))
            if self.chat_error:
                raise self.chat_error
            return LLMResponse(content=self.replies.get(key, "👍"))
        finally:
            self.in_flight -= 1

    async def upload_file(self, path, mime_type):
        if self.upload_error:
            raise self.upload_error
        file = UploadedFile(name="files/abc", uri="https://files.example/abc", mime_type=mime_type)
        self.uploaded.append(file)
        return file

    async def delete_file(self, file):
        self.deleted.append(file)

    def get_default_model(self):
        return "fake"

    @staticmethod
    def _key(content):
        if isinstance(content, str):
            return content
        return content[0]["type"]


def _make_generator(provider, mode="per_chat"):
    store = ConversationStore(REACTION_PREAMBLE, mode=mode)
    return ReactionGenerator(provider, store, fallback_emoji=FALLBACK), store


class TestText:
    @pytest.mark.asyncio
    async def test_happy_birthday(self):
        provider = FakeProvider(replies={"happy birthday!": "🎉\n"})
        generator, store = _make_generator(provider)

        emoji = await generator.generate(Text("happy birthday!"), "42")

        assert emoji == "🎉"
        sent = provider.calls[0]
        assert sent[-1] == {"role": "user", "content": "happy birthday!"}
        assert sent[0]["content"] == REACTION_PREAMBLE[0][1]

    @pytest.mark.asyncio
    async def test_exchange_appended_to_history(self):
        provider = FakeProvider(replies={"hi": "👋"})
        generator, store = _make_generator(provider)

        await generator.generate(Text("hi"), "42")

        turns = store.get("42").turns
        assert [(t.role, t.content) for t in turns] == [("user", "hi"), ("model", "👋")]

    @pytest.mark.asyncio
    async def test_history_carried_into_next_call(self):
        provider = FakeProvider(replies={"first": "1️⃣", "second": "2️⃣"})
        generator, _ = _make_generator(provider)

        await generator.generate(Text("first"), "42")
        await generator.generate(Text("second"), "42")

        contents = [m["content"] for m in provider.calls[1]]
        assert contents[-3:] == ["first", "1️⃣", "second"]

    @pytest.mark.asyncio
    async def test_reply_without_emoji_uses_fallback(self):
        provider = FakeProvider(replies={"hi": "I cannot do that"})
        generator, store = _make_generator(provider)

        assert await generator.generate(Text("hi"), "42") == FALLBACK
        assert store.get("42").turns[-1].content == FALLBACK

    @pytest.mark.asyncio
    async def test_chat_error_raises_and_leaves_history(self):
        provider = FakeProvider(chat_error=GenerationError("quota exceeded"))
        generator, store = _make_generator(provider)

        with pytest.raises(GenerationError, match="quota"):
            await generator.generate(Text("hi"), "42")
        assert store.get("42").turns == []


class TestUnsupported:
    @pytest.mark.asyncio
    async def test_fallback_without_ai_call(self):
        provider = FakeProvider()
        generator, _ = _make_generator(provider)

        emoji = await generator.generate(Unsupported("media kind other"), "42")

        assert emoji == FALLBACK
        assert provider.calls == []


class TestImage:
    @pytest.mark.asyncio
    async def test_inline_image_request(self):
        provider = FakeProvider(replies={"image_url": "🐱"})
        generator, store = _make_generator(provider)

        emoji = await generator.generate(
            Image(data=b"\x89PNG", mime_type="image/png", path=Path("/tmp/x.png")), "42"
        )

        assert emoji == "🐱"
        part = provider.calls[0][-1]["content"][0]
        assert part["image_url"]["url"] == "data:image/png;base64,iVBORw=="
        # Stored history holds a placeholder, not the bytes
        assert store.get("42").turns[0].content == "[image: image/png]"


class TestAudio:
    def _audio(self):
        return Audio(mime_type="audio/ogg", path=Path("/tmp/voice.ogg"))

    @pytest.mark.asyncio
    async def test_upload_call_delete(self):
        provider = FakeProvider(replies={"file": "🎵"})
        generator, _ = _make_generator(provider)

        emoji = await generator.generate(self._audio(), "42")

        assert emoji == "🎵"
        assert provider.calls[0][-1]["content"][0] == {
            "type": "file",
            "file": {"file_id": "https://files.example/abc", "format": "audio/ogg"},
        }
        assert provider.deleted == provider.uploaded

    @pytest.mark.asyncio
    async def test_deleted_even_when_ai_call_fails(self):
        provider = FakeProvider(chat_error=GenerationError("backend down"))
        generator, _ = _make_generator(provider)

        with pytest.raises(GenerationError):
            await generator.generate(self._audio(), "42")

        assert len(provider.uploaded) == 1
        assert provider.deleted == provider.uploaded

    @pytest.mark.asyncio
    async def test_upload_failure_is_generation_error(self):
        provider = FakeProvider(upload_error=OSError("disk gone"))
        generator, _ = _make_generator(provider)

        with pytest.raises(GenerationError, match="Upload"):
            await generator.generate(self._audio(), "42")
        assert provider.calls == []
        assert provider.deleted == []


class TestRestrict:
    def test_no_restriction(self):
        generator, _ = _make_generator(FakeProvider())
        assert generator.restrict("🦖", None) == "🦖"

    def test_allowed_emoji_kept(self):
        generator, _ = _make_generator(FakeProvider())
        assert generator.restrict("🎉", {"🎉", "👍"}) == "🎉"

    def test_variation_selector_normalized_to_platform_form(self):
        generator, _ = _make_generator(FakeProvider())
        assert generator.restrict("❤️", {"❤"}) == "❤"

    def test_disallowed_emoji_falls_back(self):
        generator, _ = _make_generator(FakeProvider())
        assert generator.restrict("🦖", {"🎉"}) == FALLBACK


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_shared_context_never_interleaves(self):
        provider = FakeProvider(
            replies={"slow": "🐢", "fast": "🐇"},
            delays={"slow": 0.05, "fast": 0.0},
        )
        generator, store = _make_generator(provider, mode=HISTORY_SHARED)

        await asyncio.gather(
            generator.generate(Text("slow"), "chat-a"),
            generator.generate(Text("fast"), "chat-b"),
        )

        turns = [(t.role, t.content) for t in store.get("any").turns]
        assert turns in (
            [("user", "slow"), ("model", "🐢"), ("user", "fast"), ("model", "🐇")],
            [("user", "fast"), ("model", "🐇"), ("user", "slow"), ("model", "🐢")],
        )
        assert provider.max_in_flight == 1
        # The second request saw the first exchange complete
        second = [m["content"] for m in provider.calls[1]]
        assert second[-3:-1] in (["slow", "🐢"], ["fast", "🐇"])

    @pytest.mark.asyncio
    async def test_per_chat_contexts_run_in_parallel(self):
        provider = FakeProvider(
            replies={"a": "🅰️", "b": "🅱️"},
            delays={"a": 0.05, "b": 0.05},
        )
        generator, store = _make_generator(provider)

        await asyncio.gather(
            generator.generate(Text("a"), "chat-a"),
            generator.generate(Text("b"), "chat-b"),
        )

        assert provider.max_in_flight == 2
        assert [t.content for t in store.get("chat-a").turns] == ["a", "🅰️"]
        assert [t.content for t in store.get("chat-b").turns] == ["b", "🅱️"]

    @pytest.mark.asyncio
    async def test_same_chat_serialized_in_per_chat_mode(self):
        provider = FakeProvider(delays={"one": 0.05, "two": 0.0})
        generator, store = _make_generator(provider)

        await asyncio.gather(
            generator.generate(Text("one"), "42"),
            generator.generate(Text("two"), "42"),
        )

        assert provider.max_in_flight == 1
        assert len(store.get("42").turns) == 4
