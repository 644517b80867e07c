"""Tests for emoji extraction from model replies."""

import unicodedata

import pytest

from reactbot.reaction.emoji import (
    clean,
    extract_emoji,
    graphemes,
    is_emoji,
    strip_variation_selectors,
)

FAMILY = "\U0001F468\u200d\U0001F469\u200d\U0001F467"  # man, woman, girl
THUMBS_UP_DARK = "\U0001F44D\U0001F3FF"
FLAG_IL = "\U0001F1EE\U0001F1F1"
KEYCAP_ONE = "1\ufe0f\u20e3"
HEART_ON_FIRE = "\u2764\ufe0f\u200d\U0001F525"
SCOTLAND = "\U0001F3F4\U000E0067\U000E0062\U000E0073\U000E0063\U000E0074\U000E007F"


class TestExtractEmoji:
    def test_trailing_newline_stripped(self):
        assert extract_emoji("🎉\n") == "🎉"

    def test_surrounding_whitespace(self):
        assert extract_emoji("  😂  \r\n") == "😂"

    def test_replacement_character_dropped(self):
        assert extract_emoji("\ufffd🔥\ufffd") == "🔥"

    def test_control_characters_dropped(self):
        assert extract_emoji("\x00\x1b👍\x7f") == "👍"

    def test_first_emoji_wins(self):
        assert extract_emoji("🎉🎂") == "🎉"

    def test_text_around_emoji(self):
        assert extract_emoji("Sure! 🍕 is my pick.") == "🍕"

    @pytest.mark.parametrize(
        "emoji", [FAMILY, THUMBS_UP_DARK, FLAG_IL, KEYCAP_ONE, HEART_ON_FIRE, SCOTLAND]
    )
    def test_multi_codepoint_emoji_kept_whole(self, emoji):
        assert extract_emoji(f"{emoji}\n") == emoji

    def test_two_flags_split(self):
        assert extract_emoji(FLAG_IL + "\U0001F1FA\U0001F1F8") == FLAG_IL

    @pytest.mark.parametrize(
        "reply, expected",
        [("→ 🎉", "🎉"), ("♪🎵", "🎵"), ("■ ⌘ 👍", "👍"), ("\U0001F1F3 🙂", "🙂")],
    )
    def test_plain_symbols_skipped(self, reply, expected):
        assert extract_emoji(reply) == expected

    @pytest.mark.parametrize("reply", ["■", "⌘", "→", "♪", "\U0001F1F3", "\U0001F3FB"])
    def test_symbol_only_reply_has_no_emoji(self, reply):
        assert extract_emoji(reply) is None

    @pytest.mark.parametrize("reply", ["↔️", "▶️", "⭐", "⚡", "☃"])
    def test_emoji_in_symbol_blocks_kept(self, reply):
        assert extract_emoji(reply) == reply

    @pytest.mark.parametrize("reply", [None, "", "\n", "no emoji here", "10/10", "\ufffd\ufffd"])
    def test_no_emoji_returns_none(self, reply):
        assert extract_emoji(reply) is None

    @pytest.mark.parametrize(
        "reply", ["🎉\n", " 😂 ", "\ufffd🔥", FAMILY + "\n\n", "ok " + THUMBS_UP_DARK]
    )
    def test_output_has_no_control_or_replacement(self, reply):
        result = extract_emoji(reply)
        assert result
        assert "\n" not in result
        assert "\ufffd" not in result
        assert not any(unicodedata.category(ch) == "Cc" for ch in result)


class TestGraphemes:
    def test_zwj_sequence_is_one_cluster(self):
        assert graphemes(FAMILY) == [FAMILY]

    def test_skin_tone_attaches(self):
        assert graphemes(THUMBS_UP_DARK + "a") == [THUMBS_UP_DARK, "a"]

    def test_regional_indicators_pair_up(self):
        assert graphemes(FLAG_IL * 2) == [FLAG_IL, FLAG_IL]


class TestHelpers:
    def test_clean_keeps_zwj_and_variation_selector(self):
        assert clean(HEART_ON_FIRE + "\n") == HEART_ON_FIRE

    def test_plain_digit_is_not_emoji(self):
        assert not is_emoji("1")
        assert is_emoji(KEYCAP_ONE)

    def test_strip_variation_selectors(self):
        assert strip_variation_selectors("\u2764\ufe0f") == "\u2764"
