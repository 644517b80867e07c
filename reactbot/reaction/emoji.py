"""Emoji extraction from free-form model replies.

Model replies often carry trailing newlines, stray control characters or
U+FFFD from truncated byte sequences. The reply is cleaned and split into
grapheme clusters so that multi-codepoint emoji (ZWJ families, skin tones,
flags, keycaps, tag sequences) survive intact; the first cluster that is an
emoji is the reaction.
"""

import unicodedata

ZWJ = "\u200d"
KEYCAP = "\u20e3"
REPLACEMENT_CHAR = "\ufffd"
VARIATION_SELECTORS = ("\ufe0e", "\ufe0f")

_KEYCAP_BASES = frozenset("0123456789#*")

# Code points with the Unicode "Emoji" property (emoji-data.txt), outside the
# keycap bases and regional indicators. Supplementary-plane blocks are kept
# whole so emoji newer than this table still count.
_EMOJI_RANGES = (
    (0x00A9, 0x00A9), (0x00AE, 0x00AE), (0x203C, 0x203C), (0x2049, 0x2049),
    (0x2122, 0x2122), (0x2139, 0x2139), (0x2194, 0x2199), (0x21A9, 0x21AA),
    (0x231A, 0x231B), (0x2328, 0x2328), (0x23CF, 0x23CF), (0x23E9, 0x23F3),
    (0x23F8, 0x23FA), (0x24C2, 0x24C2), (0x25AA, 0x25AB), (0x25B6, 0x25B6),
    (0x25C0, 0x25C0), (0x25FB, 0x25FE), (0x2600, 0x2604), (0x260E, 0x260E),
    (0x2611, 0x2611), (0x2614, 0x2615), (0x2618, 0x2618), (0x261D, 0x261D),
    (0x2620, 0x2620), (0x2622, 0x2623), (0x2626, 0x2626), (0x262A, 0x262A),
    (0x262E, 0x262F), (0x2638, 0x263A), (0x2640, 0x2640), (0x2642, 0x2642),
    (0x2648, 0x2653), (0x265F, 0x2660), (0x2663, 0x2663), (0x2665, 0x2666),
    (0x2668, 0x2668), (0x267B, 0x267B), (0x267E, 0x267F), (0x2692, 0x2697),
    (0x2699, 0x2699), (0x269B, 0x269C), (0x26A0, 0x26A1), (0x26A7, 0x26A7),
    (0x26AA, 0x26AB), (0x26B0, 0x26B1), (0x26BD, 0x26BE), (0x26C4, 0x26C5),
    (0x26C8, 0x26C8), (0x26CE, 0x26CF), (0x26D1, 0x26D1), (0x26D3, 0x26D4),
    (0x26E9, 0x26EA), (0x26F0, 0x26F5), (0x26F7, 0x26FA), (0x26FD, 0x26FD),
    (0x2702, 0x2702), (0x2705, 0x2705), (0x2708, 0x270D), (0x270F, 0x270F),
    (0x2712, 0x2712), (0x2714, 0x2714), (0x2716, 0x2716), (0x271D, 0x271D),
    (0x2721, 0x2721), (0x2728, 0x2728), (0x2733, 0x2734), (0x2744, 0x2744),
    (0x2747, 0x2747), (0x274C, 0x274C), (0x274E, 0x274E), (0x2753, 0x2755),
    (0x2757, 0x2757), (0x2763, 0x2764), (0x2795, 0x2797), (0x27A1, 0x27A1),
    (0x27B0, 0x27B0), (0x27BF, 0x27BF), (0x2934, 0x2935), (0x2B05, 0x2B07),
    (0x2B1B, 0x2B1C), (0x2B50, 0x2B50), (0x2B55, 0x2B55), (0x3030, 0x3030),
    (0x303D, 0x303D), (0x3297, 0x3297), (0x3299, 0x3299),
    (0x1F004, 0x1F004), (0x1F0CF, 0x1F0CF), (0x1F170, 0x1F171),
    (0x1F17E, 0x1F17F), (0x1F18E, 0x1F18E), (0x1F191, 0x1F19A),
    (0x1F201, 0x1F202), (0x1F21A, 0x1F21A), (0x1F22F, 0x1F22F),
    (0x1F232, 0x1F23A), (0x1F250, 0x1F251),
    (0x1F300, 0x1F3FA),  # skin tone modifiers 1F3FB-1F3FF only attach
    (0x1F400, 0x1F64F), (0x1F680, 0x1F6FF), (0x1F7E0, 0x1F7FF),
    (0x1F90C, 0x1F9FF), (0x1FA70, 0x1FAFF),
)


def _is_regional_indicator(ch: str) -> bool:
    return 0x1F1E6 <= ord(ch) <= 0x1F1FF


def _is_tag(ch: str) -> bool:
    return 0xE0020 <= ord(ch) <= 0xE007F


def _is_skin_tone(ch: str) -> bool:
    return 0x1F3FB <= ord(ch) <= 0x1F3FF


def _is_emoji_char(ch: str) -> bool:
    cp = ord(ch)
    return any(lo <= cp <= hi for lo, hi in _EMOJI_RANGES)


def _is_extender(ch: str) -> bool:
    """Characters that attach to the preceding grapheme."""
    if ch in VARIATION_SELECTORS or ch == KEYCAP:
        return True
    if _is_skin_tone(ch) or _is_tag(ch):
        return True
    return unicodedata.category(ch) in ("Mn", "Me")


def _is_junk(ch: str) -> bool:
    """Whitespace, control, private-use and replacement characters."""
    if ch == REPLACEMENT_CHAR or ch == VARIATION_SELECTORS[0]:
        return True
    if ch == ZWJ or _is_tag(ch):
        return False
    category = unicodedata.category(ch)
    # Cn is kept: emoji newer than the interpreter's Unicode tables are unassigned
    return category in ("Cc", "Cf", "Cs", "Co", "Zs", "Zl", "Zp")


def clean(text: str) -> str:
    """Drop characters that can never be part of a reaction."""
    return "".join(ch for ch in text if not _is_junk(ch))


def _extend(text: str, i: int) -> int:
    while i < len(text) and _is_extender(text[i]):
        i += 1
    return i


def graphemes(text: str) -> list[str]:
    """Split *text* into emoji-aware grapheme clusters."""
    clusters: list[str] = []
    n = len(text)
    i = 0
    while i < n:
        start = i
        ch = text[i]
        i += 1
        if _is_regional_indicator(ch) and i < n and _is_regional_indicator(text[i]):
            i += 1
        else:
            i = _extend(text, i)
            while i < n - 1 and text[i] == ZWJ:
                i = _extend(text, i + 2)
            if i < n and text[i] == ZWJ:
                i += 1
        clusters.append(text[start:i])
    return clusters


def is_emoji(cluster: str) -> bool:
    """Whether a single grapheme cluster is an emoji."""
    if not cluster:
        return False
    base = cluster[0]
    if base in _KEYCAP_BASES:
        return KEYCAP in cluster
    if _is_regional_indicator(base):
        # A lone regional indicator is a letter symbol, not a flag
        return len(cluster) >= 2 and _is_regional_indicator(cluster[1])
    return _is_emoji_char(base)


def extract_emoji(reply: str | None) -> str | None:
    """Return the first emoji grapheme in a model reply, or None.

    The result never contains newlines, control characters or U+FFFD.
    """
    if not reply:
        return None
    for cluster in graphemes(clean(reply)):
        if is_emoji(cluster):
            return cluster.rstrip(ZWJ)
    return None


def strip_variation_selectors(emoji: str) -> str:
    """Remove VS15/VS16 so differently-encoded forms compare equal."""
    for vs in VARIATION_SELECTORS:
        emoji = emoji.replace(vs, "")
    return emoji
