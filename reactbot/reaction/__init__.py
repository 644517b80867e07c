"""Content classification and emoji reaction generation."""

from reactbot.reaction.content import (
    Audio,
    ClassifiedContent,
    Image,
    Text,
    Unsupported,
    classify,
)
from reactbot.reaction.conversation import ConversationContext, ConversationStore, Turn
from reactbot.reaction.emoji import extract_emoji
from reactbot.reaction.generator import DEFAULT_FALLBACK_EMOJI, ReactionGenerator

__all__ = [
    "Audio",
    "ClassifiedContent",
    "ConversationContext",
    "ConversationStore",
    "DEFAULT_FALLBACK_EMOJI",
    "Image",
    "ReactionGenerator",
    "Text",
    "Turn",
    "Unsupported",
    "classify",
    "extract_emoji",
]
