"""Conversation preamble that seeds every reaction context."""

REACTION_INSTRUCTIONS = (
    "Hey friend, let's play a game! I'll send a message and you will reply with "
    "an emoji that describes the message the most. The messages will be text, "
    "an image or a voice recording, in any language. Answer only with a unicode "
    "emoji, not a special character or an emoticon but an emoji that you can "
    "react to a message with in a chat app. If you don't know what to do, pick a "
    "random emoji, and mix it up. Always exactly one emoji, nothing else."
)

# Seeded (role, text) turns. The model turn shows the expected answer shape.
REACTION_PREAMBLE: list[tuple[str, str]] = [
    ("user", REACTION_INSTRUCTIONS),
    ("model", "🎱"),
]

IMAGE_PLACEHOLDER = "[image: {mime_type}]"
AUDIO_PLACEHOLDER = "[voice message: {mime_type}]"
