"""reactbot - reacts to every chat message with a single AI-picked emoji."""

__version__ = "0.1.0"
__logo__ = "🎱"
