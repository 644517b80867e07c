"""Attachment storage."""

from reactbot.media.store import MediaStore, extension_for

__all__ = ["MediaStore", "extension_for"]
