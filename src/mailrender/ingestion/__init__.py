"""Input collaborators producing mailbox items."""

from .json_source import ItemDocument, JsonItemSource

__all__ = ["ItemDocument", "JsonItemSource"]
