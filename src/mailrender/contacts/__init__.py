"""vCard serialization."""

from .vcard import ContactSerializer

__all__ = ["ContactSerializer"]
