"""Item tree traversal and document output."""

from .exporter import ItemExporter, document_name
from .sinks import DirectorySink, MemorySink

__all__ = ["DirectorySink", "ItemExporter", "MemorySink", "document_name"]
