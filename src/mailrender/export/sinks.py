"""Document sinks."""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER = logging.getLogger(__name__)


class DirectorySink:
    """Write documents as files below a root directory."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def write(self, name: str, document: bytes) -> None:
        """Store ``document`` at ``root/name``, creating folders as needed.

        Names resolving outside the root directory are rejected with
        ``ValueError``.
        """
        root = self._root.resolve()
        target = (root / name.lstrip("/")).resolve()
        if not target.is_relative_to(root):
            raise ValueError(f"document name {name!r} escapes {root}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(document)
        LOGGER.debug("Wrote %s (%d bytes)", target, len(document))


class MemorySink:
    """Keep documents in a dictionary, in write order."""

    def __init__(self) -> None:
        self.documents: dict[str, bytes] = {}

    def write(self, name: str, document: bytes) -> None:
        """Remember ``document`` under ``name``."""
        self.documents[name] = document


__all__ = ["DirectorySink", "MemorySink"]
