"""Depth-first export of an item tree into named documents."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..calendar.ical import CalendarSerializer
from ..contacts.vcard import ContactSerializer
from ..core.interfaces import DocumentSink, FatalExportError
from ..core.models import ExportReport, ItemType, MailItem
from ..rendering.assembler import MessageAssembler

LOGGER = logging.getLogger(__name__)

MIN_NUMBER_DIGITS = 4

_MAIL_TYPES = (ItemType.NOTE, ItemType.SCHEDULE, ItemType.REPORT)

ProgressCallback = Callable[[int, int], None]


def document_name(parent: str, number: int, extension: str) -> str:
    """Return the name of the ``number``-th document inside ``parent``."""
    return f"{parent}/{number:0{MIN_NUMBER_DIGITS}d}{extension}"


def folder_segment(file_as: str) -> str:
    """Turn a folder name into a single, non-traversing path segment."""
    segment = file_as.replace("/", "_").replace("\\", "_")
    if segment in (".", ".."):
        segment = segment.replace(".", "_")
    return segment


def unique_segment(file_as: str, taken: set[str]) -> str:
    """Return a segment for ``file_as`` not yet in ``taken`` and record it.

    Sibling folders sharing a name get ``-2``, ``-3`` ... suffixes. Names
    are compared case-insensitively.
    """
    base = folder_segment(file_as)
    candidate = base
    suffix = 1
    while candidate.lower() in taken:
        suffix += 1
        candidate = f"{base}-{suffix}"
    taken.add(candidate.lower())
    return candidate


class ItemExporter:
    """Walk folders and route each item to the matching serializer."""

    def __init__(
        self,
        sink: DocumentSink,
        *,
        assembler: MessageAssembler,
        contacts: ContactSerializer,
        calendar: CalendarSerializer,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        # pylint: disable=too-many-arguments
        """Initialise the exporter with its serializers and document sink."""
        self._sink = sink
        self._assembler = assembler
        self._contacts = contacts
        self._calendar = calendar
        self._progress_callback = progress_callback
        self._processed = 0
        self._total = 0
        self._documents = 0

    def run(self, root: MailItem) -> ExportReport:
        """Export every item below ``root`` and return a summary."""
        self._processed = 0
        self._documents = 0
        self._total = root.item_count
        LOGGER.info("Starting export of %s", root.file_as or "<unnamed store>")
        try:
            self._walk(root.children, "")
        except MemoryError as exc:
            LOGGER.error("Export aborted: out of memory")
            raise FatalExportError(
                "out of memory because a message was too large"
            ) from exc
        LOGGER.info(
            "Export finished: %d documents, %d items processed",
            self._documents,
            self._processed,
        )
        return ExportReport(
            processed=self._processed, total=self._total, documents=self._documents
        )

    def _walk(self, items: list[MailItem], outer_name: str) -> None:
        number = 1
        taken: set[str] = set()
        for item in items:
            if item.item_type is ItemType.FOLDER and item.file_as:
                LOGGER.debug("Processing folder %r", item.file_as)
                # The first non-empty folder seen reports the store's item count.
                if not self._total and item.item_count:
                    self._total = item.item_count
                if item.children:
                    segment = unique_segment(item.file_as, taken)
                    if segment != item.file_as:
                        LOGGER.debug("Folder %r exported as %r", item.file_as, segment)
                    self._walk(item.children, f"{outer_name}/{segment}")
                continue

            rendered = self._render(item)
            if rendered is None:
                LOGGER.debug(
                    "Skipping %s item %r", item.item_type.value, item.subject
                )
            else:
                extension, document = rendered
                self._sink.write(document_name(outer_name, number, extension), document)
                self._documents += 1
                number += 1
            self._advance_progress()

    def _render(self, item: MailItem) -> tuple[str, bytes] | None:
        if item.item_type is ItemType.CONTACT and item.contact is not None:
            return ".vcard", self._contacts.render(item)
        if item.item_type in _MAIL_TYPES and item.email is not None:
            return ".eml", self._assembler.render(item)
        if item.item_type is ItemType.JOURNAL and item.journal is not None:
            return ".ics", self._calendar.render_journal(item)
        if item.item_type is ItemType.APPOINTMENT and item.appointment is not None:
            return ".ics", self._calendar.render_appointment(item)
        return None

    def _advance_progress(self) -> None:
        self._processed += 1
        if self._progress_callback:
            self._progress_callback(self._processed, self._total)


__all__ = [
    "ItemExporter",
    "ProgressCallback",
    "document_name",
    "folder_segment",
    "unique_segment",
]
