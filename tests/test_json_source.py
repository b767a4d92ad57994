"""Tests for the JSON item source."""

from __future__ import annotations

import base64
import json
from datetime import UTC, datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from mailrender.core.interfaces import MissingAttachmentData, UnparseableEmbeddedItem
from mailrender.core.models import (
    AttachMethod,
    AttachmentRef,
    FreeBusy,
    ItemType,
    PostalAddress,
)
from mailrender.ingestion import JsonItemSource


def _sample_document() -> dict:
    return {
        "root": {
            "type": "store",
            "file_as": "Mailbox",
            "item_count": 3,
            "children": [
                {
                    "type": "folder",
                    "file_as": "Inbox",
                    "children": [
                        {
                            "type": "note",
                            "subject": "Hello",
                            "read": True,
                            "body": {"text": "Hi there"},
                            "email": {
                                "sender_address": "alice@example.com",
                                "to": "bob@example.com",
                                "sent_date": "2024-01-02T03:04:05Z",
                                "html_body": {
                                    "data": base64.b64encode(b"<p>x</p>").decode(),
                                    "utf8": False,
                                },
                            },
                            "attachments": [
                                {"filename": "a.txt", "fetch_id": 7},
                                {"method": "embedded", "item": {"type": "note"}},
                            ],
                            "extra_fields": [{"name": "Keywords", "value": "work"}],
                        },
                        {
                            "type": "appointment",
                            "appointment": {
                                "start": "2024-03-04T10:00:00Z",
                                "show_as": "free",
                                "recurrence": {"frequency": "weekly", "weekday_mask": 2},
                            },
                        },
                        {
                            "type": "contact",
                            "contact": {
                                "fullname": "Ann",
                                "home_address": {"label": "1 Main St", "city": "Town"},
                            },
                        },
                    ],
                }
            ],
        },
        "blobs": {"7": base64.b64encode(b"attachment bytes").decode(), "8": "!!!"},
    }


def _source() -> JsonItemSource:
    return JsonItemSource.from_json(json.dumps(_sample_document()))


def test_root_converts_whole_tree() -> None:
    root = _source().root()

    assert root.item_type is ItemType.STORE
    assert root.item_count == 3
    inbox = root.children[0]
    assert inbox.item_type is ItemType.FOLDER
    note, appointment, contact = inbox.children

    assert note.is_read
    assert note.body is not None and note.body.data == b"Hi there" and note.body.is_utf8
    assert note.email is not None
    assert note.email.sent_to == "bob@example.com"
    assert note.email.sent_date == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
    assert note.email.html_body is not None
    assert note.email.html_body.data == b"<p>x</p>"
    assert not note.email.html_body.is_utf8
    assert note.keywords() == ["work"]
    assert note.attachments[0].fetch_id == 7
    assert note.attachments[1].method is AttachMethod.EMBEDDED

    assert appointment.appointment is not None
    assert appointment.appointment.show_as is FreeBusy.FREE
    assert appointment.appointment.recurrence is not None
    assert appointment.appointment.recurrence.weekday_mask == 2

    assert contact.contact is not None
    assert contact.contact.home_address == PostalAddress(label="1 Main St", city="Town")


def test_fetch_returns_decoded_blob() -> None:
    assert _source().fetch(7) == b"attachment bytes"


@pytest.mark.parametrize("fetch_id", [8, 99])
def test_fetch_missing_or_corrupt_blob(fetch_id: int) -> None:
    with pytest.raises(MissingAttachmentData):
        _source().fetch(fetch_id)


def test_load_embedded_parses_raw_item() -> None:
    source = _source()
    attachment = source.root().children[0].children[0].attachments[1]

    item = source.load_embedded(attachment)

    assert item.item_type is ItemType.NOTE


@pytest.mark.parametrize("payload", [None, "text", {"type": "unknown"}])
def test_load_embedded_rejects_invalid_items(payload: object) -> None:
    attachment = AttachmentRef(method=AttachMethod.EMBEDDED, embedded=payload)

    with pytest.raises(UnparseableEmbeddedItem):
        _source().load_embedded(attachment)


def test_unknown_body_keys_are_rejected() -> None:
    document = _sample_document()
    document["root"]["children"][0]["children"][0]["body"] = {"html": "<p/>"}

    with pytest.raises(ValidationError):
        JsonItemSource.from_json(json.dumps(document))


def test_from_path_reads_file(tmp_path: Path) -> None:
    path = tmp_path / "items.json"
    path.write_text(json.dumps(_sample_document()), encoding="utf-8")

    assert JsonItemSource.from_path(path).root().file_as == "Mailbox"


@pytest.mark.parametrize(
    "field",
    [
        ("body", {"data": "abc"}),
        ("attachments", [{"filename": "a.bin", "data": "abc"}]),
        ("email", {"encrypted_body": "not base64!"}),
    ],
)
def test_invalid_inline_base64_is_rejected_on_load(field: tuple[str, object]) -> None:
    document = _sample_document()
    name, value = field
    document["root"]["children"][0]["children"][0][name] = value

    with pytest.raises(ValidationError):
        JsonItemSource.from_json(json.dumps(document))


def test_load_embedded_rejects_invalid_base64() -> None:
    attachment = AttachmentRef(
        method=AttachMethod.EMBEDDED,
        embedded={"type": "note", "email": {}, "body": {"data": "abc"}},
    )

    with pytest.raises(UnparseableEmbeddedItem):
        _source().load_embedded(attachment)
