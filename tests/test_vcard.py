"""Tests for vCard output."""

from __future__ import annotations

from datetime import UTC, datetime

from mailrender.contacts.vcard import ContactSerializer
from mailrender.core.models import (
    BodyText,
    Contact,
    ExtraField,
    ItemType,
    MailItem,
    PostalAddress,
)


def _sample_contact_item() -> MailItem:
    contact = Contact(
        fullname="Smith, John",
        surname="Smith",
        first_name="John",
        display_name_prefix="Dr.",
        nickname="Jack",
        address1="john@example.com",
        birthday=datetime(1980, 5, 17, tzinfo=UTC),
        home_address=PostalAddress(
            label="1 Main St\r\nTown",
            street="1 Main St",
            city="Town",
            state="ST",
            postal_code="12345",
            country="USA",
        ),
        business_address=PostalAddress(label="", street="ignored without label"),
        business_phone="555-1000",
        mobile_phone="555-2000",
        company_main_phone="555-3000",
        job_title="Engineer",
        assistant_name="Ann",
        assistant_phone="555-4000",
        company_name="Example Corp",
    )
    return MailItem(
        item_type=ItemType.CONTACT,
        comment="Met at conference",
        contact=contact,
        extra_fields=[ExtraField(name="Keywords", value="friends")],
    )


def test_full_contact_card() -> None:
    lines = ContactSerializer().render(_sample_contact_item()).decode().splitlines()

    assert lines == [
        "BEGIN:VCARD",
        "FN:Smith\\, John",
        "N:Smith;John;;Dr.;",
        "NICKNAME:Jack",
        "EMAIL:john@example.com",
        "BDAY:1980-05-17T00:00:00Z",
        "ADR;TYPE=home:;;1 Main St;Town;ST;12345;USA",
        "LABEL;TYPE=home:1 Main St\\nTown",
        "TEL;TYPE=work,voice:555-1000",
        "TEL;TYPE=cell,voice:555-2000",
        "TEL;TYPE=work,pref:555-3000",
        "TITLE:Engineer",
        "AGENT:BEGIN:VCARD\\nFN:Ann\\nTEL:555-4000\\nEND:VCARD",
        "ORG:Example Corp",
        "NOTE:Met at conference",
        "CATEGORIES:friends",
        "VERSION:3.0",
        "END:VCARD",
        "",
    ]


def test_minimal_contact_card_keeps_required_lines() -> None:
    item = MailItem(item_type=ItemType.CONTACT, contact=Contact())

    assert ContactSerializer().render(item) == (
        b"BEGIN:VCARD\nFN:\nN:;;;;\nVERSION:3.0\nEND:VCARD\n\n"
    )


def test_body_becomes_second_note() -> None:
    item = MailItem(
        item_type=ItemType.CONTACT,
        comment="first",
        body=BodyText(data="caf\xe9; bar".encode("latin-1")),
        contact=Contact(fullname="X"),
    )

    lines = ContactSerializer().render(item).decode().splitlines()

    notes = [line for line in lines if line.startswith("NOTE:")]
    assert notes == ["NOTE:first", "NOTE:caf\xe9\\; bar"]
