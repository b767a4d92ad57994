"""vCard 3.0 output for contact items."""

from __future__ import annotations

from ..core.config import OutputSettings
from ..core.datetime_utils import rfc2425_datetime
from ..core.encoding import default_charset, escape_directory_text, keyword_categories
from ..core.models import Contact, MailItem, PostalAddress
from ..core.stream import DocumentWriter

# Contact attribute and TYPE parameter of every telephone line, in output order.
TELEPHONE_FIELDS = (
    ("business_fax", "work,fax"),
    ("business_phone", "work,voice"),
    ("business_phone2", "work,voice"),
    ("car_phone", "car,voice"),
    ("home_fax", "home,fax"),
    ("home_phone", "home,voice"),
    ("home_phone2", "home,voice"),
    ("isdn_phone", "isdn"),
    ("mobile_phone", "cell,voice"),
    ("other_phone", "msg"),
    ("pager_phone", "pager"),
    ("primary_fax", "fax,pref"),
    ("primary_phone", "phone,pref"),
    ("radio_phone", "pcs"),
    ("telex", "bbs"),
    ("callback_phone", "msg"),
    ("company_main_phone", "work,pref"),
)


def _escaped(value: str | None) -> str:
    return escape_directory_text(value) if value else ""


class ContactSerializer:
    """Write contact items as vCard documents."""

    def __init__(self, settings: OutputSettings | None = None) -> None:
        self._fallback_charset = (settings or OutputSettings()).default_charset

    def render(self, item: MailItem) -> bytes:
        """Return the vCard document for ``item``."""
        writer = DocumentWriter()
        self.write(writer, item)
        return writer.getvalue()

    def write(self, writer: DocumentWriter, item: MailItem) -> None:
        """Write one vCard for ``item`` onto ``writer``."""
        contact = item.contact or Contact()
        writer.line("BEGIN:VCARD")
        writer.line(f"FN:{_escaped(contact.fullname)}")
        name_parts = (
            contact.surname,
            contact.first_name,
            contact.middle_name,
            contact.display_name_prefix,
            contact.suffix,
        )
        writer.line("N:" + ";".join(_escaped(part) for part in name_parts))

        if contact.nickname:
            writer.line(f"NICKNAME:{_escaped(contact.nickname)}")
        for address in (contact.address1, contact.address2, contact.address3):
            if address:
                writer.line(f"EMAIL:{_escaped(address)}")
        if contact.birthday:
            writer.line(f"BDAY:{rfc2425_datetime(contact.birthday)}")

        for kind, postal in (
            ("home", contact.home_address),
            ("work", contact.business_address),
            ("postal", contact.other_address),
        ):
            if postal is not None and postal.label:
                self._write_address(writer, kind, postal)

        for attribute, tel_type in TELEPHONE_FIELDS:
            number = getattr(contact, attribute)
            if number:
                writer.line(f"TEL;TYPE={tel_type}:{_escaped(number)}")

        if contact.job_title:
            writer.line(f"TITLE:{_escaped(contact.job_title)}")
        if contact.profession:
            writer.line(f"ROLE:{_escaped(contact.profession)}")
        if contact.assistant_name or contact.assistant_phone:
            writer.line(f"AGENT:{_agent_card(contact)}")
        if contact.company_name:
            writer.line(f"ORG:{_escaped(contact.company_name)}")
        if item.comment:
            writer.line(f"NOTE:{_escaped(item.comment)}")
        if item.body:
            body = item.body.decode(default_charset(item, self._fallback_charset))
            writer.line(f"NOTE:{_escaped(body)}")

        categories = keyword_categories(item)
        if categories:
            writer.line(categories)

        writer.line("VERSION:3.0")
        writer.line("END:VCARD")
        writer.line()

    @staticmethod
    def _write_address(writer: DocumentWriter, kind: str, postal: PostalAddress) -> None:
        fields = (
            postal.po_box,
            None,  # extended address
            postal.street,
            postal.city,
            postal.state,
            postal.postal_code,
            postal.country,
        )
        writer.line(f"ADR;TYPE={kind}:" + ";".join(_escaped(value) for value in fields))
        writer.line(f"LABEL;TYPE={kind}:{_escaped(postal.label)}")


def _agent_card(contact: Contact) -> str:
    """Return the assistant's nested vCard as one escaped AGENT value."""
    lines = ["BEGIN:VCARD"]
    if contact.assistant_name:
        lines.append(f"FN:{_escaped(contact.assistant_name)}")
    if contact.assistant_phone:
        lines.append(f"TEL:{_escaped(contact.assistant_phone)}")
    lines.append("END:VCARD")
    return escape_directory_text("\n".join(lines))


__all__ = ["ContactSerializer", "TELEPHONE_FIELDS"]
