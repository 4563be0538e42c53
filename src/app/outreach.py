"""Outbound contact links for a lead (mail client, Telegram, WhatsApp)."""

import re
from urllib.parse import quote

from src.core.schemas import SOCIAL_FIELDS, Lead

_TELEGRAM_PREFIX_RE = re.compile(r"^(?:https?://)?(?:www\.)?t\.me/(?:s/)?|^@", re.IGNORECASE)


def mailto_url(lead: Lead, body: str = "") -> str | None:
    """mailto: link with subject and body, or None if the lead has no email."""
    if not lead.contacts.email:
        return None
    subject = quote(f"Development proposal: {lead.title}")
    return f"mailto:{lead.contacts.email}?subject={subject}&body={quote(body)}"


def telegram_url(handle: str) -> str:
    """Normalize ``@name``, ``name`` or a t.me link into ``https://t.me/name``."""
    name = _TELEGRAM_PREFIX_RE.sub("", handle.strip()).strip("/")
    return f"https://t.me/{name}"


def whatsapp_url(phone: str, text: str = "") -> str:
    digits = re.sub(r"\D", "", phone)
    url = f"https://wa.me/{digits}"
    if text:
        url += f"?text={quote(text)}"
    return url


def contact_links(lead: Lead, message: str = "") -> dict[str, str]:
    """Every actionable link for a lead, keyed by channel name."""
    links: dict[str, str] = {}
    mail = mailto_url(lead, message)
    if mail:
        links["email"] = mail
    if lead.contacts.telegram:
        links["telegram"] = telegram_url(lead.contacts.telegram)
    if lead.contacts.whatsapp:
        links["whatsapp"] = whatsapp_url(lead.contacts.whatsapp, message)
    for social in SOCIAL_FIELDS:
        value = getattr(lead.contacts, social)
        if value:
            links[social] = value
    links["post"] = lead.url
    return links
