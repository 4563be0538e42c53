"""Contact validation: a shape firewall between backend output and leads.

The backend is known to fabricate plausible usernames. These checks cannot
tell a real-but-wrong handle from a real one, only reject malformed values.
Every validator is pure: ``str | None`` in, the accepted value or None out.
"""

import re
from collections.abc import Callable
from urllib.parse import urlparse

from src.core.schemas import Contacts, RawContacts

Validator = Callable[[str | None], str | None]

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_TELEGRAM_HANDLE_RE = re.compile(r"^@?[A-Za-z0-9_]{4,}$")
_TELEGRAM_LINK_RE = re.compile(
    r"^(?:https?://)?(?:www\.)?t\.me/(?:s/)?[A-Za-z0-9_]{4,}/?$", re.IGNORECASE
)

MIN_PHONE_DIGITS = 10
MAX_PHONE_DIGITS = 15


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def validate_email(value: str | None) -> str | None:
    value = _clean(value)
    if value is None or not _EMAIL_RE.match(value):
        return None
    return value


def validate_phone(value: str | None) -> str | None:
    """Accept numbers with 10-15 digits once formatting is stripped.

    The value keeps its original formatting; only the digit count is checked.
    """
    value = _clean(value)
    if value is None:
        return None
    digits = re.sub(r"\D", "", value)
    if not MIN_PHONE_DIGITS <= len(digits) <= MAX_PHONE_DIGITS:
        return None
    return value


# WhatsApp numbers follow the phone rule.
validate_whatsapp = validate_phone


def validate_telegram(value: str | None) -> str | None:
    """Accept ``handle``, ``@handle`` or a ``t.me/handle`` link (4+ chars)."""
    value = _clean(value)
    if value is None:
        return None
    if _TELEGRAM_HANDLE_RE.match(value) or _TELEGRAM_LINK_RE.match(value):
        return value
    return None


def validate_profile_url(value: str | None) -> str | None:
    """Accept a syntactically absolute URL (scheme + host). No reachability check."""
    value = _clean(value)
    if value is None or any(ch.isspace() for ch in value):
        return None
    try:
        parsed = urlparse(value)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    return value


def passthrough(value: str | None) -> str | None:
    return _clean(value)


CONTACT_VALIDATORS: dict[str, Validator] = {
    "email": validate_email,
    "phone": validate_phone,
    "telegram": validate_telegram,
    "whatsapp": validate_whatsapp,
    "linkedin": validate_profile_url,
    "facebook": validate_profile_url,
    "instagram": validate_profile_url,
    "vk": validate_profile_url,
    "contact_name": passthrough,
}


def validate_contacts(raw: RawContacts) -> Contacts:
    """Run every raw contact field through its validator."""
    return Contacts(
        **{name: check(getattr(raw, name)) for name, check in CONTACT_VALIDATORS.items()}
    )
