"""Core data models for the lead hunter.

Two families live here: the untrusted shapes the search backend hands back
(RawContacts, RawLeadRecord) and the trusted records the rest of the system
works with (Contacts, Lead). Only the normalizer converts one into the other.
"""

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Mode = Literal["freelance", "vacancy"]
Location = Literal["Worldwide", "Russia", "Europe", "Israel", "USA", "Asia"]
Category = Literal["Web", "Mobile", "Design", "All"]
ContactFilter = Literal["All", "Telegram", "WhatsApp", "Email", "Socials"]

ALL = "All"
HTTP_SCHEMES = ("http://", "https://")

SOCIAL_FIELDS = ("linkedin", "facebook", "instagram", "vk")


def _loose_text(value: Any) -> str | None:
    """Coerce a backend scalar into text; anything else becomes None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return None


class SearchCriteria(BaseModel):
    """User-supplied search parameters for one discovery call.

    The date range is deliberately not cross-checked: a start date after the
    end date is passed to the backend as-is.
    """

    model_config = ConfigDict(frozen=True)

    mode: Mode = "freelance"
    keyword: str
    location: Location = "Worldwide"
    category: Category = "All"
    start_date: date
    end_date: date

    @field_validator("keyword")
    @classmethod
    def keyword_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "keyword must not be empty"
            raise ValueError(msg)
        return v.strip()


# ---------------------------------------------------------------------------
# Untrusted backend payload
# ---------------------------------------------------------------------------


class RawContacts(BaseModel):
    """Contact fields exactly as the backend reported them."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    email: str | None = None
    phone: str | None = None
    telegram: str | None = None
    whatsapp: str | None = None
    linkedin: str | None = None
    facebook: str | None = None
    instagram: str | None = None
    vk: str | None = None
    contact_name: str | None = Field(default=None, alias="contactName")

    @field_validator("*", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str | None:
        return _loose_text(v)


class RawLeadRecord(BaseModel):
    """One element of the backend's result array. Shape only, never truth."""

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    description: str = ""
    platform: str = ""
    url: str = ""
    date: str = ""
    country: str | None = None
    tags: list[str] = Field(default_factory=list)
    contacts: RawContacts = Field(default_factory=RawContacts)

    @field_validator("title", "description", "platform", "url", "date", mode="before")
    @classmethod
    def coerce_required_text(cls, v: Any) -> str:
        return _loose_text(v) or ""

    @field_validator("country", mode="before")
    @classmethod
    def coerce_country(cls, v: Any) -> str | None:
        return _loose_text(v)

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, v: Any) -> list[str]:
        if not isinstance(v, list):
            return []
        return [t for t in (_loose_text(item) for item in v) if t]

    @field_validator("contacts", mode="before")
    @classmethod
    def coerce_contacts(cls, v: Any) -> Any:
        return v if isinstance(v, (dict, RawContacts)) else {}


# ---------------------------------------------------------------------------
# Trusted records
# ---------------------------------------------------------------------------


class Contacts(BaseModel):
    """Validated contact channels. Every value passed its validator or is None."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    email: str | None = None
    phone: str | None = None
    telegram: str | None = None
    whatsapp: str | None = None
    linkedin: str | None = None
    facebook: str | None = None
    instagram: str | None = None
    vk: str | None = None
    contact_name: str | None = Field(default=None, alias="contactName")

    def has_social(self) -> bool:
        return any(getattr(self, name) for name in SOCIAL_FIELDS)


class Lead(BaseModel):
    """A normalized, minimally validated work opportunity.

    Frozen: saving a lead changes its membership in the saved collection,
    never the lead itself.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    date: str = ""
    platform: str = ""
    url: str
    country: str | None = None
    contacts: Contacts = Field(default_factory=Contacts)
    tags: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def actionable(self) -> "Lead":
        if not self.title.strip():
            msg = "lead title must not be empty"
            raise ValueError(msg)
        if not self.url.lower().startswith(HTTP_SCHEMES):
            msg = f"lead url must be an http(s) link, got '{self.url}'"
            raise ValueError(msg)
        return self
