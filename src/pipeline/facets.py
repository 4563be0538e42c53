"""Facet filter chain over a lead collection.

Facets (all ANDed, order-preserving):
  1. PlatformFacet: case-insensitive substring on platform
  2. CountryFacet: case-insensitive substring on country; no country fails
  3. ContactFacet: requires a contact channel (Socials = any social profile)

"All" disables a facet. Option lists come from the active collection, not a
global catalog.
"""

import logging
from collections.abc import Callable, Iterable
from typing import NamedTuple

from src.core.schemas import ALL, ContactFilter, Lead

logger = logging.getLogger(__name__)

# A facet is a callable that takes leads and returns a subset.
Facet = Callable[[list[Lead]], list[Lead]]

_CONTACT_FIELDS: dict[str, str] = {
    "Telegram": "telegram",
    "WhatsApp": "whatsapp",
    "Email": "email",
}


class PlatformFacet:
    """Keep leads whose platform contains the filter text."""

    def __init__(self, platform: str) -> None:
        self._needle = platform.lower()

    def __call__(self, leads: list[Lead]) -> list[Lead]:
        return [lead for lead in leads if self._needle in lead.platform.lower()]


class CountryFacet:
    """Keep leads with a country containing the filter text."""

    def __init__(self, country: str) -> None:
        self._needle = country.lower()

    def __call__(self, leads: list[Lead]) -> list[Lead]:
        return [
            lead for lead in leads
            if lead.country is not None and self._needle in lead.country.lower()
        ]


class ContactFacet:
    """Keep leads reachable through the selected contact channel."""

    def __init__(self, channel: ContactFilter) -> None:
        if channel != "Socials" and channel not in _CONTACT_FIELDS:
            msg = f"Unknown contact filter '{channel}'"
            raise ValueError(msg)
        self._channel = channel

    def __call__(self, leads: list[Lead]) -> list[Lead]:
        return [lead for lead in leads if self._reachable(lead)]

    def _reachable(self, lead: Lead) -> bool:
        if self._channel == "Socials":
            return lead.contacts.has_social()
        return bool(getattr(lead.contacts, _CONTACT_FIELDS[self._channel]))


def build_facets(
    platform_filter: str = ALL,
    country_filter: str = ALL,
    contact_filter: ContactFilter = ALL,
) -> list[Facet]:
    facets: list[Facet] = []
    if platform_filter != ALL:
        facets.append(PlatformFacet(platform_filter))
    if country_filter != ALL:
        facets.append(CountryFacet(country_filter))
    if contact_filter != ALL:
        facets.append(ContactFacet(contact_filter))
    return facets


def run_facet_chain(leads: list[Lead], facets: list[Facet]) -> list[Lead]:
    """Apply facets in order, returning the surviving leads."""
    result = leads
    for f in facets:
        result = f(result)
    return result


def filter_leads(
    leads: Iterable[Lead],
    platform_filter: str = ALL,
    country_filter: str = ALL,
    contact_filter: ContactFilter = ALL,
) -> list[Lead]:
    """Intersect a lead list against the selected facets."""
    leads = list(leads)
    result = run_facet_chain(leads, build_facets(platform_filter, country_filter, contact_filter))
    hidden = len(leads) - len(result)
    if hidden:
        logger.debug("Facets hid %d of %d leads", hidden, len(leads))
    return result


class FacetOptions(NamedTuple):
    platforms: list[str]
    countries: list[str]


def facet_options(leads: Iterable[Lead]) -> FacetOptions:
    """Distinct platforms and non-empty countries, in first-seen order."""
    platforms: dict[str, None] = {}
    countries: dict[str, None] = {}
    for lead in leads:
        platforms.setdefault(lead.platform, None)
        if lead.country:
            countries.setdefault(lead.country, None)
    return FacetOptions(platforms=list(platforms), countries=list(countries))
