"""Query composer: turns SearchCriteria into a backend instruction + schema.

Everything mode- or location-specific lives in the tables below, so adding a
mode or a location is a data change, not a new branch.
"""

import copy
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict

from src.core.schemas import ALL, SearchCriteria


class ModeProfile(NamedTuple):
    role_instruction: str
    target: str
    operators: tuple[str, ...]
    source_hints: dict[str, str]


class LocationProfile(NamedTuple):
    phrase: str
    sources: tuple[str, ...]


_MODES: dict[str, ModeProfile] = {
    "freelance": ModeProfile(
        role_instruction=(
            "Your mission is to find high-value FREELANCE ORDERS, one-off projects, "
            "and short-term gigs."
        ),
        target="freelance projects",
        operators=(
            'site:t.me "{keyword}" ("vacancy" OR "hiring" OR "нужен" OR "ищу" '
            'OR "требуется" OR "order" OR "project")',
            'site:facebook.com/groups "{keyword}" "hiring"',
            'site:facebook.com/groups "{keyword}" "looking for developer"',
            'site:reddit.com/r/forhire "{keyword}"',
            'intitle:"hiring" "{keyword}" freelance {location}',
        ),
        source_hints={
            "Facebook Groups": 'Search for "looking for developer" posts.',
            "LinkedIn": "Recent posts from founders.",
            "Telegram": "Search for public channel posts.",
        },
    ),
    "vacancy": ModeProfile(
        role_instruction=(
            "Your mission is to find LONG-TERM JOB OFFERS, VACANCIES, and EMPLOYMENT "
            "opportunities (Full-time/Part-time). If the keyword is 'Vibe Coder' or "
            "similar, look for modern, AI-assisted development roles."
        ),
        target="job vacancies",
        operators=(
            'site:linkedin.com/jobs "{keyword}" {location}',
            'site:linkedin.com/posts "{keyword}" "hiring"',
            'site:facebook.com/groups "Jobs in Israel" "{keyword}"',
            'site:facebook.com/groups "Israel High Tech" "{keyword}"',
            'site:t.me/s/ "{keyword}" (vacancy OR job OR fulltime)',
            'site:glassdoor.com "hiring" "{keyword}"',
            'intitle:"Career" "{keyword}" {location}',
        ),
        source_hints={
            "Facebook Groups": (
                'Search specifically in "Jobs in Israel", "Secret Tel Aviv" and '
                "professional groups."
            ),
            "LinkedIn": "Prioritize Company Pages and Job Posts.",
            "Telegram": "Search for public channel posts.",
        },
    ),
}

_LOCATIONS: dict[str, LocationProfile] = {
    "Worldwide": LocationProfile(
        phrase="Worldwide (focus on USA, Europe, Israel, UK, UAE, CIS, Russia, Asia)",
        sources=("LinkedIn", "Telegram", "Facebook Groups", "Reddit"),
    ),
    "Israel": LocationProfile(
        phrase=(
            "Israel (Tel Aviv, Jerusalem, Haifa). Focus on Facebook Groups and LinkedIn."
        ),
        sources=("Facebook Groups", "LinkedIn"),
    ),
    "Russia": LocationProfile(
        phrase="Russia (Moscow, Saint Petersburg, remote CIS teams)",
        sources=("Telegram", "VK", "LinkedIn"),
    ),
    "Europe": LocationProfile(
        phrase="Europe (EU member states and the UK)",
        sources=("LinkedIn", "Facebook Groups", "Telegram"),
    ),
    "USA": LocationProfile(
        phrase="USA",
        sources=("LinkedIn", "Reddit", "Facebook Groups"),
    ),
    "Asia": LocationProfile(
        phrase="Asia",
        sources=("LinkedIn", "Telegram", "Facebook Groups"),
    ),
}

_DEFAULT_SOURCES = ("LinkedIn", "Telegram", "Facebook Groups")

_ALL_CATEGORIES = "Web Development, Mobile App Development, UI/UX Design"

_BROAD_LOCATIONS = {"Worldwide"}

_CRITICAL_INSTRUCTIONS = (
    "CRITICAL INSTRUCTIONS:\n"
    "1. CONTACT ACCURACY (IMPORTANT):\n"
    "   - NEVER INVENT USERNAMES. Do NOT append \"_hr\", \"_bot\", or company names "
    "to create a username.\n"
    "   - EXTRACT EXACTLY AS WRITTEN in the post (e.g., if it says \"@alex\", "
    "return \"@alex\").\n"
    "2. NO HALLUCINATIONS: Only return contacts that are explicitly visible in the "
    "source text. Leave a contact field null when it is not literally present.\n"
    "3. Return ONLY the JSON array, nothing else."
)

_EXTRACT_FIELDS = (
    "EXTRACT DATA:\n"
    "1. Title & Detailed Description.\n"
    "2. Date (YYYY-MM-DD).\n"
    '3. Platform (e.g., "Facebook Group", "LinkedIn", "Glassdoor").\n'
    "4. URL (Direct link).\n"
    "5. Country.\n"
    "6. CONTACTS (Extract ALL available): Email, Telegram (EXACTLY as written), "
    "WhatsApp, LinkedIn, Facebook (Profile link), Instagram, VK, Phone, "
    "Contact name."
)

_NULLABLE_STRING: dict[str, Any] = {"type": "string", "nullable": True}

LEAD_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "title": {"type": "string"},
            "description": {"type": "string"},
            "date": {"type": "string"},
            "platform": {"type": "string"},
            "url": {"type": "string"},
            "country": dict(_NULLABLE_STRING),
            "contacts": {
                "type": "object",
                "properties": {
                    name: dict(_NULLABLE_STRING)
                    for name in (
                        "email",
                        "phone",
                        "telegram",
                        "whatsapp",
                        "linkedin",
                        "facebook",
                        "instagram",
                        "vk",
                        "contactName",
                    )
                },
            },
            "tags": {"type": "array", "items": {"type": "string"}},
        },
        "required": ["title", "description", "platform", "url"],
    },
}


class DiscoveryQuery(BaseModel):
    """Everything one discovery call sends to the backend."""

    model_config = ConfigDict(frozen=True)

    prompt: str
    operators: str
    output_schema: dict[str, Any]


def resolve_location(location: str) -> LocationProfile:
    return _LOCATIONS.get(location, LocationProfile(location, _DEFAULT_SOURCES))


def resolve_category(category: str) -> str:
    if category == ALL:
        return _ALL_CATEGORIES
    return f"{category} Development"


def build_operators(mode: str, keyword: str, location: str) -> str:
    """Render the mode's site-scoped operator templates into one OR-joined string."""
    profile = _MODES[mode]
    scoped = "" if location in _BROAD_LOCATIONS else location
    rendered = [
        " ".join(template.format(keyword=keyword, location=scoped).split())
        for template in profile.operators
    ]
    return " OR ".join(rendered)


def _priority_sources(mode: ModeProfile, location: LocationProfile) -> str:
    lines = ["PRIORITY SOURCES (DIG DEEP HERE):"]
    for source in location.sources:
        hint = mode.source_hints.get(source, "Search recent public posts.")
        lines.append(f"- {source.upper()}: {hint}")
    return "\n".join(lines)


def compose_query(criteria: SearchCriteria) -> DiscoveryQuery:
    """Build the instruction prompt, operator string and output schema.

    Raises:
        KeyError: If the criteria mode has no profile.
    """
    mode = _MODES[criteria.mode]
    location = resolve_location(criteria.location)
    operators = build_operators(criteria.mode, criteria.keyword, criteria.location)

    prompt = "\n\n".join(
        [
            f"ROLE: You are an Elite Global Lead Hunter. {mode.role_instruction}",
            f"TASK:\nFind at least 15-20 REAL {mode.target}.",
            (
                "SEARCH PARAMETERS:\n"
                f'1. KEYWORDS: "{criteria.keyword}" (and related tech synonyms).\n'
                f"2. DEEP SEARCH QUERY: {operators}\n"
                f"3. DATE RANGE: Strictly between {criteria.start_date.isoformat()} "
                f"and {criteria.end_date.isoformat()}.\n"
                f"4. LOCATION: {location.phrase}.\n"
                f"5. CATEGORY: {resolve_category(criteria.category)}."
            ),
            _priority_sources(mode, location),
            _CRITICAL_INSTRUCTIONS,
            _EXTRACT_FIELDS,
            "Return JSON array.",
        ]
    )

    return DiscoveryQuery(
        prompt=prompt,
        operators=operators,
        output_schema=copy.deepcopy(LEAD_SCHEMA),
    )
