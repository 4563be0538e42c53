"""Discovery service: the single entry point for getting leads.

Data flow:
  1. Query composer → prompt + operators + schema
  2. One backend call (schema + web search)
  3. No text → empty result
  4. Parse JSON array (failure is fatal for the call)
  5. Normalizer → accepted leads
  6. Sort by date, newest first; unparseable dates last

No lock, no retry. Callers serialize their own calls and impose any timeout.
"""

import json
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from dateutil import parser as dateparser

from src.backend.base import LLMProvider, strip_code_fences
from src.core.schemas import Lead, SearchCriteria
from src.pipeline.normalizer import normalize_leads
from src.pipeline.query import compose_query

logger = logging.getLogger(__name__)

_EPOCH = 0.0

# Missing date fields fill from here, so fragments like "Jan 5" sort low.
_DATE_DEFAULT = datetime(1970, 1, 1)


class DiscoveryError(Exception):
    """The discovery call failed: transport error or malformed payload."""


def parse_payload(raw_text: str) -> list[Any]:
    """Parse the backend text as a JSON array.

    Raises:
        DiscoveryError: If the text is not JSON or not an array.
    """
    try:
        data = json.loads(strip_code_fences(raw_text))
    except json.JSONDecodeError as e:
        msg = f"Failed to parse backend response as JSON: {e}"
        raise DiscoveryError(msg) from e

    if not isinstance(data, list):
        msg = f"Expected a JSON array of leads, got {type(data).__name__}"
        raise DiscoveryError(msg)
    return data


def lead_timestamp(value: str) -> float:
    """Sort key for a lead date. Unparseable or empty dates map to epoch zero."""
    if not value:
        return _EPOCH
    try:
        parsed = dateparser.parse(value, default=_DATE_DEFAULT)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.timestamp()
    except (ValueError, OverflowError):
        return _EPOCH


def sort_by_date(leads: list[Lead]) -> list[Lead]:
    """Newest first. Stable, so equal dates keep backend order."""
    return sorted(leads, key=lambda lead: lead_timestamp(lead.date), reverse=True)


class LeadDiscovery:
    """Runs discovery calls against one backend provider.

    Usage::

        discovery = LeadDiscovery(get_provider("gemini"))
        leads = await discovery.discover(criteria)
    """

    def __init__(
        self,
        provider: LLMProvider,
        *,
        model: str | None = None,
        web_search: bool = True,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._provider = provider
        self._model = model
        self._web_search = web_search
        self._clock = clock

    async def discover(self, criteria: SearchCriteria) -> list[Lead]:
        """Run one discovery call and return sorted, validated leads.

        Raises:
            DiscoveryError: If the backend call fails or returns malformed JSON.
        """
        query = compose_query(criteria)
        logger.info(
            "Discovering %s leads for '%s' (%s, %s)",
            criteria.mode, criteria.keyword, criteria.location, criteria.category,
        )
        logger.debug("Search operators: %s", query.operators)

        try:
            raw_text = await self._provider.generate(
                query.prompt,
                self._model,
                schema=query.output_schema,
                web_search=self._web_search,
            )
        except Exception as e:
            logger.error("Backend call failed: %s", e)
            msg = f"Backend call failed: {e}"
            raise DiscoveryError(msg) from e

        if not raw_text:
            logger.info("Backend returned no text, 0 leads")
            return []

        items = parse_payload(raw_text)
        leads = normalize_leads(items, captured_at=self._clock())
        logger.info("Raw records: %d, actionable leads: %d", len(items), len(leads))

        return sort_by_date(leads)
