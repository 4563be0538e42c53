"""Application state and its reducer.

All UI-level state (criteria, results, saved leads, facets, active tab,
proposal target) lives in one frozen AppState. It only changes through
``reduce(state, action)``; the pipeline components stay stateless.
"""

import asyncio
import logging
from collections.abc import Sequence
from datetime import date, timedelta
from typing import Literal

from pydantic import BaseModel, ConfigDict

from src.core.config import Settings
from src.core.schemas import ALL, ContactFilter, Lead, SearchCriteria
from src.core.store import toggle_saved
from src.pipeline.discovery import DiscoveryError, LeadDiscovery
from src.pipeline.facets import FacetOptions, facet_options, filter_leads

logger = logging.getLogger(__name__)

Status = Literal["idle", "loading", "success", "error"]
Tab = Literal["search", "saved"]

SEARCH_FAILED_MESSAGE = "Could not find any data. Try changing the query or dates."


class AppState(BaseModel):
    model_config = ConfigDict(frozen=True)

    criteria: SearchCriteria | None = None
    results: tuple[Lead, ...] = ()
    saved: tuple[Lead, ...] = ()
    status: Status = "idle"
    error_message: str = ""
    active_tab: Tab = "search"
    platform_filter: str = ALL
    country_filter: str = ALL
    contact_filter: ContactFilter = ALL
    proposal_target: Lead | None = None


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


class Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class SetCriteria(Action):
    criteria: SearchCriteria


class SearchStarted(Action):
    pass


class SearchSucceeded(Action):
    leads: tuple[Lead, ...]


class SearchFailed(Action):
    message: str = SEARCH_FAILED_MESSAGE


class LoadSaved(Action):
    leads: tuple[Lead, ...]


class ToggleSave(Action):
    lead: Lead


class SetTab(Action):
    tab: Tab


class SetFacets(Action):
    """Change any subset of facets; None leaves a facet unchanged."""

    platform: str | None = None
    country: str | None = None
    contact: ContactFilter | None = None


class OpenProposal(Action):
    lead: Lead


class CloseProposal(Action):
    pass


def reduce(state: AppState, action: Action) -> AppState:
    """Return the next state. Pure: never mutates ``state``."""
    if isinstance(action, SetCriteria):
        return state.model_copy(update={"criteria": action.criteria})

    if isinstance(action, SearchStarted):
        if state.status == "loading":
            # One outstanding discovery call at a time.
            return state
        return state.model_copy(
            update={
                "status": "loading",
                "results": (),
                "error_message": "",
                "active_tab": "search",
            }
        )

    if isinstance(action, SearchSucceeded):
        return state.model_copy(update={"status": "success", "results": tuple(action.leads)})

    if isinstance(action, SearchFailed):
        return state.model_copy(
            update={"status": "error", "results": (), "error_message": action.message}
        )

    if isinstance(action, LoadSaved):
        return state.model_copy(update={"saved": tuple(action.leads)})

    if isinstance(action, ToggleSave):
        return state.model_copy(update={"saved": tuple(toggle_saved(state.saved, action.lead))})

    if isinstance(action, SetTab):
        return state.model_copy(update={"active_tab": action.tab})

    if isinstance(action, SetFacets):
        update: dict[str, str] = {}
        if action.platform is not None:
            update["platform_filter"] = action.platform
        if action.country is not None:
            update["country_filter"] = action.country
        if action.contact is not None:
            update["contact_filter"] = action.contact
        return state.model_copy(update=update)

    if isinstance(action, OpenProposal):
        return state.model_copy(update={"proposal_target": action.lead})

    if isinstance(action, CloseProposal):
        return state.model_copy(update={"proposal_target": None})

    msg = f"Unknown action: {type(action).__name__}"
    raise TypeError(msg)


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------


def active_leads(state: AppState) -> Sequence[Lead]:
    return state.results if state.active_tab == "search" else state.saved


def visible_leads(state: AppState) -> list[Lead]:
    return filter_leads(
        active_leads(state),
        platform_filter=state.platform_filter,
        country_filter=state.country_filter,
        contact_filter=state.contact_filter,
    )


def visible_facet_options(state: AppState) -> FacetOptions:
    return facet_options(active_leads(state))


def is_saved(state: AppState, lead_id: str) -> bool:
    return any(lead.id == lead_id for lead in state.saved)


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------


def default_criteria(settings: Settings, keyword: str, today: date | None = None) -> SearchCriteria:
    """Criteria from configured defaults; the range ends today."""
    end = today or date.today()
    return SearchCriteria(
        mode=settings.search.mode,
        keyword=keyword,
        location=settings.search.location,
        category=settings.search.category,
        start_date=end - timedelta(days=settings.search.lookback_days),
        end_date=end,
    )


async def perform_search(
    state: AppState,
    criteria: SearchCriteria,
    discovery: LeadDiscovery,
    timeout: float | None = None,
) -> AppState:
    """Run one discovery call and fold its outcome into the state.

    A call issued with a loading state is ignored. The gate only sees the state
    passed in, so callers that run searches concurrently must feed back the
    loading state they publish. A timeout is reported like any other backend
    failure; the backend call itself is not cancelled and a late result is
    dropped.
    """
    if state.status == "loading":
        logger.info("Discovery already in progress, ignoring new request")
        return state

    started = reduce(reduce(state, SetCriteria(criteria=criteria)), SearchStarted())
    try:
        leads = await asyncio.wait_for(asyncio.shield(discovery.discover(criteria)), timeout)
    except (DiscoveryError, asyncio.TimeoutError) as e:
        logger.error("Search for '%s' failed: %s", criteria.keyword, str(e) or "timed out")
        return reduce(started, SearchFailed())

    return reduce(started, SearchSucceeded(leads=tuple(leads)))
