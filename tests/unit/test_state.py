"""Tests for the app-state reducer, selectors and search effect."""

import asyncio
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.state import (
    SEARCH_FAILED_MESSAGE,
    Action,
    AppState,
    CloseProposal,
    LoadSaved,
    OpenProposal,
    SearchFailed,
    SearchStarted,
    SearchSucceeded,
    SetCriteria,
    SetFacets,
    SetTab,
    ToggleSave,
    default_criteria,
    is_saved,
    perform_search,
    reduce,
    visible_facet_options,
    visible_leads,
)
from src.core.config import SearchDefaults, Settings
from src.core.schemas import Contacts, Lead, SearchCriteria
from src.pipeline.discovery import DiscoveryError, LeadDiscovery


def _lead(lead_id: str, **kw: object) -> Lead:
    defaults: dict[str, object] = {
        "id": lead_id,
        "title": f"Lead {lead_id}",
        "url": f"https://example.com/{lead_id}",
    }
    defaults.update(kw)
    return Lead(**defaults)  # type: ignore[arg-type]


def _criteria(keyword: str = "React") -> SearchCriteria:
    return SearchCriteria(keyword=keyword, start_date=date(2024, 1, 1), end_date=date(2024, 1, 7))


def _discovery(leads: list[Lead] | None = None, error: Exception | None = None) -> MagicMock:
    discovery = MagicMock(spec=LeadDiscovery)
    discovery.discover = AsyncMock(return_value=leads or [], side_effect=error)
    return discovery


class TestReduce:
    def test_set_criteria(self) -> None:
        state = reduce(AppState(), SetCriteria(criteria=_criteria()))
        assert state.criteria == _criteria()

    def test_search_started_resets_results(self) -> None:
        state = AppState(
            results=(_lead("old"),), status="error", error_message="x", active_tab="saved"
        )
        state = reduce(state, SearchStarted())
        assert state.status == "loading"
        assert state.results == ()
        assert state.error_message == ""
        assert state.active_tab == "search"

    def test_search_started_ignored_while_loading(self) -> None:
        state = AppState(status="loading", results=(_lead("keep"),))
        assert reduce(state, SearchStarted()) is state

    def test_search_succeeded(self) -> None:
        leads = (_lead("1"), _lead("2"))
        state = reduce(AppState(status="loading"), SearchSucceeded(leads=leads))
        assert state.status == "success"
        assert state.results == leads

    def test_search_succeeded_empty_is_not_error(self) -> None:
        state = reduce(AppState(status="loading"), SearchSucceeded(leads=()))
        assert state.status == "success"
        assert state.error_message == ""

    def test_search_failed(self) -> None:
        state = reduce(AppState(status="loading"), SearchFailed())
        assert state.status == "error"
        assert state.results == ()
        assert state.error_message == SEARCH_FAILED_MESSAGE

    def test_toggle_save_twice(self) -> None:
        lead = _lead("lead-1")
        once = reduce(AppState(), ToggleSave(lead=lead))
        twice = reduce(once, ToggleSave(lead=lead))
        assert [s.id for s in once.saved] == ["lead-1"]
        assert twice.saved == ()

    def test_load_saved(self) -> None:
        state = reduce(AppState(), LoadSaved(leads=(_lead("a"),)))
        assert [s.id for s in state.saved] == ["a"]

    def test_set_tab(self) -> None:
        assert reduce(AppState(), SetTab(tab="saved")).active_tab == "saved"

    def test_set_facets_partial(self) -> None:
        state = reduce(AppState(), SetFacets(platform="LinkedIn", contact="Email"))
        state = reduce(state, SetFacets(country="Israel"))
        assert state.platform_filter == "LinkedIn"
        assert state.country_filter == "Israel"
        assert state.contact_filter == "Email"

    def test_proposal_open_close(self) -> None:
        lead = _lead("p")
        state = reduce(AppState(), OpenProposal(lead=lead))
        assert state.proposal_target == lead
        assert reduce(state, CloseProposal()).proposal_target is None

    def test_does_not_mutate(self) -> None:
        state = AppState()
        reduce(state, SetTab(tab="saved"))
        assert state.active_tab == "search"

    def test_unknown_action_raises(self) -> None:
        class Bogus(Action):
            pass

        with pytest.raises(TypeError, match="Unknown action: Bogus"):
            reduce(AppState(), Bogus())


class TestSelectors:
    def test_visible_leads_follow_tab(self) -> None:
        state = AppState(results=(_lead("r"),), saved=(_lead("s"),))
        assert [lead.id for lead in visible_leads(state)] == ["r"]
        state = reduce(state, SetTab(tab="saved"))
        assert [lead.id for lead in visible_leads(state)] == ["s"]

    def test_visible_leads_apply_facets(self) -> None:
        state = AppState(
            results=(
                _lead("1", platform="LinkedIn", contacts=Contacts(email="a@b.com")),
                _lead("2", platform="Telegram", contacts=Contacts(telegram="@x123")),
            ),
            contact_filter="Telegram",
        )
        assert [lead.id for lead in visible_leads(state)] == ["2"]

    def test_facet_options_from_active_tab(self) -> None:
        state = AppState(
            results=(_lead("1", platform="Reddit", country="USA"),),
            saved=(_lead("2", platform="VK", country="Russia"),),
            active_tab="saved",
        )
        options = visible_facet_options(state)
        assert options.platforms == ["VK"]
        assert options.countries == ["Russia"]

    def test_is_saved(self) -> None:
        state = AppState(saved=(_lead("a"),))
        assert is_saved(state, "a")
        assert not is_saved(state, "b")


class TestDefaultCriteria:
    def test_uses_configured_defaults(self) -> None:
        settings = Settings(search=SearchDefaults(mode="vacancy", location="USA", lookback_days=3))
        c = default_criteria(settings, "Flutter", today=date(2024, 3, 10))
        assert c.mode == "vacancy"
        assert c.location == "USA"
        assert c.category == "All"
        assert c.start_date == date(2024, 3, 7)
        assert c.end_date == date(2024, 3, 10)


class TestPerformSearch:
    async def test_success(self) -> None:
        leads = [_lead("1"), _lead("2")]
        discovery = _discovery(leads)

        state = await perform_search(AppState(), _criteria(), discovery)

        assert state.status == "success"
        assert [lead.id for lead in state.results] == ["1", "2"]
        assert state.criteria == _criteria()
        discovery.discover.assert_awaited_once_with(_criteria())

    async def test_failure_sets_generic_message(self) -> None:
        discovery = _discovery(error=DiscoveryError("Failed to parse backend response as JSON"))

        state = await perform_search(AppState(results=(_lead("old"),)), _criteria(), discovery)

        assert state.status == "error"
        assert state.results == ()
        assert state.error_message == SEARCH_FAILED_MESSAGE

    async def test_timeout_is_failure(self) -> None:
        async def slow(criteria: SearchCriteria) -> list[Lead]:
            await asyncio.sleep(1)
            return []

        discovery = MagicMock(spec=LeadDiscovery)
        discovery.discover = slow

        state = await perform_search(AppState(), _criteria(), discovery, timeout=0.01)

        assert state.status == "error"
        assert state.error_message == SEARCH_FAILED_MESSAGE

    async def test_timeout_does_not_cancel_backend_call(self) -> None:
        release = asyncio.Event()
        finished: list[str] = []

        async def slow(criteria: SearchCriteria) -> list[Lead]:
            await release.wait()
            finished.append(criteria.keyword)
            return [_lead("late")]

        discovery = MagicMock(spec=LeadDiscovery)
        discovery.discover = slow

        state = await perform_search(AppState(), _criteria(), discovery, timeout=0.01)
        assert state.status == "error"

        release.set()
        for _ in range(3):
            await asyncio.sleep(0)

        assert finished == ["React"]
        assert state.results == ()

    async def test_gate_applies_to_fed_back_loading_state(self) -> None:
        discovery = _discovery([_lead("1")])
        published = reduce(AppState(), SearchStarted())

        assert await perform_search(published, _criteria("Vue"), discovery) is published
        discovery.discover.assert_not_awaited()

    async def test_ignored_while_loading(self) -> None:
        discovery = _discovery([_lead("1")])
        loading = AppState(status="loading")

        state = await perform_search(loading, _criteria(), discovery)

        assert state is loading
        discovery.discover.assert_not_awaited()

    async def test_keeps_saved_and_facets(self) -> None:
        state = AppState(saved=(_lead("s"),), platform_filter="LinkedIn")
        state = await perform_search(state, _criteria(), _discovery([_lead("1")]))
        assert [s.id for s in state.saved] == ["s"]
        assert state.platform_filter == "LinkedIn"
