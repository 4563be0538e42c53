"""Tests for the query composer: tables, operators, prompt, schema."""

from datetime import date

import pytest

from src.core.schemas import SearchCriteria
from src.pipeline.query import (
    LEAD_SCHEMA,
    build_operators,
    compose_query,
    resolve_category,
    resolve_location,
)


def _criteria(**overrides: object) -> SearchCriteria:
    defaults: dict[str, object] = {
        "mode": "freelance",
        "keyword": "React",
        "location": "Worldwide",
        "category": "All",
        "start_date": date(2024, 1, 1),
        "end_date": date(2024, 1, 8),
    }
    defaults.update(overrides)
    return SearchCriteria(**defaults)  # type: ignore[arg-type]


class TestResolveLocation:
    def test_worldwide_broadens(self) -> None:
        profile = resolve_location("Worldwide")
        assert "USA" in profile.phrase
        assert "Israel" in profile.phrase
        assert len(profile.sources) >= 3

    def test_israel_pins_two_platforms(self) -> None:
        profile = resolve_location("Israel")
        assert profile.sources == ("Facebook Groups", "LinkedIn")
        assert "Tel Aviv" in profile.phrase

    def test_unknown_location_uses_default(self) -> None:
        profile = resolve_location("Antarctica")
        assert profile.phrase == "Antarctica"
        assert "LinkedIn" in profile.sources


class TestResolveCategory:
    def test_all_expands(self) -> None:
        assert resolve_category("All") == (
            "Web Development, Mobile App Development, UI/UX Design"
        )

    def test_single_category(self) -> None:
        assert resolve_category("Mobile") == "Mobile Development"


class TestBuildOperators:
    def test_freelance_targets_gig_channels(self) -> None:
        ops = build_operators("freelance", "React", "Worldwide")
        assert 'site:t.me "React"' in ops
        assert 'site:reddit.com/r/forhire "React"' in ops
        assert "linkedin.com/jobs" not in ops

    def test_vacancy_targets_job_boards(self) -> None:
        ops = build_operators("vacancy", "React", "Europe")
        assert 'site:linkedin.com/jobs "React" Europe' in ops
        assert 'site:glassdoor.com "hiring" "React"' in ops
        assert "r/forhire" not in ops

    def test_worldwide_omits_location(self) -> None:
        ops = build_operators("vacancy", "React", "Worldwide")
        assert 'site:linkedin.com/jobs "React" OR' in ops
        assert "Worldwide" not in ops

    def test_no_double_spaces(self) -> None:
        ops = build_operators("freelance", "Vue", "Worldwide")
        assert "  " not in ops

    def test_joined_with_or(self) -> None:
        ops = build_operators("freelance", "Vue", "USA")
        assert ops.count(" OR site:") >= 3

    def test_unknown_mode_raises(self) -> None:
        with pytest.raises(KeyError):
            build_operators("consulting", "Vue", "USA")


class TestComposeQuery:
    def test_prompt_includes_parameters(self) -> None:
        query = compose_query(_criteria(location="Israel", category="Web"))
        assert '"React"' in query.prompt
        assert "2024-01-01" in query.prompt
        assert "2024-01-08" in query.prompt
        assert "Tel Aviv" in query.prompt
        assert "Web Development" in query.prompt
        assert query.operators in query.prompt

    def test_mode_changes_role(self) -> None:
        freelance = compose_query(_criteria(mode="freelance"))
        vacancy = compose_query(_criteria(mode="vacancy"))
        assert "FREELANCE ORDERS" in freelance.prompt
        assert "freelance projects" in freelance.prompt
        assert "LONG-TERM JOB OFFERS" in vacancy.prompt
        assert "job vacancies" in vacancy.prompt

    def test_anti_hallucination_instructions(self) -> None:
        prompt = compose_query(_criteria()).prompt
        assert "NEVER INVENT USERNAMES" in prompt
        assert "EXTRACT EXACTLY AS WRITTEN" in prompt
        assert "Return ONLY the JSON array" in prompt

    def test_priority_sources_follow_location(self) -> None:
        prompt = compose_query(_criteria(location="Israel", mode="vacancy")).prompt
        assert "- FACEBOOK GROUPS:" in prompt
        assert "Jobs in Israel" in prompt
        assert "- REDDIT:" not in prompt

    def test_inverted_date_range_passes_through(self) -> None:
        query = compose_query(
            _criteria(start_date=date(2024, 5, 1), end_date=date(2024, 4, 1))
        )
        assert "Strictly between 2024-05-01 and 2024-04-01" in query.prompt

    def test_deterministic(self) -> None:
        assert compose_query(_criteria()) == compose_query(_criteria())

    def test_schema_required_fields(self) -> None:
        schema = compose_query(_criteria()).output_schema
        assert schema["type"] == "array"
        item = schema["items"]
        assert item["required"] == ["title", "description", "platform", "url"]
        assert item["properties"]["country"]["nullable"] is True
        contacts = item["properties"]["contacts"]["properties"]
        assert set(contacts) == {
            "email", "phone", "telegram", "whatsapp", "linkedin",
            "facebook", "instagram", "vk", "contactName",
        }
        assert all(field["nullable"] is True for field in contacts.values())

    def test_schema_is_a_copy(self) -> None:
        schema = compose_query(_criteria()).output_schema
        schema["items"]["required"].append("date")
        assert "date" not in LEAD_SCHEMA["items"]["required"]
