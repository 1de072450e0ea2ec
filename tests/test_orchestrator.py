"""Tests for SearchOrchestrator and its record policies."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from conftest import awards_body, make_award

from nsf_awards_mcp.application.search import (
    SearchOrchestrator,
    exclude_subawards,
    filter_expired,
    merge_unique,
    sort_by_start_date,
)
from nsf_awards_mcp.domain.entities import AwardRecord, SearchQuery
from nsf_awards_mcp.infrastructure.nsf import AWARDS_PATH
from nsf_awards_mcp.shared.exceptions import (
    NetworkError,
    NotFoundError,
    ParseError,
    ServiceUnavailableError,
    UpstreamError,
)


def record(award_id: str, **fields) -> AwardRecord:
    return AwardRecord.from_api(make_award(award_id, **fields))


# ============================================================
# Record policies
# ============================================================


class TestFilterExpired:
    def test_drops_past_expiration(self):
        now = datetime(2024, 6, 15, 12, 0)
        awards = [record("old", expDate="01/01/2020"), record("live", expDate="12/31/2030")]
        assert [a.award_id for a in filter_expired(awards, now)] == ["live"]

    def test_expiring_today_is_dropped_after_midnight(self):
        now = datetime(2024, 6, 15, 12, 0)
        assert filter_expired([record("1", expDate="06/15/2024")], now) == []

    def test_missing_or_bad_dates_kept(self):
        now = datetime(2024, 6, 15)
        awards = [record("none", expDate=None), record("bad", expDate="31/02/2024")]
        assert [a.award_id for a in filter_expired(awards, now)] == ["none", "bad"]


class TestExcludeSubawards:
    def test_case_insensitive(self):
        awards = [record("1", transType="Grant"), record("2", transType="SUBAWARD"), record("3", transType="Subaward Grant")]
        assert [a.award_id for a in exclude_subawards(awards)] == ["1"]


class TestMergeUnique:
    def test_primary_wins(self):
        primary = [record("A", title="primary copy")]
        secondary = [record("A", title="secondary copy"), record("B")]
        merged = merge_unique(primary, secondary)
        assert [a.award_id for a in merged] == ["A", "B"]
        assert merged[0].title == "primary copy"

    def test_duplicates_within_secondary(self):
        merged = merge_unique([], [record("B"), record("B")])
        assert [a.award_id for a in merged] == ["B"]

    def test_records_without_id_are_kept(self):
        primary = [record("p")]
        secondary = [AwardRecord.from_api({"title": "no id 1"}), AwardRecord.from_api({"title": "no id 2"})]
        merged = merge_unique(primary, secondary)
        assert [a.award_id for a in merged] == ["p", "", ""]
        assert [a.title for a in merged[1:]] == ["no id 1", "no id 2"]


class TestSortByStartDate:
    def test_newest_first(self):
        awards = [record("a", startDate="01/01/2020"), record("b", startDate="01/01/2023"), record("c", startDate="06/01/2021")]
        assert [a.award_id for a in sort_by_start_date(awards)] == ["b", "c", "a"]

    def test_undated_after_dated_and_stable(self):
        awards = [
            record("x", startDate=None),
            record("dated", startDate="01/01/2022"),
            record("y", startDate="garbage"),
            record("z", startDate=None),
        ]
        assert [a.award_id for a in sort_by_start_date(awards)] == ["dated", "x", "y", "z"]


# ============================================================
# search
# ============================================================


class TestSearch:
    async def test_has_more_when_page_full(self, orchestrator, mock_gateway):
        mock_gateway.execute.return_value = awards_body(*[make_award(str(i)) for i in range(7)])
        result = await orchestrator.search(SearchQuery(keyword="machine learning", page_size=5))

        assert [a.award_id for a in result.awards] == ["0", "1", "2", "3", "4"]
        assert result.has_more is True
        assert result.limit == 5
        mock_gateway.execute.assert_awaited_once_with(AWARDS_PATH, {"keyword": "machine learning", "rpp": 5})

    async def test_exactly_full_page(self, orchestrator, mock_gateway):
        mock_gateway.execute.return_value = awards_body(*[make_award(str(i)) for i in range(5)])
        result = await orchestrator.search(SearchQuery(page_size=5))
        assert result.count == 5
        assert result.has_more is True

    async def test_no_more_when_short_page(self, orchestrator, mock_gateway):
        mock_gateway.execute.return_value = awards_body(make_award("1"), make_award("2"))
        result = await orchestrator.search(SearchQuery(page_size=5))
        assert result.count == 2
        assert result.has_more is False

    async def test_single_award_object(self, orchestrator, mock_gateway):
        mock_gateway.execute.return_value = {"response": {"award": make_award("solo")}}
        result = await orchestrator.search(SearchQuery())
        assert [a.award_id for a in result.awards] == ["solo"]

    async def test_missing_award_key(self, orchestrator, mock_gateway):
        mock_gateway.execute.return_value = {"response": {}}
        result = await orchestrator.search(SearchQuery())
        assert result.awards == ()
        assert result.has_more is False

    async def test_xml_body(self, orchestrator, mock_gateway):
        mock_gateway.execute.return_value = (
            "<response><award><id>1</id><startDate>2022-03-01</startDate></award>"
            "<award><id>2</id></award></response>"
        )
        result = await orchestrator.search(SearchQuery())
        assert [a.award_id for a in result.awards] == ["1", "2"]
        assert result.awards[0].start_date == "03/01/2022"

    async def test_unparseable_body(self, orchestrator, mock_gateway):
        mock_gateway.execute.return_value = "%%% not a body %%%"
        with pytest.raises(ParseError):
            await orchestrator.search(SearchQuery())

    async def test_error_envelope_in_ok_response(self, orchestrator, mock_gateway):
        mock_gateway.execute.return_value = {"response": {"error": {"code": "E1", "message": "bad query"}}}
        with pytest.raises(UpstreamError, match="bad query"):
            await orchestrator.search(SearchQuery())

    async def test_error_envelope_without_code(self, orchestrator, mock_gateway):
        mock_gateway.execute.return_value = {"response": {"error": {"message": "bad query"}}}
        with pytest.raises(UpstreamError) as exc_info:
            await orchestrator.search(SearchQuery())
        assert str(exc_info.value) == "bad query"

    async def test_exclude_expired(self, orchestrator, mock_gateway):
        mock_gateway.execute.return_value = awards_body(
            make_award("expired", expDate="01/01/2020"),
            make_award("active", expDate="01/01/2030"),
            make_award("bad-date", expDate="31/02/2024"),
        )
        result = await orchestrator.search(SearchQuery(), include_expired=False)
        assert [a.award_id for a in result.awards] == ["active", "bad-date"]

    async def test_include_expired_by_default(self, orchestrator, mock_gateway):
        mock_gateway.execute.return_value = awards_body(make_award("expired", expDate="01/01/2020"))
        result = await orchestrator.search(SearchQuery())
        assert result.count == 1

    async def test_gateway_error_propagates(self, orchestrator, mock_gateway):
        mock_gateway.execute.side_effect = ServiceUnavailableError("HTTP 503", status=503)
        with pytest.raises(ServiceUnavailableError):
            await orchestrator.search(SearchQuery())


# ============================================================
# Detail and outcomes
# ============================================================


class TestLookups:
    async def test_get_by_id(self, orchestrator, mock_gateway, mock_award):
        mock_gateway.execute.return_value = {"response": {"award": [mock_award]}}
        award = await orchestrator.get_by_id("2112345")
        assert award.award_id == "2112345"
        mock_gateway.execute.assert_awaited_once_with("/awards/2112345.json")

    async def test_get_by_id_not_found(self, orchestrator, mock_gateway):
        mock_gateway.execute.side_effect = NotFoundError("NSF resource", "/awards/0.json")
        assert await orchestrator.get_by_id("0") is None

    async def test_get_by_id_empty_body(self, orchestrator, mock_gateway):
        mock_gateway.execute.return_value = {"response": {}}
        assert await orchestrator.get_by_id("0") is None

    async def test_get_outcomes(self, orchestrator, mock_gateway, mock_outcome):
        mock_gateway.execute.return_value = mock_outcome
        outcome = await orchestrator.get_outcomes("1812345")
        assert outcome.award_id == "1812345"
        assert outcome.publication_count == 2
        mock_gateway.execute.assert_awaited_once_with("/awards/1812345/projectoutcomes.json")

    async def test_get_outcomes_not_found(self, orchestrator, mock_gateway):
        mock_gateway.execute.side_effect = NotFoundError("NSF resource")
        assert await orchestrator.get_outcomes("1") is None

    async def test_get_outcomes_other_errors_propagate(self, orchestrator, mock_gateway):
        mock_gateway.execute.side_effect = NetworkError("down")
        with pytest.raises(NetworkError):
            await orchestrator.get_outcomes("1")


# ============================================================
# By institution
# ============================================================


class TestSearchByInstitution:
    async def test_pins_awardee_and_drops_subawards(self, orchestrator, mock_gateway):
        mock_gateway.execute.return_value = awards_body(
            make_award("1", transType="Standard Grant"),
            make_award("2", transType="Subaward"),
        )
        result = await orchestrator.search_by_institution(
            "Stanford University", SearchQuery(awardee_state_code="CA", page_size=10)
        )
        assert [a.award_id for a in result.awards] == ["1"]
        params = mock_gateway.execute.await_args.args[1]
        assert params["awardeeName"] == "Stanford University"
        assert params["awardeeStateCode"] == "CA"

    async def test_include_subawards(self, orchestrator, mock_gateway):
        mock_gateway.execute.return_value = awards_body(make_award("1"), make_award("2", transType="Subaward"))
        result = await orchestrator.search_by_institution("MIT", include_subawards=True)
        assert result.count == 2


# ============================================================
# By investigator (PI + Co-PI merge)
# ============================================================


class TestSearchByInvestigator:
    async def test_primary_only(self, orchestrator, mock_gateway):
        mock_gateway.execute.return_value = awards_body(make_award("A"))
        result = await orchestrator.search_by_investigator("Jane", "Smith")
        assert [a.award_id for a in result.awards] == ["A"]
        params = mock_gateway.execute.await_args.args[1]
        assert params["piFirstName"] == "Jane"
        assert params["piLastName"] == "Smith"
        assert mock_gateway.execute.await_count == 1

    async def test_co_pi_merge_dedups(self, orchestrator, mock_gateway):
        mock_gateway.execute.side_effect = [
            awards_body(make_award("A", startDate="01/01/2021")),
            awards_body(make_award("A", startDate="01/01/2021"), make_award("B", startDate="01/01/2022")),
        ]
        result = await orchestrator.search_by_investigator("Jane", "Smith", include_co_investigators=True)

        assert sorted(a.award_id for a in result.awards) == ["A", "B"]
        assert [a.award_id for a in result.awards] == ["B", "A"]
        assert result.has_more is False

        co_params = mock_gateway.execute.await_args_list[1].args[1]
        assert co_params["coPDPI"] == "Smith"
        assert "piFirstName" not in co_params
        assert "piLastName" not in co_params

    async def test_secondary_failure_is_non_fatal(self, orchestrator, mock_gateway):
        mock_gateway.execute.side_effect = [
            awards_body(make_award("A")),
            ServiceUnavailableError("HTTP 503", status=503),
        ]
        result = await orchestrator.search_by_investigator(None, "Smith", include_co_investigators=True)
        assert [a.award_id for a in result.awards] == ["A"]

    async def test_primary_failure_propagates(self, orchestrator, mock_gateway):
        mock_gateway.execute.side_effect = NetworkError("down")
        with pytest.raises(NetworkError):
            await orchestrator.search_by_investigator(None, "Smith", include_co_investigators=True)

    async def test_truncation_sets_has_more(self, orchestrator, mock_gateway):
        mock_gateway.execute.side_effect = [
            awards_body(make_award("A", startDate="01/01/2020"), make_award("B", startDate="01/01/2021")),
            awards_body(make_award("C", startDate="01/01/2022")),
        ]
        result = await orchestrator.search_by_investigator(
            None, "Smith", SearchQuery(page_size=3), include_co_investigators=True
        )
        # Primary returned 2 < 3 and secondary 1 < 3, so only the merge can signal more
        assert result.has_more is False

        mock_gateway.execute.side_effect = [
            awards_body(make_award("A", startDate="01/01/2020"), make_award("B", startDate="01/01/2021")),
            awards_body(make_award("C", startDate="01/01/2022"), make_award("D", startDate="01/01/2019")),
        ]
        result = await orchestrator.search_by_investigator(
            None, "Smith", SearchQuery(page_size=3), include_co_investigators=True
        )
        assert [a.award_id for a in result.awards] == ["C", "B", "A"]
        assert result.has_more is True

    async def test_secondary_has_more_propagates(self, mock_gateway, frozen_now):
        orchestrator = SearchOrchestrator(mock_gateway, clock=lambda: frozen_now)
        mock_gateway.execute = AsyncMock(
            side_effect=[
                awards_body(make_award("A")),
                awards_body(make_award("B"), make_award("C")),
            ]
        )
        result = await orchestrator.search_by_investigator(
            None, "Smith", SearchQuery(page_size=2), include_co_investigators=True
        )
        assert result.count == 2
        assert result.has_more is True


# ============================================================
# Page-size clamp across operations
# ============================================================


class TestPageSizeClamp:
    async def test_every_search_sends_at_most_25(self, orchestrator, mock_gateway):
        query = SearchQuery(page_size=100)
        await orchestrator.search(query)
        await orchestrator.search_by_institution("MIT", query)
        await orchestrator.search_by_investigator(None, "Smith", query, include_co_investigators=True)

        sent = [call.args[1]["rpp"] for call in mock_gateway.execute.await_args_list]
        assert sent == [25, 25, 25, 25]
