"""
Search Orchestrator - NSF award operations composed from gateway + translator.

Flow for every operation:
    SearchQuery -> QueryTranslator -> HttpGateway (retry) -> ResponseParser
    -> ensure_list -> AwardRecord / OutcomeRecord -> domain policy

Domain policy lives here:
- page truncation and the ``has_more`` heuristic
- expired-award filtering (fail-open on missing or bad dates)
- sub-award exclusion for institution searches
- PI + Co-PI merge: dedup by award id, newest start date first, re-limit

The co-investigator query is issued strictly after the primary one; there is
no parallel fan-out.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from datetime import date, datetime, time
from typing import Any

from nsf_awards_mcp.domain.entities import (
    AwardRecord,
    OutcomeRecord,
    SearchQuery,
    SearchResult,
)
from nsf_awards_mcp.infrastructure.nsf import (
    AWARDS_PATH,
    HttpGateway,
    ResponseParser,
    award_path,
    outcomes_path,
)
from nsf_awards_mcp.shared.dates import parse_canonical_date
from nsf_awards_mcp.shared.exceptions import (
    NotFoundError,
    NsfAwardsError,
    ParseError,
    UnrecognizedEnvelope,
    UpstreamError,
    decode_error_envelope,
    describe_envelope,
)
from nsf_awards_mcp.shared.records import ensure_list

from .query_translator import QueryTranslator

logger = logging.getLogger(__name__)


# =============================================================================
# Record policies
# =============================================================================


def _canonical_or_none(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return parse_canonical_date(value)
    except ValueError:
        return None


def filter_expired(awards: Iterable[AwardRecord], now: datetime) -> list[AwardRecord]:
    """
    Drop awards whose expiration date is strictly before *now*.

    Awards with a missing or unparseable ``exp_date`` are kept.
    """
    kept = []
    for award in awards:
        expires = _canonical_or_none(award.exp_date)
        if expires is not None and datetime.combine(expires, time.min) < now:
            continue
        kept.append(award)
    return kept


def exclude_subawards(awards: Iterable[AwardRecord]) -> list[AwardRecord]:
    """Drop awards whose transaction type mentions "subaward" (any case)."""
    return [award for award in awards if not award.is_subaward]


def merge_unique(primary: Sequence[AwardRecord], secondary: Iterable[AwardRecord]) -> list[AwardRecord]:
    """
    Append *secondary* awards not already present by id; primary wins.

    Awards without an id cannot be matched and are always kept.
    """
    seen = {award.award_id for award in primary if award.award_id}
    merged = list(primary)
    for award in secondary:
        if award.award_id:
            if award.award_id in seen:
                continue
            seen.add(award.award_id)
        merged.append(award)
    return merged


def sort_by_start_date(awards: Iterable[AwardRecord]) -> list[AwardRecord]:
    """
    Newest start date first.

    Awards without a usable start date compare equal to each other and go
    after dated awards, keeping their relative order (the sort is stable).
    """

    def key(award: AwardRecord) -> tuple[bool, date]:
        started = _canonical_or_none(award.start_date)
        return (started is not None, started or date.min)

    return sorted(awards, key=key, reverse=True)


# =============================================================================
# Orchestrator
# =============================================================================


class SearchOrchestrator:
    """
    The five NSF award operations.

    Usage:
        orchestrator = SearchOrchestrator(gateway)
        result = await orchestrator.search(SearchQuery(keyword="quantum", page_size=10))
        award = await orchestrator.get_by_id("2112345")
    """

    def __init__(
        self,
        gateway: HttpGateway,
        translator: QueryTranslator | None = None,
        parser: ResponseParser | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._gateway = gateway
        self._translator = translator or QueryTranslator()
        self._parser = parser or ResponseParser()
        self._clock = clock

    # ------------------------------------------------------------------
    # Payload handling
    # ------------------------------------------------------------------

    def _response_block(self, raw: Any) -> dict[str, Any]:
        payload = self._parser.parse(raw)
        if not isinstance(payload, dict):
            raise ParseError(f"Expected an object envelope, got {type(payload).__name__}")

        envelope = decode_error_envelope(payload)
        if not isinstance(envelope, UnrecognizedEnvelope):
            raise UpstreamError(describe_envelope(envelope) or "NSF API error", envelope=envelope)

        response = payload.get("response")
        return response if isinstance(response, dict) else {}

    def _awards_from(self, raw: Any) -> list[AwardRecord]:
        block = self._response_block(raw)
        return [AwardRecord.from_api(a) for a in ensure_list(block.get("award")) if isinstance(a, dict)]

    def _outcomes_from(self, raw: Any) -> list[OutcomeRecord]:
        block = self._response_block(raw)
        return [
            OutcomeRecord.from_api(o) for o in ensure_list(block.get("projectOutcomes")) if isinstance(o, dict)
        ]

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def search(self, query: SearchQuery, include_expired: bool = True) -> SearchResult:
        """
        Plain award search.

        Keyword relevance is the upstream's job; results keep upstream order.
        """
        params = self._translator.translate(query)
        raw = await self._gateway.execute(AWARDS_PATH, params)
        awards = self._awards_from(raw)

        page_size = query.effective_page_size
        has_more = len(awards) >= page_size
        awards = awards[:page_size]

        if not include_expired:
            before = len(awards)
            awards = filter_expired(awards, self._clock())
            logger.debug(f"Expired filter removed {before - len(awards)} awards")

        return SearchResult(
            awards=tuple(awards),
            has_more=has_more,
            offset=query.offset or 0,
            limit=page_size,
        )

    async def get_by_id(self, award_id: str) -> AwardRecord | None:
        """Award detail; None when the award does not exist."""
        try:
            raw = await self._gateway.execute(award_path(award_id))
        except NotFoundError:
            logger.info(f"Award {award_id} not found (404)")
            return None
        awards = self._awards_from(raw)
        return awards[0] if awards else None

    async def get_outcomes(self, award_id: str) -> OutcomeRecord | None:
        """Project Outcomes Report; None when none was filed."""
        try:
            raw = await self._gateway.execute(outcomes_path(award_id))
        except NotFoundError:
            logger.info(f"Project outcomes for {award_id} not found (404)")
            return None
        outcomes = self._outcomes_from(raw)
        if len(outcomes) > 1:
            logger.warning(f"Award {award_id}: {len(outcomes)} outcome records, using the first")
        return outcomes[0] if outcomes else None

    async def search_by_institution(
        self,
        institution_name: str,
        query: SearchQuery | None = None,
        include_subawards: bool = False,
    ) -> SearchResult:
        """Awards for one awardee organization, optionally without sub-awards."""
        pinned = replace(query or SearchQuery(), awardee_name=institution_name)
        result = await self.search(pinned)
        if include_subawards:
            return result
        return replace(result, awards=tuple(exclude_subawards(result.awards)))

    async def search_by_investigator(
        self,
        first_name: str | None,
        last_name: str,
        query: SearchQuery | None = None,
        include_co_investigators: bool = False,
    ) -> SearchResult:
        """
        Awards led by a PI, optionally merged with awards where they are Co-PI.

        The Co-PI query filters on last name only (first name does not apply to
        ``coPDPI``). Its failure is logged and the PI results are returned.
        """
        base = query or SearchQuery()
        primary = await self.search(replace(base, pi_first_name=first_name, pi_last_name=last_name))

        awards = list(primary.awards)
        has_more = primary.has_more

        if include_co_investigators:
            co_query = replace(base, pi_first_name=None, pi_last_name=None, co_pd_pi=last_name)
            try:
                secondary = await self.search(co_query)
            except NsfAwardsError as e:
                logger.warning(f"Co-PI search failed, returning PI results only: {e}")
            else:
                awards = merge_unique(awards, secondary.awards)
                has_more = has_more or secondary.has_more

        awards = sort_by_start_date(awards)
        limit = base.effective_page_size
        limited = awards[:limit]

        return SearchResult(
            awards=tuple(limited),
            has_more=has_more or len(awards) > len(limited),
            offset=base.offset or 0,
            limit=limit,
        )
