"""
Award Operations - the five NSF tools as ToolOutcome-returning calls.

Each operation:
- checks the few inputs the tool schema cannot express (blank names, inverted
  date ranges) and answers VALIDATION_ERROR
- runs the orchestrator and times it
- turns a missing award / outcome report into a successful, empty outcome
  with a notice instead of an error
- converts every other failure into a failed ToolOutcome with the operation's
  error code; nothing is raised to the caller
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import replace

from nsf_awards_mcp.domain.entities import (
    AwardRecord,
    ErrorCode,
    OutcomeMetadata,
    OutcomeRecord,
    SearchQuery,
    SearchResult,
    ToolOutcome,
)
from nsf_awards_mcp.shared.dates import normalize_date, validate_date_range
from nsf_awards_mcp.shared.exceptions import (
    InvalidParameterError,
    NsfAwardsError,
    ValidationError,
)

from .search.orchestrator import SearchOrchestrator

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return (time.monotonic() - start) * 1000


def _require(name: str, value: str | None) -> str:
    if value is None or not value.strip():
        raise InvalidParameterError(name, value, "a non-empty string")
    return value.strip()


def _check_start_range(query: SearchQuery) -> None:
    """Reject an inverted start-date range; malformed dates are left to the translator."""
    start_from = normalize_date(query.start_date_from)
    start_to = normalize_date(query.start_date_to)
    if start_from and start_to and not validate_date_range(start_from, start_to):
        raise InvalidParameterError(
            "start_date_from",
            query.start_date_from,
            f"a date on or before start_date_to ({query.start_date_to})",
        )


def _search_metadata(result: SearchResult, start: float) -> OutcomeMetadata:
    return OutcomeMetadata(
        offset=result.offset,
        limit=result.limit,
        has_more=result.has_more,
        total_results=result.count,
        execution_time_ms=_elapsed_ms(start),
    )


def _single_metadata(found: bool, start: float, notice: ErrorCode | None = None, message: str | None = None) -> OutcomeMetadata:
    return OutcomeMetadata(
        offset=0,
        limit=1,
        has_more=False,
        total_results=1 if found else 0,
        execution_time_ms=_elapsed_ms(start),
        notice=None if found else notice,
        notice_message=None if found else message,
    )


class AwardOperations:
    """
    Tool-facing operations over one SearchOrchestrator.

    The orchestrator (and the gateway inside it) is created once by the
    hosting server and passed in; there is no module-level client.
    """

    def __init__(self, orchestrator: SearchOrchestrator) -> None:
        self._orchestrator = orchestrator

    async def search_awards(
        self,
        query: SearchQuery,
        include_expired: bool = True,
    ) -> ToolOutcome[tuple[AwardRecord, ...]]:
        start = time.monotonic()
        logger.info(f"Executing search_nsf_awards: keyword={query.keyword!r} page_size={query.page_size}")
        try:
            _check_start_range(query)
            result = await self._orchestrator.search(query, include_expired=include_expired)
        except ValidationError as e:
            return ToolOutcome.fail(ErrorCode.VALIDATION_ERROR, str(e))
        except NsfAwardsError as e:
            logger.error(f"search_nsf_awards failed: {e}")
            return ToolOutcome.fail(ErrorCode.SEARCH_FAILED, str(e))
        except Exception as e:
            logger.exception(f"search_nsf_awards failed unexpectedly: {e}")
            return ToolOutcome.fail(ErrorCode.SEARCH_FAILED, str(e) or "Unknown error occurred")

        metadata = _search_metadata(result, start)
        logger.info(
            f"search_nsf_awards completed: results={result.count} "
            f"has_more={result.has_more} time={metadata.execution_time_ms:.0f}ms"
        )
        return ToolOutcome.ok(result.awards, metadata)

    async def get_award_details(
        self,
        award_id: str,
        include_abstract: bool = True,
    ) -> ToolOutcome[AwardRecord]:
        start = time.monotonic()
        try:
            award_id = _require("award_id", award_id)
            logger.info(f"Executing get_award_details: award_id={award_id}")
            award = await self._orchestrator.get_by_id(award_id)
        except ValidationError as e:
            return ToolOutcome.fail(ErrorCode.VALIDATION_ERROR, str(e))
        except NsfAwardsError as e:
            logger.error(f"get_award_details failed: {e}")
            return ToolOutcome.fail(ErrorCode.GET_DETAILS_FAILED, str(e))
        except Exception as e:
            logger.exception(f"get_award_details failed unexpectedly: {e}")
            return ToolOutcome.fail(ErrorCode.GET_DETAILS_FAILED, str(e) or "Unknown error occurred")

        if award is None:
            logger.warning(f"Award not found: {award_id}")
            return ToolOutcome.ok(
                None,
                _single_metadata(
                    False, start, ErrorCode.AWARD_NOT_FOUND, f"No award found with ID: {award_id}"
                ),
            )

        if not include_abstract:
            award = replace(award, abstract_text=None)

        metadata = _single_metadata(True, start)
        logger.info(f"get_award_details completed: award_id={award_id} time={metadata.execution_time_ms:.0f}ms")
        return ToolOutcome.ok(award, metadata)

    async def get_project_outcomes(self, award_id: str) -> ToolOutcome[OutcomeRecord]:
        start = time.monotonic()
        try:
            award_id = _require("award_id", award_id)
            logger.info(f"Executing get_project_outcomes: award_id={award_id}")
            outcome = await self._orchestrator.get_outcomes(award_id)
        except ValidationError as e:
            return ToolOutcome.fail(ErrorCode.VALIDATION_ERROR, str(e))
        except NsfAwardsError as e:
            logger.error(f"get_project_outcomes failed: {e}")
            return ToolOutcome.fail(ErrorCode.GET_OUTCOMES_FAILED, str(e))
        except Exception as e:
            logger.exception(f"get_project_outcomes failed unexpectedly: {e}")
            return ToolOutcome.fail(ErrorCode.GET_OUTCOMES_FAILED, str(e) or "Unknown error occurred")

        if outcome is None:
            logger.warning(f"Project outcomes not found: {award_id}")
            return ToolOutcome.ok(
                None,
                _single_metadata(
                    False,
                    start,
                    ErrorCode.OUTCOMES_NOT_FOUND,
                    f"No project outcomes found for award ID: {award_id}. The project may not "
                    "have submitted outcomes yet, or the award is too recent.",
                ),
            )

        metadata = _single_metadata(True, start)
        logger.info(
            f"get_project_outcomes completed: award_id={award_id} "
            f"publications={outcome.publication_count} conferences={outcome.conference_count} "
            f"time={metadata.execution_time_ms:.0f}ms"
        )
        return ToolOutcome.ok(outcome, metadata)

    async def search_by_institution(
        self,
        institution_name: str,
        query: SearchQuery,
        include_subawards: bool = False,
    ) -> ToolOutcome[tuple[AwardRecord, ...]]:
        start = time.monotonic()
        try:
            institution_name = _require("institution_name", institution_name)
            logger.info(
                f"Executing search_by_institution: institution={institution_name!r} "
                f"state={query.awardee_state_code}"
            )
            _check_start_range(query)
            result = await self._orchestrator.search_by_institution(
                institution_name, query, include_subawards=include_subawards
            )
        except ValidationError as e:
            return ToolOutcome.fail(ErrorCode.VALIDATION_ERROR, str(e))
        except NsfAwardsError as e:
            logger.error(f"search_by_institution failed: {e}")
            return ToolOutcome.fail(ErrorCode.INSTITUTION_SEARCH_FAILED, str(e))
        except Exception as e:
            logger.exception(f"search_by_institution failed unexpectedly: {e}")
            return ToolOutcome.fail(ErrorCode.INSTITUTION_SEARCH_FAILED, str(e) or "Unknown error occurred")

        metadata = _search_metadata(result, start)
        programs = Counter(award.program for award in result.awards)
        logger.info(
            f"search_by_institution completed: institution={institution_name!r} "
            f"results={result.count} programs={len(programs)} time={metadata.execution_time_ms:.0f}ms"
        )
        return ToolOutcome.ok(result.awards, metadata)

    async def search_by_pi(
        self,
        first_name: str | None,
        last_name: str,
        query: SearchQuery,
        include_co_pis: bool = False,
    ) -> ToolOutcome[tuple[AwardRecord, ...]]:
        start = time.monotonic()
        try:
            last_name = _require("last_name", last_name)
            first_name = first_name.strip() if first_name and first_name.strip() else None
            pi_name = " ".join(part for part in (first_name, last_name) if part)
            logger.info(
                f"Executing search_by_pi: name={pi_name!r} "
                f"institution={query.awardee_name!r} include_co_pis={include_co_pis}"
            )
            _check_start_range(query)
            result = await self._orchestrator.search_by_investigator(
                first_name, last_name, query, include_co_investigators=include_co_pis
            )
        except ValidationError as e:
            return ToolOutcome.fail(ErrorCode.VALIDATION_ERROR, str(e))
        except NsfAwardsError as e:
            logger.error(f"search_by_pi failed: {e}")
            return ToolOutcome.fail(ErrorCode.PI_SEARCH_FAILED, str(e))
        except Exception as e:
            logger.exception(f"search_by_pi failed unexpectedly: {e}")
            return ToolOutcome.fail(ErrorCode.PI_SEARCH_FAILED, str(e) or "Unknown error occurred")

        metadata = _search_metadata(result, start)
        total_amount = sum(award.estimated_total_amt or 0 for award in result.awards)
        institutions = Counter(award.organization for award in result.awards)
        logger.info(
            f"search_by_pi completed: results={result.count} total_amount={total_amount:.0f} "
            f"institutions={len(institutions)} time={metadata.execution_time_ms:.0f}ms"
        )
        return ToolOutcome.ok(result.awards, metadata)
