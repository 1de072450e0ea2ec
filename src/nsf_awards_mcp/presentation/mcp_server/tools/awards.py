"""
MCP Tools for NSF Award Search

Provides tools for:
- Keyword / filter award search
- Award detail and Project Outcomes Report lookup
- Institution and Principal Investigator searches

Every tool returns the JSON-serialized ToolOutcome; failures are reported in
the payload (``success: false``), never raised to the MCP client.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from mcp.server.fastmcp import FastMCP

from nsf_awards_mcp.domain.entities import DEFAULT_PAGE_SIZE, SearchQuery, ToolOutcome

if TYPE_CHECKING:
    from nsf_awards_mcp.application.operations import AwardOperations

logger = logging.getLogger(__name__)


def _awards_payload(outcome: ToolOutcome) -> str:
    data = None
    if outcome.success and outcome.data is not None:
        data = [award.to_dict() for award in outcome.data]
    return json.dumps(outcome.to_dict(data=data), indent=2, ensure_ascii=False)


def _record_payload(outcome: ToolOutcome) -> str:
    data: Any = None
    if outcome.success and outcome.data is not None:
        data = outcome.data.to_dict()
    return json.dumps(outcome.to_dict(data=data), indent=2, ensure_ascii=False)


def register_award_tools(mcp: FastMCP, operations: AwardOperations) -> None:
    """Register the five NSF award tools."""

    @mcp.tool()
    async def search_nsf_awards(
        keyword: str | None = None,
        print_fields: str | None = None,
        award_id: str | None = None,
        uei_number: str | None = None,
        parent_uei_number: str | None = None,
        cfda_number: str | None = None,
        awardee_name: str | None = None,
        awardee_city: str | None = None,
        awardee_state_code: str | None = None,
        awardee_country_code: str | None = None,
        awardee_zip_code: str | None = None,
        awardee_district_code: str | None = None,
        pi_first_name: str | None = None,
        pi_last_name: str | None = None,
        pd_pi_name: str | None = None,
        co_pd_pi: str | None = None,
        start_date_from: str | None = None,
        start_date_to: str | None = None,
        exp_date_from: str | None = None,
        exp_date_to: str | None = None,
        date_start: str | None = None,
        date_end: str | None = None,
        awards_date_start: str | None = None,
        awards_date_end: str | None = None,
        estimated_total_amt_from: int | float | None = None,
        estimated_total_amt_to: int | float | None = None,
        funds_obligated_amt_from: int | float | None = None,
        funds_obligated_amt_to: int | float | None = None,
        agency: str | None = None,
        award_agency_code: str | None = None,
        funding_agency_code: str | None = None,
        awarding_agency_code: str | None = None,
        fund_program_name: str | None = None,
        primary_program: str | None = None,
        nsf_organization: str | None = None,
        nsf_directorate_name: str | None = None,
        trans_type: str | None = None,
        award_type: str | None = None,
        perf_location: str | None = None,
        perf_state: str | None = None,
        perf_state_code: str | None = None,
        perf_country_code: str | None = None,
        offset: int | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        include_expired: bool = True,
    ) -> str:
        """
        Search NSF awards by keyword and any combination of NSF filters.

        Args:
            keyword: Keyword searched across all award fields
            print_fields: Comma-separated fields to return (e.g. "id,title,piLastName")
            award_id: Specific NSF award ID
            uei_number: Unique Entity Identifier of the awardee
            parent_uei_number: UEI of the parent organization
            cfda_number: Catalog of Federal Domestic Assistance number
            awardee_name: Award recipient organization
            awardee_city: Awardee city
            awardee_state_code: Awardee state code (e.g. CA, NY)
            awardee_country_code: Awardee country code (e.g. US)
            awardee_zip_code: Awardee ZIP code
            awardee_district_code: Awardee congressional district
            pi_first_name: Principal Investigator first name
            pi_last_name: Principal Investigator last name
            pd_pi_name: Combined PD/PI name search
            co_pd_pi: Co-PD/Co-PI name
            start_date_from: Award start date from (mm/dd/yyyy or yyyy-mm-dd)
            start_date_to: Award start date to
            exp_date_from: Award expiration date from
            exp_date_to: Award expiration date to
            date_start: General award date from
            date_end: General award date to
            awards_date_start: Alternative award date from
            awards_date_end: Alternative award date to
            estimated_total_amt_from: Minimum estimated total amount
            estimated_total_amt_to: Maximum estimated total amount
            funds_obligated_amt_from: Minimum obligated amount
            funds_obligated_amt_to: Maximum obligated amount
            agency: Funding agency name
            award_agency_code: Award agency code
            funding_agency_code: Funding agency code
            awarding_agency_code: Awarding agency code
            fund_program_name: Funding program name
            primary_program: Primary program name
            nsf_organization: NSF organization code
            nsf_directorate_name: NSF directorate name
            trans_type: Transaction type (Grant, Contract, Fellowship...)
            award_type: Award type (Standard Grant, Continuing Grant...)
            perf_location: Performance location description
            perf_state: Performance location state name
            perf_state_code: Performance location state code
            perf_country_code: Performance location country code
            offset: Pagination offset
            limit: Results per page (max 25, larger values are clamped)
            include_expired: Include awards whose expiration date has passed

        Returns:
            JSON ToolOutcome with the matching awards
        """
        query = SearchQuery(
            keyword=keyword,
            print_fields=print_fields,
            award_id=award_id,
            uei_number=uei_number,
            parent_uei_number=parent_uei_number,
            cfda_number=cfda_number,
            awardee_name=awardee_name,
            awardee_city=awardee_city,
            awardee_state_code=awardee_state_code,
            awardee_country_code=awardee_country_code,
            awardee_zip_code=awardee_zip_code,
            awardee_district_code=awardee_district_code,
            pi_first_name=pi_first_name,
            pi_last_name=pi_last_name,
            pd_pi_name=pd_pi_name,
            co_pd_pi=co_pd_pi,
            start_date_from=start_date_from,
            start_date_to=start_date_to,
            exp_date_from=exp_date_from,
            exp_date_to=exp_date_to,
            date_start=date_start,
            date_end=date_end,
            awards_date_start=awards_date_start,
            awards_date_end=awards_date_end,
            estimated_total_amt_from=estimated_total_amt_from,
            estimated_total_amt_to=estimated_total_amt_to,
            funds_obligated_amt_from=funds_obligated_amt_from,
            funds_obligated_amt_to=funds_obligated_amt_to,
            agency=agency,
            award_agency_code=award_agency_code,
            funding_agency_code=funding_agency_code,
            awarding_agency_code=awarding_agency_code,
            fund_program_name=fund_program_name,
            primary_program=primary_program,
            nsf_organization=nsf_organization,
            nsf_directorate_name=nsf_directorate_name,
            trans_type=trans_type,
            award_type=award_type,
            perf_location=perf_location,
            perf_state=perf_state,
            perf_state_code=perf_state_code,
            perf_country_code=perf_country_code,
            offset=offset,
            page_size=limit,
        )
        outcome = await operations.search_awards(query, include_expired=include_expired)
        return _awards_payload(outcome)

    @mcp.tool()
    async def get_award_details(award_id: str, include_abstract: bool = True) -> str:
        """
        Get the full record of one NSF award.

        Args:
            award_id: NSF award ID (e.g. "2112345")
            include_abstract: Include the award abstract text

        Returns:
            JSON ToolOutcome; ``data`` is null with a notice when the award does not exist
        """
        outcome = await operations.get_award_details(award_id, include_abstract=include_abstract)
        return _record_payload(outcome)

    @mcp.tool()
    async def get_project_outcomes(award_id: str) -> str:
        """
        Get the Project Outcomes Report for an award.

        Lists publications, conference presentations, accomplishments and
        broader impacts reported by the PI after the award.

        Args:
            award_id: NSF award ID

        Returns:
            JSON ToolOutcome; ``data`` is null with a notice when no report was filed
        """
        outcome = await operations.get_project_outcomes(award_id)
        return _record_payload(outcome)

    @mcp.tool()
    async def search_by_institution(
        institution_name: str,
        state_code: str | None = None,
        start_date_from: str | None = None,
        start_date_to: str | None = None,
        include_subawards: bool = False,
        offset: int | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> str:
        """
        Search NSF awards held by one institution.

        Args:
            institution_name: Awardee organization name
            state_code: Awardee state code (e.g. MI)
            start_date_from: Award start date from
            start_date_to: Award start date to
            include_subawards: Keep awards whose transaction type is a sub-award
            offset: Pagination offset
            limit: Results per page (max 25)

        Returns:
            JSON ToolOutcome with the institution's awards
        """
        query = SearchQuery(
            awardee_state_code=state_code,
            start_date_from=start_date_from,
            start_date_to=start_date_to,
            offset=offset,
            page_size=limit,
        )
        outcome = await operations.search_by_institution(
            institution_name, query, include_subawards=include_subawards
        )
        return _awards_payload(outcome)

    @mcp.tool()
    async def search_by_pi(
        last_name: str,
        first_name: str | None = None,
        institution: str | None = None,
        start_date_from: str | None = None,
        start_date_to: str | None = None,
        include_co_pis: bool = False,
        offset: int | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> str:
        """
        Search NSF awards by Principal Investigator.

        With ``include_co_pis`` the awards where the person is Co-PI (matched
        on last name) are merged in, de-duplicated, newest start date first.

        Args:
            last_name: PI last name (required)
            first_name: PI first name
            institution: Restrict to one awardee organization
            start_date_from: Award start date from
            start_date_to: Award start date to
            include_co_pis: Also include awards where the person is Co-PI
            offset: Pagination offset
            limit: Results per page (max 25)

        Returns:
            JSON ToolOutcome with the investigator's awards
        """
        query = SearchQuery(
            awardee_name=institution,
            start_date_from=start_date_from,
            start_date_to=start_date_to,
            offset=offset,
            page_size=limit,
        )
        outcome = await operations.search_by_pi(first_name, last_name, query, include_co_pis=include_co_pis)
        return _awards_payload(outcome)

    logger.debug("Registered NSF award tools")
