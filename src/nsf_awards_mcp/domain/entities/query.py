"""
Search query and result value objects.

SearchQuery is an immutable bag of optional NSF filters plus pagination.
Derived queries (e.g. the co-investigator follow-up search) are built with
``dataclasses.replace`` so a query is never mutated after creation.
"""

from __future__ import annotations

from dataclasses import dataclass

from .award import AwardRecord

MAX_PAGE_SIZE = 25
DEFAULT_PAGE_SIZE = 25


@dataclass(frozen=True)
class SearchQuery:
    """
    Application-level award search.

    All filters are optional; dates may be given in any format accepted by
    ``normalize_date`` and are reconciled when the query is translated.
    ``page_size`` is clamped to 25 at translation time, never rejected.
    """

    # Core
    keyword: str | None = None
    print_fields: str | None = None

    # Identifiers
    award_id: str | None = None
    uei_number: str | None = None
    parent_uei_number: str | None = None
    cfda_number: str | None = None

    # Organization
    awardee_name: str | None = None
    awardee_city: str | None = None
    awardee_state_code: str | None = None
    awardee_country_code: str | None = None
    awardee_zip_code: str | None = None
    awardee_district_code: str | None = None

    # Investigators
    pi_first_name: str | None = None
    pi_last_name: str | None = None
    pd_pi_name: str | None = None
    co_pd_pi: str | None = None

    # Date ranges
    start_date_from: str | None = None
    start_date_to: str | None = None
    exp_date_from: str | None = None
    exp_date_to: str | None = None
    date_start: str | None = None
    date_end: str | None = None
    awards_date_start: str | None = None
    awards_date_end: str | None = None

    # Amount ranges
    estimated_total_amt_from: int | float | None = None
    estimated_total_amt_to: int | float | None = None
    funds_obligated_amt_from: int | float | None = None
    funds_obligated_amt_to: int | float | None = None

    # Agency / program
    agency: str | None = None
    award_agency_code: str | None = None
    funding_agency_code: str | None = None
    awarding_agency_code: str | None = None
    fund_program_name: str | None = None
    primary_program: str | None = None
    nsf_organization: str | None = None
    nsf_directorate_name: str | None = None

    # Classification
    trans_type: str | None = None
    award_type: str | None = None

    # Performance location
    perf_location: str | None = None
    perf_state: str | None = None
    perf_state_code: str | None = None
    perf_country_code: str | None = None

    # Pagination
    offset: int | None = None
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def effective_page_size(self) -> int:
        """Page size actually sent upstream (1..25)."""
        if not self.page_size:
            return DEFAULT_PAGE_SIZE
        return max(1, min(self.page_size, MAX_PAGE_SIZE))


@dataclass(frozen=True)
class SearchResult:
    """
    One page of awards.

    ``has_more`` is a heuristic: True iff the upstream returned as many
    records as were requested. It is a false positive when the true total is
    an exact multiple of the page size; the NSF API offers no total count.
    """

    awards: tuple[AwardRecord, ...] = ()
    has_more: bool = False
    offset: int = 0
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def count(self) -> int:
        return len(self.awards)

    def to_list(self, include_abstract: bool = True) -> list[dict]:
        return [a.to_dict(include_abstract=include_abstract) for a in self.awards]
