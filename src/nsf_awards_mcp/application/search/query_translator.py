"""
Query Translator - SearchQuery -> NSF Awards API query parameters.

Rules:
- Every filter that is set is copied verbatim under its NSF parameter name
- Whole-number amounts go out as integers (``100000``, not ``100000.0``)
- ``rpp`` (results per page) is clamped to the NSF hard limit of 25
- Date filters are reconciled to mm/dd/yyyy; a date that cannot be reconciled
  is dropped (with a warning) so the search runs unfiltered on that field
  instead of failing
- ``printFields`` is passed through only when the caller asked for it
"""

from __future__ import annotations

import logging
from typing import Any

from nsf_awards_mcp.domain.entities import SearchQuery
from nsf_awards_mcp.shared.dates import normalize_date

logger = logging.getLogger(__name__)

# SearchQuery attribute -> NSF parameter
FIELD_MAP: dict[str, str] = {
    "keyword": "keyword",
    "award_id": "id",
    "uei_number": "ueiNumber",
    "parent_uei_number": "parentUeiNumber",
    "cfda_number": "cfdaNumber",
    "awardee_name": "awardeeName",
    "awardee_city": "awardeeCity",
    "awardee_state_code": "awardeeStateCode",
    "awardee_country_code": "awardeeCountryCode",
    "awardee_zip_code": "awardeeZipCode",
    "awardee_district_code": "awardeeDistrictCode",
    "pi_first_name": "piFirstName",
    "pi_last_name": "piLastName",
    "pd_pi_name": "pdPIName",
    "co_pd_pi": "coPDPI",
    "estimated_total_amt_from": "estimatedTotalAmtFrom",
    "estimated_total_amt_to": "estimatedTotalAmtTo",
    "funds_obligated_amt_from": "fundsObligatedAmtFrom",
    "funds_obligated_amt_to": "fundsObligatedAmtTo",
    "agency": "agency",
    "award_agency_code": "awardAgencyCode",
    "funding_agency_code": "fundingAgencyCode",
    "awarding_agency_code": "awardingAgencyCode",
    "fund_program_name": "fundProgramName",
    "primary_program": "primaryProgram",
    "nsf_organization": "nsfOrganization",
    "nsf_directorate_name": "nsfDirectorateName",
    "trans_type": "transType",
    "award_type": "awardType",
    "perf_location": "perfLocation",
    "perf_state": "perfState",
    "perf_state_code": "perfStateCode",
    "perf_country_code": "perfCountryCode",
    "offset": "offset",
}

AMOUNT_FIELDS = frozenset(
    {
        "estimated_total_amt_from",
        "estimated_total_amt_to",
        "funds_obligated_amt_from",
        "funds_obligated_amt_to",
    }
)

DATE_FIELD_MAP: dict[str, str] = {
    "start_date_from": "startDateFrom",
    "start_date_to": "startDateTo",
    "exp_date_from": "expDateFrom",
    "exp_date_to": "expDateTo",
    "date_start": "dateStart",
    "date_end": "dateEnd",
    "awards_date_start": "awardsDateStart",
    "awards_date_end": "awardsDateEnd",
}


class QueryTranslator:
    """Stateless mapper from SearchQuery to NSF request parameters."""

    def translate(self, query: SearchQuery) -> dict[str, Any]:
        params: dict[str, Any] = {}

        for attr, name in FIELD_MAP.items():
            value = getattr(query, attr)
            if value is None or value == "":
                continue
            if attr in AMOUNT_FIELDS and isinstance(value, float) and value.is_integer():
                value = int(value)
            params[name] = value

        for attr, name in DATE_FIELD_MAP.items():
            value = getattr(query, attr)
            if value is None or value == "":
                continue
            normalized = normalize_date(value)
            if normalized:
                params[name] = normalized
            else:
                logger.warning(f"Invalid date format for {name}: {value!r}, filter dropped")

        params["rpp"] = query.effective_page_size

        if query.print_fields:
            params["printFields"] = query.print_fields

        return params
