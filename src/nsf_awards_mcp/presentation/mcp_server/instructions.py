"""
MCP Server Instructions - usage guide for AI agents.

Kept out of server.py so it can be edited and reviewed on its own.
"""

from __future__ import annotations

SERVER_INSTRUCTIONS = """
NSF Awards MCP Server - search National Science Foundation research funding

═══════════════════════════════════════════════════════════════════════════════
TOOLS
═══════════════════════════════════════════════════════════════════════════════

search_nsf_awards      Keyword / filter search over all NSF awards
get_award_details      Full record for one award ID (abstract optional)
get_project_outcomes   Project Outcomes Report: publications, conferences,
                       accomplishments and impacts
search_by_institution  Awards held by one awardee organization
search_by_pi           Awards led by an investigator, optionally including
                       awards where they are Co-PI

═══════════════════════════════════════════════════════════════════════════════
CONVENTIONS
═══════════════════════════════════════════════════════════════════════════════

- Page size is capped at 25 by NSF. Larger limits are silently clamped.
- Page with `offset` (1-based record offset, as NSF defines it).
- `hasMore` is true when a full page came back. When the true total is an
  exact multiple of the page size, the next page may turn out empty.
- Dates may be given as mm/dd/yyyy, yyyy-mm-dd or ISO timestamps. A date
  that cannot be read is dropped from the filter rather than failing the
  search.
- Dates in results are always mm/dd/yyyy.
- A missing award or outcomes report is NOT an error: `success` is true,
  `data` is null and `metadata.notice` explains why.

═══════════════════════════════════════════════════════════════════════════════
EXAMPLES
═══════════════════════════════════════════════════════════════════════════════

search_nsf_awards(keyword="quantum computing", start_date_from="2022-01-01", limit=10)
search_by_institution(institution_name="University of Michigan", state_code="MI")
search_by_pi(last_name="Smith", first_name="Jane", include_co_pis=True)
get_award_details(award_id="2112345", include_abstract=False)
get_project_outcomes(award_id="1812345")
"""
