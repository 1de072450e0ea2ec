"""
Award Entities - NSF award and project outcome records.

Key Entities:
    - AwardRecord: One NSF award as returned by /awards
    - OutcomeRecord: Project Outcomes Report for one award
    - Publication / Conference: Ordered sub-records of an outcome

Architecture:
    Built from the decoded upstream payload via ``from_api()`` and written back
    with ``to_dict()`` using the upstream (camelCase) field names, so tool
    output reads like the NSF API documentation.

    Dates are reconciled to ``mm/dd/yyyy`` at construction. An upstream date
    that cannot be reconciled becomes None; raw values never pass through.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from nsf_awards_mcp.shared.dates import normalize_date
from nsf_awards_mcp.shared.records import ensure_list

logger = logging.getLogger(__name__)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    return str(value)


def _amount(value: Any) -> float | None:
    """Parse a signed decimal amount; None if missing or malformed."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(str(value).replace(",", "").strip())
    except (TypeError, ValueError):
        return None


def _date(value: Any, field_name: str, award_id: str) -> str | None:
    if value in (None, ""):
        return None
    normalized = normalize_date(value)
    if normalized is None:
        logger.debug(f"Award {award_id}: dropping unparseable {field_name}={value!r}")
    return normalized


# (upstream name, attribute name) for plain text fields
_AWARD_TEXT_FIELDS: tuple[tuple[str, str], ...] = (
    ("title", "title"),
    ("agency", "agency"),
    ("awardeeName", "awardee_name"),
    ("awardeeCity", "awardee_city"),
    ("awardeeStateCode", "awardee_state_code"),
    ("awardeeCountryCode", "awardee_country_code"),
    ("awardeeZipCode", "awardee_zip_code"),
    ("piFirstName", "pi_first_name"),
    ("piMiddleInitial", "pi_middle_initial"),
    ("piLastName", "pi_last_name"),
    ("piEmail", "pi_email"),
    ("pdPIName", "pd_pi_name"),
    ("fundProgramName", "fund_program_name"),
    ("primaryProgram", "primary_program"),
    ("awardAgencyCode", "award_agency_code"),
    ("fundAgencyCode", "fund_agency_code"),
    ("cfdaNumber", "cfda_number"),
    ("transType", "trans_type"),
    ("awardType", "award_type"),
    ("abstractText", "abstract_text"),
)

_AWARD_AMOUNT_FIELDS: tuple[tuple[str, str], ...] = (
    ("estimatedTotalAmt", "estimated_total_amt"),
    ("fundsObligatedAmt", "funds_obligated_amt"),
)

_AWARD_DATE_FIELDS: tuple[tuple[str, str], ...] = (
    ("startDate", "start_date"),
    ("expDate", "exp_date"),
)

_AWARD_KNOWN_KEYS = frozenset(
    ["id", "coPDPI"]
    + [k for k, _ in _AWARD_TEXT_FIELDS]
    + [k for k, _ in _AWARD_AMOUNT_FIELDS]
    + [k for k, _ in _AWARD_DATE_FIELDS]
)


@dataclass(frozen=True)
class AwardRecord:
    """
    A single NSF award.

    Attributes:
        award_id: NSF award identifier (e.g. "2112345")
        title: Award title
        start_date / exp_date: Canonical ``mm/dd/yyyy`` or None
        estimated_total_amt / funds_obligated_amt: Signed amounts in USD
        co_investigators: Co-PI names as returned upstream (``coPDPI``)
        extra: Upstream fields without a dedicated attribute
    """

    award_id: str
    title: str | None = None
    agency: str | None = None
    awardee_name: str | None = None
    awardee_city: str | None = None
    awardee_state_code: str | None = None
    awardee_country_code: str | None = None
    awardee_zip_code: str | None = None
    pi_first_name: str | None = None
    pi_middle_initial: str | None = None
    pi_last_name: str | None = None
    pi_email: str | None = None
    pd_pi_name: str | None = None
    co_investigators: tuple[str, ...] = ()
    start_date: str | None = None
    exp_date: str | None = None
    estimated_total_amt: float | None = None
    funds_obligated_amt: float | None = None
    fund_program_name: str | None = None
    primary_program: str | None = None
    award_agency_code: str | None = None
    fund_agency_code: str | None = None
    cfda_number: str | None = None
    trans_type: str | None = None
    award_type: str | None = None
    abstract_text: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> AwardRecord:
        """Build from one decoded upstream ``award`` object."""
        award_id = _text(data.get("id")) or ""
        kwargs: dict[str, Any] = {"award_id": award_id}

        for key, attr in _AWARD_TEXT_FIELDS:
            kwargs[attr] = _text(data.get(key))
        for key, attr in _AWARD_AMOUNT_FIELDS:
            kwargs[attr] = _amount(data.get(key))
        for key, attr in _AWARD_DATE_FIELDS:
            kwargs[attr] = _date(data.get(key), key, award_id)

        kwargs["co_investigators"] = tuple(
            name for name in (_text(v) for v in ensure_list(data.get("coPDPI"))) if name
        )
        kwargs["extra"] = {k: v for k, v in data.items() if k not in _AWARD_KNOWN_KEYS}
        return cls(**kwargs)

    @property
    def organization(self) -> str:
        return self.awardee_name or "Unknown"

    @property
    def program(self) -> str:
        return self.fund_program_name or self.primary_program or "Unknown"

    @property
    def is_subaward(self) -> bool:
        return bool(self.trans_type) and "subaward" in self.trans_type.lower()

    def to_dict(self, include_abstract: bool = True) -> dict[str, Any]:
        """Serialize with upstream field names, omitting empty fields."""
        result: dict[str, Any] = dict(self.extra)
        result["id"] = self.award_id
        for key, attr in _AWARD_TEXT_FIELDS + _AWARD_DATE_FIELDS + _AWARD_AMOUNT_FIELDS:
            value = getattr(self, attr)
            if value is not None:
                result[key] = value
        if self.co_investigators:
            result["coPDPI"] = list(self.co_investigators)
        if not include_abstract:
            result.pop("abstractText", None)
        return result


# =============================================================================
# Project outcomes
# =============================================================================


def _items(value: Any, item_key: str) -> list[Any]:
    """List of sub-records, unwrapping XML-style ``{item_key: [...]}`` containers."""
    if isinstance(value, dict) and item_key in value and len(value) == 1:
        value = value[item_key]
    return ensure_list(value)


@dataclass(frozen=True)
class Publication:
    """A publication listed in a Project Outcomes Report."""

    title: str
    authors: str | None = None
    journal_name: str | None = None
    year: str | None = None
    doi: str | None = None

    @classmethod
    def from_api(cls, data: Any) -> Publication:
        if not isinstance(data, dict):
            return cls(title=_text(data) or "")
        return cls(
            title=_text(data.get("title")) or "",
            authors=_text(data.get("authors")),
            journal_name=_text(data.get("journalName")),
            year=_text(data.get("year")),
            doi=_text(data.get("doi")),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"title": self.title}
        for key, value in (
            ("authors", self.authors),
            ("journalName", self.journal_name),
            ("year", self.year),
            ("doi", self.doi),
        ):
            if value is not None:
                result[key] = value
        return result


@dataclass(frozen=True)
class Conference:
    """A conference presentation listed in a Project Outcomes Report."""

    title: str
    location: str | None = None
    year: str | None = None

    @classmethod
    def from_api(cls, data: Any) -> Conference:
        if not isinstance(data, dict):
            return cls(title=_text(data) or "")
        return cls(
            title=_text(data.get("title")) or "",
            location=_text(data.get("location")),
            year=_text(data.get("year")),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"title": self.title}
        if self.location is not None:
            result["location"] = self.location
        if self.year is not None:
            result["year"] = self.year
        return result


@dataclass(frozen=True)
class OutcomeRecord:
    """
    Project Outcomes Report for one award.

    There is at most one outcome record per award; ``award_id`` is its only
    identity.
    """

    award_id: str
    award_title: str | None = None
    pi: str | None = None
    organization: str | None = None
    accomplishments: str | None = None
    impacts: str | None = None
    publications: tuple[Publication, ...] = ()
    conferences: tuple[Conference, ...] = ()
    websites: tuple[str, ...] = ()
    other_products: tuple[str, ...] = ()

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> OutcomeRecord:
        return cls(
            award_id=_text(data.get("awardId") or data.get("id")) or "",
            award_title=_text(data.get("awardTitle") or data.get("title")),
            pi=_text(data.get("pi")),
            organization=_text(data.get("organization")),
            accomplishments=_text(data.get("accomplishments")),
            impacts=_text(data.get("impacts")),
            publications=tuple(
                Publication.from_api(p) for p in _items(data.get("publications"), "publication")
            ),
            conferences=tuple(
                Conference.from_api(c) for c in _items(data.get("conferences"), "conference")
            ),
            websites=tuple(w for w in (_text(v) for v in _items(data.get("websites"), "website")) if w),
            other_products=tuple(
                p for p in (_text(v) for v in _items(data.get("otherProducts"), "product")) if p
            ),
        )

    @property
    def publication_count(self) -> int:
        return len(self.publications)

    @property
    def conference_count(self) -> int:
        return len(self.conferences)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"awardId": self.award_id}
        for key, value in (
            ("awardTitle", self.award_title),
            ("pi", self.pi),
            ("organization", self.organization),
            ("accomplishments", self.accomplishments),
            ("impacts", self.impacts),
        ):
            if value is not None:
                result[key] = value
        result["publications"] = [p.to_dict() for p in self.publications]
        result["conferences"] = [c.to_dict() for c in self.conferences]
        if self.websites:
            result["websites"] = list(self.websites)
        if self.other_products:
            result["otherProducts"] = list(self.other_products)
        return result
