"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from nsf_awards_mcp.application.search import SearchOrchestrator

# ============================================================
# Award payload builders
# ============================================================


def make_award(award_id: str, **fields) -> dict:
    """Build one upstream ``award`` object with sensible defaults."""
    award = {
        "id": award_id,
        "title": f"Award {award_id}",
        "awardeeName": "University of Michigan Ann Arbor",
        "awardeeStateCode": "MI",
        "piFirstName": "Jane",
        "piLastName": "Smith",
        "startDate": "01/01/2023",
        "expDate": "12/31/2099",
        "estimatedTotalAmt": "500000",
        "fundProgramName": "CYBER-PHYSICAL SYSTEMS",
        "transType": "Standard Grant",
    }
    award.update(fields)
    return award


def awards_body(*awards: dict) -> dict:
    """Wrap award objects in the NSF JSON envelope."""
    return {"response": {"award": list(awards)}}


# ============================================================
# Mock NSF API Responses
# ============================================================


@pytest.fixture
def mock_award():
    """Single NSF award as returned by /awards/{id}.json."""
    return make_award(
        "2112345",
        title="Collaborative Research: Quantum Sensing Networks",
        piMiddleInitial="Q",
        piEmail="jsmith@umich.edu",
        coPDPI=["Alan Turing", "Grace Hopper"],
        fundsObligatedAmt="250,000.50",
        abstractText="This project develops quantum sensing networks.",
        cfdaNumber="47.049",
        agency="NSF",
    )


@pytest.fixture
def mock_outcome():
    """Project Outcomes Report payload (JSON shape)."""
    return {
        "response": {
            "projectOutcomes": {
                "awardId": "1812345",
                "awardTitle": "Robotics for Agriculture",
                "pi": "Jane Smith",
                "organization": "Iowa State University",
                "accomplishments": "Built three field robots.",
                "impacts": "Trained 12 graduate students.",
                "publications": [
                    {"title": "Field Robots", "authors": "Smith, J.", "journalName": "IEEE RA-L", "year": "2021"},
                    {"title": "Crop Mapping", "year": "2022", "doi": "10.1000/crop"},
                ],
                "conferences": {"title": "ICRA 2021", "location": "Xi'an", "year": "2021"},
            }
        }
    }


# ============================================================
# Orchestrator fixtures
# ============================================================


@pytest.fixture
def frozen_now():
    return datetime(2024, 6, 15, 12, 0, 0)


@pytest.fixture
def mock_gateway():
    """HttpGateway stand-in; set ``execute.return_value`` / ``side_effect`` per test."""
    gateway = AsyncMock()
    gateway.execute = AsyncMock(return_value=awards_body())
    return gateway


@pytest.fixture
def orchestrator(mock_gateway, frozen_now):
    return SearchOrchestrator(mock_gateway, clock=lambda: frozen_now)
