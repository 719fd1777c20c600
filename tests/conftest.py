"""Shared fixtures for pipeline tests.

Payload fixtures mirror the shapes each upstream source actually serves
(trimmed to a few rows).
"""

import logging

import pytest

from humdata_pipeline.config import clear_config_cache
from humdata_pipeline.utils.logger import reset_logger


@pytest.fixture(autouse=True)
def _isolate_pipeline_state():
    """Fresh config cache and logger wiring for every test."""
    clear_config_cache()
    yield
    clear_config_cache()
    reset_logger()
    # PipelineLogger detaches its logger from the root; undo so caplog keeps working
    for name in ("humdata_pipeline", "humdata_pipeline.cli"):
        pipeline_logger = logging.getLogger(name)
        for handler in pipeline_logger.handlers:
            handler.close()
        pipeline_logger.handlers.clear()
        pipeline_logger.propagate = True
        pipeline_logger.setLevel(logging.NOTSET)


# ─── Validated records ─────────────────────────────────────────────────────


@pytest.fixture
def casualty_records():
    """Three clean daily casualty records."""
    return [
        {"date": "2024-01-13", "killed": 120, "injured": 300, "location": "Gaza", "source": "tech4palestine"},
        {"date": "2024-01-14", "killed": 95, "injured": 280, "location": "Gaza", "source": "tech4palestine"},
        {"date": "2024-01-15T10:30:00", "killed": 110, "injured": 310, "source": "tech4palestine"},
    ]


@pytest.fixture
def healthcare_records():
    return [
        {"date": "2024-01-15", "facility_name": "Al-Shifa", "incident_type": "attack", "facility_type": "hospital"},
        {"date": "2024-01-16", "facility_name": "Al-Awda", "incident_type": "attack", "facility_type": "Clinic"},
    ]


# ─── Raw source payloads ───────────────────────────────────────────────────


@pytest.fixture
def t4p_casualties_payload():
    return [
        {
            "report_date": "2024-01-15",
            "killed": 100,
            "killed_cum": 24000,
            "injured": "1,200",
            "injured_cum": 60000,
            "killed_children": 40,
            "killed_women": 30,
        },
        {
            "report_date": "2024-01-16",
            "killed": 80,
            "killed_cum": 24080,
            "injured": 150,
            "injured_cum": 60150,
        },
    ]


@pytest.fixture
def t4p_westbank_payload():
    return [
        {
            "date": "2024-01-15",
            "report_date": "2024-01-15",
            "verified": {"killed": 10, "injured": 20},
            "killed": 12,
            "injured": 25,
            "settler_attacks": 3,
        }
    ]


@pytest.fixture
def t4p_infrastructure_payload():
    return [
        {
            "report_date": "2024-01-15",
            "residential": {"destroyed": 70000, "damaged": 290000},
            "places_of_worship": {"mosques_destroyed": 600},
            "educational_buildings": {"destroyed": 100, "damaged": 300},
            "health_facilities": {"destroyed": "30"},
        }
    ]


@pytest.fixture
def goodshepherd_reports_payload():
    return {
        "reports": [
            {
                "metadata": {"Date": "2024-01-15"},
                "data": [
                    {"location": "jenin", "type": "airstrike", "killed": 3, "injured": "7"},
                    {"killed": 1, "injured": 0, "description": "Settler attack near village"},
                ],
            },
            {"metadata": {"Date": "2024-01-16"}},
        ]
    }


@pytest.fixture
def goodshepherd_demolitions_payload():
    return [
        {"Date of Demolition": "2024-01-15", "Locality": "hebron", "Housing Units": "3", "People left Homeless": "12"},
        {"date": "2024-01-16"},
    ]


@pytest.fixture
def goodshepherd_healthcare_payload():
    return [
        {
            "isoDate": "2024-01-15",
            "facility": "Al-Shifa",
            "type": "Hospital",
            "totalHealthWorkerKilled": 2,
            "totalHealthWorkerInjured": 5,
            "location": "Gaza City",
            "latitude": "31.52",
            "longitude": 34.44,
        }
    ]


@pytest.fixture
def goodshepherd_ngo_payload():
    return {
        "data": [
            {
                "name": "Relief Org",
                "ein": "12-3456789",
                "state": "CA",
                "filings": [
                    {"year": 2021, "totalRevenue": 100},
                    {"year": 2022, "totalRevenue": "250,000", "expenses": 200000},
                ],
            },
            {"name": "Flat Org", "revenue": 5000},
        ]
    }


@pytest.fixture
def worldbank_payload():
    indicator = {"id": "NY.GDP.MKTP.CD", "value": "GDP (current US$)"}
    country = {"id": "PS", "value": "West Bank and Gaza"}
    return [
        {"page": 1, "pages": 1, "per_page": 50, "total": 2},
        [
            {
                "indicator": indicator,
                "country": country,
                "countryiso3code": "PSE",
                "date": "2022",
                "value": 19112000000,
                "unit": "",
            },
            {"indicator": indicator, "country": country, "countryiso3code": "PSE", "date": "2021", "value": None},
        ],
    ]


@pytest.fixture
def hdx_conflict_payload():
    return {
        "data": [
            {
                "event_date": "2024-01-15T00:00:00",
                "event_type": "Explosions/Remote violence",
                "location_name": "gaza",
                "fatalities": "12",
                "admin1_name": "Gaza Strip",
                "latitude": "31.5",
                "longitude": "34.46",
            }
        ]
    }


@pytest.fixture
def hdx_infrastructure_payload():
    return [
        {
            "damage_date": "2024-01-10",
            "structure_type": "School",
            "damage": "Severely Damaged",
            "governorate": "north gaza",
        }
    ]


@pytest.fixture
def hdx_humanitarian_payload():
    return {
        "data": [
            {
                "reference_period_start": "2024-01-01T00:00:00",
                "category": "Phase 5",
                "population": "345,000",
                "location_name": "Gaza Strip",
                "ipc_type": "current",
            }
        ]
    }


@pytest.fixture
def geographic_payload():
    return [
        {"latitude": 31.5, "longitude": 34.47, "name": "gaza", "type": "bombing", "killed": 4, "date": "2024-01-15"},
        {"lat": 40.7, "lng": -74.0, "name": "Elsewhere", "date": "2024-01-15"},
        {"lat": 95, "lng": 34.5, "name": "Nowhere", "date": "2024-01-15"},
    ]
