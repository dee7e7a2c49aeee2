"""Shared fixtures: small in-memory rule tables injected into the engines."""

import copy

import pytest

from lead_screening.config.loader import build_store
from lead_screening.engine import LeadScreeningEngine


EXCLUSION_TABLE = {
    "version": "test-1",
    "categories": {
        "educational": {
            "category": "EDU",
            "enabled": True,
            "tlds": [".edu"],
            "keywords": ["university", "school of dentistry", "college"],
        },
        "government": {
            "category": "GOV",
            "enabled": True,
            "tlds": [".gov", ".mil"],
            "keywords": [],
        },
        "dso": {
            "category": "DSO",
            "enabled": True,
            "matchingRules": {"domainMatch": True, "nameMatch": True},
            "organizations": [
                {"name": "Heartland Dental", "domains": ["heartlanddental.com"]},
                {"name": "Aspen Dental", "domains": ["aspendental.com"]},
                {"name": "Western Dental", "domains": ["westerndental.com"]},
            ],
        },
        "clinic": {
            "category": "CLINIC",
            "enabled": True,
            "keywords": ["community health", "free dental", "mobile dental"],
        },
    },
}

COHORT_TABLE = {
    "version": "test-1",
    "fallbackCohort": "Uncategorized",
    "dsoCohort": "DSO",
    "generalDentistrySpecialties": ["General Dentistry", "General Practice"],
    "cohorts": [
        {"name": "Dealers", "priority": 1, "groupNames": ["Dealers"], "color": "amber"},
        {"name": "Government", "priority": 2, "domainSuffixes": [".gov"], "color": "blue"},
        {"name": "Education", "priority": 3, "groupNames": ["US Schools"], "color": "indigo"},
        {
            "name": "Clinic",
            "priority": 4,
            "keywords": ["foundation", "community", "chc"],
            "specialties": ["Public Health"],
            "color": "teal",
        },
        {
            "name": "Pediatric",
            "priority": 5,
            "keywords": ["kids", "pediatric", "children"],
            "specialties": ["Pediatric Dentistry"],
            "excludeIfGeneralOnly": True,
            "color": "pink",
        },
        {
            "name": "DSO",
            "priority": 6,
            "keywords": ["dental group", "comfort dental"],
            "strongBrands": ["Comfort Dental"],
            "requiresMultiLocation": True,
            "color": "purple",
        },
        {"name": "Uncategorized", "priority": 99, "color": "slate"},
    ],
}


@pytest.fixture
def exclusion_data():
    return copy.deepcopy(EXCLUSION_TABLE)


@pytest.fixture
def cohort_data():
    return copy.deepcopy(COHORT_TABLE)


@pytest.fixture
def store(exclusion_data, cohort_data):
    return build_store(exclusion_data, cohort_data)


@pytest.fixture
def engine(store):
    return LeadScreeningEngine(store)
