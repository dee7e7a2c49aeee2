"""Tests for the pre-submission exclusion engine."""

import pytest

from lead_screening.config.loader import build_store
from lead_screening.models.schemas import ExclusionCategory
from lead_screening.stages.exclusion import ExclusionEngine


@pytest.fixture
def exclusion(store):
    return ExclusionEngine(store)


def engine_with(exclusion_data, cohort_data, **overrides):
    """ExclusionEngine with per-category field overrides, e.g. dso={"enabled": False}"""
    for slot, fields in overrides.items():
        exclusion_data["categories"][slot].update(fields)
    return ExclusionEngine(build_store(exclusion_data, cohort_data))


class TestTLDCheck:
    """Stage 1: TLD exclusions."""

    def test_edu_domain(self, exclusion):
        verdict = exclusion.check("AnyName", "clinic.edu")
        assert verdict.is_excluded
        assert verdict.category == ExclusionCategory.EDU
        assert ".edu" in verdict.reason
        assert verdict.matched_pattern == ".edu"
        assert verdict.detected_domain == "clinic.edu"

    def test_gov_domain_from_url(self, exclusion):
        verdict = exclusion.check("VA Dental", "https://www.va.gov/miami-health-care/")
        assert verdict.category == ExclusionCategory.GOV
        assert ".gov" in verdict.reason
        assert verdict.detected_domain == "va.gov"

    def test_mil_domain(self, exclusion):
        assert exclusion.check("", "tricare.mil").category == ExclusionCategory.GOV

    def test_tld_beats_dso(self, exclusion):
        verdict = exclusion.check("Aspen Dental", "aspen.edu")
        assert verdict.category == ExclusionCategory.EDU


class TestDSOCheck:
    """Stage 2: DSO organizations."""

    def test_name_match_with_unrelated_domain(self, exclusion):
        verdict = exclusion.check("Aspen Dental Meridian", "randomsite.com")
        assert verdict.is_excluded
        assert verdict.category == ExclusionCategory.DSO
        assert verdict.dso_name == "Aspen Dental"
        assert "Aspen Dental" in verdict.reason

    def test_domain_match(self, exclusion):
        verdict = exclusion.check("Downtown Smiles", "https://locations.westerndental.com/la")
        assert verdict.category == ExclusionCategory.DSO
        assert verdict.dso_name == "Western Dental"
        assert verdict.matched_pattern == "westerndental.com"

    def test_dso_beats_educational_keyword(self, exclusion):
        verdict = exclusion.check("Heartland Dental University Center", "heartlandcare.com")
        assert verdict.category == ExclusionCategory.DSO

    def test_free_text_query(self, exclusion):
        verdict = exclusion.check(
            "Aspen Dental Meridian", "Aspen Dental Meridian, 3270 N Eagle Rd, Meridian, ID"
        )
        assert verdict.category == ExclusionCategory.DSO
        assert verdict.detected_domain == ""

    def test_name_matching_disabled(self, exclusion_data, cohort_data):
        engine = engine_with(
            exclusion_data, cohort_data,
            dso={"matchingRules": {"domainMatch": True, "nameMatch": False}},
        )
        assert not engine.check("Aspen Dental Meridian", "randomsite.com").is_excluded
        assert engine.check("Anything", "aspendental.com").category == ExclusionCategory.DSO

    def test_both_matching_rules_off(self, exclusion_data, cohort_data):
        engine = engine_with(
            exclusion_data, cohort_data,
            dso={"matchingRules": {"domainMatch": False, "nameMatch": False}},
        )
        assert not engine.check("Aspen Dental", "aspendental.com").is_excluded


class TestKeywordChecks:
    """Stages 3 and 4: educational then clinic keywords."""

    def test_educational_keyword(self, exclusion):
        verdict = exclusion.check("UCLA School of Dentistry", "dentistry.ucla.org")
        assert verdict.category == ExclusionCategory.EDU
        assert verdict.matched_pattern == "school of dentistry"
        assert '"school of dentistry"' in verdict.reason

    def test_keyword_found_in_domain(self, exclusion):
        verdict = exclusion.check("Main Street Dental", "dentalcollege.org")
        assert verdict.category == ExclusionCategory.EDU
        assert verdict.matched_pattern == "college"

    def test_query_text_without_domain_is_not_searched(self, exclusion):
        verdict = exclusion.check("Main Street Dental", "mobile dental van, Seattle")
        assert not verdict.is_excluded

    def test_educational_before_clinic(self, exclusion):
        verdict = exclusion.check("Community Health College Program", "")
        assert verdict.category == ExclusionCategory.EDU

    def test_clinic_keyword(self, exclusion):
        verdict = exclusion.check("Community Health Center Dental", "chcdental.org")
        assert verdict.category == ExclusionCategory.CLINIC
        assert verdict.matched_pattern == "community health"

    def test_first_keyword_in_list_order(self, exclusion):
        verdict = exclusion.check("Free Dental Day at Community Health", "")
        assert verdict.matched_pattern == "community health"


class TestPassAndEdgeCases:
    """Allowed practices and degenerate input."""

    def test_private_practice_passes(self, exclusion):
        verdict = exclusion.check("Smith Family Dentistry", "smithdental.com")
        assert not verdict.is_excluded
        assert verdict.category is None
        assert verdict.detected_domain == "smithdental.com"
        assert verdict.reason

    @pytest.mark.parametrize("name, query", [("", ""), (None, None), ("  ", "   ")])
    def test_no_data(self, exclusion, name, query):
        verdict = exclusion.check(name, query)
        assert not verdict.is_excluded
        assert verdict.detected_domain == ""
        assert "No data" in verdict.reason

    def test_unparsable_domain_degrades(self, exclusion):
        verdict = exclusion.check("Smith Family Dentistry", "::::////")
        assert not verdict.is_excluded
        assert verdict.detected_domain == ""


class TestKillSwitches:
    """Disabled categories never match."""

    def test_disable_edu(self, exclusion_data, cohort_data):
        engine = engine_with(exclusion_data, cohort_data, educational={"enabled": False})
        assert not engine.check("AnyName", "clinic.edu").is_excluded
        assert not engine.check("State University Dental", "").is_excluded

    def test_disable_gov(self, exclusion_data, cohort_data):
        engine = engine_with(exclusion_data, cohort_data, government={"enabled": False})
        assert not engine.check("AnyName", "va.gov").is_excluded

    def test_disable_dso(self, exclusion_data, cohort_data):
        engine = engine_with(exclusion_data, cohort_data, dso={"enabled": False})
        assert not engine.check("Aspen Dental Meridian", "randomsite.com").is_excluded

    def test_disable_clinic(self, exclusion_data, cohort_data):
        engine = engine_with(exclusion_data, cohort_data, clinic={"enabled": False})
        assert not engine.check("Community Health Center Dental", "").is_excluded

    def test_disabled_dso_falls_through_to_keywords(self, exclusion_data, cohort_data):
        engine = engine_with(exclusion_data, cohort_data, dso={"enabled": False})
        verdict = engine.check("Heartland Dental University Center", "")
        assert verdict.category == ExclusionCategory.EDU


class TestHasExclusionPattern:
    """TLD-only pre-check agrees with stage 1 of check()."""

    @pytest.mark.parametrize("domain", [
        "clinic.edu", "https://www.va.gov/x", "tricare.mil",
        "smithdental.com", "", None, "localhost", "aspendental.com",
    ])
    def test_agrees_with_full_check(self, exclusion, domain):
        verdict = exclusion.check("", domain)
        stage1_hit = verdict.is_excluded and (verdict.matched_pattern or "").startswith(".")
        assert exclusion.has_exclusion_pattern(domain) == stage1_hit

    def test_respects_kill_switch(self, exclusion_data, cohort_data):
        engine = engine_with(exclusion_data, cohort_data, educational={"enabled": False})
        assert not engine.has_exclusion_pattern("clinic.edu")


class TestIntrospection:
    def test_counts(self, exclusion):
        assert exclusion.dso_count == 3
        assert exclusion.educational_keyword_count == 3
        assert exclusion.clinic_keyword_count == 3
