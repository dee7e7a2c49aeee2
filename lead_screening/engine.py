"""
Lead Screening Engine - Main Orchestrator
=========================================
Wires the rule tables into the two screening stages:
  Exclusion check (pre-submission) -> Cohort classification (post-enrichment)

The engine holds no mutable state; one instance can serve any number of
concurrent requests.
"""

from typing import Any, Dict, Optional

from .config.loader import get_rule_store
from .models.rule_config import RuleConfigStore
from .models.schemas import ClassificationInput, CohortMatch, ExclusionVerdict
from .stages.cohort import CohortClassifier
from .stages.dso_matcher import DSOMatcher
from .stages.exclusion import ExclusionEngine


class LeadScreeningEngine:
    """
    Facade over the exclusion and cohort stages sharing one rule store.
    """

    def __init__(self, store: RuleConfigStore):
        """
        Args:
            store: Loaded rule tables
        """
        self.store = store
        self.dso_matcher = DSOMatcher(store.exclusion.categories.dso.organizations)
        self.exclusion = ExclusionEngine(store)
        self.cohorts = CohortClassifier(store, dso_matcher=self.dso_matcher)

    # =========================================================================
    # Pre-submission
    # =========================================================================

    def check_exclusion(self, practice_name: Optional[str], query: Optional[str]) -> ExclusionVerdict:
        """Exclusion verdict for a submission (practice name + URL/free text)"""
        return self.exclusion.check(practice_name, query)

    def has_exclusion_pattern(self, domain: Optional[str]) -> bool:
        return self.exclusion.has_exclusion_pattern(domain)

    # =========================================================================
    # Post-enrichment
    # =========================================================================

    def classify_cohort(self, lead: ClassificationInput) -> str:
        return self.cohorts.classify(lead)

    def explain_cohort(self, lead: ClassificationInput) -> str:
        return self.cohorts.explain(lead)

    def evaluate_cohort(self, lead: ClassificationInput) -> CohortMatch:
        return self.cohorts.evaluate(lead)

    def cohort_color(self, name: str) -> str:
        return self.cohorts.cohort_color(name)

    # =========================================================================
    # Introspection
    # =========================================================================

    def get_info(self) -> Dict[str, Any]:
        """Rule table versions and sizes"""
        return {
            "versions": self.store.versions,
            "dso_organizations": self.exclusion.dso_count,
            "educational_keywords": self.exclusion.educational_keyword_count,
            "clinic_keywords": self.exclusion.clinic_keyword_count,
            "cohorts": [c.name for c in self.store.cohorts.cohorts],
            "fallback_cohort": self.cohorts.fallback_cohort,
        }


# =============================================================================
# Convenience Functions
# =============================================================================

def create_engine(store: Optional[RuleConfigStore] = None) -> LeadScreeningEngine:
    """
    Factory function to create an engine.

    Args:
        store: Rule tables to use (defaults to the process-wide store)

    Returns:
        Configured LeadScreeningEngine instance
    """
    return LeadScreeningEngine(store or get_rule_store())


def quick_check(practice_name: str, query: str) -> ExclusionVerdict:
    """
    Quick exclusion check with the default rule tables.

    Args:
        practice_name: Practice name
        query: URL, domain, or free-text query

    Returns:
        ExclusionVerdict
    """
    return create_engine().check_exclusion(practice_name, query)


def quick_classify(lead_data: Dict[str, Any]) -> str:
    """
    Quick cohort classification from a plain dict (camelCase or snake_case keys).

    Args:
        lead_data: Dictionary with lead information

    Returns:
        Cohort name
    """
    return create_engine().classify_cohort(ClassificationInput(**lead_data))
