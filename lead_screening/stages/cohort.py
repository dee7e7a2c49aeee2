"""
Cohort Classification
=====================
Tags a completed (enriched) lead with a market cohort.

Cohort rules come from the cohort table and are tried in ascending priority
order (table order breaks ties). For each rule the condition types are tried
in a fixed sub-order, and the first satisfied type decides the rule:

  1. group name contains one of the rule's group names
  2. domain ends with one of the rule's domain suffixes
  3. practice name contains one of the rule's keywords
  4. a specialty contains one of the rule's specialties

Keyword and specialty matches then pass through veto gates (general-only,
multi-location). A vetoed rule falls through to the next rule. The fallback
cohort is never tried; it is returned when nothing else matches.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from ..config.settings import DEFAULT_COHORT_COLOR
from ..models.rule_config import CohortDefinition, CohortRuleTable, RuleConfigStore
from ..models.schemas import ClassificationInput, CohortCondition, CohortMatch
from .domain import normalize_domain
from .dso_matcher import DSOMatcher

logger = logging.getLogger(__name__)

# (pattern, value) pair for a satisfied condition
Hit = Tuple[str, str]


# =============================================================================
# Condition predicates
# =============================================================================

def _contains_any(text: Optional[str], patterns: Iterable[str]) -> Optional[Hit]:
    """First pattern contained in text (case-insensitive)"""
    if not text or not isinstance(text, str):
        return None
    lower = text.lower()
    for pattern in patterns:
        if pattern.lower() in lower:
            return pattern, text
    return None


def match_group_name(rule: CohortDefinition, lead: ClassificationInput, domain: str) -> Optional[Hit]:
    return _contains_any(lead.group_name, rule.group_names)


def match_domain_suffix(rule: CohortDefinition, lead: ClassificationInput, domain: str) -> Optional[Hit]:
    if not domain:
        return None
    for suffix in rule.domain_suffixes:
        if domain.endswith(suffix.lower()):
            return suffix, domain
    return None


def match_keyword(rule: CohortDefinition, lead: ClassificationInput, domain: str) -> Optional[Hit]:
    return _contains_any(lead.practice_name, rule.keywords)


def match_specialty(rule: CohortDefinition, lead: ClassificationInput, domain: str) -> Optional[Hit]:
    for specialty in _specialties(lead):
        hit = _contains_any(specialty, rule.specialties)
        if hit:
            return hit
    return None


# Fixed sub-order; first satisfied condition type decides the rule
CONDITIONS = (
    (CohortCondition.GROUP_NAME, "group_names", match_group_name),
    (CohortCondition.DOMAIN_SUFFIX, "domain_suffixes", match_domain_suffix),
    (CohortCondition.KEYWORD, "keywords", match_keyword),
    (CohortCondition.SPECIALTY, "specialties", match_specialty),
)


def _specialties(lead: ClassificationInput) -> List[str]:
    return [s for s in (lead.specialties or []) if isinstance(s, str) and s.strip()]


class CohortClassifier:
    """
    Data-driven, priority-ordered cohort classifier.
    """

    def __init__(self, store: RuleConfigStore, dso_matcher: Optional[DSOMatcher] = None):
        """
        Args:
            store: Loaded rule tables
            dso_matcher: Matcher for the DSO cohort; built from the exclusion
                table's organizations when not given
        """
        self.table: CohortRuleTable = store.cohorts
        self.dso_matcher = dso_matcher or DSOMatcher(
            store.exclusion.categories.dso.organizations
        )
        self.fallback_cohort = self.table.fallback.name
        dso = self.table.get_cohort(self.table.dso_cohort) if self.table.dso_cohort else None
        self.dso_cohort = dso.name if dso else None

        # sorted() is stable, so equal priorities keep table order
        self.rules: Tuple[CohortDefinition, ...] = tuple(
            sorted(
                (c for c in self.table.cohorts if c.name != self.fallback_cohort),
                key=lambda c: c.priority,
            )
        )

    def classify(self, lead: ClassificationInput) -> str:
        """Return the cohort name for a lead; never None"""
        return self.evaluate(lead).cohort

    def explain(self, lead: ClassificationInput) -> str:
        """Describe why classify() picked its cohort"""
        return self.evaluate(lead).reason

    def evaluate(self, lead: ClassificationInput) -> CohortMatch:
        """
        Run the full rule scan.

        Returns:
            CohortMatch with the winning cohort, condition and reason
        """
        domain = normalize_domain(lead.resulting_url)
        sufficient = self.has_sufficient_data(lead)

        for rule in self.rules:
            result = self._evaluate_rule(rule, lead, domain)
            if result:
                condition, pattern, value = result
                logger.debug("Cohort %s matched on %s (%r)", rule.name, condition.value, pattern)
                return CohortMatch(
                    cohort=rule.name,
                    priority=rule.priority,
                    condition=condition,
                    matched_pattern=pattern,
                    matched_value=value,
                    reason=self._describe(condition, pattern, value),
                    sufficient_data=sufficient,
                )

        logger.debug("No cohort rule matched, using %s", self.fallback_cohort)
        return CohortMatch(
            cohort=self.fallback_cohort,
            priority=self.table.fallback.priority,
            condition=CohortCondition.FALLBACK,
            reason="No cohort rules matched",
            sufficient_data=sufficient,
        )

    def _evaluate_rule(
        self, rule: CohortDefinition, lead: ClassificationInput, domain: str
    ) -> Optional[Tuple[CohortCondition, str, str]]:
        """Test one rule; None means no match or vetoed"""
        is_dso_rule = rule.name == self.dso_cohort

        if is_dso_rule:
            dso_match = self.dso_matcher.match(lead.practice_name, domain)
            if dso_match:
                return CohortCondition.DSO_LIST, dso_match.name, dso_match.matched_pattern

        for condition, field, predicate in CONDITIONS:
            if not getattr(rule, field):
                continue
            hit = predicate(rule, lead, domain)
            if not hit:
                continue

            if condition in (CohortCondition.KEYWORD, CohortCondition.SPECIALTY):
                if self._general_only_veto(rule, lead):
                    logger.debug("Cohort %s vetoed: general dentistry only", rule.name)
                    return None
                if condition == CohortCondition.KEYWORD and is_dso_rule and self._multi_location_veto(rule, lead):
                    logger.debug("Cohort %s vetoed: single location, no strong brand", rule.name)
                    return None

            return condition, hit[0], hit[1]

        return None

    # =========================================================================
    # Veto gates
    # =========================================================================

    def _general_only_veto(self, rule: CohortDefinition, lead: ClassificationInput) -> bool:
        """Every listed specialty is a general-dentistry variant"""
        if not rule.exclude_if_general_only:
            return False
        return self.is_general_only(lead.specialties)

    def _multi_location_veto(self, rule: CohortDefinition, lead: ClassificationInput) -> bool:
        """Single-location practice with no strong brand in its name"""
        if not rule.requires_multi_location:
            return False
        if lead.works_multiple_locations:
            return False
        return _contains_any(lead.practice_name, rule.strong_brands) is None

    def is_general_only(self, specialties: Optional[List[str]]) -> bool:
        cleaned = [s for s in (specialties or []) if isinstance(s, str) and s.strip()]
        if not cleaned:
            return False
        variants = self.table.general_dentistry_specialties
        return all(_contains_any(s, variants) for s in cleaned)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def has_sufficient_data(lead: ClassificationInput) -> bool:
        """Informational only: any usable field present"""
        return bool(
            (lead.practice_name or "").strip()
            or (lead.resulting_url or "").strip()
            or (lead.group_name or "").strip()
            or _specialties(lead)
        )

    @staticmethod
    def _describe(condition: CohortCondition, pattern: str, value: str) -> str:
        if condition == CohortCondition.GROUP_NAME:
            return f'Group name "{value}" contains "{pattern}"'
        if condition == CohortCondition.DOMAIN_SUFFIX:
            return f'Domain "{value}" ends with "{pattern}"'
        if condition == CohortCondition.KEYWORD:
            return f'Practice name "{value}" contains "{pattern}"'
        if condition == CohortCondition.SPECIALTY:
            return f'Specialty "{value}" contains "{pattern}"'
        return f'Matched DSO organization "{pattern}" via "{value}"'

    def get_cohort(self, name: str) -> Optional[CohortDefinition]:
        return self.table.get_cohort(name)

    def cohort_color(self, name: str) -> str:
        """Badge color for a cohort name, neutral for unknown names"""
        cohort = self.get_cohort(name)
        return cohort.color if cohort else DEFAULT_COHORT_COLOR
