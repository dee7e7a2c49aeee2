"""
Exclusion Engine
================
Pre-submission gate that blocks practice types we never enrich.
Runs before the enrichment pipeline to avoid paying for excluded leads.

Checks, in fixed order (first match wins):
  1. TLD (.edu -> EDU, .gov/.mil -> GOV)
  2. DSO organizations (name or domain)
  3. Educational keywords (dental schools without .edu domains)
  4. Clinic keywords (community clinics, health centers)

Each category has its own enabled flag; a disabled category never matches.
"""

import logging
from typing import Optional, Tuple

from ..models.rule_config import ExclusionRuleTable, RuleConfigStore
from ..models.schemas import ExclusionCategory, ExclusionVerdict
from .domain import extract_domain_from_free_text, extract_tld, normalize_domain
from .dso_matcher import DSOMatcher

logger = logging.getLogger(__name__)


class ExclusionEngine:
    """
    Decides whether a submission must be blocked before enrichment.
    """

    def __init__(self, store: RuleConfigStore):
        self.rules: ExclusionRuleTable = store.exclusion
        categories = self.rules.categories
        self.educational = categories.educational
        self.government = categories.government
        self.dso = categories.dso
        self.clinic = categories.clinic
        self.dso_matcher = DSOMatcher(self.dso.organizations)

    def check(self, practice_name: Optional[str], raw_domain: Optional[str]) -> ExclusionVerdict:
        """
        Run every exclusion check against a practice.

        Args:
            practice_name: Practice name as entered (may be empty)
            raw_domain: URL, domain, or free-text query that may contain one

        Returns:
            ExclusionVerdict; detected_domain is always filled in
        """
        name = practice_name if isinstance(practice_name, str) else ""
        raw_text = raw_domain if isinstance(raw_domain, str) else ""
        domain = self.detect_domain(raw_text)

        if not name.strip() and not raw_text.strip():
            return ExclusionVerdict(
                is_excluded=False,
                reason="No data provided for exclusion check",
                detected_domain=domain,
            )

        # Check 1: TLD
        tld_result = self._check_tld(domain)
        if tld_result:
            tld, category = tld_result
            if category == ExclusionCategory.EDU:
                reason = f"Educational institution ({tld} domain)"
            else:
                reason = f"Government entity ({tld} domain)"
            return self._excluded(category, reason, domain, matched_pattern=tld)

        # Check 2: DSO
        dso_match = self._check_dso(name, domain)
        if dso_match:
            return self._excluded(
                ExclusionCategory.DSO,
                f"DSO organization: {dso_match.name}",
                domain,
                matched_pattern=dso_match.matched_pattern,
                dso_name=dso_match.name,
            )

        # Check 3: Educational keywords
        keyword = self._check_keywords(self.educational.enabled, self.educational.keywords, name, domain)
        if keyword:
            return self._excluded(
                ExclusionCategory.EDU,
                f'Educational institution (matched keyword: "{keyword}")',
                domain,
                matched_pattern=keyword,
            )

        # Check 4: Clinic keywords
        keyword = self._check_keywords(self.clinic.enabled, self.clinic.keywords, name, domain)
        if keyword:
            return self._excluded(
                ExclusionCategory.CLINIC,
                f'Community clinic or health center (matched keyword: "{keyword}")',
                domain,
                matched_pattern=keyword,
            )

        return ExclusionVerdict(
            is_excluded=False,
            reason="Practice passed all exclusion checks",
            detected_domain=domain,
        )

    def has_exclusion_pattern(self, domain: Optional[str]) -> bool:
        """
        Quick TLD-only pre-check. Agrees with check() stage 1 by construction;
        a False here does not mean check() will pass.
        """
        return self._check_tld(self.detect_domain(domain)) is not None

    @staticmethod
    def detect_domain(raw_domain: Optional[str]) -> str:
        """Normalized domain from a URL/domain, or from free text as a fallback"""
        domain = normalize_domain(raw_domain)
        if not domain:
            domain = normalize_domain(extract_domain_from_free_text(raw_domain))
        return domain

    # =========================================================================
    # Individual checks
    # =========================================================================

    def _check_tld(self, domain: str) -> Optional[Tuple[str, ExclusionCategory]]:
        """Match the domain's TLD against enabled EDU then GOV TLD sets"""
        tld = extract_tld(domain)
        if not tld:
            return None

        if self.educational.enabled and tld in self.educational.tlds:
            return tld, ExclusionCategory.EDU
        if self.government.enabled and tld in self.government.tlds:
            return tld, ExclusionCategory.GOV
        return None

    def _check_dso(self, name: str, domain: str):
        """DSO organization match, honoring the kill switch and matching rules"""
        rules = self.dso.matching_rules
        if not self.dso.enabled or not (rules.domain_match or rules.name_match):
            return None

        return self.dso_matcher.match(
            name,
            domain,
            match_names=rules.name_match,
            match_domains=rules.domain_match,
        )

    @staticmethod
    def _check_keywords(enabled: bool, keywords, name: str, domain: str) -> Optional[str]:
        """First keyword contained in "<name> <domain>", or None"""
        if not enabled or not keywords:
            return None

        searchable = f"{name} {domain}".lower()
        for keyword in keywords:
            if keyword.lower() in searchable:
                return keyword
        return None

    def _excluded(
        self,
        category: ExclusionCategory,
        reason: str,
        domain: str,
        matched_pattern: Optional[str] = None,
        dso_name: Optional[str] = None,
    ) -> ExclusionVerdict:
        """Create an excluded ExclusionVerdict"""
        logger.info("Excluded as %s: %s (domain=%r)", category.value, reason, domain)
        return ExclusionVerdict(
            is_excluded=True,
            category=category,
            reason=reason,
            matched_pattern=matched_pattern,
            dso_name=dso_name,
            detected_domain=domain,
        )

    # =========================================================================
    # Introspection
    # =========================================================================

    @property
    def dso_count(self) -> int:
        return len(self.dso.organizations)

    @property
    def educational_keyword_count(self) -> int:
        return len(self.educational.keywords)

    @property
    def clinic_keyword_count(self) -> int:
        return len(self.clinic.keywords)
