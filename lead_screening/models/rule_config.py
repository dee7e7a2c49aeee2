"""
Rule Table Models
=================
Typed, immutable views of the two versioned rule tables:

- Exclusion table (master_exclusion.json): per-category kill switch, TLDs,
  keywords, DSO organizations and matching rules.
- Cohort table (cohort_definitions.json): priority-ordered cohort definitions
  with one designated fallback cohort.

Both are validated once when loaded. Every collection is stored as a tuple or
frozenset and every model is frozen, so evaluation can never mutate them.
"""

from typing import Dict, FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .schemas import ExclusionCategory


def _clean_patterns(values):
    """Strip patterns and reject blanks (a blank pattern matches everything)"""
    if not isinstance(values, (list, tuple)):
        raise ValueError("expected a list of strings")
    cleaned = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("patterns must be non-empty strings")
        cleaned.append(value.strip())
    return cleaned


class RuleModel(BaseModel):
    """Base for rule table models: frozen, camelCase aliases, no unknown keys"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")


# =============================================================================
# EXCLUSION TABLE
# =============================================================================

class DSOOrganization(RuleModel):
    """A known dental service organization and its registered domains"""
    name: str
    domains: Tuple[str, ...] = ()

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("organization name must not be empty")
        return value.strip()

    @field_validator("domains", mode="before")
    @classmethod
    def clean_domains(cls, value):
        return [d.lower() for d in _clean_patterns(value)]


class MatchingRules(RuleModel):
    """Which DSO signals are allowed to match"""
    domain_match: bool = Field(True, alias="domainMatch")
    name_match: bool = Field(True, alias="nameMatch")


class ExclusionCategoryRule(RuleModel):
    """Rules for a single exclusion category"""
    category: ExclusionCategory
    enabled: bool = True
    tlds: FrozenSet[str] = frozenset()
    keywords: Tuple[str, ...] = ()
    organizations: Tuple[DSOOrganization, ...] = ()
    matching_rules: MatchingRules = Field(default_factory=MatchingRules, alias="matchingRules")

    @field_validator("tlds", mode="before")
    @classmethod
    def clean_tlds(cls, value):
        tlds = [t.lower() for t in _clean_patterns(value)]
        for tld in tlds:
            if not tld.startswith(".") or len(tld) < 2:
                raise ValueError(f"TLD must look like '.edu', got {tld!r}")
        return tlds

    @field_validator("keywords", mode="before")
    @classmethod
    def clean_keywords(cls, value):
        return _clean_patterns(value)


class ExclusionCategories(RuleModel):
    """The four exclusion categories, one slot each"""
    educational: ExclusionCategoryRule
    government: ExclusionCategoryRule
    dso: ExclusionCategoryRule
    clinic: ExclusionCategoryRule

    @model_validator(mode="after")
    def check_slots(self):
        expected = {
            "educational": ExclusionCategory.EDU,
            "government": ExclusionCategory.GOV,
            "dso": ExclusionCategory.DSO,
            "clinic": ExclusionCategory.CLINIC,
        }
        for slot, category in expected.items():
            actual = getattr(self, slot).category
            if actual != category:
                raise ValueError(
                    f"categories.{slot} must have category {category.value}, got {actual.value}"
                )
        return self


class ExclusionRuleTable(RuleModel):
    """Complete exclusion rule table"""
    version: str
    categories: ExclusionCategories


# =============================================================================
# COHORT TABLE
# =============================================================================

class CohortDefinition(RuleModel):
    """A single cohort rule"""
    name: str
    priority: int
    color: str
    keywords: Tuple[str, ...] = ()
    specialties: Tuple[str, ...] = ()
    domain_suffixes: Tuple[str, ...] = Field((), alias="domainSuffixes")
    group_names: Tuple[str, ...] = Field((), alias="groupNames")
    exclude_if_general_only: bool = Field(False, alias="excludeIfGeneralOnly")
    strong_brands: Tuple[str, ...] = Field((), alias="strongBrands")
    requires_multi_location: bool = Field(False, alias="requiresMultiLocation")

    @field_validator("name", "color")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator(
        "keywords", "specialties", "domain_suffixes", "group_names", "strong_brands",
        mode="before",
    )
    @classmethod
    def clean_lists(cls, value):
        return _clean_patterns(value)


class CohortRuleTable(RuleModel):
    """Complete cohort rule table"""
    version: str
    fallback_cohort: str = Field(alias="fallbackCohort")
    dso_cohort: Optional[str] = Field(None, alias="dsoCohort")
    general_dentistry_specialties: Tuple[str, ...] = Field(
        ("General Dentistry", "General Practice"), alias="generalDentistrySpecialties"
    )
    cohorts: Tuple[CohortDefinition, ...]

    @field_validator("general_dentistry_specialties", mode="before")
    @classmethod
    def clean_general(cls, value):
        return _clean_patterns(value)

    @model_validator(mode="after")
    def check_names(self):
        seen = set()
        for cohort in self.cohorts:
            key = cohort.name.lower()
            if key in seen:
                raise ValueError(f"duplicate cohort name: {cohort.name}")
            seen.add(key)

        if self.fallback_cohort.lower() not in seen:
            raise ValueError(f"fallback cohort {self.fallback_cohort!r} is not defined")
        if self.dso_cohort is not None:
            if self.dso_cohort.lower() not in seen:
                raise ValueError(f"DSO cohort {self.dso_cohort!r} is not defined")
            if self.dso_cohort.lower() == self.fallback_cohort.lower():
                raise ValueError("DSO cohort cannot be the fallback cohort")
        return self

    def get_cohort(self, name: str) -> Optional[CohortDefinition]:
        """Case-insensitive lookup by cohort name"""
        if not name:
            return None
        for cohort in self.cohorts:
            if cohort.name.lower() == name.lower():
                return cohort
        return None

    @property
    def fallback(self) -> CohortDefinition:
        return self.get_cohort(self.fallback_cohort)

    def colors(self) -> Dict[str, str]:
        return {c.name: c.color for c in self.cohorts}


# =============================================================================
# STORE
# =============================================================================

class RuleConfigStore(RuleModel):
    """Both rule tables, loaded once and injected into the engines"""
    exclusion: ExclusionRuleTable
    cohorts: CohortRuleTable

    @property
    def versions(self) -> Dict[str, str]:
        return {"exclusion": self.exclusion.version, "cohorts": self.cohorts.version}
