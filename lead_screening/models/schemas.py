"""
Pydantic schemas for the Lead Screening Engine
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class ExclusionCategory(str, Enum):
    """Reason a submission is blocked before enrichment"""
    EDU = "EDU"
    GOV = "GOV"
    DSO = "DSO"
    CLINIC = "CLINIC"


class CohortCondition(str, Enum):
    """Which condition type decided a cohort match"""
    GROUP_NAME = "group_name"
    DOMAIN_SUFFIX = "domain_suffix"
    KEYWORD = "keyword"
    SPECIALTY = "specialty"
    DSO_LIST = "dso_list"
    FALLBACK = "fallback"


# =============================================================================
# INPUT SCHEMAS
# =============================================================================

class ClassificationInput(BaseModel):
    """Enriched lead fields used for cohort classification"""
    model_config = ConfigDict(populate_by_name=True)

    practice_name: Optional[str] = Field(None, alias="practiceName")
    resulting_url: Optional[str] = Field(None, alias="resultingUrl")
    specialties: Optional[List[str]] = None
    group_name: Optional[str] = Field(None, alias="groupName")
    works_multiple_locations: Optional[bool] = Field(None, alias="worksMultipleLocations")


# =============================================================================
# RESULT SCHEMAS
# =============================================================================

class ExclusionVerdict(BaseModel):
    """Result of the pre-submission exclusion check"""
    is_excluded: bool
    category: Optional[ExclusionCategory] = None
    reason: str
    matched_pattern: Optional[str] = None
    dso_name: Optional[str] = None
    detected_domain: str = ""


class DSOMatch(BaseModel):
    """An organization hit from the DSO matcher"""
    name: str
    matched_pattern: str
    matched_on: str  # "domain" or "name"


class CohortMatch(BaseModel):
    """Cohort verdict plus the rule and condition that produced it"""
    cohort: str
    priority: Optional[int] = None
    condition: CohortCondition
    matched_pattern: Optional[str] = None
    matched_value: Optional[str] = None
    reason: str
    sufficient_data: bool = False
