"""
Rule table loading
==================
Reads the exclusion and cohort tables from JSON, validates them into the
typed models, and fails fast on anything missing or malformed.
"""

import json
import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..models.rule_config import CohortRuleTable, ExclusionRuleTable, RuleConfigStore
from .settings import COHORT_RULES_PATH, EXCLUSION_RULES_PATH

logger = logging.getLogger(__name__)


class RuleConfigError(Exception):
    """A rule table is missing or structurally invalid"""


def _read_json(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise RuleConfigError(f"Rule table not found: {path}") from e
    except (OSError, ValueError) as e:
        raise RuleConfigError(f"Could not read rule table {path}: {e}") from e


def build_store(
    exclusion_data: Dict[str, Any],
    cohort_data: Dict[str, Any],
    source: str = "<memory>",
) -> RuleConfigStore:
    """
    Validate raw rule documents into a RuleConfigStore.

    Raises:
        RuleConfigError: if either document fails validation
    """
    try:
        exclusion = ExclusionRuleTable.model_validate(exclusion_data)
    except ValidationError as e:
        raise RuleConfigError(f"Invalid exclusion rule table ({source}): {e}") from e

    try:
        cohorts = CohortRuleTable.model_validate(cohort_data)
    except ValidationError as e:
        raise RuleConfigError(f"Invalid cohort rule table ({source}): {e}") from e

    return RuleConfigStore(exclusion=exclusion, cohorts=cohorts)


def load_rule_store(
    exclusion_path: Optional[str] = None,
    cohort_path: Optional[str] = None,
) -> RuleConfigStore:
    """
    Load both rule tables from disk.

    Args:
        exclusion_path: Exclusion table path (defaults to EXCLUSION_RULES_PATH)
        cohort_path: Cohort table path (defaults to COHORT_RULES_PATH)

    Returns:
        Validated, immutable RuleConfigStore
    """
    exclusion_path = exclusion_path or EXCLUSION_RULES_PATH
    cohort_path = cohort_path or COHORT_RULES_PATH

    exclusion_data = _read_json(exclusion_path)
    cohort_data = _read_json(cohort_path)
    store = build_store(
        exclusion_data, cohort_data, source=f"{exclusion_path}, {cohort_path}"
    )

    categories = store.exclusion.categories
    logger.info(
        "Loaded exclusion rules v%s (%d DSO orgs, %d edu keywords, %d clinic keywords)",
        store.exclusion.version,
        len(categories.dso.organizations),
        len(categories.educational.keywords),
        len(categories.clinic.keywords),
    )
    logger.info(
        "Loaded cohort rules v%s (%d cohorts, fallback=%s)",
        store.cohorts.version,
        len(store.cohorts.cohorts),
        store.cohorts.fallback_cohort,
    )
    return store


@lru_cache(maxsize=1)
def get_rule_store() -> RuleConfigStore:
    """Process-wide store from the configured paths, loaded on first use"""
    return load_rule_store()
