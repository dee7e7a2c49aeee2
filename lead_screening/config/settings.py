"""
Configuration settings for the Lead Screening Engine
"""

import os

# =============================================================================
# RULE TABLE LOCATIONS
# =============================================================================

DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data")

EXCLUSION_RULES_PATH = os.getenv(
    "EXCLUSION_RULES_PATH", os.path.join(DATA_DIR, "master_exclusion.json")
)
COHORT_RULES_PATH = os.getenv(
    "COHORT_RULES_PATH", os.path.join(DATA_DIR, "cohort_definitions.json")
)

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# =============================================================================
# COHORT DISPLAY
# =============================================================================

# Badge color for cohort names missing from the cohort table
DEFAULT_COHORT_COLOR = "slate"

# =============================================================================
# API
# =============================================================================

API_CONFIG = {
    "title": "Lead Screening Engine API",
    "version": "1.0.0",
    "host": os.getenv("API_HOST", "0.0.0.0"),
    "port": int(os.getenv("API_PORT", "8000")),
}
