"""
Lead Screening Engine
=====================
Rule-driven screening for dental practice leads:
  Exclusion: blocks DSO, educational, government and clinic practices
             before they reach the enrichment pipeline
  Cohort:    tags enriched leads with a market cohort

Both stages read versioned JSON rule tables validated once at startup.
"""

__version__ = "1.0.0"
__author__ = "Lead Screening Team"
