# Screening stages module
from .cohort import CohortClassifier
from .dso_matcher import DSOMatcher
from .exclusion import ExclusionEngine
