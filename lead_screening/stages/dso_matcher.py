"""
DSO (Dental Service Organization) Matcher
=========================================
Checks a practice name and domain against the list of known DSO
organizations.

Matching is plain case-insensitive substring containment:
  - the practice name contains the organization name, or
  - the domain contains one of the organization's registered domains.

The first organization in table order wins. Containment means a name that
merely includes an organization name inside a longer phrase also matches;
downstream consumers rely on this, so it is kept as-is.
"""

import logging
from typing import Iterable, Optional, Tuple

from ..models.rule_config import DSOOrganization
from ..models.schemas import DSOMatch
from .domain import normalize_domain

logger = logging.getLogger(__name__)


class DSOMatcher:
    """
    Substring matcher over an ordered list of DSO organizations.
    """

    def __init__(self, organizations: Iterable[DSOOrganization]):
        self.organizations: Tuple[DSOOrganization, ...] = tuple(organizations)
        # Lowercased (name, domains) pairs, same order as organizations
        self._patterns = tuple(
            (org.name.lower(), tuple(normalize_domain(d) or d.lower() for d in org.domains))
            for org in self.organizations
        )

    def match(
        self,
        practice_name: Optional[str] = "",
        domain: Optional[str] = "",
        match_names: bool = True,
        match_domains: bool = True,
    ) -> Optional[DSOMatch]:
        """
        Find the first organization matching the name or domain.

        Args:
            practice_name: Practice name as entered
            domain: Domain or URL (normalized here)
            match_names: Allow organization-name containment
            match_domains: Allow registered-domain containment

        Returns:
            DSOMatch for the first matching organization, or None
        """
        name = practice_name.lower().strip() if isinstance(practice_name, str) else ""
        host = normalize_domain(domain)

        if not name and not host:
            return None

        for org, (org_name, org_domains) in zip(self.organizations, self._patterns):
            if match_domains and host:
                for org_domain, raw in zip(org_domains, org.domains):
                    if org_domain and org_domain in host:
                        logger.debug("DSO domain match: %s via %s", org.name, raw)
                        return DSOMatch(name=org.name, matched_pattern=raw, matched_on="domain")

            if match_names and name and org_name in name:
                logger.debug("DSO name match: %s in %r", org.name, practice_name)
                return DSOMatch(name=org.name, matched_pattern=org.name, matched_on="name")

        return None

    def is_dso(self, practice_name: Optional[str] = "", domain: Optional[str] = "") -> bool:
        """True if the practice belongs to a known DSO"""
        return self.match(practice_name, domain) is not None

    def get_dso_name(self, practice_name: Optional[str] = "", domain: Optional[str] = "") -> Optional[str]:
        """Name of the first matching DSO, or None"""
        found = self.match(practice_name, domain)
        return found.name if found else None

    def __len__(self) -> int:
        return len(self.organizations)
